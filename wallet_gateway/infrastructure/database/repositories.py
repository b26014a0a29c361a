"""Data access layer for admins, users and transaction records"""

import uuid
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_gateway.infrastructure.database.models import Admin, TransactionRecord, User


class AdminRepository:
    """Repository for operator accounts"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_admins(self) -> List[Admin]:
        result = await self.db.execute(select(Admin).order_by(Admin.created_at))
        return list(result.scalars().all())

    async def get_by_code(self, code: str, lock: Optional[str] = None) -> Optional[Admin]:
        """
        Fetch an admin by code.

        Args:
            lock: "update" for an exclusive row lock, "share" for a shared one
        """
        stmt = select(Admin).where(Admin.code == code)
        if lock == "update":
            stmt = stmt.with_for_update()
        elif lock == "share":
            stmt = stmt.with_for_update(read=True)
        if lock:
            # A locked read must reflect the row, not the identity map
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_admin(self, code: str, name: str, password_hash: str, role: str) -> Admin:
        db_admin = Admin(code=code, name=name, password_hash=password_hash, role=role, is_active=True)
        self.db.add(db_admin)
        await self.db.flush()  # Surface unique-code conflicts before commit
        return db_admin


class UserRepository:
    """Repository for end-user accounts"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str, for_update: bool = False) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_admin(self, admin_code: str) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.admin_code == admin_code).order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def create_user(
        self,
        name: str,
        email: str,
        state_code: str,
        township_code: str,
        admin_code: str,
    ) -> User:
        db_user = User(
            name=name,
            email=email,
            balance=Decimal("0"),
            state_code=state_code,
            township_code=township_code,
            admin_code=admin_code,
        )
        self.db.add(db_user)
        await self.db.flush()
        return db_user


class TransactionRepository:
    """Repository for the append-only transaction audit trail"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        type: str,
        amount: Decimal,
        admin_code: str,
        sender: Optional[User] = None,
        receiver: Optional[User] = None,
        note: Optional[str] = None,
    ) -> TransactionRecord:
        db_record = TransactionRecord(
            type=type,
            amount=amount,
            admin_code=admin_code,
            sender=sender,
            receiver=receiver,
            note=note,
        )
        self.db.add(db_record)
        await self.db.flush()
        return db_record

    async def list_for_user(self, user_id: uuid.UUID, newest_first: bool = False) -> List[TransactionRecord]:
        """Records where the user is sender or receiver"""
        stmt = select(TransactionRecord).where(
            or_(TransactionRecord.sender_id == user_id, TransactionRecord.receiver_id == user_id)
        )
        return await self._ordered(stmt, newest_first)

    async def list_for_admin(self, admin_code: str, newest_first: bool = False) -> List[TransactionRecord]:
        """Records performed by the admin"""
        stmt = select(TransactionRecord).where(TransactionRecord.admin_code == admin_code)
        return await self._ordered(stmt, newest_first)

    async def _ordered(self, stmt, newest_first: bool) -> List[TransactionRecord]:
        if newest_first:
            order = (TransactionRecord.created_at.desc(), TransactionRecord.seq.desc())
        else:
            order = (TransactionRecord.created_at.asc(), TransactionRecord.seq.asc())
        result = await self.db.execute(stmt.order_by(*order))
        return list(result.unique().scalars().all())
