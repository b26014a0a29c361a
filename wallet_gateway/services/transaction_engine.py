"""Transaction engine - authorization, balance invariants, and atomic mutation"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, List, Optional, Union
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_gateway.domain.exceptions import (
    AccessDenied,
    AdminNotFound,
    DepositError,
    DomainException,
    InsufficientAmount,
    ReceiverNotFound,
    SameUserError,
    SenderNotFound,
    StoreFailure,
    UserAlreadyCreated,
    UserNotFound,
    WithdrawError,
)
from wallet_gateway.domain.models import BalanceChange, TransactionType, TransferResult
from wallet_gateway.domain.operations import (
    DepositOperation,
    ListTransactionsOperation,
    TransactionOperation,
    TransferOperation,
    WithdrawOperation,
)
from wallet_gateway.infrastructure.database.models import Admin, TransactionRecord, User
from wallet_gateway.infrastructure.database.repositories import (
    AdminRepository,
    TransactionRepository,
    UserRepository,
)
from wallet_gateway.infrastructure.observability.metrics import record_transaction, store_failure_counter

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, str]


def to_amount(value: Amount) -> Decimal:
    """Coerce to Decimal; binary floats are refused outright"""
    if isinstance(value, float):
        raise TypeError("Monetary amounts must not be floats")
    return value if isinstance(value, Decimal) else Decimal(value)


class TransactionEngine:
    """
    Executes money movements on behalf of an acting admin.

    Every operation is one atomic unit on the session: authorization,
    invariant checks, balance mutation and the audit record commit together
    or not at all. Balances are re-read under a row lock inside the unit,
    so concurrent operations on the same user serialize.

    Authorization policy:
    - the acting admin must exist (AdminNotFound) and be active (AccessDenied)
    - the target user must be owned by the acting admin (AccessDenied)
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.admins = AdminRepository(db)
        self.users = UserRepository(db)
        self.records = TransactionRepository(db)

    @asynccontextmanager
    async def _atomic(self, operation: str, failure: type = StoreFailure) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except DomainException:
            await self.db.rollback()
            record_transaction(operation, "rejected")
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            store_failure_counter.labels(operation=operation).inc()
            record_transaction(operation, "store_failure")
            logger.error("Atomic unit rolled back", exc_info=True, extra={"operation": operation})
            raise failure() from e

        record_transaction(operation, "committed")

    async def _authorize(self, acting_admin_code: str, owner_code: Optional[str] = None) -> Admin:
        # Shared lock: a concurrent deactivation waits for this unit
        admin = await self.admins.get_by_code(acting_admin_code, lock="share")
        if admin is None:
            raise AdminNotFound(acting_admin_code)
        if not admin.is_active:
            raise AccessDenied()
        if owner_code is not None and owner_code != admin.code:
            raise AccessDenied()
        return admin

    @staticmethod
    def _check_amount(amount: Decimal, available: Optional[Decimal] = None) -> None:
        if not amount.is_finite() or amount <= 0:
            raise InsufficientAmount()
        if available is not None and amount > available:
            raise InsufficientAmount()

    async def transfer(
        self,
        sender_email: str,
        receiver_email: str,
        amount: Amount,
        note: Optional[str],
        acting_admin_code: str,
    ) -> TransferResult:
        """
        Move funds between two users.

        The acting admin must own the sender; the receiver may belong to
        anyone. Both rows are locked in email order so opposite-direction
        transfers cannot deadlock.
        """
        amount = to_amount(amount)

        async with self._atomic(TransactionType.TRANSFER.value):
            if sender_email == receiver_email:
                raise SameUserError()

            locked = {}
            for email in sorted((sender_email, receiver_email)):
                locked[email] = await self.users.get_by_email(email, for_update=True)

            sender, receiver = locked[sender_email], locked[receiver_email]
            if sender is None:
                raise SenderNotFound()
            if receiver is None:
                raise ReceiverNotFound()

            admin = await self._authorize(acting_admin_code, owner_code=sender.admin_code)
            self._check_amount(amount, available=sender.balance)

            sender.balance = sender.balance - amount
            receiver.balance = receiver.balance + amount
            record = await self.records.append(
                TransactionType.TRANSFER.value,
                amount,
                admin.code,
                sender=sender,
                receiver=receiver,
                note=note,
            )

        return TransferResult(sender=sender, receiver=receiver, record=record)

    async def withdraw(self, user_email: str, amount: Amount, acting_admin_code: str) -> BalanceChange:
        amount = to_amount(amount)

        async with self._atomic(TransactionType.WITHDRAW.value, failure=WithdrawError):
            user = await self.users.get_by_email(user_email, for_update=True)
            if user is None:
                raise UserNotFound()

            admin = await self._authorize(acting_admin_code, owner_code=user.admin_code)
            self._check_amount(amount, available=user.balance)

            user.balance = user.balance - amount
            record = await self.records.append(TransactionType.WITHDRAW.value, amount, admin.code, sender=user)

        return BalanceChange(user=user, record=record)

    async def deposit(self, user_email: str, amount: Amount, acting_admin_code: str) -> BalanceChange:
        amount = to_amount(amount)

        async with self._atomic(TransactionType.DEPOSIT.value, failure=DepositError):
            user = await self.users.get_by_email(user_email, for_update=True)
            if user is None:
                raise UserNotFound()

            admin = await self._authorize(acting_admin_code, owner_code=user.admin_code)
            # No upper bound: a deposit cannot drive a balance negative
            self._check_amount(amount)

            user.balance = user.balance + amount
            record = await self.records.append(TransactionType.DEPOSIT.value, amount, admin.code, receiver=user)

        return BalanceChange(user=user, record=record)

    async def register_user(
        self,
        name: str,
        email: str,
        state_code: str,
        township_code: str,
        acting_admin_code: str,
    ) -> User:
        """Create a zero-balance user owned by the acting admin"""
        async with self._atomic("register_user"):
            admin = await self._authorize(acting_admin_code)

            if await self.users.get_by_email(email) is not None:
                raise UserAlreadyCreated()
            try:
                user = await self.users.create_user(name, email, state_code, township_code, admin.code)
            except IntegrityError as e:
                # Lost a race with a concurrent registration of the same email
                raise UserAlreadyCreated() from e

        return user

    async def list_transactions_for_user(
        self,
        email: str,
        acting_admin_code: str,
        newest_first: bool = False,
    ) -> List[TransactionRecord]:
        async with self._atomic("list_user_transactions"):
            user = await self.users.get_by_email(email)
            if user is None:
                raise UserNotFound()
            await self._authorize(acting_admin_code, owner_code=user.admin_code)
            records = await self.records.list_for_user(user.id, newest_first=newest_first)

        return records

    async def list_transactions_for_admin(self, admin_code: str, newest_first: bool = False) -> List[TransactionRecord]:
        async with self._atomic("list_admin_transactions"):
            if await self.admins.get_by_code(admin_code) is None:
                raise AdminNotFound(admin_code)
            records = await self.records.list_for_admin(admin_code, newest_first=newest_first)

        return records

    async def execute(
        self,
        operation: TransactionOperation,
        acting_admin_code: str,
    ) -> Union[TransferResult, BalanceChange, List[TransactionRecord]]:
        """Run one of the closed set of transaction operations"""
        if isinstance(operation, TransferOperation):
            return await self.transfer(
                operation.sender_email,
                operation.receiver_email,
                operation.amount,
                operation.note,
                acting_admin_code,
            )
        if isinstance(operation, WithdrawOperation):
            return await self.withdraw(operation.user_email, operation.amount, acting_admin_code)
        if isinstance(operation, DepositOperation):
            return await self.deposit(operation.user_email, operation.amount, acting_admin_code)
        if isinstance(operation, ListTransactionsOperation):
            return await self.list_transactions_for_user(
                operation.user_email,
                acting_admin_code,
                newest_first=operation.newest_first,
            )
        raise TypeError(f"Unsupported operation: {type(operation).__name__}")
