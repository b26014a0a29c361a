"""Admin lifecycle: creation, lookup, and the activation state machine"""

import logging
from typing import Callable, List
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_gateway.config import settings
from wallet_gateway.domain.admin_codes import generate_admin_code
from wallet_gateway.domain.exceptions import (
    AccessDenied,
    AdminCreationError,
    AdminNotFound,
    AlreadyActivated,
    AlreadyDeactivated,
    StoreFailure,
)
from wallet_gateway.domain.models import Role
from wallet_gateway.infrastructure.database.models import Admin, User
from wallet_gateway.infrastructure.database.repositories import AdminRepository, UserRepository
from wallet_gateway.infrastructure.observability.metrics import record_admin_transition, store_failure_counter
from wallet_gateway.infrastructure.security.passwords import PasswordHasher, password_hasher
from wallet_gateway.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class AdminDirectory:
    """
    Manages operator accounts.

    States are Active and Deactivated. Admins start Active, move only through
    activate/deactivate, and are never deleted. Redundant transitions are
    rejected rather than ignored.

    Only an existing, Active super admin may activate or deactivate, checked
    against the stored row so a deactivated admin's live session cannot
    undo its own deactivation.
    """

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher = password_hasher,
        clock: Callable = utc_now,
    ):
        self.db = db
        self.admins = AdminRepository(db)
        self.users = UserRepository(db)
        self.hasher = hasher
        self.clock = clock

    async def find_all(self) -> List[Admin]:
        admins = await self.admins.list_admins()
        await self.db.commit()  # End the read transaction
        return admins

    async def find_by_code(self, code: str) -> Admin:
        admin = await self.admins.get_by_code(code)
        await self.db.commit()
        if admin is None:
            raise AdminNotFound(code)
        return admin

    async def list_users(self, code: str) -> List[User]:
        """Users registered under an admin code"""
        admin = await self.admins.get_by_code(code)
        users = await self.users.list_by_admin(code) if admin is not None else []
        await self.db.commit()
        if admin is None:
            raise AdminNotFound(code)
        return users

    async def create(self, name: str, password: str, role: Role = Role.STANDARD) -> Admin:
        """
        Persist a new Active admin with a freshly generated code.

        A code collision rolls back and retries with a new timestamp.

        Raises:
            AdminCreationError: Attempts exhausted or store unavailable
        """
        password_hash = self.hasher.hash(password)

        for attempt in range(1, settings.admin_code_attempts + 1):
            code = generate_admin_code(name, self.clock(), settings.admin_code_length)
            try:
                admin = await self.admins.create_admin(code, name, password_hash, Role(role).value)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning("Admin code collision", extra={"attempt": attempt})
                continue
            except SQLAlchemyError as e:
                await self.db.rollback()
                store_failure_counter.labels(operation="create_admin").inc()
                record_admin_transition("create", "store_failure")
                logger.error("Admin creation failed", exc_info=True)
                raise AdminCreationError() from e

            record_admin_transition("create", "committed")
            logger.info("Admin created", extra={"admin_code": code, "role": admin.role})
            return admin

        record_admin_transition("create", "store_failure")
        raise AdminCreationError(f"Admin code collided {settings.admin_code_attempts} times")

    async def activate(self, code: str, acting_admin_code: str) -> Admin:
        return await self._transition(code, acting_admin_code, activate=True)

    async def deactivate(self, code: str, acting_admin_code: str) -> Admin:
        return await self._transition(code, acting_admin_code, activate=False)

    @staticmethod
    def _authorize(acting: Admin | None) -> None:
        """State changes need an existing, Active super admin as stored, not as claimed"""
        if acting is None or not acting.is_active or acting.role != Role.SUPER.value:
            raise AccessDenied()

    async def _transition(self, code: str, acting_admin_code: str, activate: bool) -> Admin:
        action = "activate" if activate else "deactivate"
        try:
            # Lock in code order so crossed transitions between two admins cannot deadlock
            locked = {}
            for admin_code in sorted({code, acting_admin_code}):
                locked[admin_code] = await self.admins.get_by_code(admin_code, lock="update")

            self._authorize(locked[acting_admin_code])
            admin = locked[code]
            if admin is None:
                raise AdminNotFound(code)
            if admin.is_active and activate:
                raise AlreadyActivated()
            if not admin.is_active and not activate:
                raise AlreadyDeactivated()

            admin.is_active = activate
            await self.db.commit()
        except (AccessDenied, AdminNotFound, AlreadyActivated, AlreadyDeactivated):
            await self.db.rollback()
            record_admin_transition(action, "rejected")
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            store_failure_counter.labels(operation=action).inc()
            record_admin_transition(action, "store_failure")
            logger.error("Admin state transition failed", exc_info=True, extra={"admin_code": code})
            raise StoreFailure() from e

        record_admin_transition(action, "committed")
        logger.info(
            "Admin state changed",
            extra={"admin_code": code, "action": action, "acting_admin_code": acting_admin_code},
        )
        return admin
