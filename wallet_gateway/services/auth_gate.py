"""Credential verification and session claims"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_gateway.domain.exceptions import AccessDenied
from wallet_gateway.domain.models import Role, SessionClaims
from wallet_gateway.infrastructure.database.repositories import AdminRepository
from wallet_gateway.infrastructure.observability.metrics import login_counter, store_failure_counter
from wallet_gateway.infrastructure.security.passwords import PasswordHasher, password_hasher
from wallet_gateway.infrastructure.security.tokens import SessionTokens

logger = logging.getLogger(__name__)


class AuthGate:
    """
    Resolves who is acting; never decides what they may do.

    Every login failure surfaces as the same AccessDenied so callers cannot
    tell an unknown code from a wrong password.
    """

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher = password_hasher,
        tokens: SessionTokens | None = None,
    ):
        self.db = db
        self.admins = AdminRepository(db)
        self.hasher = hasher
        self.tokens = tokens or SessionTokens()

    async def login(self, admin_code: str, password: str) -> SessionClaims:
        try:
            admin = await self.admins.get_by_code(admin_code)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            store_failure_counter.labels(operation="login").inc()
            login_counter.labels(outcome="denied").inc()
            # Logged in full here; the caller only ever sees the generic denial
            logger.error("Store failure during login", exc_info=True, extra={"admin_code": admin_code})
            raise AccessDenied() from None

        if admin is None:
            self.hasher.burn(password)
            verified = False
        else:
            verified = self.hasher.verify(admin.password_hash, password)

        if not verified:
            login_counter.labels(outcome="denied").inc()
            logger.info("Login denied", extra={"admin_code": admin_code})
            raise AccessDenied()

        login_counter.labels(outcome="granted").inc()
        return SessionClaims(admin_code=admin.code, role=Role(admin.role))

    def issue_session(self, claims: SessionClaims) -> str:
        return self.tokens.issue(claims)

    def resolve_session(self, token: str | None) -> SessionClaims:
        if not token:
            raise AccessDenied()
        return self.tokens.resolve(token)
