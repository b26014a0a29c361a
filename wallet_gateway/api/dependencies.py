"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_gateway.config import settings
from wallet_gateway.domain.exceptions import AccessDenied
from wallet_gateway.domain.models import SessionClaims
from wallet_gateway.infrastructure.database.session import get_db
from wallet_gateway.services.admin_directory import AdminDirectory
from wallet_gateway.services.auth_gate import AuthGate
from wallet_gateway.services.transaction_engine import TransactionEngine

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_admin_directory(db: AsyncSession = Depends(get_db)) -> AdminDirectory:
    return AdminDirectory(db)


def get_transaction_engine(db: AsyncSession = Depends(get_db)) -> TransactionEngine:
    return TransactionEngine(db)


def get_auth_gate(db: AsyncSession = Depends(get_db)) -> AuthGate:
    return AuthGate(db)


def get_session_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> SessionClaims:
    """Resolve the acting admin from the session cookie or a bearer token"""
    token = request.cookies.get(settings.session_cookie_name)
    if token is None and credentials is not None:
        token = credentials.credentials
    return auth_gate.resolve_session(token)


def require_super_admin(claims: SessionClaims = Depends(get_session_claims)) -> SessionClaims:
    if not claims.is_super:
        raise AccessDenied()
    return claims
