"""Signed session tokens (JWT) carrying admin claims"""

from datetime import datetime, timedelta
from typing import Any, Dict

from jose import JWTError, jwt

from wallet_gateway.config import settings
from wallet_gateway.domain.exceptions import AccessDenied
from wallet_gateway.domain.models import Role, SessionClaims
from wallet_gateway.utils.date_utils import utc_now


class SessionTokens:
    """Issues and resolves tamper-evident session tokens"""

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        ttl_minutes: int | None = None,
    ):
        self.secret = secret or settings.session_secret
        self.algorithm = algorithm or settings.session_algorithm
        self.ttl = timedelta(minutes=ttl_minutes or settings.session_ttl_minutes)

    def issue(self, claims: SessionClaims, now_utc: datetime | None = None) -> str:
        issued_at = now_utc or utc_now()
        payload: Dict[str, Any] = {
            "sub": claims.admin_code,
            "role": claims.role.value,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def resolve(self, token: str) -> SessionClaims:
        """
        Decode a token back into claims.

        Raises:
            AccessDenied: On bad signature, expiry, or malformed claims
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            return SessionClaims(admin_code=payload["sub"], role=Role(payload["role"]))
        except (JWTError, KeyError, ValueError) as e:
            raise AccessDenied() from e
