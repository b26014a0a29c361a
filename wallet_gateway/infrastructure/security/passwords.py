"""Credential hashing with Argon2"""

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordHasher:
    """Hashes and verifies admin credentials"""

    def __init__(self) -> None:
        self.ph = Argon2Hasher()
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        return str(self.ph.hash(password))

    def verify(self, stored: str, provided: str) -> bool:
        try:
            return bool(self.ph.verify(stored, provided))
        except (VerificationError, InvalidHashError):
            return False

    def burn(self, provided: str) -> None:
        """Spend the same work as a real verification, for unknown accounts"""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("wallet-gateway-dummy-credential")
        self.verify(self._dummy_hash, provided)


password_hasher = PasswordHasher()
