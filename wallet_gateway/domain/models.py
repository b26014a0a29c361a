"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Operator roles carried in session claims"""

    STANDARD = "standard"
    SUPER = "super"


class TransactionType(str, Enum):
    TRANSFER = "transfer"
    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"


@dataclass(frozen=True)
class SessionClaims:
    """Identity resolved from a session token"""

    admin_code: str
    role: Role

    @property
    def is_super(self) -> bool:
        return self.role == Role.SUPER


@dataclass
class TransferResult:
    """Sender and receiver after a committed transfer"""

    sender: Any
    receiver: Any
    record: Any


@dataclass
class BalanceChange:
    """User after a committed withdraw or deposit"""

    user: Any
    record: Any
