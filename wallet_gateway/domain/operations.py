"""Transaction operation variants resolved once at the HTTP boundary"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union


@dataclass(frozen=True)
class TransferOperation:
    sender_email: str
    receiver_email: str
    amount: Decimal
    note: Optional[str] = None


@dataclass(frozen=True)
class WithdrawOperation:
    user_email: str
    amount: Decimal


@dataclass(frozen=True)
class DepositOperation:
    user_email: str
    amount: Decimal


@dataclass(frozen=True)
class ListTransactionsOperation:
    user_email: str
    newest_first: bool = False


TransactionOperation = Union[
    TransferOperation,
    WithdrawOperation,
    DepositOperation,
    ListTransactionsOperation,
]
