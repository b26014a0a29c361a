"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from wallet_gateway.domain.models import Role
from wallet_gateway.domain.operations import (
    DepositOperation,
    ListTransactionsOperation,
    TransferOperation,
    WithdrawOperation,
)

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Success envelope: {"data": ...}"""

    data: T


# Admins


class AdminSchema(BaseModel):
    """Public view of an admin; never carries the credential hash"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: str
    role: Role
    is_active: bool
    created_at: datetime


class CreateAdminRequest(BaseModel):
    """Request body for POST /admins"""

    name: str = Field(..., min_length=1, description="Admin display name")
    password: str = Field(..., min_length=8, description="Initial credential")
    role: Role = Role.STANDARD


class AdminActionRequest(BaseModel):
    """Request body for POST /admins/{code}/actions"""

    process: Literal["activate", "deactivate", "search"]


class LoginRequest(BaseModel):
    admin_code: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginData(BaseModel):
    admin_code: str
    role: Role


# Users


class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    balance: Decimal
    admin_code: str
    state_code: str
    township_code: str
    created_at: datetime


class RegisterUserRequest(BaseModel):
    """Request body for POST /users"""

    name: str = Field(..., min_length=1)
    email: EmailStr
    state_code: str = Field(..., min_length=1)
    township_code: str = Field(..., min_length=1)


# Transactions


class TransactionSchema(BaseModel):
    id: uuid.UUID
    type: str
    sender_email: Optional[str] = None
    receiver_email: Optional[str] = None
    amount: Decimal
    note: Optional[str] = None
    admin_code: str
    created_at: datetime

    @classmethod
    def from_record(cls, record) -> "TransactionSchema":
        return cls(
            id=record.id,
            type=record.type,
            sender_email=record.sender.email if record.sender else None,
            receiver_email=record.receiver.email if record.receiver else None,
            amount=record.amount,
            note=record.note,
            admin_code=record.admin_code,
            created_at=record.created_at,
        )


class TransferResultSchema(BaseModel):
    sender: UserSchema
    receiver: UserSchema
    transaction: TransactionSchema


class BalanceChangeSchema(BaseModel):
    user: UserSchema
    transaction: TransactionSchema


class TransferData(BaseModel):
    sender_email: EmailStr
    receiver_email: EmailStr
    amount: Decimal = Field(..., gt=0, description="Amount to move")
    note: Optional[str] = None


class AmountData(BaseModel):
    user_email: EmailStr
    amount: Decimal = Field(..., gt=0)


class ListData(BaseModel):
    user_email: EmailStr
    newest_first: bool = False


class TransferRequest(BaseModel):
    process: Literal["transfer"]
    data: TransferData

    def to_operation(self) -> TransferOperation:
        return TransferOperation(
            sender_email=self.data.sender_email,
            receiver_email=self.data.receiver_email,
            amount=self.data.amount,
            note=self.data.note,
        )


class WithdrawRequest(BaseModel):
    process: Literal["withdraw"]
    data: AmountData

    def to_operation(self) -> WithdrawOperation:
        return WithdrawOperation(user_email=self.data.user_email, amount=self.data.amount)


class DepositRequest(BaseModel):
    process: Literal["deposit"]
    data: AmountData

    def to_operation(self) -> DepositOperation:
        return DepositOperation(user_email=self.data.user_email, amount=self.data.amount)


class ListRequest(BaseModel):
    process: Literal["list"]
    data: ListData

    def to_operation(self) -> ListTransactionsOperation:
        return ListTransactionsOperation(user_email=self.data.user_email, newest_first=self.data.newest_first)


# Request body for POST /transactions, resolved on "process"
TransactionRequest = Annotated[
    Union[TransferRequest, WithdrawRequest, DepositRequest, ListRequest],
    Field(discriminator="process"),
]


TransactionResult = Union[TransferResultSchema, BalanceChangeSchema, List[TransactionSchema]]
