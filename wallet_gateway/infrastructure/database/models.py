"""SQLAlchemy ORM models for admins, users and the transaction audit trail"""

import uuid
from decimal import Decimal
from sqlalchemy import BigInteger, Column, Boolean, DateTime, ForeignKey, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

from wallet_gateway.domain.models import Role
from wallet_gateway.utils.date_utils import utc_now

Base = declarative_base()


class DecimalText(TypeDecorator):
    """Decimal stored as its canonical string, for backends without a native decimal type"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


# SQLite would store NUMERIC as REAL and round every balance through a float
Money = Numeric(asdecimal=True).with_variant(DecimalText(), "sqlite")


class Admin(Base):
    """Operator account"""

    __tablename__ = "admin"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(Text, nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    password_hash = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default=Role.STANDARD.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class User(Base):
    """End-user monetary account owned by the admin that registered it"""

    __tablename__ = "wallet_user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True, index=True)
    balance = Column(Money, nullable=False, default=Decimal("0"))
    admin_code = Column(Text, ForeignKey("admin.code"), nullable=False, index=True)
    state_code = Column(Text, nullable=False)
    township_code = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class TransactionRecord(Base):
    """Append-only audit entry for a committed balance change"""

    __tablename__ = "transaction_record"

    # Insertion order; breaks created_at ties in history listings
    seq = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    id = Column(Uuid, nullable=False, unique=True, default=uuid.uuid4)
    type = Column(Text, nullable=False)
    sender_id = Column(Uuid, ForeignKey("wallet_user.id"), nullable=True, index=True)
    receiver_id = Column(Uuid, ForeignKey("wallet_user.id"), nullable=True, index=True)
    amount = Column(Money, nullable=False)
    note = Column(Text, nullable=True)
    admin_code = Column(Text, ForeignKey("admin.code"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)

    # Eager: async sessions cannot lazy-load on attribute access
    sender = relationship("User", foreign_keys=[sender_id], lazy="joined")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="joined")
