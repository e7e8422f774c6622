"""SQLAlchemy models mirroring the Pydantic domain models."""

from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class CustomerDB(Base):
    """SQLAlchemy model for customers."""

    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Embedded address
    street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    country: Mapped[str | None] = mapped_column(String(50), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Behavioral summary
    average_transaction_amount: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    typical_transaction_hours: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<CustomerDB(id={self.id}, email={self.email})>"


class CardDB(Base):
    """SQLAlchemy model for payment cards."""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=False, index=True
    )
    card_number: Mapped[str] = mapped_column(String(19), nullable=False, index=True)
    card_holder_name: Mapped[str] = mapped_column(String(255), nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    cvv: Mapped[str] = mapped_column(String(4), nullable=False)
    card_type: Mapped[str] = mapped_column(String(20), nullable=False)
    credit_limit: Mapped[float] = mapped_column(
        Numeric(18, 2, asdecimal=False), nullable=False
    )
    available_balance: Mapped[float] = mapped_column(
        Numeric(18, 2, asdecimal=False), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    __table_args__ = (Index("ix_cards_is_active", "is_active"),)

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, is_active={self.is_active})>"


class TransactionDB(Base):
    """SQLAlchemy model for synthesized transactions."""

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    card_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cards.id"), nullable=False, index=True
    )
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(
        Numeric(18, 2, asdecimal=False), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    merchant_id: Mapped[str] = mapped_column(String(50), nullable=False)
    merchant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    merchant_category: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Embedded merchant location
    merchant_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    merchant_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    merchant_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    merchant_country: Mapped[str | None] = mapped_column(String(50), nullable=True)

    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_card_present: Mapped[bool] = mapped_column(Boolean, nullable=False)

    # Embedded device info
    device_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    device_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(255), nullable=True)

    transaction_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    previous_transaction_id: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    __table_args__ = (
        Index("ix_transactions_timestamp", "transaction_timestamp"),
    )

    def __repr__(self) -> str:
        return f"<TransactionDB(id={self.id}, amount={self.amount})>"
