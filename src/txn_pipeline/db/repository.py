"""Repositories implementing the persistence contract.

Every call opens its own session, so each operation commits or rolls back
on its own. A failure saving one entity never affects entities saved by
earlier calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, func, select

from txn_pipeline.db.models import Base, CardDB, CustomerDB, TransactionDB
from txn_pipeline.db.session import DatabaseSession
from txn_pipeline.models import (
    Address,
    Card,
    Customer,
    DeviceInfo,
    MerchantLocation,
    Transaction,
)

ModelT = TypeVar("ModelT", bound=BaseModel)
RowT = TypeVar("RowT", bound=Base)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def customer_to_db(customer: Customer) -> CustomerDB:
    """Convert a Pydantic Customer to SQLAlchemy model."""
    return CustomerDB(
        id=customer.id,
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email,
        phone_number=customer.phone_number,
        street=customer.address.street,
        city=customer.address.city,
        state=customer.address.state,
        zip_code=customer.address.zip_code,
        country=customer.address.country,
        latitude=customer.address.latitude,
        longitude=customer.address.longitude,
        average_transaction_amount=customer.average_transaction_amount,
        typical_transaction_hours=customer.typical_transaction_hours,
        created_at=customer.created_at,
    )


def customer_from_db(row: CustomerDB) -> Customer:
    return Customer(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        phone_number=row.phone_number,
        address=Address(
            street=row.street,
            city=row.city,
            state=row.state,
            zip_code=row.zip_code,
            country=row.country,
            latitude=row.latitude,
            longitude=row.longitude,
        ),
        average_transaction_amount=row.average_transaction_amount,
        typical_transaction_hours=row.typical_transaction_hours,
        created_at=_as_utc(row.created_at),
    )


def card_to_db(card: Card) -> CardDB:
    """Convert a Pydantic Card to SQLAlchemy model."""
    return CardDB(
        id=card.id,
        customer_id=card.customer_id,
        card_number=card.card_number,
        card_holder_name=card.card_holder_name,
        expiry_date=card.expiry_date,
        cvv=card.cvv,
        card_type=card.card_type.value,
        credit_limit=card.credit_limit,
        available_balance=card.available_balance,
        is_active=card.is_active,
        created_at=card.created_at,
    )


def card_from_db(row: CardDB) -> Card:
    return Card(
        id=row.id,
        customer_id=row.customer_id,
        card_number=row.card_number,
        card_holder_name=row.card_holder_name,
        expiry_date=row.expiry_date,
        cvv=row.cvv,
        card_type=row.card_type,
        credit_limit=row.credit_limit,
        available_balance=row.available_balance,
        is_active=row.is_active,
        created_at=_as_utc(row.created_at),
    )


def transaction_to_db(txn: Transaction) -> TransactionDB:
    """Convert a Pydantic Transaction to SQLAlchemy model."""
    location = txn.merchant_location
    device = txn.device_info
    return TransactionDB(
        id=txn.id,
        card_id=txn.card_id,
        customer_id=txn.customer_id,
        amount=txn.amount,
        currency=txn.currency,
        merchant_id=txn.merchant_id,
        merchant_name=txn.merchant_name,
        merchant_category=txn.merchant_category,
        merchant_latitude=location.latitude if location else None,
        merchant_longitude=location.longitude if location else None,
        merchant_city=location.city if location else None,
        merchant_country=location.country if location else None,
        transaction_type=txn.transaction_type,
        is_card_present=txn.is_card_present,
        device_id=device.device_id if device else None,
        device_type=device.device_type if device else None,
        ip_address=device.ip_address if device else None,
        user_agent=device.user_agent if device else None,
        transaction_timestamp=txn.transaction_timestamp,
        status=txn.status,
        previous_transaction_id=txn.previous_transaction_id,
    )


def transaction_from_db(row: TransactionDB) -> Transaction:
    location = None
    if row.merchant_city is not None:
        location = MerchantLocation(
            latitude=row.merchant_latitude,
            longitude=row.merchant_longitude,
            city=row.merchant_city,
            country=row.merchant_country,
        )
    device = None
    if row.device_id is not None:
        device = DeviceInfo(
            device_id=row.device_id,
            device_type=row.device_type,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
        )
    return Transaction(
        id=row.id,
        card_id=row.card_id,
        customer_id=row.customer_id,
        amount=row.amount,
        currency=row.currency,
        merchant_id=row.merchant_id,
        merchant_name=row.merchant_name,
        merchant_category=row.merchant_category,
        merchant_location=location,
        transaction_type=row.transaction_type,
        is_card_present=row.is_card_present,
        device_info=device,
        transaction_timestamp=_as_utc(row.transaction_timestamp),
        status=row.status,
        previous_transaction_id=row.previous_transaction_id,
    )


class Repository(ABC, Generic[ModelT, RowT]):
    """Generic CRUD over one table, speaking domain models."""

    row_type: type[Base]

    def __init__(self, db: DatabaseSession):
        self.db = db

    @abstractmethod
    def _to_row(self, model: ModelT) -> RowT:
        """Convert a domain model to a new ORM row."""

    @abstractmethod
    def _from_row(self, row: RowT) -> ModelT:
        """Convert an ORM row back to its domain model."""

    def save(self, model: ModelT) -> ModelT:
        """Insert or update a single entity."""
        with self.db.get_session() as session:
            session.merge(self._to_row(model))
        return model

    def count(self) -> int:
        with self.db.get_session() as session:
            return session.scalar(select(func.count()).select_from(self.row_type))

    def find_by_id(self, entity_id: str) -> ModelT | None:
        with self.db.get_session() as session:
            row = session.get(self.row_type, entity_id)
            return self._from_row(row) if row is not None else None

    def find_all(self) -> list[ModelT]:
        with self.db.get_session() as session:
            rows = session.scalars(select(self.row_type)).all()
            return [self._from_row(row) for row in rows]

    def delete_all(self) -> int:
        """Delete every row in the table.

        Returns:
            Number of rows deleted.
        """
        with self.db.get_session() as session:
            result = session.execute(delete(self.row_type))
            return result.rowcount or 0


class CustomerRepository(Repository[Customer, CustomerDB]):
    row_type = CustomerDB

    def _to_row(self, model: Customer) -> CustomerDB:
        return customer_to_db(model)

    def _from_row(self, row: CustomerDB) -> Customer:
        return customer_from_db(row)

    def save(self, model: Customer) -> Customer:
        # Plain insert so a duplicate email surfaces as an IntegrityError
        with self.db.get_session() as session:
            session.add(self._to_row(model))
        return model

    def find_by_email(self, email: str) -> Customer | None:
        with self.db.get_session() as session:
            row = session.scalars(
                select(CustomerDB).where(CustomerDB.email == email)
            ).first()
            return customer_from_db(row) if row is not None else None


class CardRepository(Repository[Card, CardDB]):
    row_type = CardDB

    def _to_row(self, model: Card) -> CardDB:
        return card_to_db(model)

    def _from_row(self, row: CardDB) -> Card:
        return card_from_db(row)

    def find_active_cards(self) -> list[Card]:
        """All cards eligible as transaction sources."""
        with self.db.get_session() as session:
            rows = session.scalars(
                select(CardDB).where(CardDB.is_active.is_(True))
            ).all()
            return [card_from_db(row) for row in rows]

    def count_active(self) -> int:
        with self.db.get_session() as session:
            return session.scalar(
                select(func.count(CardDB.id)).where(CardDB.is_active.is_(True))
            )

    def find_by_customer_id(self, customer_id: str) -> list[Card]:
        with self.db.get_session() as session:
            rows = session.scalars(
                select(CardDB).where(CardDB.customer_id == customer_id)
            ).all()
            return [card_from_db(row) for row in rows]


class TransactionRepository(Repository[Transaction, TransactionDB]):
    row_type = TransactionDB

    def _to_row(self, model: Transaction) -> TransactionDB:
        return transaction_to_db(model)

    def _from_row(self, row: TransactionDB) -> Transaction:
        return transaction_from_db(row)

    def find_by_card_id(self, card_id: str) -> list[Transaction]:
        """Transactions for a card, newest first."""
        with self.db.get_session() as session:
            rows = session.scalars(
                select(TransactionDB)
                .where(TransactionDB.card_id == card_id)
                .order_by(TransactionDB.transaction_timestamp.desc())
            ).all()
            return [transaction_from_db(row) for row in rows]
