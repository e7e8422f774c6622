"""Database models, connection management and repositories."""

from txn_pipeline.db.models import Base, CardDB, CustomerDB, TransactionDB
from txn_pipeline.db.repository import (
    CardRepository,
    CustomerRepository,
    TransactionRepository,
)
from txn_pipeline.db.session import DatabaseSession, get_database_url

__all__ = [
    "Base",
    "CardDB",
    "CardRepository",
    "CustomerDB",
    "CustomerRepository",
    "DatabaseSession",
    "TransactionDB",
    "TransactionRepository",
    "get_database_url",
]
