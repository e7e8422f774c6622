"""Pydantic data models for customers, cards and transactions."""

from txn_pipeline.models.card import Card, CardType
from txn_pipeline.models.customer import Address, Customer
from txn_pipeline.models.transaction import DeviceInfo, MerchantLocation, Transaction
from txn_pipeline.models.wire import (
    CardTransactionRecord,
    TransactionType,
    WireDeviceInfo,
    WireMerchantLocation,
)

__all__ = [
    "Address",
    "Card",
    "CardTransactionRecord",
    "CardType",
    "Customer",
    "DeviceInfo",
    "MerchantLocation",
    "Transaction",
    "TransactionType",
    "WireDeviceInfo",
    "WireMerchantLocation",
]
