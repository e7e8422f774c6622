"""Mapping from domain transactions to the wire schema."""

import json
from datetime import datetime, timezone

from txn_pipeline.errors import UnknownTransactionTypeError
from txn_pipeline.models import (
    CardTransactionRecord,
    Transaction,
    TransactionType,
    WireDeviceInfo,
    WireMerchantLocation,
)


def to_epoch_millis(value: datetime) -> int:
    """Convert a timestamp to UTC epoch milliseconds.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def to_wire_type(transaction_type: str) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise UnknownTransactionTypeError(transaction_type) from None


def to_wire(transaction: Transaction) -> CardTransactionRecord:
    """Map a domain transaction to its wire record.

    Merchant location and device info stay ``None`` when the domain
    transaction has none, and are dropped from the encoded payload.

    Raises:
        UnknownTransactionTypeError: If the transaction type is neither
            ONLINE nor POS.
    """
    location = transaction.merchant_location
    device = transaction.device_info

    return CardTransactionRecord(
        transaction_id=transaction.id,
        card_id=transaction.card_id,
        customer_id=transaction.customer_id,
        transaction_timestamp=to_epoch_millis(transaction.transaction_timestamp),
        transaction_amount=transaction.amount,
        currency=transaction.currency,
        merchant_id=transaction.merchant_id,
        merchant_name=transaction.merchant_name,
        merchant_category=transaction.merchant_category,
        merchant_location=(
            WireMerchantLocation(
                latitude=location.latitude,
                longitude=location.longitude,
                city=location.city,
                country=location.country,
            )
            if location is not None
            else None
        ),
        transaction_type=to_wire_type(transaction.transaction_type),
        device_info=(
            WireDeviceInfo(
                device_id=device.device_id,
                device_type=device.device_type,
                ip_address=device.ip_address,
                user_agent=device.user_agent,
            )
            if device is not None
            else None
        ),
        is_card_present=transaction.is_card_present,
        previous_transaction_id=transaction.previous_transaction_id,
        status=transaction.status,
    )


def encode_record(record: CardTransactionRecord) -> bytes:
    """Serialize a wire record to UTF-8 JSON."""
    return json.dumps(record.to_payload(), separators=(",", ":")).encode("utf-8")


def encode_key(key: str) -> bytes:
    return key.encode("utf-8")
