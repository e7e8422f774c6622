"""Tests for the domain-to-wire schema mapper."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from txn_pipeline.errors import UnknownTransactionTypeError
from txn_pipeline.mapper import encode_record, to_epoch_millis, to_wire
from txn_pipeline.models import (
    DeviceInfo,
    MerchantLocation,
    Transaction,
    TransactionType,
)

NEW_YEAR_2024 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_transaction(**overrides) -> Transaction:
    values = {
        "id": "txn-1",
        "card_id": "card-1",
        "customer_id": "cust-1",
        "amount": 42.5,
        "currency": "USD",
        "merchant_id": "MERCH_1",
        "merchant_name": "Starbucks 12",
        "merchant_category": "FOOD",
        "transaction_type": "POS",
        "is_card_present": True,
        "transaction_timestamp": NEW_YEAR_2024,
        "status": "APPROVED",
    }
    values.update(overrides)
    return Transaction(**values)


class TestTimestamps:
    def test_utc_epoch_millis(self):
        assert to_epoch_millis(NEW_YEAR_2024) == 1704067200000

    def test_naive_treated_as_utc(self):
        assert to_epoch_millis(datetime(2024, 1, 1)) == 1704067200000

    def test_offset_normalized(self):
        plus_two = timezone(timedelta(hours=2))
        assert to_epoch_millis(datetime(2024, 1, 1, 2, tzinfo=plus_two)) == (
            1704067200000
        )


class TestToWire:
    """Tests for field mapping."""

    def test_scalar_fields_copied(self):
        record = to_wire(make_transaction())

        assert record.transaction_id == "txn-1"
        assert record.card_id == "card-1"
        assert record.customer_id == "cust-1"
        assert record.transaction_amount == 42.5
        assert record.currency == "USD"
        assert record.merchant_name == "Starbucks 12"
        assert record.transaction_timestamp == 1704067200000
        assert record.transaction_type is TransactionType.POS
        assert record.is_card_present is True

    def test_absent_nested_structures_stay_absent(self):
        """No location or device means no placeholders on the wire."""
        record = to_wire(make_transaction())
        assert record.merchant_location is None
        assert record.device_info is None

        payload = record.to_payload()
        assert "merchantLocation" not in payload
        assert "deviceInfo" not in payload
        assert payload["previousTransactionId"] is None

    def test_absent_scalars_sent_as_null(self):
        """Every record carries the same scalar keys."""
        with_link = to_wire(make_transaction(previous_transaction_id="PREV_1"))
        without_link = to_wire(make_transaction(merchant_category=None))

        payload = without_link.to_payload()
        assert payload["merchantCategory"] is None
        assert payload["previousTransactionId"] is None
        assert set(payload) == set(with_link.to_payload())

    def test_online_with_device_and_location(self):
        txn = make_transaction(
            transaction_type="ONLINE",
            is_card_present=False,
            merchant_location=MerchantLocation(
                latitude=34.1, longitude=-118.2, city="Miami", country="USA"
            ),
            device_info=DeviceInfo(
                device_id="DEV_1",
                device_type="MOBILE",
                ip_address="192.168.0.1",
                user_agent="Mozilla/5.0",
            ),
            previous_transaction_id="PREV_abc",
        )
        payload = to_wire(txn).to_payload()

        assert payload["transactionType"] == "ONLINE"
        assert payload["isCardPresent"] is False
        assert payload["merchantLocation"] == {
            "latitude": 34.1,
            "longitude": -118.2,
            "city": "Miami",
            "country": "USA",
        }
        assert payload["deviceInfo"]["deviceId"] == "DEV_1"
        assert payload["deviceInfo"]["ipAddress"] == "192.168.0.1"
        assert payload["previousTransactionId"] == "PREV_abc"

    def test_unknown_type_rejected(self):
        txn = make_transaction(transaction_type="ATM")
        with pytest.raises(UnknownTransactionTypeError) as exc_info:
            to_wire(txn)
        assert exc_info.value.transaction_type == "ATM"

    def test_lowercase_type_rejected(self):
        with pytest.raises(UnknownTransactionTypeError):
            to_wire(make_transaction(transaction_type="pos"))

    def test_mapping_is_deterministic(self):
        txn = make_transaction()
        assert to_wire(txn) == to_wire(txn)


class TestEncodeRecord:
    def test_json_with_camel_case_keys(self):
        data = json.loads(encode_record(to_wire(make_transaction())))

        assert data["transactionId"] == "txn-1"
        assert data["transactionTimestamp"] == 1704067200000
        assert data["transactionAmount"] == 42.5
        assert "transaction_id" not in data


class TestTransactionInvariant:
    def test_card_present_must_invert_online(self):
        with pytest.raises(ValueError):
            make_transaction(transaction_type="ONLINE", is_card_present=True)
