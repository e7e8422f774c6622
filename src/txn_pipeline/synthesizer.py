"""Random card transaction synthesis and publishing."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from txn_pipeline.db.repository import CardRepository, TransactionRepository
from txn_pipeline.errors import (
    InvalidCountError,
    NoActiveCardsError,
    PublishFailureError,
)
from txn_pipeline.generator import random_coordinates
from txn_pipeline.logging import get_logger
from txn_pipeline.mapper import to_wire
from txn_pipeline.models import (
    Card,
    CardTransactionRecord,
    DeviceInfo,
    MerchantLocation,
    Transaction,
)
from txn_pipeline.publisher import TransactionPublisher

logger = get_logger(__name__)

MERCHANT_NAMES = (
    "Amazon", "Walmart", "Starbucks", "Target", "Best Buy",
    "McDonald's", "Apple Store", "Netflix", "Uber", "Shell Gas",
)  # fmt: skip
MERCHANT_CATEGORIES = (
    "RETAIL", "FOOD", "ENTERTAINMENT", "TRAVEL", "SERVICES", "UTILITIES",
)  # fmt: skip
MERCHANT_CITIES = ("New York", "Los Angeles", "Chicago", "Houston", "Miami")
DEVICE_TYPES = ("MOBILE", "DESKTOP", "TABLET")
USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X) AppleWebKit/537.36",
    "Mozilla/5.0 (Android 10; Mobile) AppleWebKit/537.36",
)

ONLINE_PROBABILITY = 0.4
PREVIOUS_LINK_PROBABILITY = 0.3
MIN_AMOUNT = 10.0
MAX_AMOUNT = 500.0
CURRENCY = "USD"
DEFAULT_STATUS = "APPROVED"

# Bulk generation pauses on every PACING_EVERY-th iteration
PACING_EVERY = 10
PACING_DELAY_SECONDS = 0.05


@dataclass
class SyntheticTransaction:
    """A generated transaction in both its domain and wire forms."""

    transaction: Transaction
    record: CardTransactionRecord


class TransactionSynthesizer:
    """Synthesizes transactions from the active card pool and publishes them.

    Attributes:
        cards: Source of the active card pool.
        publisher: Destination for wire records.
        transactions: Where synthesized transactions are saved, if anywhere.
        max_bulk_size: Largest count accepted by generate_and_publish_many.
        rng: Numpy random generator.
    """

    def __init__(
        self,
        cards: CardRepository,
        publisher: TransactionPublisher,
        transactions: TransactionRepository | None = None,
        max_bulk_size: int = 1000,
        rng: np.random.Generator | None = None,
        sleep=time.sleep,
        lock: threading.RLock | None = None,
    ):
        self.cards = cards
        self.publisher = publisher
        self.transactions = transactions
        self.max_bulk_size = max_bulk_size
        self.rng = rng if rng is not None else np.random.default_rng()
        self._sleep = sleep
        # Shared with the initialization controller so a reset never sees
        # a pool read or transaction save in flight
        self._lock = lock if lock is not None else threading.RLock()

    def _choice(self, options: tuple[str, ...]) -> str:
        return options[int(self.rng.integers(0, len(options)))]

    def _generate_ip(self) -> str:
        third, fourth = (int(octet) for octet in self.rng.integers(0, 256, size=2))
        return f"192.168.{third}.{fourth}"

    def _generate_device(self) -> DeviceInfo:
        return DeviceInfo(
            device_id=f"DEV_{int(self.rng.integers(0, 10000))}",
            device_type=self._choice(DEVICE_TYPES),
            ip_address=self._generate_ip(),
            user_agent=self._choice(USER_AGENTS),
        )

    def _generate_previous_id(self) -> str | None:
        if float(self.rng.random()) < PREVIOUS_LINK_PROBABILITY:
            return f"PREV_{uuid.UUID(bytes=self.rng.bytes(16), version=4)}"
        return None

    def build_transaction(self, card: Card) -> Transaction:
        """Build a random transaction charged to ``card``."""
        is_online = float(self.rng.random()) < ONLINE_PROBABILITY
        amount = round(float(self.rng.uniform(MIN_AMOUNT, MAX_AMOUNT)), 2)
        latitude, longitude = random_coordinates(self.rng)

        return Transaction(
            id=str(uuid.UUID(bytes=self.rng.bytes(16), version=4)),
            card_id=card.id,
            customer_id=card.customer_id,
            amount=amount,
            currency=CURRENCY,
            merchant_id=f"MERCH_{int(self.rng.integers(0, 100000))}",
            merchant_name=(
                f"{self._choice(MERCHANT_NAMES)} {int(self.rng.integers(0, 100))}"
            ),
            merchant_category=self._choice(MERCHANT_CATEGORIES),
            merchant_location=MerchantLocation(
                latitude=latitude,
                longitude=longitude,
                city=self._choice(MERCHANT_CITIES),
                country="USA",
            ),
            transaction_type="ONLINE" if is_online else "POS",
            is_card_present=not is_online,
            device_info=self._generate_device() if is_online else None,
            transaction_timestamp=datetime.now(timezone.utc),
            status=DEFAULT_STATUS,
            previous_transaction_id=self._generate_previous_id(),
        )

    def generate_one(self) -> SyntheticTransaction:
        """Synthesize one transaction from a uniformly chosen active card.

        Raises:
            NoActiveCardsError: If the active card pool is empty.
        """
        active_cards = self.cards.find_active_cards()
        if not active_cards:
            raise NoActiveCardsError()

        card = active_cards[int(self.rng.integers(0, len(active_cards)))]
        transaction = self.build_transaction(card)
        return SyntheticTransaction(
            transaction=transaction, record=to_wire(transaction)
        )

    def generate_random_transaction(self) -> CardTransactionRecord:
        """Synthesize one wire record without publishing it."""
        with self._lock:
            return self.generate_one().record

    def generate_and_publish_one(self) -> CardTransactionRecord:
        """Synthesize one transaction and hand it to the publisher.

        Returns:
            The published wire record.

        Raises:
            PublishFailureError: If generation, saving or handing off failed.
                The original error is chained as the cause.
        """
        try:
            with self._lock:
                synthetic = self.generate_one()
                if self.transactions is not None:
                    self.transactions.save(synthetic.transaction)
                self.publisher.publish(synthetic.record)
        except Exception as e:
            logger.error("Error generating transaction", error=str(e))
            raise PublishFailureError() from e

        logger.debug(
            "Generated and sent transaction",
            transaction_id=synthetic.record.transaction_id,
        )
        return synthetic.record

    def generate_and_publish_many(self, count: int) -> int:
        """Generate and publish ``count`` transactions.

        Individual failures are logged and skipped.

        Returns:
            Number of transactions published successfully.

        Raises:
            InvalidCountError: If count is outside [1, max_bulk_size].
        """
        if count <= 0 or count > self.max_bulk_size:
            raise InvalidCountError(count, self.max_bulk_size)

        logger.info("Generating random transactions", count=count)
        success_count = 0

        for i in range(count):
            try:
                self.generate_and_publish_one()
                success_count += 1
            except PublishFailureError as e:
                logger.error(
                    "Error generating transaction in bulk",
                    index=i + 1,
                    count=count,
                    error=str(e.__cause__ or e),
                )

            if i % PACING_EVERY == 0:
                self._sleep(PACING_DELAY_SECONDS)

        logger.info(
            "Bulk generation complete", succeeded=success_count, requested=count
        )
        return success_count
