"""Generator service wiring the pipeline components together.

This is the surface the HTTP and CLI layers call into.
"""

from __future__ import annotations

import numpy as np

from txn_pipeline.config import GeneratorSettings
from txn_pipeline.db import (
    CardRepository,
    CustomerRepository,
    DatabaseSession,
    TransactionRepository,
)
from txn_pipeline.generator import EntityGenerator
from txn_pipeline.initializer import (
    DataStatus,
    InitializationController,
    InitializationResult,
)
from txn_pipeline.logging import get_logger
from txn_pipeline.models import CardTransactionRecord
from txn_pipeline.publisher import TransactionPublisher
from txn_pipeline.scheduler import EmissionScheduler
from txn_pipeline.synthesizer import TransactionSynthesizer

logger = get_logger(__name__)

SHUTDOWN_FLUSH_TIMEOUT_SECONDS = 10.0


class GeneratorService:
    """Owns the database, publisher, controller, synthesizer and scheduler."""

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        db: DatabaseSession | None = None,
        publisher: TransactionPublisher | None = None,
    ):
        """Build the pipeline from settings.

        Args:
            settings: Generator settings. Defaults to the environment.
            db: Database session manager. Defaults to DATABASE_URL.
            publisher: Transaction publisher. Defaults to a Kafka publisher
                built from the settings.
        """
        self.settings = settings or GeneratorSettings.from_env()
        self.db = db or DatabaseSession()
        self.publisher = publisher or TransactionPublisher(
            topic=self.settings.transactions_topic,
            bootstrap_servers=self.settings.bootstrap_servers,
        )

        self.customers = CustomerRepository(self.db)
        self.cards = CardRepository(self.db)
        self.transactions = TransactionRepository(self.db)

        # Separate streams so seeding does not shift the transaction sequence
        entity_rng, transaction_rng = (
            np.random.default_rng(s)
            for s in np.random.SeedSequence(self.settings.seed).spawn(2)
        )

        self.controller = InitializationController(
            customers=self.customers,
            cards=self.cards,
            transactions=self.transactions,
            generator=EntityGenerator(seed=self.settings.seed, rng=entity_rng),
            initial_customers=self.settings.initial_customers,
            cards_per_customer=self.settings.cards_per_customer,
            enabled=self.settings.generation_enabled,
        )
        self.synthesizer = TransactionSynthesizer(
            cards=self.cards,
            publisher=self.publisher,
            transactions=(
                self.transactions if self.settings.persist_transactions else None
            ),
            max_bulk_size=self.settings.max_bulk_size,
            rng=transaction_rng,
            lock=self.controller.lock,
        )
        self.scheduler = EmissionScheduler(
            controller=self.controller,
            synthesizer=self.synthesizer,
            interval_ms=self.settings.transaction_interval_ms,
            enabled=self.settings.generation_enabled,
        )

    def start(self, run_scheduler: bool = True) -> None:
        """Create tables, seed if enabled, then start scheduled emission."""
        self.db.create_tables()
        if self.settings.generation_enabled:
            logger.info("Auto-initializing sample data on startup")
            self.controller.initialize()
            if run_scheduler:
                self.scheduler.start()

    def shutdown(self) -> None:
        """Stop the scheduler and flush what the producer still holds."""
        self.scheduler.stop(timeout=self.settings.transaction_interval_ms / 1000 + 5)
        try:
            self.publisher.close(timeout=SHUTDOWN_FLUSH_TIMEOUT_SECONDS)
        except Exception as e:
            logger.warning("Kafka producer did not close cleanly", error=str(e))
        self.db.dispose()

    def initialize(self) -> InitializationResult:
        return self.controller.initialize()

    def reinitialize_data(self) -> InitializationResult:
        return self.controller.reinitialize()

    def generate_random_transaction(self) -> CardTransactionRecord:
        return self.synthesizer.generate_random_transaction()

    def generate_and_publish_one(self) -> CardTransactionRecord:
        return self.synthesizer.generate_and_publish_one()

    def generate_and_publish_many(self, count: int) -> int:
        return self.synthesizer.generate_and_publish_many(count)

    def total_customers(self) -> int:
        return self.customers.count()

    def active_card_count(self) -> int:
        return self.cards.count_active()

    def total_transactions(self) -> int:
        return self.transactions.count()

    def data_status(self) -> DataStatus:
        return self.controller.status()

    def stats(self) -> dict[str, int]:
        return {
            "total_customers": self.total_customers(),
            "active_cards": self.active_card_count(),
            "total_transactions": self.total_transactions(),
        }
