"""Dataset seeding and the initialization state machine."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from txn_pipeline.db.repository import (
    CardRepository,
    CustomerRepository,
    TransactionRepository,
)
from txn_pipeline.errors import UniqueConstraintExhaustedError
from txn_pipeline.generator import EntityGenerator
from txn_pipeline.logging import get_logger

logger = get_logger(__name__)

PROGRESS_LOG_EVERY = 20


class InitState(str, Enum):
    """Whether the dataset has been seeded (or found already seeded)."""

    NOT_INITIALIZED = "NOT_INITIALIZED"
    INITIALIZED = "INITIALIZED"


class DataStatus(str, Enum):
    """Readiness of the dataset for transaction synthesis."""

    NOT_INITIALIZED = "NOT_INITIALIZED"
    INITIALIZED_BUT_NO_DATA = "INITIALIZED_BUT_NO_DATA"
    READY = "READY"


class SupportsClear(Protocol):
    def clear(self) -> None: ...


@dataclass
class InitializationResult:
    """Outcome of one initialize() call.

    ``customers_skipped`` counts customers that were not fully seeded:
    either no unique email could be derived or saving failed part way.
    """

    customers_created: int = 0
    cards_created: int = 0
    customers_skipped: int = 0
    already_seeded: bool = False
    skipped_disabled: bool = False


class InitializationController:
    """Seeds customers and cards and tracks whether seeding has happened.

    All state transitions happen under one re-entrant lock, so a reset
    never interleaves with another initialization or with the self-healing
    path of the scheduler.
    """

    def __init__(
        self,
        customers: CustomerRepository,
        cards: CardRepository,
        transactions: TransactionRepository,
        generator: EntityGenerator,
        initial_customers: int = 100,
        cards_per_customer: int = 2,
        enabled: bool = True,
        cache: SupportsClear | None = None,
    ):
        """Initialize the controller.

        Args:
            customers: Customer persistence.
            cards: Card persistence.
            transactions: Transaction persistence, cleared on reset.
            generator: Source of random customers and cards.
            initial_customers: Customers created by a fresh initialization.
            cards_per_customer: Cards issued to each customer.
            enabled: If False, initialize() is a no-op.
            cache: Auxiliary cache cleared on reset.
        """
        self.customers = customers
        self.cards = cards
        self.transactions = transactions
        self.generator = generator
        self.initial_customers = initial_customers
        self.cards_per_customer = cards_per_customer
        self.enabled = enabled
        self.cache = cache
        self._state = InitState.NOT_INITIALIZED
        self._lock = threading.RLock()

    @property
    def state(self) -> InitState:
        with self._lock:
            return self._state

    @property
    def lock(self) -> threading.RLock:
        """Dataset lock, shared with everything that reads the card pool."""
        return self._lock

    @property
    def is_initialized(self) -> bool:
        return self.state is InitState.INITIALIZED

    def mark_not_initialized(self) -> None:
        with self._lock:
            self._state = InitState.NOT_INITIALIZED

    def initialize(self) -> InitializationResult:
        """Seed the dataset unless it already holds customers.

        Per-customer failures are logged and skipped; the controller ends
        up INITIALIZED even if some or all customers failed.
        """
        with self._lock:
            if not self.enabled:
                logger.info("Data generation is disabled")
                return InitializationResult(skipped_disabled=True)

            existing_customers = self.customers.count()
            if existing_customers > 0:
                logger.info(
                    "Data already exists, skipping initialization",
                    customers=existing_customers,
                    cards=self.cards.count(),
                )
                self._state = InitState.INITIALIZED
                return InitializationResult(already_seeded=True)

            result = self._seed()

            logger.info(
                "Sample data initialization completed",
                customers=self.customers.count(),
                cards=self.cards.count(),
                skipped=result.customers_skipped,
            )
            self._state = InitState.INITIALIZED

            active_cards = self.cards.count_active()
            if active_cards == 0:
                logger.warning("No active cards found after data initialization")
            else:
                logger.info(
                    "Active cards available for transactions", count=active_cards
                )
            return result

    def _seed(self) -> InitializationResult:
        logger.info(
            "Initializing sample data",
            customers=self.initial_customers,
            cards_per_customer=self.cards_per_customer,
        )
        result = InitializationResult()
        used_emails: set[str] = set()

        for i in range(self.initial_customers):
            try:
                customer = self.generator.generate_customer(used_emails)
            except UniqueConstraintExhaustedError as e:
                logger.warning(
                    "Failed to create unique customer, skipping", error=str(e)
                )
                result.customers_skipped += 1
                continue

            try:
                self.customers.save(customer)
                result.customers_created += 1
                for card in self.generator.generate_cards(
                    customer, self.cards_per_customer
                ):
                    self.cards.save(card)
                    result.cards_created += 1
            except Exception as e:
                logger.error(
                    "Error saving customer",
                    index=i + 1,
                    customer_id=customer.id,
                    error=str(e),
                )
                result.customers_skipped += 1
                continue

            if (i + 1) % PROGRESS_LOG_EVERY == 0:
                logger.info(
                    "Seeding progress",
                    customers=i + 1,
                    cards=result.cards_created,
                )

        return result

    def reinitialize(self) -> InitializationResult:
        """Delete every entity and seed from scratch.

        Runs under the dataset lock, so no synthesis sharing that lock can
        read the card pool or save a transaction until seeding is done. If
        clearing fails the previous state is restored before re-raising.
        """
        with self._lock:
            logger.info("Data reinitialization triggered")
            previous_state = self._state
            self._state = InitState.NOT_INITIALIZED

            try:
                # Children before parents
                deleted_transactions = self.transactions.delete_all()
                deleted_cards = self.cards.delete_all()
                deleted_customers = self.customers.delete_all()
                if self.cache is not None:
                    self.cache.clear()
            except Exception:
                logger.exception(
                    "Clearing data failed, keeping previous state",
                    state=previous_state.value,
                )
                self._state = previous_state
                raise

            logger.info(
                "Cleared existing data and cache",
                transactions=deleted_transactions,
                cards=deleted_cards,
                customers=deleted_customers,
            )
            return self.initialize()

    def recover(self) -> InitializationResult:
        """Drop back to NOT_INITIALIZED and initialize again inline."""
        with self._lock:
            logger.warning("Attempting to reinitialize data due to no active cards")
            self._state = InitState.NOT_INITIALIZED
            return self.initialize()

    def status(self) -> DataStatus:
        with self._lock:
            if self._state is not InitState.INITIALIZED:
                return DataStatus.NOT_INITIALIZED
            if self.customers.count() == 0 or self.cards.count_active() == 0:
                return DataStatus.INITIALIZED_BUT_NO_DATA
            return DataStatus.READY
