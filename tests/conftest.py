"""Shared fixtures: in-memory database, seeded generators, fake Kafka."""

from unittest.mock import MagicMock

import numpy as np
import pytest

from txn_pipeline.config import GeneratorSettings
from txn_pipeline.db import (
    CardRepository,
    CustomerRepository,
    DatabaseSession,
    TransactionRepository,
)
from txn_pipeline.generator import EntityGenerator
from txn_pipeline.initializer import InitializationController
from txn_pipeline.publisher import TransactionPublisher
from txn_pipeline.service import GeneratorService
from txn_pipeline.synthesizer import TransactionSynthesizer


@pytest.fixture
def db() -> DatabaseSession:
    """Fresh in-memory SQLite database with all tables created."""
    session = DatabaseSession(database_url="sqlite://")
    session.create_tables()
    yield session
    session.dispose()


@pytest.fixture
def customers(db) -> CustomerRepository:
    return CustomerRepository(db)


@pytest.fixture
def cards(db) -> CardRepository:
    return CardRepository(db)


@pytest.fixture
def transactions(db) -> TransactionRepository:
    return TransactionRepository(db)


@pytest.fixture
def entity_generator() -> EntityGenerator:
    """Create a seeded generator for reproducible tests."""
    return EntityGenerator(seed=42)


@pytest.fixture
def producer() -> MagicMock:
    """Stand-in for KafkaProducer that records every send."""
    return MagicMock(name="KafkaProducer")


@pytest.fixture
def publisher(producer) -> TransactionPublisher:
    return TransactionPublisher(topic="transactions", producer=producer)


@pytest.fixture
def controller(customers, cards, transactions, entity_generator):
    return InitializationController(
        customers=customers,
        cards=cards,
        transactions=transactions,
        generator=entity_generator,
        initial_customers=10,
        cards_per_customer=2,
    )


@pytest.fixture
def synthesizer(cards, transactions, publisher, controller) -> TransactionSynthesizer:
    return TransactionSynthesizer(
        cards=cards,
        publisher=publisher,
        transactions=transactions,
        max_bulk_size=1000,
        rng=np.random.default_rng(7),
        sleep=lambda _: None,
        lock=controller.lock,
    )


@pytest.fixture
def settings() -> GeneratorSettings:
    return GeneratorSettings(
        initial_customers=5,
        cards_per_customer=2,
        transaction_interval_ms=20,
        max_bulk_size=1000,
        seed=1234,
    )


@pytest.fixture
def service(settings, db, publisher) -> GeneratorService:
    svc = GeneratorService(settings=settings, db=db, publisher=publisher)
    svc.synthesizer._sleep = lambda _: None
    yield svc
    svc.scheduler.stop(timeout=2)
