"""Tests for generator settings."""

import pytest
from pydantic import ValidationError

from txn_pipeline.config import GeneratorSettings
from txn_pipeline.db.session import get_database_url

ENV_VARS = (
    "GENERATION_ENABLED",
    "GENERATION_INITIAL_CUSTOMERS",
    "GENERATION_CARDS_PER_CUSTOMER",
    "GENERATION_TRANSACTION_INTERVAL_MS",
    "GENERATION_MAX_BULK_SIZE",
    "GENERATION_PERSIST_TRANSACTIONS",
    "GENERATION_SEED",
    "KAFKA_BOOTSTRAP_SERVERS",
    "KAFKA_TRANSACTIONS_TOPIC",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestGeneratorSettings:
    def test_defaults(self):
        settings = GeneratorSettings.from_env()

        assert settings.generation_enabled is True
        assert settings.initial_customers == 100
        assert settings.cards_per_customer == 2
        assert settings.transaction_interval_ms == 5000
        assert settings.max_bulk_size == 1000
        assert settings.persist_transactions is True
        assert settings.seed is None
        assert settings.transactions_topic == "transactions"

    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("GENERATION_ENABLED", "false")
        monkeypatch.setenv("GENERATION_INITIAL_CUSTOMERS", "25")
        monkeypatch.setenv("GENERATION_SEED", "99")
        monkeypatch.setenv("KAFKA_BOOTSTRAP_SERVERS", "a:9092, b:9092")

        settings = GeneratorSettings.from_env()

        assert settings.generation_enabled is False
        assert settings.initial_customers == 25
        assert settings.seed == 99
        assert settings.bootstrap_servers == ["a:9092", "b:9092"]

    def test_overrides_win_and_none_ignored(self, monkeypatch):
        monkeypatch.setenv("KAFKA_TRANSACTIONS_TOPIC", "from-env")

        settings = GeneratorSettings.from_env(
            transactions_topic="from-cli", initial_customers=None
        )

        assert settings.transactions_topic == "from-cli"
        assert settings.initial_customers == 100

    @pytest.mark.parametrize(
        "field,value",
        [
            ("transaction_interval_ms", 0),
            ("max_bulk_size", 0),
            ("initial_customers", -1),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            GeneratorSettings(**{field: value})


class TestDatabaseUrl:
    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
        assert get_database_url() == "sqlite:///x.db"

    def test_built_from_postgres_vars(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("POSTGRES_PORT", raising=False)
        monkeypatch.setenv("POSTGRES_HOST", "db")
        monkeypatch.setenv("POSTGRES_DB", "cards")

        url = get_database_url()

        assert url.startswith("postgresql://")
        assert url.endswith("@db:5432/cards")
