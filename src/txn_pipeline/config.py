"""Generator settings loaded from environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


class GeneratorSettings(BaseModel):
    """Runtime configuration for seeding and transaction emission."""

    generation_enabled: bool = Field(
        default=True,
        description="Master switch for seeding and scheduled emission",
    )
    initial_customers: int = Field(
        default=100,
        ge=0,
        description="Number of customers created by a fresh initialization",
    )
    cards_per_customer: int = Field(
        default=2,
        ge=0,
        description="Number of cards issued to each generated customer",
    )
    transaction_interval_ms: int = Field(
        default=5000,
        gt=0,
        description="Delay between scheduled emissions in milliseconds",
    )
    max_bulk_size: int = Field(
        default=1000,
        ge=1,
        description="Largest count accepted by bulk generation",
    )
    persist_transactions: bool = Field(
        default=True,
        description="Save each synthesized transaction before publishing it",
    )
    seed: int | None = Field(
        default=None,
        description="Random seed for reproducible generation",
    )
    kafka_bootstrap_servers: str = Field(
        default="localhost:9092",
        description="Comma-separated Kafka bootstrap servers",
    )
    transactions_topic: str = Field(
        default="transactions",
        description="Topic that receives card transaction records",
    )

    @property
    def bootstrap_servers(self) -> list[str]:
        """Bootstrap servers as a list, as KafkaProducer expects."""
        return [s.strip() for s in self.kafka_bootstrap_servers.split(",") if s.strip()]

    @classmethod
    def from_env(cls, **overrides) -> GeneratorSettings:
        """Build settings from environment variables.

        Args:
            **overrides: Explicit values that take precedence over the
                environment (e.g. CLI options). ``None`` values are ignored.

        Returns:
            Validated settings.
        """
        seed = os.getenv("GENERATION_SEED")
        values = {
            "generation_enabled": _env_bool("GENERATION_ENABLED", True),
            "initial_customers": int(os.getenv("GENERATION_INITIAL_CUSTOMERS", "100")),
            "cards_per_customer": int(
                os.getenv("GENERATION_CARDS_PER_CUSTOMER", "2")
            ),
            "transaction_interval_ms": int(
                os.getenv("GENERATION_TRANSACTION_INTERVAL_MS", "5000")
            ),
            "max_bulk_size": int(os.getenv("GENERATION_MAX_BULK_SIZE", "1000")),
            "persist_transactions": _env_bool("GENERATION_PERSIST_TRANSACTIONS", True),
            "seed": int(seed) if seed else None,
            "kafka_bootstrap_servers": os.getenv(
                "KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"
            ),
            "transactions_topic": os.getenv("KAFKA_TRANSACTIONS_TOPIC", "transactions"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
