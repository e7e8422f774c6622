"""Fire-and-forget publishing of wire records to Kafka."""

from __future__ import annotations

import threading
from typing import Any

from kafka import KafkaProducer

from txn_pipeline.logging import get_logger
from txn_pipeline.mapper import encode_key, encode_record
from txn_pipeline.models import CardTransactionRecord

logger = get_logger(__name__)


def create_producer(bootstrap_servers: list[str], **overrides: Any) -> KafkaProducer:
    """Create a producer that serializes keys and wire records itself.

    Args:
        bootstrap_servers: Kafka bootstrap servers.
        **overrides: Extra KafkaProducer configuration.
    """
    config: dict[str, Any] = {
        "bootstrap_servers": bootstrap_servers,
        "key_serializer": encode_key,
        "value_serializer": encode_record,
        "acks": "all",
        "linger_ms": 5,
        "retries": 0,
    }
    config.update(overrides)
    return KafkaProducer(**config)


class TransactionPublisher:
    """Sends transaction records to a single topic without waiting for acks.

    Delivery outcome is only logged: success at debug level, failure at
    error level. Failed records are not retried and the caller is never
    told about them.
    """

    def __init__(
        self,
        topic: str,
        bootstrap_servers: list[str] | None = None,
        producer: KafkaProducer | None = None,
    ):
        """Initialize the publisher.

        Args:
            topic: Destination topic.
            bootstrap_servers: Used to build the producer on first publish
                when no ``producer`` is given.
            producer: Preconfigured producer (or test double).
        """
        self.topic = topic
        self.bootstrap_servers = bootstrap_servers or ["localhost:9092"]
        self._producer = producer
        self._lock = threading.Lock()

    @property
    def producer(self) -> KafkaProducer:
        with self._lock:
            if self._producer is None:
                logger.info(
                    "Connecting Kafka producer",
                    bootstrap_servers=self.bootstrap_servers,
                    topic=self.topic,
                )
                self._producer = create_producer(self.bootstrap_servers)
            return self._producer

    def publish(self, record: CardTransactionRecord):
        """Send ``record`` keyed by its transaction id.

        Returns:
            The send future, or ``None`` if the send could not be issued.
        """
        transaction_id = record.transaction_id
        try:
            future = self.producer.send(self.topic, key=transaction_id, value=record)
        except Exception as e:
            logger.error(
                "Error sending transaction to Kafka",
                transaction_id=transaction_id,
                topic=self.topic,
                error=str(e),
                exc_info=e,
            )
            return None

        future.add_callback(self._on_success, transaction_id)
        future.add_errback(self._on_failure, transaction_id)
        return future

    def _on_success(self, transaction_id: str, metadata) -> None:
        logger.debug(
            "Successfully sent transaction",
            transaction_id=transaction_id,
            topic=self.topic,
            partition=getattr(metadata, "partition", None),
            offset=getattr(metadata, "offset", None),
        )

    def _on_failure(self, transaction_id: str, exc: BaseException) -> None:
        logger.error(
            "Failed to send transaction",
            transaction_id=transaction_id,
            topic=self.topic,
            exc_info=exc,
        )

    def flush(self, timeout: float | None = None) -> None:
        if self._producer is not None:
            self._producer.flush(timeout=timeout)

    def close(self, timeout: float | None = None) -> None:
        """Flush pending sends and close the producer, if one was created."""
        with self._lock:
            if self._producer is None:
                return
            try:
                self._producer.flush(timeout=timeout)
            finally:
                self._producer.close(timeout=timeout)
                self._producer = None
