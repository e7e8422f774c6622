"""Periodic transaction emission with self-healing reseeding."""

from __future__ import annotations

import threading

from txn_pipeline.errors import NoActiveCardsError, has_cause
from txn_pipeline.initializer import InitializationController
from txn_pipeline.logging import get_logger
from txn_pipeline.synthesizer import TransactionSynthesizer

logger = get_logger(__name__)


class EmissionScheduler:
    """Emits one transaction per tick on a background thread.

    Ticks run with a fixed delay: the next tick starts ``interval_ms``
    after the previous one finished. A tick never raises. When synthesis
    finds no active cards, the tick reseeds the dataset inline before
    returning.
    """

    def __init__(
        self,
        controller: InitializationController,
        synthesizer: TransactionSynthesizer,
        interval_ms: int = 5000,
        enabled: bool = True,
    ):
        self.controller = controller
        self.synthesizer = synthesizer
        self.interval_ms = interval_ms
        self.enabled = enabled
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> bool:
        """Run one emission cycle.

        Returns:
            True if a transaction was generated and handed to the publisher.
        """
        if not self.enabled:
            return False

        if not self.controller.is_initialized:
            logger.warning(
                "Data not initialized yet, skipping scheduled transaction generation"
            )
            return False

        try:
            self.synthesizer.generate_and_publish_one()
            return True
        except Exception as e:
            if has_cause(e, NoActiveCardsError):
                logger.warning("No active cards available, reseeding data")
                try:
                    result = self.controller.recover()
                except Exception:
                    logger.exception("Reinitialization after empty card pool failed")
                else:
                    if result.already_seeded:
                        logger.warning(
                            "Customers exist so nothing was reseeded, "
                            "card pool is still empty"
                        )
            else:
                logger.exception("Error in scheduled transaction generation")
            return False

    def _run(self) -> None:
        interval = self.interval_ms / 1000
        logger.info("Transaction scheduler started", interval_ms=self.interval_ms)
        while not self._stop_event.wait(interval):
            self.tick()
        logger.info("Transaction scheduler stopped")

    def start(self) -> None:
        """Start ticking on a daemon thread. No-op if already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="transaction-scheduler", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the thread to stop and wait for the current tick to end."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop() is called or ``timeout`` elapses.

        Returns:
            True if the scheduler has been asked to stop.
        """
        return self._stop_event.wait(timeout)
