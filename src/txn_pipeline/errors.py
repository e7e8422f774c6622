"""Exceptions raised by the transaction generation pipeline.

Hierarchy:
- PipelineError (base)
  - NoActiveCardsError
  - InvalidCountError
  - UniqueConstraintExhaustedError
  - UnknownTransactionTypeError
  - PublishFailureError
"""

from __future__ import annotations

__all__ = [
    "InvalidCountError",
    "NoActiveCardsError",
    "PipelineError",
    "PublishFailureError",
    "UniqueConstraintExhaustedError",
    "UnknownTransactionTypeError",
    "has_cause",
]


class PipelineError(Exception):
    """Base class for all generator pipeline errors."""


class NoActiveCardsError(PipelineError):
    """No active card is available to synthesize a transaction from.

    The scheduler treats this as the signal to reseed the dataset.
    """

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No active cards available for transaction generation"
        )


class InvalidCountError(PipelineError, ValueError):
    """Bulk generation was requested with a count outside the allowed range."""

    def __init__(self, count: int, max_bulk_size: int) -> None:
        """Initialize InvalidCountError.

        Args:
            count: The rejected count.
            max_bulk_size: Upper bound of the allowed range.
        """
        super().__init__(f"Count must be between 1 and {max_bulk_size}, got {count}")
        self.count = count
        self.max_bulk_size = max_bulk_size


class UniqueConstraintExhaustedError(PipelineError):
    """A unique email could not be derived within the attempt limit."""

    def __init__(self, base_email: str, attempts: int) -> None:
        super().__init__(
            f"Unable to generate unique email from {base_email} "
            f"after {attempts} attempts"
        )
        self.base_email = base_email
        self.attempts = attempts


class UnknownTransactionTypeError(PipelineError, ValueError):
    """A domain transaction type has no wire-format counterpart."""

    def __init__(self, transaction_type: str) -> None:
        super().__init__(f"Unknown transaction type: {transaction_type!r}")
        self.transaction_type = transaction_type


class PublishFailureError(PipelineError):
    """Generating or handing off a transaction for publishing failed.

    The underlying error is available as ``__cause__``.
    """

    def __init__(self, message: str = "Failed to generate and publish transaction"):
        super().__init__(message)


def has_cause(exc: BaseException, error_type: type[BaseException]) -> bool:
    """Check whether ``exc`` or anything in its cause chain is ``error_type``."""
    current: BaseException | None = exc
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        if isinstance(current, error_type):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False
