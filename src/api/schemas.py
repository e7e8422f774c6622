"""Pydantic schemas for API request/response models."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from txn_pipeline.initializer import DataStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


class OperationResponse(BaseModel):
    """Outcome of a generator operation."""

    status: str = Field(..., examples=["success", "error"])
    message: str
    timestamp: datetime = Field(default_factory=_now)


class InitializeResponse(OperationResponse):
    """Response for initialize and reset endpoints."""

    customers_created: int = 0
    cards_created: int = 0
    customers_skipped: int = 0
    already_seeded: bool = False
    data_status: DataStatus


class StatsResponse(BaseModel):
    """Dataset counts."""

    total_customers: int = Field(..., ge=0)
    active_cards: int = Field(..., ge=0)
    total_transactions: int = Field(..., ge=0)
    timestamp: datetime = Field(default_factory=_now)


class StatusResponse(BaseModel):
    """Readiness of the dataset for transaction synthesis."""

    data_status: DataStatus
    initialized: bool
    scheduler_running: bool
    timestamp: datetime = Field(default_factory=_now)


class TransactionResponse(OperationResponse):
    """Summary of a single published transaction."""

    transaction_id: str
    card_id: str
    amount: float
    merchant: str
    transaction_type: str


class BulkResponse(OperationResponse):
    """Result of bulk generation."""

    requested_count: int
    published_count: int


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str = Field(default="healthy")
    service: str = Field(default="Card Transaction Generator")
    available_cards: int = 0
    total_customers: int = 0
    timestamp: datetime = Field(default_factory=_now)
