"""FastAPI application for driving the card transaction generator.

Endpoints trigger seeding, resets and transaction emission, and report
dataset counts. Scheduled emission runs in the background for the
lifetime of the application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from api.schemas import (
    BulkResponse,
    HealthResponse,
    InitializeResponse,
    OperationResponse,
    StatsResponse,
    StatusResponse,
    TransactionResponse,
)
from api.services import get_service
from txn_pipeline.errors import InvalidCountError
from txn_pipeline.initializer import InitializationResult
from txn_pipeline.logging import configure_logging, get_logger
from txn_pipeline.models import CardTransactionRecord

logger = get_logger(__name__)


def _error(message: str, status_code: int = 400) -> JSONResponse:
    body = OperationResponse(status="error", message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _initialize_response(
    message: str, result: InitializationResult
) -> InitializeResponse:
    return InitializeResponse(
        status="success",
        message=message,
        customers_created=result.customers_created,
        cards_created=result.cards_created,
        customers_skipped=result.customers_skipped,
        already_seeded=result.already_seeded,
        data_status=get_service().data_status(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the dataset and start scheduled emission on startup."""
    configure_logging()
    logger.info("Starting up - initializing generator")
    service = get_service()
    service.start()

    yield

    logger.info("Shutting down...")
    service.shutdown()


app = FastAPI(
    title="Card Transaction Generator API",
    description="Seeds customers and cards and streams synthetic card transactions",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.post(
    "/api/generator/initialize",
    response_model=InitializeResponse,
    tags=["Data Management"],
    summary="Seed sample data",
    description="Seed customers and cards unless the dataset already has customers.",
)
def initialize_data() -> InitializeResponse:
    result = get_service().initialize()
    return _initialize_response("Sample data initialization completed", result)


@app.post(
    "/api/generator/reset",
    response_model=InitializeResponse,
    tags=["Data Management"],
    summary="Reset and reseed",
    description="Delete all transactions, cards and customers, then seed again.",
)
def reset_data() -> InitializeResponse:
    result = get_service().reinitialize_data()
    return _initialize_response("Data cleared and reinitialized", result)


@app.get("/api/generator/stats", response_model=StatsResponse, tags=["Data Management"])
def get_stats() -> StatsResponse:
    """Get dataset counts.

    Returns:
        StatsResponse with customer, active card and transaction counts.
    """
    return StatsResponse(**get_service().stats())


@app.get("/api/generator/status", response_model=StatusResponse, tags=["System"])
def get_status() -> StatusResponse:
    service = get_service()
    return StatusResponse(
        data_status=service.data_status(),
        initialized=service.controller.is_initialized,
        scheduler_running=service.scheduler.running,
    )


@app.post(
    "/api/transactions/random",
    response_model=TransactionResponse,
    tags=["Transactions"],
    summary="Publish one random transaction",
    responses={400: {"description": "Generation or hand-off failed"}},
)
def generate_random_transaction():
    """Synthesize one transaction, publish it and describe it."""
    try:
        record = get_service().generate_and_publish_one()
    except Exception as e:
        logger.error("Error generating random transaction", error=str(e))
        cause = e.__cause__ or e
        return _error(f"Failed to generate transaction: {cause}")

    return TransactionResponse(
        status="success",
        message="Random transaction generated and sent to Kafka",
        transaction_id=record.transaction_id,
        card_id=record.card_id,
        amount=record.transaction_amount,
        merchant=record.merchant_name,
        transaction_type=record.transaction_type.value,
    )


@app.get(
    "/api/transactions/preview",
    tags=["Transactions"],
    summary="Preview a random transaction",
    description="Synthesize one wire record without publishing it.",
    responses={400: {"description": "No active cards"}},
)
def preview_transaction():
    try:
        record: CardTransactionRecord = get_service().generate_random_transaction()
    except Exception as e:
        return _error(f"Failed to generate transaction: {e}")
    return record.to_payload()


@app.post(
    "/api/transactions/bulk",
    response_model=BulkResponse,
    tags=["Transactions"],
    summary="Publish many random transactions",
    responses={400: {"description": "Count out of range"}},
)
def generate_bulk_transactions(count: int = Query(default=10)):
    service = get_service()
    try:
        published = service.generate_and_publish_many(count)
    except InvalidCountError as e:
        return _error(str(e))
    except Exception as e:
        logger.exception("Error generating bulk transactions")
        return _error(f"Failed to generate bulk transactions: {e}")

    return BulkResponse(
        status="success",
        message="Bulk transaction generation completed",
        requested_count=count,
        published_count=published,
    )


@app.get("/api/transactions/health", response_model=HealthResponse, tags=["System"])
def health_check() -> HealthResponse:
    """Check API health status.

    Returns:
        HealthResponse with card and customer counts.
    """
    service = get_service()
    return HealthResponse(
        available_cards=service.active_card_count(),
        total_customers=service.total_customers(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error("Unhandled error", path=str(request.url.path), exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
