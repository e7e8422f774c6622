"""CLI entry point for the card transaction generator."""

from typing import Annotated

import typer

from txn_pipeline.config import GeneratorSettings
from txn_pipeline.db import DatabaseSession
from txn_pipeline.errors import InvalidCountError, PipelineError
from txn_pipeline.logging import configure_logging, get_logger
from txn_pipeline.service import GeneratorService

app = typer.Typer(
    name="transaction-generator",
    help="Seed card holders and stream synthetic card transactions to Kafka.",
    add_completion=False,
)

DatabaseUrlOption = Annotated[
    str | None,
    typer.Option("--database-url", envvar="DATABASE_URL", help="Database URL"),
]
BootstrapOption = Annotated[
    str | None,
    typer.Option(
        "--bootstrap-servers",
        envvar="KAFKA_BOOTSTRAP_SERVERS",
        help="Comma-separated Kafka bootstrap servers",
    ),
]
TopicOption = Annotated[
    str | None,
    typer.Option("--topic", envvar="KAFKA_TRANSACTIONS_TOPIC", help="Kafka topic"),
]
JsonLogsOption = Annotated[
    bool,
    typer.Option("--json-logs", help="Output logs in JSON format"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose logging"),
]


def _build_service(database_url: str | None, **overrides) -> GeneratorService:
    settings = GeneratorSettings.from_env(**overrides)
    db = DatabaseSession(database_url=database_url, echo=False)
    db.create_tables()
    return GeneratorService(settings=settings, db=db)


@app.command()
def init_db(
    database_url: DatabaseUrlOption = None,
    drop_tables: Annotated[
        bool,
        typer.Option("--drop-tables", help="Drop existing tables before creating"),
    ] = False,
) -> None:
    """Initialize the database schema without seeding data."""
    configure_logging()
    log = get_logger("init_db")

    log.info("Initializing database")
    db = DatabaseSession(database_url=database_url)

    if drop_tables:
        log.warning("Dropping existing tables")
        db.drop_tables()

    log.info("Creating tables")
    db.create_tables()

    log.info("Database initialization complete")
    typer.echo("Database initialized successfully")


@app.command()
def seed(
    customers: Annotated[
        int | None,
        typer.Option(
            "--customers",
            "-c",
            envvar="GENERATION_INITIAL_CUSTOMERS",
            help="Number of customers to create",
        ),
    ] = None,
    cards_per_customer: Annotated[
        int | None,
        typer.Option(
            "--cards-per-customer",
            envvar="GENERATION_CARDS_PER_CUSTOMER",
            help="Cards issued to each customer",
        ),
    ] = None,
    seed_value: Annotated[
        int | None,
        typer.Option("--seed", "-s", help="Random seed for reproducibility"),
    ] = None,
    database_url: DatabaseUrlOption = None,
    json_logs: JsonLogsOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Seed customers and cards unless the dataset already has customers.

    Example:
        transaction-generator seed --customers 100 --cards-per-customer 2
    """
    configure_logging(level="DEBUG" if verbose else "INFO", json_format=json_logs)

    if customers is not None and customers < 1:
        raise typer.BadParameter("Customer count must be at least 1")

    service = _build_service(
        database_url,
        initial_customers=customers,
        cards_per_customer=cards_per_customer,
        seed=seed_value,
    )
    result = service.initialize()

    if result.skipped_disabled:
        typer.echo("Data generation is disabled (GENERATION_ENABLED=false)")
    elif result.already_seeded:
        typer.echo("Data already exists, nothing to do")
    else:
        typer.echo(
            f"\nCreated {result.customers_created} customers "
            f"and {result.cards_created} cards"
        )
        if result.customers_skipped:
            typer.echo(f"  Skipped: {result.customers_skipped}")
    typer.echo(f"Status: {service.data_status().value}")


@app.command()
def reset(
    database_url: DatabaseUrlOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
    json_logs: JsonLogsOption = False,
) -> None:
    """Delete all transactions, cards and customers, then seed again."""
    configure_logging(json_format=json_logs)
    if not yes:
        typer.confirm("This deletes all generated data. Continue?", abort=True)

    service = _build_service(database_url)
    result = service.reinitialize_data()
    typer.echo(
        f"Reinitialized: {result.customers_created} customers, "
        f"{result.cards_created} cards"
    )


@app.command()
def stats(database_url: DatabaseUrlOption = None) -> None:
    """Show counts of generated data in the database."""
    configure_logging()
    log = get_logger("stats")

    service = _build_service(database_url)
    counts = service.stats()
    log.info("Database statistics", **counts)

    typer.echo("\nDatabase Statistics:")
    typer.echo(f"  Total customers: {counts['total_customers']}")
    typer.echo(f"  Active cards: {counts['active_cards']}")
    typer.echo(f"  Total transactions: {counts['total_transactions']}")


@app.command()
def publish(
    count: Annotated[
        int,
        typer.Option("--count", "-n", help="Number of transactions to publish"),
    ] = 10,
    database_url: DatabaseUrlOption = None,
    bootstrap_servers: BootstrapOption = None,
    topic: TopicOption = None,
    json_logs: JsonLogsOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Generate and publish a batch of random transactions."""
    configure_logging(level="DEBUG" if verbose else "INFO", json_format=json_logs)
    log = get_logger("publish")

    service = _build_service(
        database_url,
        kafka_bootstrap_servers=bootstrap_servers,
        transactions_topic=topic,
    )
    try:
        published = service.generate_and_publish_many(count)
    except InvalidCountError as e:
        raise typer.BadParameter(str(e)) from e
    finally:
        service.shutdown()

    log.info("Publish complete", published=published, requested=count)
    typer.echo(f"Published {published} of {count} transactions")


@app.command()
def run(
    database_url: DatabaseUrlOption = None,
    bootstrap_servers: BootstrapOption = None,
    topic: TopicOption = None,
    interval_ms: Annotated[
        int | None,
        typer.Option(
            "--interval-ms",
            envvar="GENERATION_TRANSACTION_INTERVAL_MS",
            help="Delay between scheduled transactions",
        ),
    ] = None,
    json_logs: JsonLogsOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Seed if needed and emit transactions until interrupted."""
    configure_logging(level="DEBUG" if verbose else "INFO", json_format=json_logs)
    log = get_logger("run")

    service = _build_service(
        database_url,
        kafka_bootstrap_servers=bootstrap_servers,
        transactions_topic=topic,
        transaction_interval_ms=interval_ms,
    )
    try:
        service.start(run_scheduler=False)
    except PipelineError as e:
        log.error("Startup failed", error=str(e))
        raise typer.Exit(code=1) from e

    if not service.settings.generation_enabled:
        typer.echo("Data generation is disabled (GENERATION_ENABLED=false)")
        service.shutdown()
        return

    log.info(
        "Emitting transactions",
        interval_ms=service.settings.transaction_interval_ms,
        topic=service.settings.transactions_topic,
    )
    service.scheduler.start()
    try:
        while service.scheduler.running:
            service.scheduler.wait(1.0)
    except KeyboardInterrupt:
        log.info("Interrupted")
    finally:
        service.shutdown()


if __name__ == "__main__":
    app()
