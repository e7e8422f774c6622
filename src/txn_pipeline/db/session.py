"""Engine and session handling for the generator database."""

import os
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from txn_pipeline.db.models import Base


def get_database_url() -> str:
    """Build database URL from environment variables.

    ``DATABASE_URL`` wins when set; otherwise the URL is assembled from the
    ``POSTGRES_*`` variables.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("POSTGRES_USER", "transfraud")
    password = os.getenv("POSTGRES_PASSWORD", "transfraud_dev_password")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "transfraud")

    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


class DatabaseSession:
    """Owns the engine and hands out short-lived, self-committing sessions."""

    def __init__(self, database_url: str | None = None, echo: bool = False):
        """Create the engine for ``database_url``.

        Args:
            database_url: Database connection URL. Defaults to env vars.
            echo: Whether to echo SQL statements.
        """
        self.database_url = database_url or get_database_url()
        if self.database_url.startswith("sqlite"):
            # One shared connection so in-memory databases survive across
            # sessions and the scheduler thread
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,
            )
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_tables(self) -> None:
        """Create the customers, cards and transactions tables if missing."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        """Drop every generator table, data included."""
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Open a session scoped to one unit of work.

        Commits when the block exits normally and rolls back (re-raising)
        when it raises.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
