"""Database setup and session management."""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    postgresql:// URLs are routed to the psycopg 3 driver. In-memory SQLite
    shares a single connection so every Session sees the same tables.
    """
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(database_url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url)


def init_db(bind: Engine | None = None):
    """Initialize the database tables."""
    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables created")


@contextmanager
def session_scope(bind: Engine | None = None) -> Iterator[Session]:
    """Context manager for a database session on the given engine."""
    with Session(bind or engine) as session:
        yield session
