"""
Database connection and session management.
Uses SQLAlchemy; the URL comes from StorefrontConfig (SQLite or Postgres).
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.utils.logger import get_logger

logger = get_logger("data.database")

# Base class for all our database models
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Build an engine for the configured URL.

    In-memory SQLite needs a single shared connection, otherwise every
    session would see its own empty database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


class Database:
    """Engine plus session factory for one configured database."""

    def __init__(self, database_url: str) -> None:
        self.url = database_url
        self.engine = create_db_engine(database_url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine)

    def create_all(self) -> None:
        """Create tables if they don't exist (use migrations for real deployments)."""
        # models must be imported so their tables are registered on Base
        from storefront.data import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        logger.info("Tables ensured on %s", self.engine.url.render_as_string(hide_password=True))

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
