"""Database setup for the member, course and gallery records."""

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, future=True, **kwargs)
    return create_engine(database_url, future=True, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(engine: Engine) -> None:
    """Create database tables if they do not exist."""
    # models register themselves on Base.metadata when imported
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
