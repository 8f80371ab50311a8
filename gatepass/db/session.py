"""Database session management."""
from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gatepass.config.settings import Settings, settings as default_settings


def build_engine(database_url: Optional[str] = None, *, echo: Optional[bool] = None) -> Engine:
    """
    Create the SQLAlchemy engine.

    SQLite URLs get ``check_same_thread`` disabled, and in-memory SQLite
    uses a single shared connection so every session sees the same data.
    """
    url = database_url or default_settings.DATABASE_URL
    echo = default_settings.DATABASE_ECHO if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(url, echo=echo, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> Callable[[], Session]:
    """Create the session factory used by UnitOfWork."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def engine_from_settings(cfg: Optional[Settings] = None) -> Engine:
    cfg = cfg or default_settings
    return build_engine(cfg.DATABASE_URL, echo=cfg.DATABASE_ECHO)
