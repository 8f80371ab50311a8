"""Database engine, session factory and schema setup."""

from gatepass.db.session import build_engine, build_session_factory, engine_from_settings
from gatepass.db.init_db import init_db, drop_db, reset_db

__all__ = [
    "build_engine",
    "build_session_factory",
    "engine_from_settings",
    "init_db",
    "drop_db",
    "reset_db",
]
