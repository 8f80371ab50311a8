# gatepass/db/init_db.py
"""Database initialization utilities."""
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from gatepass.models import Base

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    """
    Initialize the database by creating all missing tables.
    """
    try:
        existing_tables = set(inspect(engine).get_table_names())
        Base.metadata.create_all(bind=engine)
        created = set(Base.metadata.tables) - existing_tables
        if created:
            logger.info(f"Database tables created: {', '.join(sorted(created))}")
        else:
            logger.info(f"Database already initialized with {len(existing_tables)} tables")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


def drop_db(engine: Engine) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Only for development/testing purposes.
    """
    try:
        Base.metadata.drop_all(bind=engine)
        logger.warning("All database tables dropped")
    except Exception as e:
        logger.error(f"Error dropping database: {e}")
        raise


def reset_db(engine: Engine) -> None:
    """
    Reset the database by dropping and recreating all tables.

    WARNING: This will delete all data! Only for development/testing purposes.
    """
    logger.warning("Resetting database...")
    drop_db(engine)
    init_db(engine)
    logger.info("Database reset complete")
