"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from assetbook.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV = "ASSETBOOK_DB_PATH"


def default_database_path() -> Path:
    """Return ~/.assetbook/assetbook.db, creating the directory if needed."""
    db_dir = Path.home() / ".assetbook"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "assetbook.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks ASSETBOOK_DB_PATH
            environment variable, then defaults to ~/.assetbook/assetbook.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        database_path = str(default_database_path())

    logger.debug("Opening SQLite ledger at %s", database_path)
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(database_url: str) -> SQLAlchemyDatabase:
    """Create a database instance from any SQLAlchemy URL (e.g. PostgreSQL)."""
    return SQLAlchemyDatabase(database_url)
