"""Database layer for assetbook application."""

from assetbook.database.base import Database
from assetbook.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
