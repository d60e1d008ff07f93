"""Tests for database factories and logging setup."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from assetbook.database.factories import DB_PATH_ENV, create_database, create_sqlite_database
from assetbook.domain.errors import UnbalancedTransaction
from assetbook.logging_config import LOG_LEVEL_ENV, configure_logging


def test_sqlite_path_from_environment(tmp_path, monkeypatch):
    db_path = tmp_path / "env.db"
    monkeypatch.setenv(DB_PATH_ENV, str(db_path))

    db = create_sqlite_database()

    assert db.database_url == f"sqlite:///{db_path}"
    db.disconnect()


def test_explicit_path_wins(tmp_path, monkeypatch):
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "env.db"))

    db = create_sqlite_database(database_path=str(tmp_path / "arg.db"))

    assert db.database_url.endswith("arg.db")


def test_create_database_from_url(tmp_path):
    db = create_database(f"sqlite:///{tmp_path / 'url.db'}")
    user_id = db.create_user("alice", "Alice")

    assert db.get_user(user_id).name == "alice"
    db.disconnect()


def test_configure_logging_levels(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "info")
    configure_logging()
    assert logging.getLogger().level == logging.INFO

    configure_logging(verbose=True)
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    configure_logging(level="nonsense")
    assert logging.getLogger().level == logging.WARNING


def test_unbalanced_post_logs_warning(transaction_service, sample_accounts, caplog):
    with caplog.at_level(logging.WARNING, logger="assetbook.domain.transaction"):
        with pytest.raises(UnbalancedTransaction):
            transaction_service.post(
                "Bad", date(2024, 1, 1), [("Expenses:Food", Decimal("1")), ("Assets:Bank:Checking", Decimal("-2"))]
            )

    assert "unbalanced" in caplog.text
