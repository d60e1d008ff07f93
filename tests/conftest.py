"""Shared pytest fixtures for assetbook tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from assetbook.database.factories import create_sqlite_database
from assetbook.domain.account import AccountService
from assetbook.domain.duplicates import DuplicateService
from assetbook.domain.file_import import FileImportService
from assetbook.domain.merge import MergeService
from assetbook.domain.ownership import OwnershipService
from assetbook.domain.transaction import TransactionService
from assetbook.domain.user import UserService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def ownership_service(temp_db):
    """Create an OwnershipService with a temporary database."""
    return OwnershipService(temp_db)


@pytest.fixture
def transaction_service(temp_db, account_service):
    """Create a TransactionService sharing the account service."""
    return TransactionService(temp_db, account_service)


@pytest.fixture
def merge_service(temp_db):
    """Create a MergeService with a temporary database."""
    return MergeService(temp_db)


@pytest.fixture
def duplicate_service(temp_db, merge_service):
    """Create a DuplicateService that merges through the merge service."""
    return DuplicateService(temp_db, merge_service=merge_service)


@pytest.fixture
def file_import_service(temp_db):
    """Create a FileImportService with a temporary database."""
    return FileImportService(temp_db)


@pytest.fixture
def alice(user_service):
    """Create the first user."""
    return user_service.get_user(user_service.create_user("alice", "Alice Martin"))


@pytest.fixture
def bob(user_service, alice):
    """Create a second user."""
    return user_service.get_user(user_service.create_user("bob", "Bob Martin"))


@pytest.fixture
def sample_accounts(account_service, alice):
    """Create a small chart of accounts and return IDs by path."""
    paths = {
        "Assets:Bank:Checking": "checking",
        "Assets:Bank:Savings": "savings",
        "Liabilities:Visa": "credit_card",
        "Income:Salary": "salary",
        "Expenses:Food": "food",
        "Expenses:Housing": "housing",
        "Equity:Opening": "opening_balance",
    }
    return {
        path: account_service.resolve_or_create(path, account_subtype=subtype)
        for path, subtype in paths.items()
    }


@pytest.fixture
def post(transaction_service):
    """Post a two-entry transaction: debit, credit, amount."""

    def _post(
        description,
        debit,
        credit,
        amount,
        transaction_date=date(2024, 1, 15),
        import_source=None,
        import_batch_id=None,
    ):
        amount = Decimal(amount)
        return transaction_service.post(
            description,
            transaction_date,
            [(debit, amount), (credit, -amount)],
            import_source=import_source,
            import_batch_id=import_batch_id,
        )

    return _post


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
