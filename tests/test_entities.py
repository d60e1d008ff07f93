"""Tests for domain entities."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from assetbook.domain.entities import (
    Account,
    AccountSubtype,
    AccountType,
    JournalEntry,
    MatchType,
    Transaction,
)


def _entry(entry_id, account_id, amount):
    return JournalEntry(id=entry_id, transaction_id=1, account_id=account_id, amount=Decimal(amount), memo=None)


class TestAccount:
    """Tests for Account entity."""

    def test_account_immutability(self):
        """Test that Account entities are immutable."""
        now = datetime.now(UTC)
        account = Account(
            id=1,
            name="Checking",
            account_type=AccountType.ASSET,
            account_subtype=AccountSubtype.CHECKING,
            parent_id=None,
            full_path="Checking",
            currency="EUR",
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        with pytest.raises(Exception):
            account.name = "Savings"

    def test_enums_compare_to_values(self):
        assert AccountType("asset") is AccountType.ASSET
        assert MatchType.EXACT == "exact"


class TestTransaction:
    """Tests for Transaction entity."""

    def test_amount_is_half_the_absolute_sum(self):
        """A three-way split of 100 has magnitude 100."""
        txn = Transaction(
            id=1,
            description="Split",
            transaction_date=date(2024, 1, 1),
            created_at=datetime.now(UTC),
            entries=(_entry(1, 1, "60.00"), _entry(2, 2, "40.00"), _entry(3, 3, "-100.00")),
        )
        assert txn.amount == Decimal("100.00")

    def test_amount_without_entries(self):
        txn = Transaction(id=1, description="x", transaction_date=date(2024, 1, 1), created_at=datetime.now(UTC))
        assert txn.amount == Decimal("0")
        assert txn.is_duplicate is False
