"""Transaction domain service: balanced posting of journal entries."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from assetbook.database.base import Database, EntryRow
from assetbook.domain.account import AccountService
from assetbook.domain.entities import NewJournalEntry, Transaction as TransactionEntity
from assetbook.domain.errors import (
    AccountInactive,
    AccountNotFound,
    EmptyTransaction,
    InvalidAmount,
    LedgerIntegrityError,
    TransactionNotFound,
    UnbalancedTransaction,
    ValidationError,
    account_inactive,
    account_not_found,
    account_path_not_found,
    transaction_not_found,
)
from assetbook.utils.amount_parser import check_amount_places, coerce_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _as_entry(entry) -> NewJournalEntry:
    if isinstance(entry, NewJournalEntry):
        return entry
    if isinstance(entry, tuple) and len(entry) in (2, 3):
        return NewJournalEntry(*entry)
    raise ValidationError(f"Entry must be a NewJournalEntry or (account, amount[, memo]) tuple, got {entry!r}")


class TransactionService:
    """Service for posting and managing transactions."""

    def __init__(self, db: Database, account_service: Optional[AccountService] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            account_service: Used to resolve account paths; created from db if omitted
        """
        self.db = db
        self.account_service = account_service or AccountService(db)

    def _validate_entries(self, entries: Iterable) -> list[tuple[NewJournalEntry, Decimal]]:
        """Check count, then balance, then precision, before anything is resolved or written."""
        parsed = [_as_entry(e) for e in entries]
        if len(parsed) < 2:
            raise EmptyTransaction(f"A transaction needs at least two entries, got {len(parsed)}")

        amounts = [coerce_amount(e.amount) for e in parsed]
        total = sum(amounts, ZERO)
        if total != ZERO:
            logger.warning("Rejected unbalanced transaction: entries sum to %s", total)
            raise UnbalancedTransaction(total)

        for amount in amounts:
            check_amount_places(amount)
        return list(zip(parsed, amounts))

    def _resolve_account_id(self, account, auto_create: bool, creator_id: Optional[int]) -> int:
        if isinstance(account, bool):
            raise ValidationError(f"Invalid account reference: {account!r}")

        if isinstance(account, int):
            found = self.db.get_account(account)
            if found is None:
                raise AccountNotFound(account_not_found(account))
        elif auto_create:
            return self.account_service.resolve_or_create(account, creator_id=creator_id)
        else:
            found = self.account_service.find_account_by_path(account)
            if found is None:
                raise AccountNotFound(account_path_not_found(account))

        if not found.is_active:
            raise AccountInactive(account_inactive(found.full_path))
        return found.id

    def _prepare(
        self, entries: Iterable, auto_create_accounts: bool, creator_id: Optional[int]
    ) -> list[EntryRow]:
        validated = self._validate_entries(entries)
        return [
            (self._resolve_account_id(entry.account, auto_create_accounts, creator_id), amount, entry.memo)
            for entry, amount in validated
        ]

    def post(
        self,
        description: str,
        transaction_date: date,
        entries: Iterable,
        reference: Optional[str] = None,
        import_source: Optional[str] = None,
        import_batch_id: Optional[str] = None,
        external_reference: Optional[str] = None,
        auto_create_accounts: bool = False,
        creator_id: Optional[int] = None,
    ) -> int:
        """Post a balanced transaction.

        Args:
            description: Transaction description
            transaction_date: Date of the transaction
            entries: NewJournalEntry objects or (account, amount[, memo]) tuples,
                where account is an ID or a colon-delimited path. Positive
                amounts are debits, negative amounts credits.
            reference: Optional reference (check number, invoice, ...)
            import_source: Label of the importer that produced it
            import_batch_id: Import batch the transaction belongs to
            external_reference: Identifier assigned by the source system
            auto_create_accounts: Create missing account paths
            creator_id: User posting, passed to the owner policy of new accounts

        Returns:
            Transaction ID

        Raises:
            EmptyTransaction: If there are fewer than two entries
            UnbalancedTransaction: If the amounts do not sum to exactly zero
            InvalidAmount: If an amount is a float or has more than two decimals
            AccountNotFound: If an account does not exist (and is not auto-created)
            AccountInactive: If an account is inactive
        """
        if not description or not description.strip():
            raise ValidationError("Transaction description cannot be empty")

        rows = self._prepare(entries, auto_create_accounts, creator_id)
        transaction_id = self.db.create_transaction(
            description=description.strip(),
            transaction_date=transaction_date,
            entries=rows,
            reference=reference,
            import_source=import_source,
            import_batch_id=import_batch_id,
            external_reference=external_reference,
        )
        logger.info("Posted transaction %d '%s' with %d entries", transaction_id, description.strip(), len(rows))
        return transaction_id

    def _two_entry(self, description, transaction_date, debit_account, credit_account, amount, **kwargs) -> int:
        value = coerce_amount(amount)
        if value <= ZERO:
            raise InvalidAmount(f"Amount must be positive, got {value}")
        return self.post(
            description,
            transaction_date,
            [NewJournalEntry(debit_account, value), NewJournalEntry(credit_account, -value)],
            **kwargs,
        )

    def transfer(self, description: str, transaction_date: date, from_account, to_account, amount, **kwargs) -> int:
        """Move a positive amount from one account to another."""
        return self._two_entry(description, transaction_date, to_account, from_account, amount, **kwargs)

    def income(self, description: str, transaction_date: date, income_account, asset_account, amount, **kwargs) -> int:
        """Record income received into an asset account."""
        return self._two_entry(description, transaction_date, asset_account, income_account, amount, **kwargs)

    def expense(
        self, description: str, transaction_date: date, expense_account, payment_account, amount, **kwargs
    ) -> int:
        """Record an expense paid from an asset or liability account."""
        return self._two_entry(description, transaction_date, expense_account, payment_account, amount, **kwargs)

    def _require_transaction(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise TransactionNotFound(transaction_not_found(transaction_id))
        return txn

    def replace_entries(
        self,
        transaction_id: int,
        entries: Iterable,
        auto_create_accounts: bool = False,
        creator_id: Optional[int] = None,
    ) -> None:
        """Replace the whole entry set of a transaction, validated like post().

        Raises:
            TransactionNotFound: If the transaction does not exist
        """
        self._require_transaction(transaction_id)
        rows = self._prepare(entries, auto_create_accounts, creator_id)
        self.db.replace_transaction_entries(transaction_id, rows)
        logger.info("Replaced entries of transaction %d (%d entries)", transaction_id, len(rows))

    def update_transaction(
        self,
        transaction_id: int,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        transaction_date: Optional[date] = None,
    ) -> None:
        """Update header fields. Entries are changed only through replace_entries()."""
        self._require_transaction(transaction_id)
        if description is not None:
            description = description.strip()
            if not description:
                raise ValidationError("Transaction description cannot be empty")
        self.db.update_transaction_header(
            transaction_id, description=description, reference=reference, transaction_date=transaction_date
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction with its entries and matches.

        Raises:
            TransactionNotFound: If the transaction does not exist
            DependencyError: If other transactions are merged into it
        """
        self._require_transaction(transaction_id)
        self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %d", transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID, including hidden duplicates.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_path: Optional[str] = None,
        import_batch_id: Optional[str] = None,
        include_hidden: bool = False,
    ) -> list[TransactionEntity]:
        """List transactions with optional filters, newest first.

        Hidden duplicates are left out unless include_hidden is set, so
        reports never count a merged transaction twice.
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")
        if account_path is not None:
            account_path = self.account_service.get_account_by_path(account_path).full_path
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_path=account_path,
            import_batch_id=import_batch_id,
            include_hidden=include_hidden,
        )

    def verify_ledger(self) -> None:
        """Check that every stored transaction still nets to zero.

        Raises:
            LedgerIntegrityError: If any transaction is unbalanced
        """
        unbalanced = self.db.find_unbalanced_transactions()
        if unbalanced:
            logger.error("Unbalanced transactions in ledger: %s", unbalanced)
            raise LedgerIntegrityError(
                f"{len(unbalanced)} stored transaction(s) do not net to zero: "
                + ", ".join(str(i) for i in unbalanced)
            )
