"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from assetbook.domain.entities import (
    User,
    Account,
    AccountType,
    AccountSubtype,
    OwnershipShare,
    Transaction,
    TransactionMatch,
    MatchCriteria,
    MatchType,
    MatchStatus,
    ImportedFile,
)

# (account_id, amount, memo) rows as written by the posting engine
EntryRow = tuple[int, Decimal, Optional[str]]


class Database(ABC):
    """Abstract database interface for assetbook.

    Every write method is one atomic unit of work: it either commits all of
    its rows or none of them.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, name: str, display_name: str, claim_unowned_if_first: bool = True) -> int:
        """Create a user. Returns user ID.

        When claim_unowned_if_first is set and this is the first user, every
        account without an owner is given to the user at 100% in the same
        unit of work.
        """
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_name(self, name: str) -> Optional[User]:
        """Get user by unique name."""
        pass

    @abstractmethod
    def get_first_user(self) -> Optional[User]:
        """Get the earliest created active user."""
        pass

    @abstractmethod
    def list_users(self, include_inactive: bool = False) -> list[User]:
        """List users ordered by name."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        account_type: AccountType,
        account_subtype: AccountSubtype,
        parent_id: Optional[int] = None,
        currency: str = "EUR",
        symbol: Optional[str] = None,
        quantity: Optional[Decimal] = None,
        average_cost: Optional[Decimal] = None,
        notes: Optional[str] = None,
        owner_id: Optional[int] = None,
    ) -> int:
        """Create an account, and a 100% share for owner_id if given. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_full_path(self, full_path: str) -> Optional[Account]:
        """Get account by its cached full path."""
        pass

    @abstractmethod
    def find_child_accounts(self, parent_id: Optional[int], name: str) -> list[Account]:
        """Find accounts named `name` directly under parent_id (roots when None).

        Returns a list so callers can detect a corrupt directory.
        """
        pass

    @abstractmethod
    def list_accounts(
        self, account_type: Optional[AccountType] = None, include_inactive: bool = False
    ) -> list[Account]:
        """List accounts ordered by full path."""
        pass

    @abstractmethod
    def list_child_accounts(self, parent_id: int, include_inactive: bool = False) -> list[Account]:
        """List immediate children of an account."""
        pass

    @abstractmethod
    def move_account(self, account_id: int, name: str, parent_id: Optional[int]) -> list[int]:
        """Rename and/or re-parent an account.

        Recomputes the cached full path of the account and its descendants.
        Returns the IDs whose path was recomputed.
        """
        pass

    @abstractmethod
    def update_account_fields(self, account_id: int, **fields) -> None:
        """Update non-structural account fields (notes, currency, investment fields)."""
        pass

    @abstractmethod
    def set_account_active(self, account_id: int, is_active: bool) -> None:
        """Activate or deactivate an account."""
        pass

    # Ownership operations
    @abstractmethod
    def set_ownership(
        self, account_id: int, user_id: int, percentage: Decimal, max_total: Decimal
    ) -> int:
        """Create or update one user's share, keeping the account total within max_total."""
        pass

    @abstractmethod
    def replace_ownership(
        self, account_id: int, shares: Sequence[tuple[int, Decimal]], max_total: Decimal
    ) -> None:
        """Replace every share of an account."""
        pass

    @abstractmethod
    def remove_ownership(self, account_id: int, user_id: int) -> bool:
        """Remove one user's share. Returns False if there was none."""
        pass

    @abstractmethod
    def list_ownership(self, account_id: int) -> list[OwnershipShare]:
        """List shares of an account, largest first."""
        pass

    @abstractmethod
    def list_user_shares(self, user_id: int) -> list[OwnershipShare]:
        """List shares held by a user."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        description: str,
        transaction_date: date,
        entries: Sequence[EntryRow],
        reference: Optional[str] = None,
        import_source: Optional[str] = None,
        import_batch_id: Optional[str] = None,
        external_reference: Optional[str] = None,
    ) -> int:
        """Insert a transaction header with all its entries. Returns transaction ID.

        The stored entries are re-summed before commit.
        """
        pass

    @abstractmethod
    def replace_transaction_entries(self, transaction_id: int, entries: Sequence[EntryRow]) -> None:
        """Replace the whole entry set of a transaction."""
        pass

    @abstractmethod
    def update_transaction_header(
        self,
        transaction_id: int,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        transaction_date: Optional[date] = None,
    ) -> None:
        """Update header fields of a transaction."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction with its entries and matches."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction (with entries) by ID, hidden or not."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_path: Optional[str] = None,
        import_batch_id: Optional[str] = None,
        include_hidden: bool = False,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            account_path: Only transactions touching this account or its descendants
            import_batch_id: Only transactions from this import batch
            include_hidden: If True, include transactions merged as duplicates
        """
        pass

    @abstractmethod
    def count_transactions_merged_into(self, transaction_id: int) -> int:
        """Count hidden transactions merged into this one."""
        pass

    @abstractmethod
    def find_unbalanced_transactions(self) -> list[int]:
        """Return IDs of stored transactions whose entries do not net to zero."""
        pass

    # Transaction match operations
    @abstractmethod
    def upsert_match(
        self,
        primary_transaction_id: int,
        duplicate_transaction_id: int,
        confidence: Decimal,
        criteria: MatchCriteria,
        match_type: MatchType,
    ) -> int:
        """Create or update the match for an ordered pair. Returns match ID."""
        pass

    @abstractmethod
    def get_match(self, match_id: int) -> Optional[TransactionMatch]:
        """Get match by ID."""
        pass

    @abstractmethod
    def list_matches(self, status: Optional[MatchStatus] = None) -> list[TransactionMatch]:
        """List matches, highest confidence first."""
        pass

    @abstractmethod
    def list_matches_for_transaction(self, transaction_id: int) -> list[TransactionMatch]:
        """List matches where the transaction is primary or duplicate."""
        pass

    @abstractmethod
    def update_match_status(self, match_id: int, status: MatchStatus) -> None:
        """Change the status of a match."""
        pass

    @abstractmethod
    def merge_transactions(
        self,
        primary_transaction_id: int,
        duplicate_transaction_id: int,
        manual_confidence: Decimal,
        manual_criteria: MatchCriteria,
    ) -> None:
        """Hide the duplicate and confirm the pair's matches in one unit of work.

        When the pair has no match in either direction, one is created from
        the manual confidence and criteria.
        """
        pass

    @abstractmethod
    def unmerge_transaction(self, transaction_id: int) -> int:
        """Exact inverse of merge_transactions. Returns the former primary ID."""
        pass

    # Imported file operations
    @abstractmethod
    def create_imported_file(
        self,
        file_path: str,
        file_name: str,
        file_hash: str,
        file_size: int,
        import_source: str,
        import_batch_id: str,
        transaction_count: int = 0,
        notes: Optional[str] = None,
    ) -> int:
        """Record an imported file. Returns record ID."""
        pass

    @abstractmethod
    def get_imported_file_by_hash(self, file_hash: str) -> Optional[ImportedFile]:
        """Get imported file record by content hash."""
        pass

    @abstractmethod
    def imported_file_exists(self, file_path: str, import_source: str) -> bool:
        """Check whether a path was already imported for a source."""
        pass

    @abstractmethod
    def list_imported_files(
        self, import_source: Optional[str] = None, limit: int = 50
    ) -> list[ImportedFile]:
        """List imported files, most recent first."""
        pass
