"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvariantError(DomainError):
    """Request would break a ledger invariant; nothing was persisted."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class LedgerIntegrityError(RuntimeError):
    """The stored ledger already violates its own invariants.

    Not a DomainError: callers are not expected to recover from it.
    """


# Validation errors


class InvalidPath(ValidationError):
    """Account path is empty, has an empty segment, or cannot be typed."""


class InvalidAccount(ValidationError):
    """Account fields are invalid (name, type/subtype, hierarchy)."""


class AccountInactive(ValidationError):
    """Account exists but has been deactivated."""


class EmptyTransaction(ValidationError):
    """Transaction has fewer than two entries."""


class InvalidAmount(ValidationError):
    """Amount is not a fixed-point value the ledger can store."""


class InvalidPercentage(ValidationError):
    """Ownership percentage is outside (0, 1]."""


class SelfMatch(ValidationError):
    """A transaction cannot be matched against itself."""


# Invariant errors


class UnbalancedTransaction(InvariantError):
    """Journal entries do not sum to zero."""

    def __init__(self, actual: Decimal):
        self.actual = actual
        super().__init__(unbalanced_transaction(actual))


class OwnershipExceeded(InvariantError):
    """Ownership shares of one account would exceed 100%."""

    def __init__(self, account_id: int, total: Decimal):
        self.account_id = account_id
        self.total = total
        super().__init__(ownership_exceeded(account_id, total))


class SelfMerge(InvariantError):
    """A transaction cannot be merged into itself."""


class AlreadyMerged(InvariantError):
    """Transaction is already hidden as a duplicate."""


class NotMerged(InvariantError):
    """Transaction is not hidden, so there is nothing to unmerge."""


# Not found errors


class AccountNotFound(NotFoundError):
    """Account id or path does not exist."""


class TransactionNotFound(NotFoundError):
    """Transaction id does not exist."""


class MatchNotFound(NotFoundError):
    """Transaction match id does not exist."""


class UserNotFound(NotFoundError):
    """User id or name does not exist."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_path_not_found(path: str) -> str:
    """Return message for missing account by path."""
    return f"Account '{path}' not found"


def account_inactive(path: str) -> str:
    """Return message for an inactive account."""
    return f"Account '{path}' is inactive"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def match_not_found(match_id: int) -> str:
    """Return message for missing transaction match."""
    return f"Transaction match {match_id} not found"


def user_not_found(user: int | str) -> str:
    """Return message for missing user by ID or name."""
    if isinstance(user, int):
        return f"User {user} not found"
    return f"User '{user}' not found"


def duplicate_account_name(name: str, parent_path: Optional[str]) -> str:
    """Return message for a sibling name clash."""
    if parent_path is None:
        return f"Root account '{name}' already exists"
    return f"Account '{name}' already exists under '{parent_path}'"


def unbalanced_transaction(actual: Decimal) -> str:
    """Return message for entries that do not net to zero."""
    return f"Entries must sum to zero, got {actual}"


def ownership_exceeded(account_id: int, total: Decimal) -> str:
    """Return message for over-allocated ownership."""
    return f"Total ownership of account {account_id} would be {total:.4f}, which exceeds 100%"


def account_delete_blocked(account_id: int, child_count: int) -> str:
    """Return message when an account still has active children."""
    return (
        f"Cannot deactivate account {account_id}: it has {child_count} active "
        f"child account{'s' if child_count != 1 else ''}. "
        "Please deactivate or move them first."
    )


def transaction_delete_blocked(transaction_id: int, merged_count: int) -> str:
    """Return message when other transactions are merged into this one."""
    return (
        f"Cannot delete transaction {transaction_id}: {merged_count} "
        f"transaction{'s are' if merged_count != 1 else ' is'} merged into it. "
        "Please unmerge them first."
    )
