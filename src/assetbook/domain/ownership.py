"""Ownership domain service and default-owner policies."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Mapping, Optional

from assetbook.database.base import Database
from assetbook.domain.entities import OwnershipShare
from assetbook.domain.errors import (
    AccountNotFound,
    InvalidPercentage,
    OwnershipExceeded,
    UserNotFound,
    ValidationError,
    account_not_found,
    user_not_found,
)

logger = logging.getLogger(__name__)

FULL_OWNERSHIP = Decimal("1")
OWNERSHIP_EPSILON = Decimal("0.0001")
MAX_OWNERSHIP_TOTAL = FULL_OWNERSHIP + OWNERSHIP_EPSILON
PERCENTAGE_PLACES = Decimal("0.0001")

# (db, creator_id) -> id of the user who receives 100% of a new account
OwnerPolicy = Callable[[Database, Optional[int]], Optional[int]]


def first_user_policy(db: Database, creator_id: Optional[int]) -> Optional[int]:
    """Give new accounts to their creator, else to the first active user."""
    if creator_id is not None:
        return creator_id
    user = db.get_first_user()
    return user.id if user is not None else None


def fixed_owner_policy(user_id: int) -> OwnerPolicy:
    """Give every new account to one user."""

    def policy(db: Database, creator_id: Optional[int]) -> Optional[int]:
        return user_id

    return policy


def no_owner_policy(db: Database, creator_id: Optional[int]) -> Optional[int]:
    """Leave new accounts unowned."""
    return None


def normalize_percentage(percentage) -> Decimal:
    """Validate a share fraction in (0, 1] with at most four decimal places.

    Raises:
        InvalidPercentage: If the value is outside (0, 1] or too precise
    """
    if isinstance(percentage, bool):
        raise InvalidPercentage(f"Invalid ownership percentage: {percentage!r}")
    try:
        value = Decimal(str(percentage))
    except InvalidOperation as e:
        raise InvalidPercentage(f"Invalid ownership percentage: {percentage!r}") from e

    if not value.is_finite() or value <= 0 or value > FULL_OWNERSHIP:
        raise InvalidPercentage(f"Ownership percentage must be in (0, 1], got {percentage}")
    if value != value.quantize(PERCENTAGE_PLACES):
        raise InvalidPercentage(f"Ownership percentage {percentage} has more than four decimal places")
    return value


class OwnershipService:
    """Service for managing fractional account ownership."""

    def __init__(self, db: Database):
        """Initialize ownership service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_account(self, account_id: int) -> None:
        if self.db.get_account(account_id) is None:
            raise AccountNotFound(account_not_found(account_id))

    def _require_user(self, user_id: int) -> None:
        if self.db.get_user(user_id) is None:
            raise UserNotFound(user_not_found(user_id))

    def set_ownership(self, account_id: int, user_id: int, percentage) -> int:
        """Set one user's share of an account.

        Args:
            account_id: Account ID
            user_id: User ID
            percentage: Fraction in (0, 1], e.g. Decimal("0.5") for half

        Returns:
            Ownership share ID

        Raises:
            InvalidPercentage: If percentage is outside (0, 1]
            OwnershipExceeded: If the account total would exceed 100%
            AccountNotFound, UserNotFound: If either side does not exist
        """
        value = normalize_percentage(percentage)
        self._require_account(account_id)
        self._require_user(user_id)

        try:
            share_id = self.db.set_ownership(account_id, user_id, value, MAX_OWNERSHIP_TOTAL)
        except OwnershipExceeded as e:
            logger.warning("Rejected ownership of account %d by user %d: %s", account_id, user_id, e)
            raise

        logger.info("User %d now owns %s of account %d", user_id, value, account_id)
        return share_id

    def replace_ownership(self, account_id: int, shares: Mapping[int, object] | Iterable[tuple[int, object]]) -> None:
        """Replace all shares of an account in one step.

        Args:
            account_id: Account ID
            shares: Mapping or pairs of user ID to fraction; empty leaves the account unowned

        Raises:
            ValidationError: If a user appears twice
            InvalidPercentage, OwnershipExceeded: As for set_ownership
        """
        pairs = list(shares.items()) if isinstance(shares, Mapping) else list(shares)
        user_ids = [user_id for user_id, _ in pairs]
        if len(set(user_ids)) != len(user_ids):
            raise ValidationError("Each user may appear only once in an ownership split")

        normalized = [(user_id, normalize_percentage(pct)) for user_id, pct in pairs]
        self._require_account(account_id)

        try:
            self.db.replace_ownership(account_id, normalized, MAX_OWNERSHIP_TOTAL)
        except OwnershipExceeded as e:
            logger.warning("Rejected ownership split of account %d: %s", account_id, e)
            raise
        logger.info("Replaced ownership of account %d with %d share(s)", account_id, len(normalized))

    def remove_ownership(self, account_id: int, user_id: int) -> bool:
        """Remove a user's share of an account.

        Returns:
            True if a share was removed
        """
        removed = self.db.remove_ownership(account_id, user_id)
        if removed:
            logger.info("Removed user %d from account %d", user_id, account_id)
        return removed

    def get_account_ownership(self, account_id: int) -> list[OwnershipShare]:
        """Get shares of an account, largest first."""
        self._require_account(account_id)
        return self.db.list_ownership(account_id)

    def get_user_shares(self, user_id: int) -> list[OwnershipShare]:
        """Get all shares held by a user."""
        self._require_user(user_id)
        return self.db.list_user_shares(user_id)

    def ownership_weight(self, account_id: int, user_ids: Optional[Iterable[int]] = None) -> Decimal:
        """Summed fraction of an account owned by the given users (all users when None).

        Reporting code multiplies postings by this weight to attribute them.
        """
        shares = self.get_account_ownership(account_id)
        if user_ids is not None:
            wanted = set(user_ids)
            shares = [s for s in shares if s.user_id in wanted]
        return sum((s.percentage for s in shares), Decimal("0"))
