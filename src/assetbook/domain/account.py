"""Account domain service: the hierarchical chart of accounts."""

import logging
from decimal import Decimal
from typing import Optional

from assetbook.database.base import Database
from assetbook.domain.entities import (
    PATH_SEPARATOR,
    Account as AccountEntity,
    AccountType,
    AccountSubtype,
)
from assetbook.domain.errors import (
    AccountInactive,
    AccountNotFound,
    ConflictError,
    DependencyError,
    InvalidAccount,
    InvalidPath,
    LedgerIntegrityError,
    account_delete_blocked,
    account_inactive,
    account_not_found,
    account_path_not_found,
)
from assetbook.domain.ownership import OwnerPolicy, first_user_policy

logger = logging.getLogger(__name__)

# Root segment names recognised when a path is created without an explicit type
ROOT_TYPES = {
    "assets": AccountType.ASSET,
    "asset": AccountType.ASSET,
    "liabilities": AccountType.LIABILITY,
    "liability": AccountType.LIABILITY,
    "equity": AccountType.EQUITY,
    "income": AccountType.INCOME,
    "revenue": AccountType.INCOME,
    "revenues": AccountType.INCOME,
    "expenses": AccountType.EXPENSE,
    "expense": AccountType.EXPENSE,
}

S = AccountSubtype
VALID_SUBTYPES: dict[AccountType, frozenset[AccountSubtype]] = {
    AccountType.ASSET: frozenset(
        {
            S.CASH, S.CHECKING, S.SAVINGS, S.INVESTMENT_ACCOUNT, S.STOCKS, S.ETF, S.BONDS,
            S.MUTUAL_FUND, S.CRYPTO, S.REAL_ESTATE, S.EQUIPMENT, S.OTHER_ASSET, S.CATEGORY,
        }
    ),
    AccountType.LIABILITY: frozenset({S.CREDIT_CARD, S.LOAN, S.MORTGAGE, S.OTHER_LIABILITY, S.CATEGORY}),
    AccountType.EQUITY: frozenset({S.OPENING_BALANCE, S.RETAINED_EARNINGS, S.OWNER_EQUITY, S.CATEGORY}),
    AccountType.INCOME: frozenset(
        {
            S.SALARY, S.BONUS, S.DIVIDEND, S.INTEREST, S.INVESTMENT, S.RENTAL, S.CAPITAL_GAINS,
            S.OTHER_INCOME, S.CATEGORY,
        }
    ),
    AccountType.EXPENSE: frozenset(
        {
            S.FOOD, S.HOUSING, S.TRANSPORTATION, S.COMMUNICATION, S.ENTERTAINMENT, S.PERSONAL,
            S.UTILITIES, S.HEALTHCARE, S.TAXES, S.FEES, S.OTHER_EXPENSE, S.CATEGORY,
        }
    ),
}

# Only these subtypes may carry symbol / quantity / average cost
INVESTMENT_SUBTYPES = frozenset({S.INVESTMENT_ACCOUNT, S.STOCKS, S.ETF, S.BONDS, S.MUTUAL_FUND, S.CRYPTO})

INVESTMENT_FIELDS = ("symbol", "quantity", "average_cost")


class _Unchanged:
    def __repr__(self) -> str:
        return "UNCHANGED"


# Marks "keep the current parent" in move_or_rename; None means "make it a root"
UNCHANGED = _Unchanged()


def split_path(path: str) -> list[str]:
    """Split a colon-delimited account path into stripped segments.

    Raises:
        InvalidPath: If the path or any segment is empty
    """
    if path is None or not path.strip():
        raise InvalidPath("Account path cannot be empty")
    segments = [segment.strip() for segment in path.split(PATH_SEPARATOR)]
    if any(not segment for segment in segments):
        raise InvalidPath(f"Account path '{path}' has an empty segment")
    return segments


def infer_account_type(root_name: str) -> AccountType:
    """Infer the account type from a root segment such as 'Assets' or 'Expenses'.

    Raises:
        InvalidPath: If the root name is not a known type name
    """
    account_type = ROOT_TYPES.get(root_name.strip().lower())
    if account_type is None:
        raise InvalidPath(
            f"Cannot infer the account type of root '{root_name}'; "
            "use Assets, Liabilities, Equity, Income or Expenses, or pass a type"
        )
    return account_type


def validate_account_name(name: str) -> str:
    """Return the stripped name, or raise InvalidAccount."""
    stripped = name.strip() if name else ""
    if not stripped:
        raise InvalidAccount("Account name cannot be empty")
    if PATH_SEPARATOR in stripped:
        raise InvalidAccount(f"Account name '{stripped}' cannot contain '{PATH_SEPARATOR}'")
    return stripped


def _coerce_type(account_type) -> AccountType:
    try:
        return AccountType(account_type)
    except ValueError as e:
        raise InvalidAccount(f"Unknown account type: {account_type!r}") from e


def _coerce_subtype(account_subtype) -> AccountSubtype:
    try:
        return AccountSubtype(account_subtype)
    except ValueError as e:
        raise InvalidAccount(f"Unknown account subtype: {account_subtype!r}") from e


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database, owner_policy: OwnerPolicy = first_user_policy):
        """Initialize account service.

        Args:
            db: Database instance
            owner_policy: Chooses who gets 100% of each newly created account
        """
        self.db = db
        self.owner_policy = owner_policy

    def _require_account(self, account_id: int) -> AccountEntity:
        account = self.db.get_account(account_id)
        if account is None:
            raise AccountNotFound(account_not_found(account_id))
        return account

    def _lookup_child(self, parent_id: Optional[int], name: str) -> Optional[AccountEntity]:
        matches = self.db.find_child_accounts(parent_id, name)
        if len(matches) > 1:
            logger.error("Found %d accounts named '%s' under parent %s", len(matches), name, parent_id)
            raise LedgerIntegrityError(
                f"Account directory is corrupt: {len(matches)} accounts named '{name}' under parent {parent_id}"
            )
        return matches[0] if matches else None

    def _validate_investment_fields(self, account_subtype: AccountSubtype, fields: dict) -> None:
        given = [key for key in INVESTMENT_FIELDS if fields.get(key) is not None]
        if given and account_subtype not in INVESTMENT_SUBTYPES:
            raise InvalidAccount(
                f"{', '.join(given)} can only be set on investment accounts, not '{account_subtype.value}'"
            )
        for key in ("quantity", "average_cost"):
            value = fields.get(key)
            if value is not None and (isinstance(value, float) or Decimal(value) < 0):
                raise InvalidAccount(f"{key} must be a non-negative Decimal")

    def create_account(
        self,
        name: str,
        account_type,
        account_subtype=AccountSubtype.CATEGORY,
        parent_id: Optional[int] = None,
        currency: str = "EUR",
        symbol: Optional[str] = None,
        quantity: Optional[Decimal] = None,
        average_cost: Optional[Decimal] = None,
        notes: Optional[str] = None,
        owner_id: Optional[int] = None,
        creator_id: Optional[int] = None,
    ) -> int:
        """Create a new account.

        Args:
            name: Account name (unique among its siblings, no ':')
            account_type: AccountType or its value
            account_subtype: AccountSubtype or its value; must be valid for the type
            parent_id: Parent account ID, or None for a root account
            currency: ISO currency code
            symbol, quantity, average_cost: Investment fields, investment subtypes only
            notes: Free text
            owner_id: Owner of 100% of the account; when None the owner policy decides
            creator_id: User performing the creation, passed to the owner policy

        Returns:
            Account ID

        Raises:
            InvalidAccount: If name, type/subtype, parent type or fields are invalid
            AccountNotFound: If parent does not exist
            AccountInactive: If parent is inactive
            ConflictError: If a sibling with the same name exists
        """
        name = validate_account_name(name)
        account_type = _coerce_type(account_type)
        account_subtype = _coerce_subtype(account_subtype)

        if account_subtype not in VALID_SUBTYPES[account_type]:
            raise InvalidAccount(
                f"Subtype '{account_subtype.value}' is not valid for {account_type.value} accounts"
            )
        self._validate_investment_fields(
            account_subtype, {"symbol": symbol, "quantity": quantity, "average_cost": average_cost}
        )
        currency = (currency or "").strip().upper()
        if len(currency) != 3:
            raise InvalidAccount(f"Currency must be a 3-letter code, got '{currency}'")

        if parent_id is not None:
            parent = self._require_account(parent_id)
            if not parent.is_active:
                raise AccountInactive(account_inactive(parent.full_path))
            if parent.account_type != account_type:
                raise InvalidAccount(
                    f"Account '{name}' must have the same type as its parent "
                    f"'{parent.full_path}' ({parent.account_type.value})"
                )

        if owner_id is None:
            owner_id = self.owner_policy(self.db, creator_id)

        account_id = self.db.create_account(
            name=name,
            account_type=account_type,
            account_subtype=account_subtype,
            parent_id=parent_id,
            currency=currency,
            symbol=symbol,
            quantity=quantity,
            average_cost=average_cost,
            notes=notes,
            owner_id=owner_id,
        )
        logger.info("Created %s account %d '%s' (owner %s)", account_type.value, account_id, name, owner_id)
        return account_id

    def resolve_or_create(
        self,
        path: str,
        account_type=None,
        account_subtype=None,
        creator_id: Optional[int] = None,
    ) -> int:
        """Resolve a colon-delimited path to an account ID, creating missing segments.

        Intermediate segments are created as categories; the last one gets
        account_subtype when given. Without account_type, the type is taken
        from the existing root, or inferred from the root name.

        Args:
            path: e.g. "Expenses:Food:Groceries"
            account_type: Type for newly created segments
            account_subtype: Subtype for the final segment if it is created
            creator_id: User performing the creation, passed to the owner policy

        Returns:
            Account ID of the final segment

        Raises:
            InvalidPath: If the path is malformed or its type cannot be inferred
            AccountInactive: If an existing segment is inactive
            LedgerIntegrityError: If a segment is ambiguous
        """
        segments = split_path(path)

        if account_type is not None:
            account_type = _coerce_type(account_type)
        if account_subtype is not None:
            account_subtype = _coerce_subtype(account_subtype)

        parent: Optional[AccountEntity] = None
        for index, segment in enumerate(segments):
            parent_id = parent.id if parent is not None else None
            existing = self._lookup_child(parent_id, segment)

            if existing is None:
                if parent is not None:
                    segment_type = account_type or parent.account_type
                else:
                    segment_type = account_type or infer_account_type(segment)
                is_last = index == len(segments) - 1
                subtype = account_subtype if is_last and account_subtype is not None else AccountSubtype.CATEGORY
                try:
                    account_id = self.create_account(
                        name=segment,
                        account_type=segment_type,
                        account_subtype=subtype,
                        parent_id=parent_id,
                        creator_id=creator_id,
                    )
                except ConflictError:
                    # Created concurrently; use the winner
                    existing = self._lookup_child(parent_id, segment)
                    if existing is None:
                        raise
                else:
                    existing = self._require_account(account_id)

            if not existing.is_active:
                raise AccountInactive(account_inactive(existing.full_path))
            parent = existing

        return parent.id

    def find_account_by_path(self, path: str) -> Optional[AccountEntity]:
        """Find an account by walking the tree segment by segment.

        Returns:
            Account entity or None if any segment is missing

        Raises:
            InvalidPath: If the path is malformed
            LedgerIntegrityError: If a segment is ambiguous
        """
        account: Optional[AccountEntity] = None
        for segment in split_path(path):
            account = self._lookup_child(account.id if account is not None else None, segment)
            if account is None:
                return None
        return account

    def get_account_by_path(self, path: str) -> AccountEntity:
        """Get an account by its full path, using the cached path column.

        Raises:
            InvalidPath: If the path is malformed
            AccountNotFound: If no account has that path
        """
        normalized = PATH_SEPARATOR.join(split_path(path))
        account = self.db.get_account_by_full_path(normalized)
        if account is None:
            raise AccountNotFound(account_path_not_found(normalized))
        return account

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, account_type=None, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts ordered by full path."""
        if account_type is not None:
            account_type = _coerce_type(account_type)
        return self.db.list_accounts(account_type=account_type, include_inactive=include_inactive)

    def get_children(self, account_id: int, include_inactive: bool = False) -> list[AccountEntity]:
        """List immediate children of an account."""
        self._require_account(account_id)
        return self.db.list_child_accounts(account_id, include_inactive=include_inactive)

    def move_or_rename(
        self,
        account_id: int,
        new_name: Optional[str] = None,
        new_parent_id=UNCHANGED,
    ) -> AccountEntity:
        """Rename and/or move an account.

        Args:
            account_id: Account to change
            new_name: New name, or None to keep the current one
            new_parent_id: New parent ID, None to make it a root, or UNCHANGED

        Returns:
            The updated account

        Raises:
            InvalidAccount: If the name is invalid, the move would create a cycle,
                or the new parent has another type
            AccountNotFound: If the account or new parent does not exist
            AccountInactive: If the new parent is inactive
            ConflictError: If the destination already has a sibling with that name
        """
        account = self._require_account(account_id)
        name = validate_account_name(new_name) if new_name is not None else account.name
        parent_id = account.parent_id if new_parent_id is UNCHANGED else new_parent_id

        if parent_id is not None and parent_id != account.parent_id:
            if parent_id == account_id:
                raise InvalidAccount(f"Account '{account.full_path}' cannot be its own parent")
            parent = self._require_account(parent_id)
            if not parent.is_active:
                raise AccountInactive(account_inactive(parent.full_path))
            if parent.account_type != account.account_type:
                raise InvalidAccount(
                    f"Cannot move {account.account_type.value} account '{account.full_path}' "
                    f"under {parent.account_type.value} account '{parent.full_path}'"
                )

        if name == account.name and parent_id == account.parent_id:
            return account

        updated = self.db.move_account(account_id, name, parent_id)
        moved = self._require_account(account_id)
        logger.info(
            "Account %d is now '%s' (%d path(s) recomputed)", account_id, moved.full_path, len(updated)
        )
        return moved

    def update_account(self, account_id: int, **fields) -> AccountEntity:
        """Update non-structural fields (notes, currency, symbol, quantity, average_cost).

        Raises:
            InvalidAccount: If a field is unknown or not allowed for the subtype
            AccountNotFound: If the account does not exist
        """
        account = self._require_account(account_id)
        if "currency" in fields:
            currency = (fields["currency"] or "").strip().upper()
            if len(currency) != 3:
                raise InvalidAccount(f"Currency must be a 3-letter code, got '{currency}'")
            fields["currency"] = currency
        self._validate_investment_fields(account.account_subtype, fields)

        self.db.update_account_fields(account_id, **fields)
        return self._require_account(account_id)

    def deactivate_account(self, account_id: int) -> None:
        """Deactivate an account. Accounts are never hard-deleted.

        Raises:
            DependencyError: If the account still has active children
        """
        account = self._require_account(account_id)
        children = self.db.list_child_accounts(account_id)
        if children:
            raise DependencyError(account_delete_blocked(account_id, len(children)))
        self.db.set_account_active(account_id, False)
        logger.info("Deactivated account %d '%s'", account_id, account.full_path)

    def reactivate_account(self, account_id: int) -> None:
        """Reactivate an account.

        Raises:
            AccountInactive: If its parent is inactive
        """
        account = self._require_account(account_id)
        if account.parent_id is not None:
            parent = self._require_account(account.parent_id)
            if not parent.is_active:
                raise AccountInactive(account_inactive(parent.full_path))
        self.db.set_account_active(account_id, True)
        logger.info("Reactivated account %d '%s'", account_id, account.full_path)
