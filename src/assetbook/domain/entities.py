"""Domain model entities for assetbook.

These are pure data classes representing ledger concepts, independent of the
database schema. Services and collaborators only ever see these; the ORM
models stay inside the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


PATH_SEPARATOR = ":"


class AccountType(str, Enum):
    """Top-level account classification for double-entry bookkeeping."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class AccountSubtype(str, Enum):
    """Refinement of an account type."""

    # Asset
    CASH = "cash"
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT_ACCOUNT = "investment_account"
    STOCKS = "stocks"
    ETF = "etf"
    BONDS = "bonds"
    MUTUAL_FUND = "mutual_fund"
    CRYPTO = "crypto"
    REAL_ESTATE = "real_estate"
    EQUIPMENT = "equipment"
    OTHER_ASSET = "other_asset"

    # Liability
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    OTHER_LIABILITY = "other_liability"

    # Equity
    OPENING_BALANCE = "opening_balance"
    RETAINED_EARNINGS = "retained_earnings"
    OWNER_EQUITY = "owner_equity"

    # Income
    SALARY = "salary"
    BONUS = "bonus"
    DIVIDEND = "dividend"
    INTEREST = "interest"
    INVESTMENT = "investment"
    RENTAL = "rental"
    CAPITAL_GAINS = "capital_gains"
    OTHER_INCOME = "other_income"

    # Expense
    FOOD = "food"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    COMMUNICATION = "communication"
    ENTERTAINMENT = "entertainment"
    PERSONAL = "personal"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    TAXES = "taxes"
    FEES = "fees"
    OTHER_EXPENSE = "other_expense"

    # Grouping node, valid for every type
    CATEGORY = "category"


class MatchType(str, Enum):
    """Confidence tier of a duplicate match."""

    EXACT = "exact"
    PROBABLE = "probable"
    POSSIBLE = "possible"


class MatchStatus(str, Enum):
    """Review status of a duplicate match."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class User:
    """Ledger user, owner of account shares."""

    id: int
    name: str
    display_name: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts node."""

    id: int
    name: str
    account_type: AccountType
    account_subtype: AccountSubtype
    parent_id: Optional[int]
    full_path: str
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    symbol: Optional[str] = None
    quantity: Optional[Decimal] = None
    average_cost: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class OwnershipShare:
    """Fraction of an account attributed to one user."""

    id: int
    user_id: int
    account_id: int
    percentage: Decimal
    created_at: datetime


@dataclass(frozen=True)
class JournalEntry:
    """One signed posting to one account."""

    id: int
    transaction_id: int
    account_id: int
    amount: Decimal
    memo: Optional[str]


@dataclass(frozen=True)
class Transaction:
    """Transaction header together with its journal entries."""

    id: int
    description: str
    transaction_date: date
    created_at: datetime
    reference: Optional[str] = None
    import_source: Optional[str] = None
    import_batch_id: Optional[str] = None
    external_reference: Optional[str] = None
    is_duplicate: bool = False
    merged_into_id: Optional[int] = None
    entries: tuple[JournalEntry, ...] = ()

    @property
    def amount(self) -> Decimal:
        """Magnitude of the transaction: half the sum of absolute entry amounts."""
        return sum((abs(e.amount) for e in self.entries), Decimal("0")) / 2


@dataclass(frozen=True)
class NewJournalEntry:
    """Entry to be posted; account is an id or a colon-delimited path."""

    account: int | str
    amount: Decimal
    memo: Optional[str] = None


@dataclass(frozen=True)
class MatchCriteria:
    """Why two transactions were proposed as duplicates."""

    amount_diff: Decimal
    date_diff_days: int
    description_similarity: float
    same_date: bool
    same_amount: bool
    manual: bool = False


@dataclass(frozen=True)
class TransactionMatch:
    """Directed candidate-duplicate relationship between two transactions."""

    id: int
    primary_transaction_id: int
    duplicate_transaction_id: int
    confidence: Decimal
    criteria: MatchCriteria
    match_type: MatchType
    status: MatchStatus
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DuplicateCandidate:
    """Scored candidate returned by duplicate search."""

    transaction: Transaction
    confidence: Decimal
    match_type: MatchType
    criteria: MatchCriteria


@dataclass(frozen=True)
class ImportedFile:
    """Record of a file already imported, used to refuse re-imports."""

    id: int
    file_path: str
    file_name: str
    file_hash: str
    file_size: int
    import_source: str
    import_batch_id: str
    transaction_count: int
    imported_at: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class ImportBatchSummary:
    """Counts produced by batch duplicate detection."""

    import_batch_id: str
    transactions_scanned: int
    matches: tuple[TransactionMatch, ...] = field(default_factory=tuple)
    merged: tuple[int, ...] = field(default_factory=tuple)
