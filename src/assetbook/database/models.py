"""SQLAlchemy models for the assetbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Float,
    Boolean,
    Index,
    UniqueConstraint,
    CheckConstraint,
    Enum as SAEnum,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from assetbook.domain.entities import AccountType, AccountSubtype, MatchType, MatchStatus

Base = declarative_base()


def _enum_column(enum_cls):
    """Store an enum by its value, as a plain string column."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Ledger user model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    display_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    shares = relationship("OwnershipShare", back_populates="user", cascade="all, delete-orphan")


class Account(Base):
    """Chart-of-accounts model with hierarchical structure."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    account_type = Column(_enum_column(AccountType), nullable=False)
    account_subtype = Column(_enum_column(AccountSubtype), nullable=False)
    parent_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    # Derived from the names along the parent chain; recomputed on rename/move
    full_path = Column(String, nullable=False)
    symbol = Column(String(20), nullable=True)
    quantity = Column(Numeric(20, 8), nullable=True)
    average_cost = Column(Numeric(20, 8), nullable=True)
    currency = Column(String(3), default="EUR", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("parent_id", "name", name="uq_account_name_parent"),
        CheckConstraint("name NOT LIKE '%:%'", name="chk_account_name_no_colon"),
        # NULL parents are distinct in a unique constraint, so roots need their own index
        Index(
            "uq_account_root_name",
            "name",
            unique=True,
            sqlite_where=parent_id.is_(None),
            postgresql_where=parent_id.is_(None),
        ),
        Index("ix_accounts_full_path", "full_path"),
    )

    # Relationships
    parent = relationship("Account", remote_side=[id], backref="children")
    shares = relationship("OwnershipShare", back_populates="account", cascade="all, delete-orphan")
    entries = relationship("JournalEntry", back_populates="account")


class OwnershipShare(Base):
    """Fractional ownership of an account by a user."""

    __tablename__ = "account_ownership"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    percentage = Column(Numeric(5, 4), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "account_id", name="uq_ownership_user_account"),
        CheckConstraint("percentage > 0 AND percentage <= 1", name="chk_ownership_percentage"),
    )

    # Relationships
    user = relationship("User", back_populates="shares")
    account = relationship("Account", back_populates="shares")


class Transaction(Base):
    """Transaction header model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    description = Column(String(500), nullable=False)
    reference = Column(String(100), nullable=True)
    transaction_date = Column(Date, nullable=False, index=True)
    import_source = Column(String(50), nullable=True, index=True)
    import_batch_id = Column(String(64), nullable=True, index=True)
    external_reference = Column(String(255), nullable=True)
    is_duplicate = Column(Boolean, default=False, nullable=False, index=True)
    merged_into_id = Column(Integer, ForeignKey("transactions.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    entries = relationship(
        "JournalEntry",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="JournalEntry.id",
    )
    merged_into = relationship("Transaction", remote_side=[id])
    primary_matches = relationship(
        "TransactionMatch",
        foreign_keys="TransactionMatch.primary_transaction_id",
        back_populates="primary",
        cascade="all, delete-orphan",
    )
    duplicate_matches = relationship(
        "TransactionMatch",
        foreign_keys="TransactionMatch.duplicate_transaction_id",
        back_populates="duplicate",
        cascade="all, delete-orphan",
    )


class JournalEntry(Base):
    """Journal entry model: one signed amount posted to one account."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    amount = Column(Numeric(20, 2), nullable=False)
    memo = Column(String(255), nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="entries")
    account = relationship("Account", back_populates="entries")


class TransactionMatch(Base):
    """Candidate duplicate relationship between two transactions."""

    __tablename__ = "transaction_matches"

    id = Column(Integer, primary_key=True)
    primary_transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False
    )
    duplicate_transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False
    )
    confidence = Column(Numeric(3, 2), nullable=False)
    amount_diff = Column(Numeric(20, 4), nullable=False)
    date_diff_days = Column(Integer, nullable=False)
    description_similarity = Column(Float, nullable=False)
    same_date = Column(Boolean, nullable=False)
    same_amount = Column(Boolean, nullable=False)
    manual = Column(Boolean, default=False, nullable=False)
    match_type = Column(_enum_column(MatchType), nullable=False)
    status = Column(_enum_column(MatchStatus), default=MatchStatus.PENDING, nullable=False, index=True)
    # Set by merge, cleared by unmerge
    status_before_merge = Column(_enum_column(MatchStatus), nullable=True)
    created_by_merge = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "primary_transaction_id", "duplicate_transaction_id", name="uq_transaction_match"
        ),
        CheckConstraint(
            "primary_transaction_id != duplicate_transaction_id", name="chk_different_transactions"
        ),
        CheckConstraint("confidence >= 0 AND confidence <= 1", name="chk_match_confidence"),
    )

    # Relationships
    primary = relationship(
        "Transaction", foreign_keys=[primary_transaction_id], back_populates="primary_matches"
    )
    duplicate = relationship(
        "Transaction", foreign_keys=[duplicate_transaction_id], back_populates="duplicate_matches"
    )


class ImportedFile(Base):
    """Imported file record, keyed by content hash."""

    __tablename__ = "imported_files"

    id = Column(Integer, primary_key=True)
    file_path = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_hash = Column(String(64), unique=True, nullable=False)
    file_size = Column(Integer, nullable=False)
    import_source = Column(String(50), nullable=False)
    import_batch_id = Column(String(64), nullable=False)
    transaction_count = Column(Integer, default=0, nullable=False)
    notes = Column(String, nullable=True)
    imported_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("file_path", "import_source", name="uq_file_path_source"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
