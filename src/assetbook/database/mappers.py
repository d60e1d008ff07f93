"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so ORM rows never leak out of the
database package.
"""

from decimal import Decimal

from assetbook.domain import entities as domain
from assetbook.database.models import (
    User as ORMUser,
    Account as ORMAccount,
    OwnershipShare as ORMOwnershipShare,
    Transaction as ORMTransaction,
    JournalEntry as ORMJournalEntry,
    TransactionMatch as ORMTransactionMatch,
    ImportedFile as ORMImportedFile,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        display_name=orm_user.display_name,
        is_active=orm_user.is_active,
        created_at=orm_user.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        account_subtype=domain.AccountSubtype(orm_account.account_subtype),
        parent_id=orm_account.parent_id,
        full_path=orm_account.full_path,
        currency=orm_account.currency,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
        symbol=orm_account.symbol,
        quantity=orm_account.quantity,
        average_cost=orm_account.average_cost,
        notes=orm_account.notes,
    )


def ownership_share_to_domain(orm_share: ORMOwnershipShare) -> domain.OwnershipShare:
    """Convert SQLAlchemy OwnershipShare model to domain OwnershipShare entity."""
    return domain.OwnershipShare(
        id=orm_share.id,
        user_id=orm_share.user_id,
        account_id=orm_share.account_id,
        percentage=Decimal(orm_share.percentage),
        created_at=orm_share.created_at,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        transaction_id=orm_entry.transaction_id,
        account_id=orm_entry.account_id,
        amount=Decimal(orm_entry.amount),
        memo=orm_entry.memo,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model (with entries) to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        description=orm_transaction.description,
        transaction_date=orm_transaction.transaction_date,
        created_at=orm_transaction.created_at,
        reference=orm_transaction.reference,
        import_source=orm_transaction.import_source,
        import_batch_id=orm_transaction.import_batch_id,
        external_reference=orm_transaction.external_reference,
        is_duplicate=bool(orm_transaction.is_duplicate),
        merged_into_id=orm_transaction.merged_into_id,
        entries=tuple(journal_entry_to_domain(e) for e in orm_transaction.entries),
    )


def match_criteria_to_domain(orm_match: ORMTransactionMatch) -> domain.MatchCriteria:
    """Rebuild the structured criteria record from its columns."""
    return domain.MatchCriteria(
        amount_diff=Decimal(orm_match.amount_diff),
        date_diff_days=orm_match.date_diff_days,
        description_similarity=orm_match.description_similarity,
        same_date=orm_match.same_date,
        same_amount=orm_match.same_amount,
        manual=orm_match.manual,
    )


def transaction_match_to_domain(orm_match: ORMTransactionMatch) -> domain.TransactionMatch:
    """Convert SQLAlchemy TransactionMatch model to domain TransactionMatch entity."""
    return domain.TransactionMatch(
        id=orm_match.id,
        primary_transaction_id=orm_match.primary_transaction_id,
        duplicate_transaction_id=orm_match.duplicate_transaction_id,
        confidence=Decimal(orm_match.confidence),
        criteria=match_criteria_to_domain(orm_match),
        match_type=domain.MatchType(orm_match.match_type),
        status=domain.MatchStatus(orm_match.status),
        created_at=orm_match.created_at,
        updated_at=orm_match.updated_at,
    )


def imported_file_to_domain(orm_file: ORMImportedFile) -> domain.ImportedFile:
    """Convert SQLAlchemy ImportedFile model to domain ImportedFile entity."""
    return domain.ImportedFile(
        id=orm_file.id,
        file_path=orm_file.file_path,
        file_name=orm_file.file_name,
        file_hash=orm_file.file_hash,
        file_size=orm_file.file_size,
        import_source=orm_file.import_source,
        import_batch_id=orm_file.import_batch_id,
        transaction_count=orm_file.transaction_count,
        imported_at=orm_file.imported_at,
        notes=orm_file.notes,
    )
