"""Merge and unmerge of duplicate transactions."""

import logging
from decimal import Decimal
from typing import Optional

from assetbook.database.base import Database
from assetbook.domain.matching import MatchingConfig, compute_criteria
from assetbook.domain.entities import Transaction as TransactionEntity
from assetbook.domain.errors import (
    AlreadyMerged,
    NotMerged,
    SelfMerge,
    TransactionNotFound,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

MANUAL_MATCH_CONFIDENCE = Decimal("1.00")


class MergeService:
    """Service for hiding duplicates behind their primary transaction.

    A merged duplicate keeps its rows and entries; it is only flagged so that
    listings and reports skip it. Unmerge restores the exact prior state.
    """

    def __init__(self, db: Database, config: Optional[MatchingConfig] = None):
        """Initialize merge service.

        Args:
            db: Database instance
            config: Matching configuration, used for the criteria of manual matches
        """
        self.db = db
        self.config = config or MatchingConfig()

    def _require_transaction(self, transaction_id: int) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise TransactionNotFound(transaction_not_found(transaction_id))
        return txn

    def merge(self, primary_transaction_id: int, duplicate_transaction_id: int) -> None:
        """Hide the duplicate behind the primary and confirm their matches.

        When the pair was never matched, a manual Exact match with confidence
        1.0 is created and removed again on unmerge.

        Raises:
            SelfMerge: If both IDs are equal
            TransactionNotFound: If either transaction does not exist
            AlreadyMerged: If the duplicate is already hidden, or the primary
                is itself hidden
        """
        if primary_transaction_id == duplicate_transaction_id:
            raise SelfMerge(f"Transaction {primary_transaction_id} cannot be merged into itself")

        primary = self._require_transaction(primary_transaction_id)
        duplicate = self._require_transaction(duplicate_transaction_id)
        if duplicate.is_duplicate:
            raise AlreadyMerged(f"Transaction {duplicate.id} is already merged into {duplicate.merged_into_id}")
        if primary.is_duplicate:
            raise AlreadyMerged(f"Transaction {primary.id} is itself merged into {primary.merged_into_id}")

        criteria = compute_criteria(primary, duplicate, self.config, manual=True)
        self.db.merge_transactions(primary.id, duplicate.id, MANUAL_MATCH_CONFIDENCE, criteria)
        logger.info("Merged transaction %d into %d", duplicate.id, primary.id)

    def unmerge(self, transaction_id: int) -> int:
        """Make a hidden duplicate visible again.

        Returns:
            ID of the transaction it was merged into

        Raises:
            TransactionNotFound: If the transaction does not exist
            NotMerged: If it is not hidden
        """
        txn = self._require_transaction(transaction_id)
        if not txn.is_duplicate:
            raise NotMerged(f"Transaction {transaction_id} is not merged")

        primary_id = self.db.unmerge_transaction(transaction_id)
        logger.info("Unmerged transaction %d from %d", transaction_id, primary_id)
        return primary_id
