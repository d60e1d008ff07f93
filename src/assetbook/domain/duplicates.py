"""Duplicate transaction detection.

Transactions imported from overlapping sources (a bank CSV and a payslip, say)
describe the same movement twice. Candidates are scored on amount, date and
description similarity; a scored pair is recorded as a TransactionMatch whose
status moves Pending -> Confirmed | Rejected and back to Pending.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from assetbook.database.base import Database
from assetbook.domain.entities import (
    DuplicateCandidate,
    ImportBatchSummary,
    MatchCriteria,
    MatchStatus,
    MatchType,
    TransactionMatch,
)
from assetbook.domain.errors import (
    AlreadyMerged,
    ConflictError,
    MatchNotFound,
    SelfMatch,
    TransactionNotFound,
    ValidationError,
    match_not_found,
    transaction_not_found,
)
from assetbook.domain.matching import MatchingConfig, compute_criteria, score
from assetbook.domain.merge import MergeService

logger = logging.getLogger(__name__)

CONFIDENCE_PLACES = Decimal("0.01")

ALLOWED_TRANSITIONS: dict[MatchStatus, frozenset[MatchStatus]] = {
    MatchStatus.PENDING: frozenset({MatchStatus.CONFIRMED, MatchStatus.REJECTED}),
    MatchStatus.CONFIRMED: frozenset({MatchStatus.PENDING}),
    MatchStatus.REJECTED: frozenset({MatchStatus.PENDING}),
}


class DuplicateService:
    """Service for finding and recording duplicate transactions."""

    def __init__(
        self,
        db: Database,
        config: Optional[MatchingConfig] = None,
        merge_service: Optional[MergeService] = None,
    ):
        """Initialize duplicate service.

        Args:
            db: Database instance
            config: Matching tolerances and thresholds (defaults if omitted)
            merge_service: Used by batch detection to auto-merge exact matches
        """
        self.db = db
        self.config = config or MatchingConfig()
        self.merge_service = merge_service or MergeService(db, self.config)

    def find_candidates(
        self,
        transaction_id: int,
        amount_tolerance: Optional[Decimal] = None,
        date_tolerance_days: Optional[int] = None,
        include_hidden: bool = False,
    ) -> list[DuplicateCandidate]:
        """Find transactions that may duplicate the given one.

        The pool is every other transaction dated within the date tolerance,
        whose amount is within the amount tolerance (inclusive), and whose
        import source differs. Two transactions without a source share the
        same source.

        Args:
            transaction_id: Reference transaction
            amount_tolerance: Maximum amount difference (default from config)
            date_tolerance_days: Maximum date difference in days (default from config)
            include_hidden: Also consider transactions already merged away

        Returns:
            Candidates ordered by confidence, then date delta, amount delta and ID

        Raises:
            TransactionNotFound: If the reference does not exist
            ValidationError: If a tolerance is negative
        """
        amount_tolerance = (
            self.config.amount_tolerance if amount_tolerance is None else Decimal(str(amount_tolerance))
        )
        date_tolerance_days = (
            self.config.date_tolerance_days if date_tolerance_days is None else int(date_tolerance_days)
        )
        if amount_tolerance < 0 or date_tolerance_days < 0:
            raise ValidationError("Tolerances cannot be negative")

        reference = self.db.get_transaction(transaction_id)
        if reference is None:
            raise TransactionNotFound(transaction_not_found(transaction_id))

        window = timedelta(days=date_tolerance_days)
        pool = self.db.list_transactions(
            start_date=reference.transaction_date - window,
            end_date=reference.transaction_date + window,
            include_hidden=include_hidden,
        )

        candidates = []
        for other in pool:
            if other.id == reference.id or other.import_source == reference.import_source:
                continue
            if abs(other.amount - reference.amount) > amount_tolerance:
                continue
            criteria = compute_criteria(reference, other, self.config)
            confidence = score(criteria, self.config, amount_tolerance, date_tolerance_days)
            candidates.append(
                DuplicateCandidate(
                    transaction=other,
                    confidence=confidence,
                    match_type=self.config.match_type_for(confidence),
                    criteria=criteria,
                )
            )

        candidates.sort(
            key=lambda c: (-c.confidence, c.criteria.date_diff_days, c.criteria.amount_diff, c.transaction.id)
        )
        logger.debug("Transaction %d has %d duplicate candidate(s)", transaction_id, len(candidates))
        return candidates

    def record_match(
        self,
        primary_transaction_id: int,
        duplicate_transaction_id: int,
        confidence,
        criteria: MatchCriteria,
        match_type: Optional[MatchType] = None,
    ) -> int:
        """Record (or refresh) a match for an ordered pair.

        Recording the same pair twice updates the one row; its status is kept.

        Returns:
            Match ID

        Raises:
            SelfMatch: If both IDs are equal
            ValidationError: If confidence is outside [0, 1]
            TransactionNotFound: If either transaction does not exist
        """
        if primary_transaction_id == duplicate_transaction_id:
            raise SelfMatch(f"Transaction {primary_transaction_id} cannot be matched with itself")

        confidence = Decimal(str(confidence)).quantize(CONFIDENCE_PLACES)
        if confidence < 0 or confidence > 1:
            raise ValidationError(f"Confidence must be between 0 and 1, got {confidence}")
        if match_type is None:
            match_type = self.config.match_type_for(confidence)

        match_id = self.db.upsert_match(
            primary_transaction_id, duplicate_transaction_id, confidence, criteria, MatchType(match_type)
        )
        logger.info(
            "Recorded %s match %d: %d <- %d (confidence %s)",
            MatchType(match_type).value,
            match_id,
            primary_transaction_id,
            duplicate_transaction_id,
            confidence,
        )
        return match_id

    def update_match_status(self, match_id: int, status) -> None:
        """Move a match to another status.

        Raises:
            MatchNotFound: If the match does not exist
            ConflictError: If the transition is not allowed, or the pair is
                merged and the status is not Confirmed
        """
        status = MatchStatus(status)
        match = self.db.get_match(match_id)
        if match is None:
            raise MatchNotFound(match_not_found(match_id))
        if match.status == status:
            return
        if status not in ALLOWED_TRANSITIONS[match.status]:
            raise ConflictError(
                f"Match {match_id} is {match.status.value}; it can only become "
                + " or ".join(s.value for s in sorted(ALLOWED_TRANSITIONS[match.status], key=lambda s: s.value))
            )

        self.db.update_match_status(match_id, status)
        logger.info("Match %d: %s -> %s", match_id, match.status.value, status.value)

    def get_match(self, match_id: int) -> Optional[TransactionMatch]:
        """Get match by ID, or None."""
        return self.db.get_match(match_id)

    def get_matches_for_transaction(self, transaction_id: int) -> list[TransactionMatch]:
        """Get every match the transaction takes part in."""
        return self.db.list_matches_for_transaction(transaction_id)

    def list_matches(self, status=None) -> list[TransactionMatch]:
        """List matches, optionally filtered by status."""
        return self.db.list_matches(status=MatchStatus(status) if status is not None else None)

    def detect_duplicates_for_batch(self, import_batch_id: str, auto_merge_exact: bool = False) -> ImportBatchSummary:
        """Record duplicate matches for every transaction of an import batch.

        Each batch transaction is the primary of the matches it produces.

        Args:
            import_batch_id: Batch to scan
            auto_merge_exact: Merge Exact matches into the batch transaction

        Returns:
            Summary with the recorded matches and the IDs hidden by auto-merge
        """
        batch = sorted(self.db.list_transactions(import_batch_id=import_batch_id), key=lambda t: t.id)

        match_ids: list[int] = []
        merged: list[int] = []
        for txn in batch:
            for candidate in self.find_candidates(txn.id):
                if candidate.confidence < self.config.record_threshold:
                    continue
                match_ids.append(
                    self.record_match(txn.id, candidate.transaction.id, candidate.confidence, candidate.criteria)
                )
                if auto_merge_exact and candidate.match_type == MatchType.EXACT:
                    try:
                        self.merge_service.merge(txn.id, candidate.transaction.id)
                    except AlreadyMerged as e:
                        logger.info("Skipped auto-merge of %d: %s", candidate.transaction.id, e)
                        continue
                    merged.append(candidate.transaction.id)

        matches = tuple(m for m in (self.db.get_match(i) for i in match_ids) if m is not None)
        logger.info(
            "Batch %s: scanned %d transaction(s), recorded %d match(es), merged %d",
            import_batch_id,
            len(batch),
            len(matches),
            len(merged),
        )
        return ImportBatchSummary(
            import_batch_id=import_batch_id,
            transactions_scanned=len(batch),
            matches=matches,
            merged=tuple(merged),
        )
