"""Scoring of candidate duplicate pairs."""

from dataclasses import dataclass
from decimal import Decimal

from assetbook.domain.entities import MatchCriteria, MatchType, Transaction as TransactionEntity
from assetbook.utils.similarity import similarity


@dataclass(frozen=True)
class MatchingConfig:
    """Tolerances and thresholds of the duplicate heuristic."""

    amount_tolerance: Decimal = Decimal("0.01")
    date_tolerance_days: int = 3

    # Scores, checked in this order
    exact_confidence: Decimal = Decimal("0.95")
    probable_confidence: Decimal = Decimal("0.80")
    possible_confidence: Decimal = Decimal("0.60")
    fallback_confidence: Decimal = Decimal("0.30")
    exact_amount_delta: Decimal = Decimal("0.01")
    exact_similarity: float = 0.8
    probable_similarity: float = 0.6

    # Confidence -> match type
    exact_threshold: Decimal = Decimal("0.95")
    probable_threshold: Decimal = Decimal("0.8")

    # Batch detection records candidates at or above this
    record_threshold: Decimal = Decimal("0.6")

    def match_type_for(self, confidence: Decimal) -> MatchType:
        """Map a confidence to its tier."""
        if confidence >= self.exact_threshold:
            return MatchType.EXACT
        if confidence >= self.probable_threshold:
            return MatchType.PROBABLE
        return MatchType.POSSIBLE


def compute_criteria(
    reference: TransactionEntity,
    candidate: TransactionEntity,
    config: MatchingConfig,
    manual: bool = False,
) -> MatchCriteria:
    """Describe how two transactions compare."""
    amount_diff = abs(reference.amount - candidate.amount)
    date_diff = abs((reference.transaction_date - candidate.transaction_date).days)
    return MatchCriteria(
        amount_diff=amount_diff,
        date_diff_days=date_diff,
        description_similarity=similarity(reference.description, candidate.description),
        same_date=date_diff == 0,
        same_amount=amount_diff < config.exact_amount_delta,
        manual=manual,
    )


def score(
    criteria: MatchCriteria,
    config: MatchingConfig,
    amount_tolerance: Decimal,
    date_tolerance_days: int,
) -> Decimal:
    """Confidence of a pair; the first rule that holds wins."""
    within_tolerance = (
        criteria.amount_diff < amount_tolerance and criteria.date_diff_days <= date_tolerance_days
    )
    if (
        criteria.amount_diff < config.exact_amount_delta
        and criteria.same_date
        and criteria.description_similarity > config.exact_similarity
    ):
        return config.exact_confidence
    if within_tolerance and criteria.description_similarity > config.probable_similarity:
        return config.probable_confidence
    if within_tolerance:
        return config.possible_confidence
    return config.fallback_confidence
