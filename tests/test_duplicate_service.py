"""Tests for duplicate detection and match review."""

import pytest
from datetime import date
from decimal import Decimal

from assetbook.domain.duplicates import DuplicateService
from assetbook.domain.entities import MatchCriteria, MatchStatus, MatchType
from assetbook.domain.errors import (
    ConflictError,
    MatchNotFound,
    SelfMatch,
    TransactionNotFound,
    ValidationError,
)
from assetbook.domain.matching import MatchingConfig, compute_criteria, score
from assetbook.domain.merge import MergeService


@pytest.fixture
def salary_pair(sample_accounts, post):
    """The same salary seen by the bank and by the payslip importer."""
    bank = post(
        "VIR SALAIRE", "Assets:Bank:Checking", "Income:Salary", "3000",
        transaction_date=date(2024, 1, 31), import_source="bank", import_batch_id="bank-jan",
    )
    payslip = post(
        "SALAIRE VIREMENT", "Assets:Bank:Checking", "Income:Salary", "3000",
        transaction_date=date(2024, 1, 31), import_source="payslip", import_batch_id="payslip-jan",
    )
    return bank, payslip


def _criteria(amount_diff="0", date_diff=0, similarity=1.0):
    amount_diff = Decimal(amount_diff)
    return MatchCriteria(
        amount_diff=amount_diff,
        date_diff_days=date_diff,
        description_similarity=similarity,
        same_date=date_diff == 0,
        same_amount=amount_diff < Decimal("0.01"),
    )


class TestScore:
    """Tests for the scoring rules."""

    config = MatchingConfig()
    tolerance = Decimal("0.01")

    @pytest.mark.parametrize(
        "criteria, expected",
        [
            (_criteria("0", 0, 0.9), Decimal("0.95")),
            (_criteria("0", 0, 0.8), Decimal("0.80")),
            (_criteria("0", 3, 0.9), Decimal("0.80")),
            (_criteria("0", 2, 0.6), Decimal("0.60")),
            (_criteria("0", 4, 0.9), Decimal("0.30")),
            (_criteria("0.01", 0, 1.0), Decimal("0.30")),
        ],
    )
    def test_rules_in_order(self, criteria, expected):
        assert score(criteria, self.config, self.tolerance, 3) == expected

    @pytest.mark.parametrize(
        "confidence, expected",
        [
            (Decimal("1.00"), MatchType.EXACT),
            (Decimal("0.95"), MatchType.EXACT),
            (Decimal("0.94"), MatchType.PROBABLE),
            (Decimal("0.80"), MatchType.PROBABLE),
            (Decimal("0.79"), MatchType.POSSIBLE),
            (Decimal("0.30"), MatchType.POSSIBLE),
        ],
    )
    def test_match_type_tiers(self, confidence, expected):
        assert self.config.match_type_for(confidence) is expected


class TestFindCandidates:
    """Tests for find_candidates."""

    def test_reordered_description_is_probable(self, duplicate_service, salary_pair):
        bank, payslip = salary_pair

        candidates = duplicate_service.find_candidates(bank)

        assert [c.transaction.id for c in candidates] == [payslip]
        candidate = candidates[0]
        assert candidate.confidence == Decimal("0.80")
        assert candidate.match_type is MatchType.PROBABLE
        assert candidate.criteria.same_date and candidate.criteria.same_amount
        assert candidate.criteria.description_similarity == pytest.approx(11 / 17)

    def test_identical_description_is_exact(self, duplicate_service, sample_accounts, post):
        bank = post("CB CARREFOUR", "Expenses:Food", "Assets:Bank:Checking", "52.30", import_source="bank")
        card = post("CB CARREFOUR", "Expenses:Food", "Assets:Bank:Checking", "52.30", import_source="card")

        candidates = duplicate_service.find_candidates(bank)

        assert [(c.transaction.id, c.confidence, c.match_type) for c in candidates] == [
            (card, Decimal("0.95"), MatchType.EXACT)
        ]

    def test_same_source_excluded(self, duplicate_service, sample_accounts, post):
        first = post("Coffee", "Expenses:Food", "Assets:Bank:Checking", "3", import_source="bank")
        post("Coffee", "Expenses:Food", "Assets:Bank:Checking", "3", import_source="bank")

        assert duplicate_service.find_candidates(first) == []

    def test_missing_sources_count_as_same(self, duplicate_service, sample_accounts, post):
        first = post("Coffee", "Expenses:Food", "Assets:Bank:Checking", "3")
        post("Coffee", "Expenses:Food", "Assets:Bank:Checking", "3")

        assert duplicate_service.find_candidates(first) == []

    def test_amount_and_date_window(self, duplicate_service, sample_accounts, post):
        ref = post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800", import_source="bank")
        post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800.02", import_source="manual")
        post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800", transaction_date=date(2024, 1, 19), import_source="manual")
        edge = post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800.01", transaction_date=date(2024, 1, 18), import_source="manual")

        candidates = duplicate_service.find_candidates(ref)

        # Inclusive pool bound, strict scoring bound
        assert [(c.transaction.id, c.confidence) for c in candidates] == [(edge, Decimal("0.30"))]

    def test_float_tolerance_scores_like_decimal(self, duplicate_service, sample_accounts, post):
        ref = post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800", import_source="bank")
        edge = post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800.01", import_source="manual")

        exact = duplicate_service.find_candidates(ref, amount_tolerance=Decimal("0.01"))
        floated = duplicate_service.find_candidates(ref, amount_tolerance=0.01)

        assert [(c.transaction.id, c.confidence) for c in exact] == [(edge, Decimal("0.30"))]
        assert [(c.transaction.id, c.confidence) for c in floated] == [(edge, Decimal("0.30"))]

    def test_small_salary_reordered_description(self, duplicate_service, sample_accounts, post):
        bank = post("VIR SALAIRE", "Assets:Bank:Checking", "Income:Salary", "45.00", import_source="bank")
        payslip = post("SALAIRE VIREMENT", "Assets:Bank:Checking", "Income:Salary", "45.00", import_source="payslip")

        [candidate] = duplicate_service.find_candidates(bank)

        assert candidate.transaction.id == payslip
        assert candidate.transaction.amount == Decimal("45.00")
        assert candidate.confidence >= Decimal("0.80")
        assert candidate.match_type in (MatchType.PROBABLE, MatchType.EXACT)

    def test_custom_tolerances_order_candidates(self, duplicate_service, sample_accounts, post):
        ref = post("Rent", "Expenses:Housing", "Assets:Bank:Checking", "800", import_source="bank")
        far = post("Other", "Expenses:Housing", "Assets:Bank:Checking", "805", transaction_date=date(2024, 1, 20), import_source="manual")
        near = post("Other", "Expenses:Housing", "Assets:Bank:Checking", "801", transaction_date=date(2024, 1, 16), import_source="manual")

        candidates = duplicate_service.find_candidates(ref, amount_tolerance=Decimal("10"), date_tolerance_days=7)

        assert [c.transaction.id for c in candidates] == [near, far]
        assert {c.confidence for c in candidates} == {Decimal("0.60")}

    def test_hidden_transactions_skipped(self, duplicate_service, merge_service, salary_pair, sample_accounts, post):
        bank, payslip = salary_pair
        third = post("VIR SALAIRE", "Assets:Bank:Checking", "Income:Salary", "3000", transaction_date=date(2024, 1, 31), import_source="manual")
        merge_service.merge(bank, payslip)

        assert [c.transaction.id for c in duplicate_service.find_candidates(third)] == [bank]
        included = duplicate_service.find_candidates(third, include_hidden=True)
        assert {c.transaction.id for c in included} == {bank, payslip}

    def test_missing_reference(self, duplicate_service):
        with pytest.raises(TransactionNotFound):
            duplicate_service.find_candidates(404)

    def test_negative_tolerance(self, duplicate_service, salary_pair):
        with pytest.raises(ValidationError):
            duplicate_service.find_candidates(salary_pair[0], date_tolerance_days=-1)


class TestRecordMatch:
    """Tests for record_match and status changes."""

    def test_record_and_refresh(self, duplicate_service, salary_pair, temp_db):
        bank, payslip = salary_pair
        criteria = compute_criteria(temp_db.get_transaction(bank), temp_db.get_transaction(payslip), MatchingConfig())

        match_id = duplicate_service.record_match(bank, payslip, Decimal("0.8"), criteria)
        duplicate_service.update_match_status(match_id, MatchStatus.REJECTED)
        again = duplicate_service.record_match(bank, payslip, Decimal("0.95"), criteria)

        match = duplicate_service.get_match(match_id)
        assert again == match_id
        assert match.confidence == Decimal("0.95")
        assert match.match_type is MatchType.EXACT
        assert match.status is MatchStatus.REJECTED

    def test_confidence_bounds(self, duplicate_service, salary_pair):
        with pytest.raises(ValidationError):
            duplicate_service.record_match(*salary_pair, Decimal("1.5"), _criteria())

    def test_self_match(self, duplicate_service, salary_pair):
        with pytest.raises(SelfMatch):
            duplicate_service.record_match(salary_pair[0], salary_pair[0], Decimal("1"), _criteria())

    def test_missing_transaction(self, duplicate_service, salary_pair):
        with pytest.raises(TransactionNotFound):
            duplicate_service.record_match(salary_pair[0], 404, Decimal("0.5"), _criteria())

    def test_status_transitions(self, duplicate_service, salary_pair):
        match_id = duplicate_service.record_match(*salary_pair, Decimal("0.8"), _criteria())

        duplicate_service.update_match_status(match_id, "confirmed")
        with pytest.raises(ConflictError):
            duplicate_service.update_match_status(match_id, MatchStatus.REJECTED)
        duplicate_service.update_match_status(match_id, MatchStatus.PENDING)
        duplicate_service.update_match_status(match_id, MatchStatus.REJECTED)
        duplicate_service.update_match_status(match_id, MatchStatus.REJECTED)

        assert duplicate_service.get_match(match_id).status is MatchStatus.REJECTED

    def test_unknown_match(self, duplicate_service):
        with pytest.raises(MatchNotFound):
            duplicate_service.update_match_status(9, MatchStatus.CONFIRMED)

    def test_listing(self, duplicate_service, salary_pair):
        bank, payslip = salary_pair
        low = duplicate_service.record_match(payslip, bank, Decimal("0.6"), _criteria())
        high = duplicate_service.record_match(bank, payslip, Decimal("0.95"), _criteria())
        duplicate_service.update_match_status(low, MatchStatus.REJECTED)

        assert [m.id for m in duplicate_service.list_matches()] == [high, low]
        assert [m.id for m in duplicate_service.list_matches(status="rejected")] == [low]
        assert {m.id for m in duplicate_service.get_matches_for_transaction(bank)} == {high, low}


class TestBatchDetection:
    """Tests for detect_duplicates_for_batch."""

    def test_records_matches_for_batch(self, duplicate_service, salary_pair, sample_accounts, post):
        bank, payslip = salary_pair
        post("Unrelated", "Expenses:Food", "Assets:Bank:Checking", "12", import_source="payslip", import_batch_id="payslip-jan")

        summary = duplicate_service.detect_duplicates_for_batch("payslip-jan")

        assert summary.transactions_scanned == 2
        assert len(summary.matches) == 1
        match = summary.matches[0]
        assert (match.primary_transaction_id, match.duplicate_transaction_id) == (payslip, bank)
        assert match.status is MatchStatus.PENDING
        assert summary.merged == ()

    def test_rescan_is_idempotent(self, duplicate_service, salary_pair):
        duplicate_service.detect_duplicates_for_batch("payslip-jan")
        duplicate_service.detect_duplicates_for_batch("payslip-jan")

        assert len(duplicate_service.list_matches()) == 1

    def test_auto_merge_exact(self, duplicate_service, transaction_service, sample_accounts, post):
        bank = post("CB CARREFOUR", "Expenses:Food", "Assets:Bank:Checking", "52.30", import_source="bank")
        card = post("CB CARREFOUR", "Expenses:Food", "Assets:Bank:Checking", "52.30", import_source="card", import_batch_id="card-1")

        summary = duplicate_service.detect_duplicates_for_batch("card-1", auto_merge_exact=True)

        assert summary.merged == (bank,)
        assert summary.matches[0].match_type is MatchType.EXACT
        hidden = transaction_service.get_transaction(bank)
        assert hidden.is_duplicate and hidden.merged_into_id == card
        assert duplicate_service.get_match(summary.matches[0].id).status is MatchStatus.CONFIRMED

    def test_unknown_batch(self, duplicate_service):
        summary = duplicate_service.detect_duplicates_for_batch("nope")

        assert summary.transactions_scanned == 0
        assert summary.matches == ()

    def test_auto_merge_goes_through_given_merge_service(self, temp_db, sample_accounts, post):
        merged = []

        class RecordingMergeService(MergeService):
            def merge(self, primary_transaction_id, duplicate_transaction_id):
                merged.append((primary_transaction_id, duplicate_transaction_id))
                super().merge(primary_transaction_id, duplicate_transaction_id)

        bank = post("CB CARREFOUR", "Expenses:Food", "Assets:Bank:Checking", "52.30", import_source="bank")
        card = post("CB CARREFOUR", "Expenses:Food", "Assets:Bank:Checking", "52.30", import_source="card", import_batch_id="card-1")
        service = DuplicateService(temp_db, merge_service=RecordingMergeService(temp_db))

        service.detect_duplicates_for_batch("card-1", auto_merge_exact=True)

        assert merged == [(card, bank)]
