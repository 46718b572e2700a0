"""
Tests for priority scoring and reason assignment.
"""

import pytest

from app.services.attempt_history import item_type_counts, latest_attempts
from app.services.blueprint_alignment import compute_blueprint_alignment
from app.services.mastery import compute_mastery
from app.services.practice_types import RECOMMENDATION_REASONS, BlueprintCategory, DomainMastery
from app.services.recommendation_scorer import (
    RuleOutcome,
    ScoringContext,
    score_catalog,
    score_question,
)
from tests.factories import NOW, domain_history, make_attempt, make_question


def _mastery(domain, accuracy, attempted=10):
    return DomainMastery(
        domain=domain,
        accuracy=accuracy,
        attempted=attempted,
        correct=round(attempted * accuracy / 100),
        mastery_level="developing",
        questions_to_next_level=0,
    )


def _category(name, gap, status):
    return BlueprintCategory(
        category=name,
        nclex_weight=10,
        your_practice=10 + gap,
        gap=gap,
        attempted=1,
        accuracy=100.0,
        status=status,
    )


def _context(question, history=(), mastery=(), alignment=(), type_counts=None):
    return ScoringContext(
        question=question,
        history=list(history),
        mastery={m.domain: m for m in mastery},
        alignment={c.category: c for c in alignment},
        type_counts=type_counts or {},
        now=NOW,
    )


class TestReasonAssignment:
    """Test which reason each question is tagged with"""

    @pytest.mark.unit
    def test_weak_area_wins_over_blueprint_gap(self):
        question = make_question("q1", "Pharmacological Therapies")
        ctx = _context(
            question,
            mastery=[_mastery("Pharmacological Therapies", 60.0)],
            alignment=[_category("Pharmacological Therapies", -10.0, "under_practiced")],
        )

        result = score_question(ctx)

        # 40 weak area + 30 blueprint + 5 never attempted
        assert result.score == 75
        assert result.reason == "weak_area"

    @pytest.mark.unit
    def test_blueprint_gap_on_unpracticed_domain(self):
        question = make_question("q1", "Psychosocial Integrity")
        ctx = _context(
            question,
            alignment=[_category("Psychosocial Integrity", -6.0, "under_practiced")],
        )

        result = score_question(ctx)

        assert result.score == 40
        assert result.reason == "blueprint_gap"

    @pytest.mark.unit
    def test_spaced_repetition_after_two_weeks(self):
        question = make_question("q1")
        ctx = _context(
            question,
            history=[make_attempt("q1", is_correct=True, days_ago=20)],
            mastery=[_mastery("Management of Care", 85.0)],
            alignment=[_category("Management of Care", 0.0, "aligned")],
        )

        result = score_question(ctx)

        # +20 stale review, -5 already answered correctly first time
        assert result.score == 15
        assert result.reason == "spaced_repetition"

    @pytest.mark.unit
    def test_under_represented_item_type(self):
        question = make_question("q1", question_type="Bowtie")
        ctx = _context(
            question,
            history=[make_attempt("q1", is_correct=True, days_ago=2)],
            mastery=[_mastery("Management of Care", 85.0)],
            alignment=[_category("Management of Care", 0.0, "aligned")],
            type_counts={"Bowtie": 1, "Multiple Choice": 9},
        )

        result = score_question(ctx)

        assert result.score == 10
        assert result.reason == "item_type"

    @pytest.mark.unit
    def test_new_when_nothing_claims(self):
        question = make_question("q1", "Basic Care and Comfort")

        result = score_question(_context(question))

        # 5 unseen domain + 5 never attempted
        assert result.score == 10
        assert result.reason == "new"


class TestScoreAdjustments:
    """Test individual point adjustments"""

    @pytest.mark.unit
    def test_recently_answered_is_deprioritized(self):
        question = make_question("q1")
        ctx = _context(
            question,
            history=[make_attempt("q1", is_correct=True, days_ago=0.5)],
            mastery=[_mastery("Management of Care", 85.0)],
        )

        # -5 recent, -5 known cold
        assert score_question(ctx).score == -10

    @pytest.mark.unit
    def test_previous_miss_is_boosted(self):
        question = make_question("q1")
        ctx = _context(
            question,
            history=[make_attempt("q1", is_correct=False, days_ago=5)],
            mastery=[_mastery("Management of Care", 85.0)],
        )

        # +10 after 3+ days, +10 previously incorrect
        assert score_question(ctx).score == 20

    @pytest.mark.unit
    def test_latest_attempt_drives_history_rules(self):
        question = make_question("q1")
        ctx = _context(
            question,
            history=[
                make_attempt("q1", is_correct=False, days_ago=30, attempt_number=1),
                make_attempt("q1", is_correct=True, days_ago=0.5, attempt_number=2),
            ],
            mastery=[_mastery("Management of Care", 85.0)],
        )

        result = score_question(ctx)

        # -5 recent, 0 for a correct retry
        assert result.score == -5
        assert result.reason == "new"

    @pytest.mark.unit
    def test_over_practiced_domain_penalized(self):
        question = make_question("q1")
        ctx = _context(
            question,
            mastery=[_mastery("Management of Care", 85.0)],
            alignment=[_category("Management of Care", 20.0, "over_practiced")],
        )

        assert score_question(ctx).score == -5

    @pytest.mark.unit
    def test_custom_rules(self):
        """Rule lists can be swapped without touching the scorer"""
        question = make_question("q1")

        result = score_question(_context(question), rules=(lambda ctx, running: RuleOutcome(7),))

        assert result.score == 7
        assert result.reason == "new"


class TestScoreCatalog:
    """Test scoring the whole catalog against real history"""

    @pytest.mark.unit
    def test_every_question_scored_with_known_reason(self):
        weak_catalog, weak_attempts = domain_history("Pharmacological Therapies", correct=5, total=10, days_ago=3)
        strong_catalog, strong_attempts = domain_history("Management of Care", correct=10, total=10, days_ago=20)
        fresh = [make_question(f"fresh-{i}", "Physiological Adaptation") for i in range(5)]
        catalog = weak_catalog + strong_catalog + fresh
        attempts = weak_attempts + strong_attempts

        mastery = compute_mastery(attempts, catalog)
        alignment = compute_blueprint_alignment(attempts, catalog)
        scored = score_catalog(catalog, attempts, mastery, alignment.categories, item_type_counts(attempts, catalog), NOW)

        assert len(scored) == len(catalog)
        assert all(sq.reason in RECOMMENDATION_REASONS for sq in scored)
        by_domain = {sq.question.category: sq.reason for sq in scored}
        assert by_domain["Pharmacological Therapies"] == "weak_area"

    @pytest.mark.unit
    def test_scoring_is_repeatable(self):
        catalog, attempts = domain_history("Reduction of Risk Potential", correct=6, total=12, days_ago=9)
        catalog += [make_question("fresh-1", "Basic Care and Comfort", "Bowtie")]
        mastery = compute_mastery(attempts, catalog)
        alignment = compute_blueprint_alignment(attempts, catalog).categories
        counts = item_type_counts(attempts, catalog)

        first = score_catalog(catalog, attempts, mastery, alignment, counts, NOW)
        second = score_catalog(catalog, attempts, mastery, alignment, counts, NOW)

        assert first == second

    @pytest.mark.unit
    def test_latest_attempt_resolved_once_per_question(self, monkeypatch):
        calls = []

        def counting_latest(history):
            calls.append(len(history))
            return latest_attempts(history)

        monkeypatch.setattr("app.services.recommendation_scorer.latest_attempts", counting_latest)
        question = make_question("q1")
        ctx = _context(
            question,
            history=[
                make_attempt("q1", is_correct=False, days_ago=10, attempt_number=1),
                make_attempt("q1", is_correct=False, days_ago=5, attempt_number=2),
            ],
            mastery=[_mastery("Management of Care", 85.0)],
        )

        result = score_question(ctx)

        # +10 after 3+ days, +10 previously incorrect
        assert result.score == 20
        assert calls == [2]
