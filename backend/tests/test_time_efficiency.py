"""
Tests for time efficiency quadrants and the efficiency index.
"""

import pytest

from app.services.time_efficiency import compute_time_efficiency, quadrant_for, speed_issue_for
from tests.factories import domain_history, make_attempt, make_question


class TestQuadrants:
    """Test speed/accuracy quadrant placement"""

    @pytest.mark.unit
    @pytest.mark.parametrize("seconds,accuracy,expected", [
        (45, 80, "fast_accurate"),
        (60, 80, "slow_accurate"),
        (45, 69.9, "fast_inaccurate"),
        (90, 50, "slow_inaccurate"),
    ])
    def test_quadrant_for(self, seconds, accuracy, expected):
        assert quadrant_for(seconds, accuracy) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("seconds,accuracy,expected", [
        (20, 50, "too_fast"),
        (20, 80, None),
        (150, 90, "too_slow"),
        (75, 80, "optimal"),
        (75, 60, None),
        (45, 80, None),
    ])
    def test_speed_issue_for(self, seconds, accuracy, expected):
        assert speed_issue_for(seconds, accuracy) == expected


class TestComputeTimeEfficiency:
    """Test per-domain points and the overall index"""

    @pytest.mark.unit
    def test_five_fast_accurate_answers(self):
        """5 answers at 45s with 80% accuracy lands in fast_accurate"""
        catalog, attempts = domain_history("Safety and Infection Control", correct=4, total=5, seconds=45)

        result = compute_time_efficiency(attempts, catalog)

        assert len(result.points) == 1
        point = result.points[0]
        assert point.domain == "Safety and Infection Control"
        assert point.average_time == 45.0
        assert point.accuracy == 80.0
        assert point.quadrant == "fast_accurate"
        # (80 / 0.75) * 10
        assert result.index == 1066.7
        assert result.speed_issue is None

    @pytest.mark.unit
    def test_small_domains_omitted(self):
        catalog, attempts = domain_history("Psychosocial Integrity", correct=4, total=4)

        result = compute_time_efficiency(attempts, catalog)

        assert result.points == []
        assert result.index > 0

    @pytest.mark.unit
    def test_empty_history_has_no_data(self):
        result = compute_time_efficiency([], [make_question("q1")])

        assert result.points == []
        assert result.index == 0.0
        assert result.speed_issue is None

    @pytest.mark.unit
    def test_no_recorded_time_has_no_index(self):
        catalog, attempts = domain_history("Management of Care", correct=5, total=5, seconds=0)

        result = compute_time_efficiency(attempts, catalog)

        assert result.index == 0.0
        assert result.speed_issue is None
        assert result.points[0].quadrant == "fast_accurate"

    @pytest.mark.unit
    def test_zero_time_guessing_is_still_too_fast(self):
        catalog, attempts = domain_history("Management of Care", correct=2, total=5, seconds=0)

        result = compute_time_efficiency(attempts, catalog)

        assert result.index == 0.0
        assert result.speed_issue == "too_fast"
        assert result.points[0].quadrant == "fast_inaccurate"

    @pytest.mark.unit
    def test_rushing_is_flagged(self):
        catalog, attempts = domain_history("Pharmacological Therapies", correct=5, total=10, seconds=20)

        result = compute_time_efficiency(attempts, catalog)

        assert result.speed_issue == "too_fast"
        assert result.points[0].quadrant == "fast_inaccurate"

    @pytest.mark.unit
    def test_retries_use_latest_time(self):
        catalog = [make_question("q1")]
        attempts = [
            make_attempt("q1", is_correct=False, days_ago=3, seconds=300, attempt_number=1),
            make_attempt("q1", is_correct=True, days_ago=1, seconds=75, attempt_number=2),
        ]

        result = compute_time_efficiency(attempts, catalog)

        assert result.speed_issue == "optimal"
