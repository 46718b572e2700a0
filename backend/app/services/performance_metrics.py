"""
Performance Metrics Service

Readiness snapshot for the progress dashboard:
1. Accuracy (overall on latest attempts, first-attempt, last 7 days)
2. Improvement rate (last 50 vs first 50 questions, once 100+ answered)
3. Correct-answer streaks
4. Domain mastery with strongest/weakest domain
5. Pass probability and readiness level

Pass probability is a points model, not a calibrated statistical estimate:
    accuracy (40) + proficient domain share (30) + volume (20) + weak areas (10)
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from app.services.attempt_history import index_catalog, latest_attempts, percentage, round_half_up, to_naive_utc
from app.services.mastery import compute_mastery, weak_areas
from app.services.practice_types import (
    AttemptRecord,
    CatalogQuestion,
    DomainMastery,
    PerformanceMetrics,
)

IMPROVEMENT_WINDOW = 50
RECENT_DAYS = 7


def calculate_pass_probability(
    overall_accuracy: float,
    domain_mastery: List[DomainMastery],
    total_attempted: int,
    weak_area_count: int,
) -> int:
    score = 0.0

    # Overall accuracy (40 points)
    if overall_accuracy >= 75:
        score += 40
    elif overall_accuracy >= 70:
        score += 30
    elif overall_accuracy >= 65:
        score += 20
    elif overall_accuracy >= 60:
        score += 10

    # Domain coverage (30 points)
    rated = [d for d in domain_mastery if d.mastery_level != "insufficient_data"]
    proficient = [d for d in rated if d.mastery_level in ("proficient", "mastery")]
    if rated:
        score += len(proficient) / len(rated) * 30

    # Volume (20 points)
    if total_attempted >= 1000:
        score += 20
    elif total_attempted >= 500:
        score += 15
    elif total_attempted >= 250:
        score += 10
    elif total_attempted >= 100:
        score += 5

    # Weak areas (10 points)
    if weak_area_count == 0:
        score += 10
    elif weak_area_count <= 2:
        score += 5

    return round_half_up(score)


def readiness_level(pass_probability: int) -> str:
    if pass_probability >= 85:
        return "ready"
    if pass_probability >= 70:
        return "on_track"
    if pass_probability >= 50:
        return "developing"
    return "not_ready"


def calculate_streaks(attempts: Iterable[AttemptRecord]):
    """Return (current_streak, longest_streak) of consecutive correct answers."""
    ordered = sorted(attempts, key=lambda a: a.attempted_at)

    longest = run = 0
    for attempt in ordered:
        if attempt.is_correct:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    # run is whatever streak is still open at the most recent answer
    return run, longest


def calculate_improvement_rate(latest: List[AttemptRecord]) -> float:
    if len(latest) < IMPROVEMENT_WINDOW * 2:
        return 0.0
    ordered = sorted(latest, key=lambda a: a.attempted_at)
    first = ordered[:IMPROVEMENT_WINDOW]
    last = ordered[-IMPROVEMENT_WINDOW:]
    first_accuracy = percentage(sum(1 for a in first if a.is_correct), IMPROVEMENT_WINDOW)
    last_accuracy = percentage(sum(1 for a in last if a.is_correct), IMPROVEMENT_WINDOW)
    return last_accuracy - first_accuracy


def _ranked_domains(domain_mastery: List[DomainMastery]) -> List[DomainMastery]:
    rated = [d for d in domain_mastery if d.mastery_level != "insufficient_data"]
    return sorted(rated, key=lambda d: d.accuracy, reverse=True)


def compute_performance_metrics(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    now: Optional[datetime] = None,
) -> PerformanceMetrics:
    now = to_naive_utc(now or datetime.utcnow())
    by_id = index_catalog(catalog)
    # Attempts on questions missing from the catalog are ignored throughout
    attempts = [a for a in attempts if a.question_id in by_id]
    latest = latest_attempts(attempts)

    total_attempted = len(latest)
    total_correct = sum(1 for a in latest if a.is_correct)
    overall_accuracy = percentage(total_correct, total_attempted)

    first_attempts = [a for a in attempts if a.attempt_number == 1]
    first_attempt_accuracy = percentage(sum(1 for a in first_attempts if a.is_correct), len(first_attempts))

    cutoff = now - timedelta(days=RECENT_DAYS)
    recent = [a for a in latest if a.attempted_at >= cutoff]
    seven_day_accuracy = percentage(sum(1 for a in recent if a.is_correct), len(recent))

    current_streak, longest_streak = calculate_streaks(attempts)

    domain_mastery = compute_mastery(attempts, by_id.values())
    ranked = _ranked_domains(domain_mastery)
    weak_area_count = len(weak_areas(domain_mastery))

    pass_probability = calculate_pass_probability(
        overall_accuracy=overall_accuracy,
        domain_mastery=domain_mastery,
        total_attempted=total_attempted,
        weak_area_count=weak_area_count,
    )

    total_time = sum(a.time_spent_seconds or 0 for a in attempts)
    average_time = total_time / len(attempts) if attempts else 0

    return PerformanceMetrics(
        overall_accuracy=overall_accuracy,
        first_attempt_accuracy=first_attempt_accuracy,
        total_attempted=total_attempted,
        total_correct=total_correct,
        total_incorrect=total_attempted - total_correct,
        seven_day_accuracy=seven_day_accuracy,
        seven_day_attempted=len(recent),
        improvement_rate=calculate_improvement_rate(latest),
        current_streak=current_streak,
        longest_streak=longest_streak,
        domain_mastery=domain_mastery,
        strongest_domain=ranked[0].domain if ranked else "N/A",
        weakest_domain=ranked[-1].domain if ranked else "N/A",
        pass_probability=pass_probability,
        readiness_level=readiness_level(pass_probability),
        weak_area_count=weak_area_count,
        average_time_per_question=round_half_up(average_time),
        last_updated=now,
    )
