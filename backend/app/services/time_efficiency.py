"""
Time Efficiency Calculator

Places each domain (with at least 5 latest attempts) in a speed/accuracy
quadrant and derives an overall efficiency index:

    index = (overall_accuracy / (average_seconds / 60)) * 10

An empty history yields "no data" (index 0.0, speed_issue None). A history
with no recorded time keeps its speed issue but has an index of 0.0.
"""

from typing import Iterable, Optional

from app.services.attempt_history import join_catalog, percentage
from app.services.practice_types import (
    AttemptRecord,
    CatalogQuestion,
    TimeEfficiency,
    TimeEfficiencyPoint,
)

MIN_DOMAIN_SAMPLE = 5
FAST_CUTOFF_SECONDS = 60
ACCURATE_CUTOFF = 70


def quadrant_for(average_time: float, accuracy: float) -> str:
    fast = average_time < FAST_CUTOFF_SECONDS
    accurate = accuracy >= ACCURATE_CUTOFF
    if fast and accurate:
        return "fast_accurate"
    if accurate:
        return "slow_accurate"
    if fast:
        return "fast_inaccurate"
    return "slow_inaccurate"


def speed_issue_for(average_time: float, accuracy: float) -> Optional[str]:
    if average_time < 30 and accuracy < 70:
        return "too_fast"
    if average_time > 120:
        return "too_slow"
    if 60 <= average_time <= 90 and accuracy >= 70:
        return "optimal"
    return None


def compute_time_efficiency(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
) -> TimeEfficiency:
    joined = join_catalog(attempts, catalog)
    if not joined:
        return TimeEfficiency(points=[], index=0.0, speed_issue=None)

    stats = {}
    for attempt, question in joined:
        bucket = stats.setdefault(question.category, {"total_time": 0, "correct": 0, "total": 0})
        bucket["total_time"] += attempt.time_spent_seconds or 0
        bucket["total"] += 1
        if attempt.is_correct:
            bucket["correct"] += 1

    points = []
    for domain, s in stats.items():
        if s["total"] < MIN_DOMAIN_SAMPLE:
            continue
        average_time = s["total_time"] / s["total"]
        accuracy = percentage(s["correct"], s["total"])
        points.append(TimeEfficiencyPoint(
            domain=domain,
            average_time=average_time,
            accuracy=accuracy,
            quadrant=quadrant_for(average_time, accuracy),
        ))

    total = len(joined)
    overall_time = sum(a.time_spent_seconds or 0 for a, _ in joined) / total
    overall_accuracy = percentage(sum(1 for a, _ in joined if a.is_correct), total)

    index = 0.0
    if overall_time > 0:
        index = round((overall_accuracy / (overall_time / 60)) * 10, 1)

    return TimeEfficiency(
        points=points,
        index=index,
        speed_issue=speed_issue_for(overall_time, overall_accuracy),
    )
