"""
Progress Trends Service

Daily accuracy trend for the progress chart. Latest attempts are grouped by
UTC calendar date; each point carries a rolling accuracy over its own date and
the previous 6 dates that have activity (calendar gaps are not filled).
"""

import logging
from typing import Dict, Iterable, List

from app.services.attempt_history import join_catalog, percentage, to_naive_utc
from app.services.practice_types import AttemptRecord, CatalogQuestion, TrendPoint

logger = logging.getLogger(__name__)

ROLLING_WINDOW = 7
DEFAULT_TREND_DAYS = 30


def compute_accuracy_trend(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    days: int = DEFAULT_TREND_DAYS,
) -> List[TrendPoint]:
    """Return at most `days` trend points, oldest first."""
    if days < 1:
        raise ValueError("days must be at least 1")

    by_date: Dict[str, Dict[str, int]] = {}
    for attempt, _ in join_catalog(attempts, catalog):
        date = to_naive_utc(attempt.attempted_at).date().isoformat()
        bucket = by_date.setdefault(date, {"correct": 0, "total": 0})
        bucket["total"] += 1
        if attempt.is_correct:
            bucket["correct"] += 1

    dates = sorted(by_date)
    points = []
    for i, date in enumerate(dates):
        window = dates[max(0, i - ROLLING_WINDOW + 1):i + 1]
        correct = sum(by_date[d]["correct"] for d in window)
        total = sum(by_date[d]["total"] for d in window)
        points.append(TrendPoint(
            date=date,
            accuracy=round(percentage(correct, total), 1),
            attempted=by_date[date]["total"],
        ))

    logger.debug("Built %d trend points from %d active dates", min(len(points), days), len(dates))
    return points[-days:]
