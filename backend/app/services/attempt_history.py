"""
Attempt History Utilities

Shared reductions over a user's attempt log. Every calculator works on the
latest attempt per question, so deduplication lives here and nowhere else.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from app.services.practice_types import AttemptRecord, CatalogQuestion

logger = logging.getLogger(__name__)


def percentage(part: float, whole: float) -> float:
    """100 * part / whole, or 0.0 when there is nothing to divide by."""
    if not whole:
        return 0.0
    return (part / whole) * 100


def round_half_up(value: float) -> int:
    """Round halves away from zero. Built-in round() sends halves to the even neighbour."""
    if value < 0:
        return -round_half_up(-value)
    return int(value + 0.5)


def to_naive_utc(value: datetime) -> datetime:
    """Attempt timestamps are stored as naive UTC; normalize aware values to match."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def latest_attempts(attempts: Iterable[AttemptRecord]) -> List[AttemptRecord]:
    """
    Reduce an attempt log to one record per question.

    The record with the greatest attempted_at wins; on equal timestamps the
    record seen first is kept. Output preserves first-seen question order.
    """
    latest: Dict[str, AttemptRecord] = {}
    for attempt in attempts:
        existing = latest.get(attempt.question_id)
        if existing is None or attempt.attempted_at > existing.attempted_at:
            latest[attempt.question_id] = attempt
    return list(latest.values())


def index_catalog(catalog: Iterable[CatalogQuestion]) -> Dict[str, CatalogQuestion]:
    return {question.id: question for question in catalog}


def join_catalog(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
) -> List[Tuple[AttemptRecord, CatalogQuestion]]:
    """
    Pair each latest attempt with its catalog question.

    Attempts referencing questions that are no longer in the catalog are
    skipped (orphaned data, not an error).
    """
    by_id = catalog if isinstance(catalog, dict) else index_catalog(catalog)
    joined = []
    orphaned = 0
    for attempt in latest_attempts(attempts):
        question = by_id.get(attempt.question_id)
        if question is None:
            orphaned += 1
            continue
        joined.append((attempt, question))

    if orphaned:
        logger.debug("Skipped %d attempts with no catalog question", orphaned)
    return joined


def item_type_counts(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
) -> Dict[str, int]:
    """Latest-attempt volume per item type."""
    counts = Counter(question.question_type for _, question in join_catalog(attempts, catalog))
    return dict(counts)


def attempts_by_question(attempts: Iterable[AttemptRecord]) -> Dict[str, List[AttemptRecord]]:
    """Group the full (non-deduplicated) log by question id."""
    grouped: Dict[str, List[AttemptRecord]] = {}
    for attempt in attempts:
        grouped.setdefault(attempt.question_id, []).append(attempt)
    return grouped
