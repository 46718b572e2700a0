"""
Mastery Calculator

Aggregates a user's latest attempts per content domain (and per item type)
into accuracy and a 5-level mastery classification:

    attempted < 10  -> insufficient_data
    accuracy >= 90  -> mastery
    accuracy >= 75  -> proficient
    accuracy >= 60  -> developing
    otherwise       -> novice

questions_to_next_level is an optimistic estimate: it assumes every future
answer is correct. It is the smallest x >= 0 satisfying
(correct + x) / (attempted + x) >= T / 100 for the next threshold T.
"""

import math
from typing import Dict, Iterable, List

from app.services.attempt_history import join_catalog, percentage
from app.services.exam_blueprint import DEFAULT_MASTERY_SCALE, MasteryScale
from app.services.practice_types import (
    AttemptRecord,
    CatalogQuestion,
    DomainMastery,
    ItemTypePerformance,
)


def mastery_level(accuracy: float, attempted: int, scale: MasteryScale = DEFAULT_MASTERY_SCALE) -> str:
    if attempted < scale.min_attempts:
        return "insufficient_data"
    if accuracy >= scale.mastery:
        return "mastery"
    if accuracy >= scale.proficient:
        return "proficient"
    if accuracy >= scale.developing:
        return "developing"
    return "novice"


def questions_to_next_level(
    accuracy: float,
    attempted: int,
    correct: int,
    scale: MasteryScale = DEFAULT_MASTERY_SCALE,
) -> int:
    """Additional all-correct answers needed to reach the next mastery threshold."""
    if attempted < scale.min_attempts:
        return scale.min_attempts - attempted

    if accuracy >= scale.mastery:
        return 0
    if accuracy >= scale.proficient:
        target = scale.mastery
    elif accuracy >= scale.developing:
        target = scale.proficient
    else:
        target = scale.developing

    # (correct + x) / (attempted + x) = target / 100, solved for x
    needed = math.ceil((target * attempted - 100 * correct) / (100 - target))
    return max(0, needed)


def _tally(pairs, key) -> Dict[str, Dict[str, int]]:
    stats: Dict[str, Dict[str, int]] = {}
    for attempt, question in pairs:
        bucket = stats.setdefault(key(question), {"attempted": 0, "correct": 0, "total_time": 0})
        bucket["attempted"] += 1
        if attempt.is_correct:
            bucket["correct"] += 1
        bucket["total_time"] += attempt.time_spent_seconds or 0
    return stats


def compute_mastery(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    scale: MasteryScale = DEFAULT_MASTERY_SCALE,
) -> List[DomainMastery]:
    """Per-domain mastery over latest attempts. Empty history -> empty list."""
    stats = _tally(join_catalog(attempts, catalog), key=lambda q: q.category)

    results = []
    for domain, s in stats.items():
        accuracy = percentage(s["correct"], s["attempted"])
        results.append(DomainMastery(
            domain=domain,
            accuracy=accuracy,
            attempted=s["attempted"],
            correct=s["correct"],
            mastery_level=mastery_level(accuracy, s["attempted"], scale),
            questions_to_next_level=questions_to_next_level(accuracy, s["attempted"], s["correct"], scale),
        ))
    return results


def compute_item_type_performance(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    scale: MasteryScale = DEFAULT_MASTERY_SCALE,
) -> List[ItemTypePerformance]:
    """Per-NGN-format accuracy and average time over latest attempts."""
    stats = _tally(join_catalog(attempts, catalog), key=lambda q: q.question_type)

    results = []
    for item_type, s in stats.items():
        accuracy = percentage(s["correct"], s["attempted"])
        results.append(ItemTypePerformance(
            item_type=item_type,
            attempted=s["attempted"],
            correct=s["correct"],
            accuracy=accuracy,
            average_time=s["total_time"] / s["attempted"],
            mastery_level=mastery_level(accuracy, s["attempted"], scale),
        ))
    return results


def weak_areas(mastery: Iterable[DomainMastery], min_attempts: int = 10) -> List[str]:
    """Domains under 70% accuracy with enough attempts to trust the number."""
    return [m.domain for m in mastery if m.accuracy < 70 and m.attempted >= min_attempts]
