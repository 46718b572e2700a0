"""
Blueprint Alignment Calculator

Compares where a user spends practice volume against the exam blueprint.
Every blueprint domain is reported, attempted or not:

    your_practice = % of latest attempts falling in the domain
    gap           = your_practice - blueprint weight
    status        = aligned if |gap| <= tolerance (3), else over/under_practiced

alignment_score is the mean of (100 - |gap|) across domains, rounded.
"""

from typing import Iterable

from app.services.attempt_history import join_catalog, percentage, round_half_up
from app.services.exam_blueprint import DEFAULT_CATEGORY, NCLEX_2026_BLUEPRINT, ExamBlueprint
from app.services.practice_types import (
    AttemptRecord,
    BlueprintAlignment,
    BlueprintCategory,
    CatalogQuestion,
)


def alignment_status(gap: float, tolerance: float) -> str:
    if abs(gap) <= tolerance:
        return "aligned"
    if gap > 0:
        return "over_practiced"
    return "under_practiced"


def compute_blueprint_alignment(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    blueprint: ExamBlueprint = NCLEX_2026_BLUEPRINT,
) -> BlueprintAlignment:
    joined = join_catalog(attempts, catalog)
    total_attempted = len(joined)
    # Off-blueprint categories fold into the catch-all domain when the blueprint has one
    fallback = DEFAULT_CATEGORY if DEFAULT_CATEGORY in blueprint.weights else None

    stats = {}
    for attempt, question in joined:
        category = question.category if question.category in blueprint.weights else fallback
        if category is None:
            continue
        bucket = stats.setdefault(category, {"attempted": 0, "correct": 0})
        bucket["attempted"] += 1
        if attempt.is_correct:
            bucket["correct"] += 1

    categories = []
    for category, weight in blueprint.weights.items():
        s = stats.get(category, {"attempted": 0, "correct": 0})
        your_practice = percentage(s["attempted"], total_attempted)
        gap = your_practice - weight
        categories.append(BlueprintCategory(
            category=category,
            nclex_weight=weight,
            your_practice=your_practice,
            gap=gap,
            attempted=s["attempted"],
            accuracy=percentage(s["correct"], s["attempted"]),
            status=alignment_status(gap, blueprint.aligned_tolerance),
        ))

    if categories:
        mean_alignment = sum(100 - abs(c.gap) for c in categories) / len(categories)
        alignment_score = min(100, max(0, round_half_up(mean_alignment)))
    else:
        alignment_score = 0

    return BlueprintAlignment(
        categories=categories,
        alignment_score=alignment_score,
        under_practiced_categories=[c.category for c in categories if c.status == "under_practiced"],
    )
