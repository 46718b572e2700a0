"""
Recommended Practice

Builds a personalized practice set from a user's attempt history:

1. Mastery, blueprint alignment and item-type volume from latest attempts
2. Priority score + reason for every published question
3. Diversity-constrained top-N selection
4. Packaging with reasoning summary and a 24h refresh hint

Stateless: recomputed on every call, nothing is cached between requests.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from app.services.attempt_history import item_type_counts, round_half_up, to_naive_utc
from app.services.blueprint_alignment import compute_blueprint_alignment
from app.services.diversity_selector import select_diverse
from app.services.exam_blueprint import NCLEX_2026_BLUEPRINT, ExamBlueprint
from app.services.mastery import compute_mastery, weak_areas
from app.services.practice_types import (
    DIFFICULTIES,
    AttemptRecord,
    BlueprintCategory,
    CatalogQuestion,
    DomainMastery,
    RecommendationReasoning,
    RecommendedPractice,
    RecommendedQuestion,
)
from app.services.recommendation_scorer import score_catalog

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
MINUTES_PER_QUESTION = 1.5


def blueprint_gaps(categories: Iterable[BlueprintCategory]) -> List[str]:
    return [c.category for c in categories if c.status == "under_practiced" and c.gap < -5]


def assemble_recommendations(
    user_id: str,
    selected: List[RecommendedQuestion],
    mastery: List[DomainMastery],
    alignment: List[BlueprintCategory],
    count: int,
    difficulty: str,
    now: datetime,
    ttl: timedelta = DEFAULT_TTL,
) -> RecommendedPractice:
    return RecommendedPractice(
        user_id=user_id,
        generated_at=now,
        expires_at=now + ttl,
        questions=selected,
        reasoning=RecommendationReasoning(
            weak_areas=weak_areas(mastery),
            blueprint_gaps=blueprint_gaps(alignment),
            review_count=sum(1 for q in selected if q.reason == "spaced_repetition"),
            new_count=sum(1 for q in selected if q.reason == "new"),
        ),
        estimated_time=round_half_up(count * MINUTES_PER_QUESTION),
        difficulty=difficulty,
    )


def compute_recommendations(
    user_id: str,
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    count: int = 20,
    difficulty: str = "mixed",
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    blueprint: ExamBlueprint = NCLEX_2026_BLUEPRINT,
    ttl: timedelta = DEFAULT_TTL,
) -> RecommendedPractice:
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"difficulty must be one of {', '.join(DIFFICULTIES)}, got '{difficulty}'")

    attempts = list(attempts)
    catalog = list(catalog)
    now = to_naive_utc(now or datetime.utcnow())

    mastery = compute_mastery(attempts, catalog)
    alignment = compute_blueprint_alignment(attempts, catalog, blueprint=blueprint)
    type_counts = item_type_counts(attempts, catalog)

    scored = score_catalog(catalog, attempts, mastery, alignment.categories, type_counts, now)
    selected = select_diverse(scored, count, rng=rng)

    logger.info(
        "Recommended %d/%d questions for user %s (%d attempts on record)",
        len(selected), count, user_id, len(attempts),
    )

    return assemble_recommendations(
        user_id=user_id,
        selected=selected,
        mastery=mastery,
        alignment=alignment.categories,
        count=count,
        difficulty=difficulty,
        now=now,
        ttl=ttl,
    )
