"""
Advanced Analytics Service

Builds the advanced progress report:
- Item-type (NGN format) performance with strongest/weakest format
- Blueprint alignment against the exam test plan
- Time efficiency quadrants and speed issue
- Study patterns (active days, questions per day)
- Up to 5 prioritized study recommendations
"""

import math
from typing import Iterable, List, Optional

from app.services.attempt_history import index_catalog
from app.services.blueprint_alignment import compute_blueprint_alignment
from app.services.exam_blueprint import NCLEX_2026_BLUEPRINT, ExamBlueprint
from app.services.mastery import compute_item_type_performance, compute_mastery
from app.services.practice_types import (
    AdvancedMetrics,
    AttemptRecord,
    BlueprintCategory,
    CatalogQuestion,
    DomainMastery,
    ItemTypePerformance,
    StudyRecommendation,
)
from app.services.time_efficiency import compute_time_efficiency

MAX_RECOMMENDATIONS = 5


def _weakest(rows, accuracy_below: float = 70, min_attempts: int = 10):
    """Lowest-accuracy row under the threshold with enough attempts, or None."""
    weak = [r for r in rows if r.accuracy < accuracy_below and r.attempted >= min_attempts]
    if not weak:
        return None
    return min(weak, key=lambda r: r.accuracy)


def build_study_recommendations(
    domain_mastery: List[DomainMastery],
    item_types: List[ItemTypePerformance],
    blueprint: List[BlueprintCategory],
    speed_issue: Optional[str],
) -> List[StudyRecommendation]:
    recommendations = []

    domain = _weakest(domain_mastery)
    if domain:
        recommendations.append(StudyRecommendation(
            type="domain",
            priority="high",
            title=f"Strengthen {domain.domain}",
            message=f"Your {domain.domain} accuracy is {domain.accuracy:.1f}%, below the 75% target.",
            action_items=[
                f"Review {domain.domain} study materials",
                f"Practice {domain.questions_to_next_level} more questions",
                "Focus on understanding rationales",
            ],
            estimated_time="2-3 hours",
        ))

    item_type = _weakest(item_types)
    if item_type:
        recommendations.append(StudyRecommendation(
            type="item_type",
            priority="high",
            title=f"Improve {item_type.item_type} Performance",
            message=f"{item_type.item_type} accuracy is {item_type.accuracy:.1f}%.",
            action_items=[
                f"Review {item_type.item_type} strategy guide",
                f"Practice 20 more {item_type.item_type} questions",
                "Watch tutorial videos",
            ],
            estimated_time="1-2 hours",
        ))

    gaps = [c for c in blueprint if c.status == "under_practiced" and c.gap < -5]
    if gaps:
        gap = gaps[0]
        recommendations.append(StudyRecommendation(
            type="blueprint",
            priority="medium",
            title=f"Increase {gap.category} Practice",
            message=f"You're under-practicing this category by {abs(gap.gap):.1f}%.",
            action_items=[
                f"Practice {math.ceil(abs(gap.gap) * 10)} more questions in this category",
                "Review NCLEX blueprint requirements",
            ],
            estimated_time="1 hour",
        ))

    if speed_issue == "too_fast":
        recommendations.append(StudyRecommendation(
            type="speed",
            priority="high",
            title="Slow Down and Read Carefully",
            message="You're answering too quickly and making careless errors.",
            action_items=[
                "Set a minimum 45-second timer per question",
                "Read each question twice before answering",
                "Identify key words in the question stem",
            ],
            estimated_time="Ongoing",
        ))
    elif speed_issue == "too_slow":
        recommendations.append(StudyRecommendation(
            type="speed",
            priority="medium",
            title="Increase Your Pace",
            message="You're taking too long per question. Practice faster decision-making.",
            action_items=[
                "Practice timed mode (90 seconds per question)",
                "Trust your first instinct more",
                "Don't overthink simple questions",
            ],
            estimated_time="Ongoing",
        ))

    return recommendations[:MAX_RECOMMENDATIONS]


def compute_advanced_metrics(
    attempts: Iterable[AttemptRecord],
    catalog: Iterable[CatalogQuestion],
    blueprint: ExamBlueprint = NCLEX_2026_BLUEPRINT,
) -> AdvancedMetrics:
    by_id = index_catalog(catalog)
    catalog = list(by_id.values())
    attempts = [a for a in attempts if a.question_id in by_id]

    item_types = compute_item_type_performance(attempts, catalog)
    by_accuracy = sorted(item_types, key=lambda t: t.accuracy, reverse=True)
    alignment = compute_blueprint_alignment(attempts, catalog, blueprint=blueprint)
    efficiency = compute_time_efficiency(attempts, catalog)
    domain_mastery = compute_mastery(attempts, catalog)

    study_days = len({a.attempted_at.date() for a in attempts})
    per_day = len(attempts) / max(study_days, 1)

    return AdvancedMetrics(
        item_type_performance=item_types,
        strongest_item_type=by_accuracy[0].item_type if by_accuracy else "N/A",
        weakest_item_type=by_accuracy[-1].item_type if by_accuracy else "N/A",
        blueprint_alignment=alignment.categories,
        overall_alignment_score=alignment.alignment_score,
        under_practiced_categories=alignment.under_practiced_categories,
        time_efficiency=efficiency.points,
        time_efficiency_index=efficiency.index,
        speed_issue=efficiency.speed_issue,
        study_days_count=study_days,
        average_questions_per_day=round(per_day, 1),
        recommendations=build_study_recommendations(
            domain_mastery, item_types, alignment.categories, efficiency.speed_issue
        ),
    )
