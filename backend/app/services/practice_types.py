"""
Practice Analytics Records

Plain dataclasses shared by the analytics calculators. Input records
(AttemptRecord, CatalogQuestion) are frozen; derived records are built fresh
on every request and never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple, Union

from app.services.exam_blueprint import DEFAULT_CATEGORY, DEFAULT_QUESTION_TYPE


MASTERY_LEVELS = ("insufficient_data", "novice", "developing", "proficient", "mastery")
BLUEPRINT_STATUSES = ("aligned", "over_practiced", "under_practiced")
QUADRANTS = ("fast_accurate", "slow_accurate", "fast_inaccurate", "slow_inaccurate")
SPEED_ISSUES = ("too_fast", "too_slow", "optimal")
RECOMMENDATION_REASONS = ("weak_area", "blueprint_gap", "spaced_repetition", "item_type", "new")
DIFFICULTIES = ("mixed", "easier", "harder")
READINESS_LEVELS = ("not_ready", "developing", "on_track", "ready")


# =============================================================================
# INPUT RECORDS
# =============================================================================

@dataclass(frozen=True)
class AttemptRecord:
    """One answer submission from the attempt log."""

    id: str
    user_id: str
    question_id: str
    attempted_at: datetime
    is_correct: bool
    time_spent_seconds: int = 0
    attempt_number: int = 1
    selected_answer: Union[str, Tuple[str, ...], None] = None


@dataclass(frozen=True)
class CatalogQuestion:
    """Published item as seen by the analytics core."""

    id: str
    category: str = DEFAULT_CATEGORY
    question_type: str = DEFAULT_QUESTION_TYPE

    @classmethod
    def create(cls, id: str, category: Optional[str], question_type: Optional[str]) -> "CatalogQuestion":
        """Build a catalog entry, defaulting missing tags."""
        return cls(
            id=id,
            category=category or DEFAULT_CATEGORY,
            question_type=question_type or DEFAULT_QUESTION_TYPE,
        )


# =============================================================================
# DERIVED METRICS
# =============================================================================

@dataclass
class DomainMastery:
    domain: str
    accuracy: float
    attempted: int
    correct: int
    mastery_level: str
    questions_to_next_level: int


@dataclass
class ItemTypePerformance:
    item_type: str
    attempted: int
    correct: int
    accuracy: float
    average_time: float
    mastery_level: str


@dataclass
class BlueprintCategory:
    category: str
    nclex_weight: float
    your_practice: float
    gap: float
    attempted: int
    accuracy: float
    status: str


@dataclass
class BlueprintAlignment:
    categories: List[BlueprintCategory]
    alignment_score: int
    under_practiced_categories: List[str]


@dataclass
class TimeEfficiencyPoint:
    domain: str
    average_time: float
    accuracy: float
    quadrant: str


@dataclass
class TimeEfficiency:
    points: List[TimeEfficiencyPoint]
    index: float
    speed_issue: Optional[str]


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

@dataclass
class ScoredQuestion:
    question: CatalogQuestion
    score: int
    reason: str


@dataclass
class RecommendedQuestion:
    question_id: str
    priority_score: int
    reason: str
    domain: str
    item_type: str


@dataclass
class RecommendationReasoning:
    weak_areas: List[str]
    blueprint_gaps: List[str]
    review_count: int
    new_count: int


@dataclass
class RecommendedPractice:
    user_id: str
    generated_at: datetime
    expires_at: datetime
    questions: List[RecommendedQuestion]
    reasoning: RecommendationReasoning
    estimated_time: int  # minutes
    difficulty: str


# =============================================================================
# PROGRESS REPORTS
# =============================================================================

@dataclass
class PerformanceMetrics:
    overall_accuracy: float
    first_attempt_accuracy: float
    total_attempted: int
    total_correct: int
    total_incorrect: int
    seven_day_accuracy: float
    seven_day_attempted: int
    improvement_rate: float
    current_streak: int
    longest_streak: int
    domain_mastery: List[DomainMastery]
    strongest_domain: str
    weakest_domain: str
    pass_probability: int
    readiness_level: str
    weak_area_count: int
    average_time_per_question: int
    last_updated: datetime


@dataclass
class TrendPoint:
    date: str  # UTC calendar date, YYYY-MM-DD
    accuracy: float  # rolling accuracy over the last 7 active dates
    attempted: int


@dataclass
class StudyRecommendation:
    type: str  # "domain" | "item_type" | "blueprint" | "speed"
    priority: str  # "high" | "medium" | "low"
    title: str
    message: str
    action_items: List[str] = field(default_factory=list)
    estimated_time: str = ""


@dataclass
class AdvancedMetrics:
    item_type_performance: List[ItemTypePerformance]
    strongest_item_type: str
    weakest_item_type: str
    blueprint_alignment: List[BlueprintCategory]
    overall_alignment_score: int
    under_practiced_categories: List[str]
    time_efficiency: List[TimeEfficiencyPoint]
    time_efficiency_index: float
    speed_issue: Optional[str]
    study_days_count: int
    average_questions_per_day: float
    recommendations: List[StudyRecommendation]
