"""
Progress API Router

Endpoints for answer submission and progress analytics:
- submit-answer: grade and append to the attempt log
- enhanced-stats: accuracy, streaks, domain mastery, pass probability
- advanced-analytics: item types, blueprint alignment, time efficiency
- trends: daily rolling accuracy for the progress chart
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.advanced_analytics import compute_advanced_metrics
from app.services.attempt_history import round_half_up
from app.services.performance_metrics import compute_performance_metrics
from app.services.practice_store import (
    load_published_catalog,
    load_user_attempts,
    record_attempt,
    visible_statuses,
)
from app.services.progress_trends import compute_accuracy_trend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/progress", tags=["progress"])


def _round1(value: float) -> float:
    return round(value, 1)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class SubmitAnswerRequest(BaseModel):
    question_id: str = Field(..., min_length=1)
    selected_answer: Union[str, List[str]]
    time_spent_seconds: Optional[int] = Field(None, ge=0)

    @field_validator("selected_answer")
    @classmethod
    def answer_not_empty(cls, v):
        if not v:
            raise ValueError("An answer is required")
        return v


class SubmitAnswerResponse(BaseModel):
    success: bool
    is_correct: bool
    attempt_number: int
    correct_answer: Any
    rationale: Optional[str]


class DomainMasteryResponse(BaseModel):
    domain: str
    accuracy: float
    attempted: int
    correct: int
    mastery_level: str
    questions_to_next_level: int


class PerformanceMetricsResponse(BaseModel):
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
    domain_mastery: List[DomainMasteryResponse]
    strongest_domain: str
    weakest_domain: str
    pass_probability: int
    readiness_level: str
    weak_area_count: int
    average_time_per_question: int
    last_updated: datetime


class ItemTypePerformanceResponse(BaseModel):
    item_type: str
    attempted: int
    correct: int
    accuracy: float
    average_time: int
    mastery_level: str


class BlueprintCategoryResponse(BaseModel):
    category: str
    nclex_weight: float
    your_practice: float
    gap: float
    attempted: int
    accuracy: float
    status: str


class TimeEfficiencyPointResponse(BaseModel):
    domain: str
    average_time: int
    accuracy: float
    quadrant: str


class StudyRecommendationResponse(BaseModel):
    type: str
    priority: str
    title: str
    message: str
    action_items: List[str]
    estimated_time: str


class AdvancedMetricsResponse(BaseModel):
    item_type_performance: List[ItemTypePerformanceResponse]
    strongest_item_type: str
    weakest_item_type: str
    blueprint_alignment: List[BlueprintCategoryResponse]
    overall_alignment_score: int
    under_practiced_categories: List[str]
    time_efficiency: List[TimeEfficiencyPointResponse]
    time_efficiency_index: float
    speed_issue: Optional[str]
    study_days_count: int
    average_questions_per_day: float
    recommendations: List[StudyRecommendationResponse]


class TrendPointResponse(BaseModel):
    date: str
    accuracy: float
    attempted: int


class AccuracyTrendResponse(BaseModel):
    trends: List[TrendPointResponse]


# =============================================================================
# HELPERS
# =============================================================================

def _load_history(db: Session, user_id: str, failure_detail: str):
    try:
        attempts = load_user_attempts(db, user_id)
        catalog = load_published_catalog(db, visible_statuses(db, user_id))
    except SQLAlchemyError as e:
        logger.error(f"Failed to load progress data for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail=failure_detail)
    return attempts, catalog


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/submit-answer", response_model=SubmitAnswerResponse)
def submit_answer(
    request: SubmitAnswerRequest,
    user_id: str = Query(..., description="User ID"),
    db: Session = Depends(get_db)
):
    """Grade an answer and append it to the user's attempt history."""
    try:
        attempt = record_attempt(
            db,
            user_id=user_id,
            question_id=request.question_id,
            selected_answer=request.selected_answer,
            time_spent_seconds=request.time_spent_seconds,
        )
    except LookupError:
        raise HTTPException(status_code=404, detail="Question not found")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record attempt for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit answer")

    return {
        "success": True,
        "is_correct": attempt.is_correct,
        "attempt_number": attempt.attempt_number,
        "correct_answer": attempt.question.correct_answer,
        "rationale": attempt.question.rationale,
    }


@router.get("/enhanced-stats", response_model=PerformanceMetricsResponse)
def get_enhanced_stats(
    user_id: str = Query(..., description="User ID"),
    db: Session = Depends(get_db)
):
    """
    Get readiness metrics: accuracy trends, streaks, domain mastery,
    pass probability and readiness level.
    """
    attempts, catalog = _load_history(db, user_id, "Failed to calculate metrics")
    metrics = compute_performance_metrics(attempts, catalog)

    return {
        "overall_accuracy": _round1(metrics.overall_accuracy),
        "first_attempt_accuracy": _round1(metrics.first_attempt_accuracy),
        "total_attempted": metrics.total_attempted,
        "total_correct": metrics.total_correct,
        "total_incorrect": metrics.total_incorrect,
        "seven_day_accuracy": _round1(metrics.seven_day_accuracy),
        "seven_day_attempted": metrics.seven_day_attempted,
        "improvement_rate": _round1(metrics.improvement_rate),
        "current_streak": metrics.current_streak,
        "longest_streak": metrics.longest_streak,
        "domain_mastery": [
            {
                "domain": d.domain,
                "accuracy": _round1(d.accuracy),
                "attempted": d.attempted,
                "correct": d.correct,
                "mastery_level": d.mastery_level,
                "questions_to_next_level": d.questions_to_next_level,
            }
            for d in metrics.domain_mastery
        ],
        "strongest_domain": metrics.strongest_domain,
        "weakest_domain": metrics.weakest_domain,
        "pass_probability": metrics.pass_probability,
        "readiness_level": metrics.readiness_level,
        "weak_area_count": metrics.weak_area_count,
        "average_time_per_question": metrics.average_time_per_question,
        "last_updated": metrics.last_updated,
    }


@router.get("/advanced-analytics", response_model=AdvancedMetricsResponse)
def get_advanced_analytics(
    user_id: str = Query(..., description="User ID"),
    db: Session = Depends(get_db)
):
    """
    Get advanced analytics: NGN item-type performance, blueprint alignment,
    time efficiency, study patterns and study recommendations.
    """
    attempts, catalog = _load_history(db, user_id, "Failed to calculate advanced metrics")
    metrics = compute_advanced_metrics(attempts, catalog)

    return {
        "item_type_performance": [
            {
                "item_type": t.item_type,
                "attempted": t.attempted,
                "correct": t.correct,
                "accuracy": _round1(t.accuracy),
                "average_time": round_half_up(t.average_time),
                "mastery_level": t.mastery_level,
            }
            for t in metrics.item_type_performance
        ],
        "strongest_item_type": metrics.strongest_item_type,
        "weakest_item_type": metrics.weakest_item_type,
        "blueprint_alignment": [
            {
                "category": c.category,
                "nclex_weight": c.nclex_weight,
                "your_practice": _round1(c.your_practice),
                "gap": _round1(c.gap),
                "attempted": c.attempted,
                "accuracy": _round1(c.accuracy),
                "status": c.status,
            }
            for c in metrics.blueprint_alignment
        ],
        "overall_alignment_score": metrics.overall_alignment_score,
        "under_practiced_categories": metrics.under_practiced_categories,
        "time_efficiency": [
            {
                "domain": p.domain,
                "average_time": round_half_up(p.average_time),
                "accuracy": _round1(p.accuracy),
                "quadrant": p.quadrant,
            }
            for p in metrics.time_efficiency
        ],
        "time_efficiency_index": metrics.time_efficiency_index,
        "speed_issue": metrics.speed_issue,
        "study_days_count": metrics.study_days_count,
        "average_questions_per_day": metrics.average_questions_per_day,
        "recommendations": [
            {
                "type": r.type,
                "priority": r.priority,
                "title": r.title,
                "message": r.message,
                "action_items": r.action_items,
                "estimated_time": r.estimated_time,
            }
            for r in metrics.recommendations
        ],
    }


@router.get("/trends", response_model=AccuracyTrendResponse)
def get_accuracy_trends(
    user_id: str = Query(..., description="User ID"),
    days: int = Query(30, ge=1, le=365, description="Number of most recent active dates"),
    db: Session = Depends(get_db)
):
    """Get the daily accuracy trend (7-date rolling average) for the progress chart."""
    attempts, catalog = _load_history(db, user_id, "Failed to calculate trends")
    points = compute_accuracy_trend(attempts, catalog, days=days)

    return {
        "trends": [
            {"date": p.date, "accuracy": p.accuracy, "attempted": p.attempted}
            for p in points
        ]
    }
