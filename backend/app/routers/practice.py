"""
Recommended Practice API Router

Serves personalized practice sets built from the user's attempt history.
"""

import logging
import os
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.practice_store import load_published_catalog, load_user_attempts, visible_statuses
from app.services.recommended_practice import compute_recommendations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/practice", tags=["practice"])

# How long clients may reuse a recommendation set before refreshing
RECOMMENDATION_TTL_HOURS = int(os.getenv("RECOMMENDATION_TTL_HOURS", "24"))
MAX_RECOMMENDATION_COUNT = 100


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class RecommendedQuestionResponse(BaseModel):
    question_id: str
    priority_score: int
    reason: str
    domain: str
    item_type: str


class RecommendationReasoningResponse(BaseModel):
    weak_areas: List[str]
    blueprint_gaps: List[str]
    review_count: int
    new_count: int


class RecommendedPracticeResponse(BaseModel):
    user_id: str
    generated_at: datetime
    expires_at: datetime
    questions: List[RecommendedQuestionResponse]
    reasoning: RecommendationReasoningResponse
    estimated_time: int
    difficulty: str


class RecommendationsEnvelope(BaseModel):
    recommendations: RecommendedPracticeResponse
    next_update: datetime


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/recommended", response_model=RecommendationsEnvelope)
def get_recommended_practice(
    user_id: str = Query(..., description="User ID"),
    count: int = Query(20, ge=1, le=MAX_RECOMMENDATION_COUNT, description="Questions to recommend"),
    difficulty: str = Query("mixed", pattern="^(mixed|easier|harder)$"),
    db: Session = Depends(get_db)
):
    """
    Get a recommended practice set.

    Questions are prioritized by weak domains, blueprint gaps, spaced
    repetition and item-type variety, then capped so no single domain
    (40%) or item type (30%) dominates the set.
    """
    try:
        attempts = load_user_attempts(db, user_id)
        catalog = load_published_catalog(db, visible_statuses(db, user_id))
    except SQLAlchemyError as e:
        logger.error(f"Failed to load practice data for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate recommendations")

    practice = compute_recommendations(
        user_id,
        attempts,
        catalog,
        count=count,
        difficulty=difficulty,
        ttl=timedelta(hours=RECOMMENDATION_TTL_HOURS),
    )

    return {
        "recommendations": asdict(practice),
        "next_update": practice.expires_at,
    }
