"""
Practice Store

Bridges the SQL attempt log and question catalog to the analytics core.
Loaders are read-only and return plain records; store errors
(SQLAlchemyError) propagate to the caller untouched.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.models import (
    PUBLISHED_STUDENT,
    PUBLISHED_TRIAL,
    ROLE_STUDENT_TRIAL,
    Question,
    QuestionAttempt,
    User,
    generate_uuid,
)
from app.services.attempt_history import to_naive_utc
from app.services.practice_types import AttemptRecord, CatalogQuestion

logger = logging.getLogger(__name__)

Answer = Union[str, List[str]]


def _to_record(row: QuestionAttempt) -> AttemptRecord:
    selected = row.selected_answer
    if isinstance(selected, list):
        selected = tuple(selected)
    return AttemptRecord(
        id=row.id,
        user_id=row.user_id,
        question_id=row.question_id,
        attempted_at=to_naive_utc(row.attempted_at),
        is_correct=bool(row.is_correct),
        time_spent_seconds=row.time_spent_seconds or 0,
        attempt_number=row.attempt_number or 1,
        selected_answer=selected,
    )


def load_user_attempts(db: Session, user_id: str) -> List[AttemptRecord]:
    """Full attempt history for one user, oldest first."""
    rows = db.query(QuestionAttempt).filter(
        QuestionAttempt.user_id == user_id
    ).order_by(
        QuestionAttempt.attempted_at.asc()
    ).all()
    return [_to_record(row) for row in rows]


def visible_statuses(db: Session, user_id: str) -> tuple:
    """Trial users only see trial content; everyone else sees both published sets."""
    role = db.query(User.role).filter(User.id == user_id).scalar()
    if role == ROLE_STUDENT_TRIAL:
        return (PUBLISHED_TRIAL,)
    return (PUBLISHED_STUDENT, PUBLISHED_TRIAL)


def load_published_catalog(db: Session, statuses: tuple = (PUBLISHED_STUDENT, PUBLISHED_TRIAL)) -> List[CatalogQuestion]:
    rows = db.query(
        Question.id,
        Question.category,
        Question.question_type,
    ).filter(
        Question.status.in_(statuses)
    ).order_by(
        Question.created_at.asc(), Question.id.asc()
    ).all()
    return [CatalogQuestion.create(qid, category, question_type) for qid, category, question_type in rows]


def check_answer(correct_answer: Answer, selected_answer: Answer) -> bool:
    """
    Grade a submission.

    Select-all-that-apply: same number of selections, every selection in the key.
    Single answer: exact match. Mixed shapes are never correct.
    """
    if isinstance(selected_answer, list) and isinstance(correct_answer, list):
        if len(selected_answer) != len(correct_answer):
            return False
        return all(answer in correct_answer for answer in selected_answer)

    if isinstance(selected_answer, str) and isinstance(correct_answer, str):
        return selected_answer == correct_answer

    return False


def record_attempt(
    db: Session,
    user_id: str,
    question_id: str,
    selected_answer: Answer,
    time_spent_seconds: Optional[int] = None,
) -> QuestionAttempt:
    """
    Append a graded attempt to the log.

    Raises:
        LookupError: question does not exist
    """
    question = db.query(Question).filter(Question.id == question_id).first()
    if question is None:
        raise LookupError(f"Question {question_id} not found")

    previous = db.query(func.count(QuestionAttempt.id)).filter(
        QuestionAttempt.user_id == user_id,
        QuestionAttempt.question_id == question_id,
    ).scalar() or 0

    attempt = QuestionAttempt(
        id=generate_uuid(),
        user_id=user_id,
        question_id=question_id,
        selected_answer=selected_answer,
        is_correct=check_answer(question.correct_answer, selected_answer),
        time_spent_seconds=time_spent_seconds or 0,
        attempt_number=previous + 1,
        attempted_at=datetime.utcnow(),
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    logger.info(
        "Recorded attempt %d on %s for user %s (correct=%s)",
        attempt.attempt_number, question_id, user_id, attempt.is_correct,
    )
    return attempt
