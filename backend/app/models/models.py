from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from app.database import Base

# Authoring statuses visible to each portal audience
PUBLISHED_STUDENT = "published_student"
PUBLISHED_TRIAL = "published_trial"
ITEM_STATUSES = (
    "draft",
    "ai_audit",
    "ai_fix",
    "human_signoff",
    "approved",
    PUBLISHED_STUDENT,
    PUBLISHED_TRIAL,
)

ROLE_STUDENT_PAID = "student_paid"
ROLE_STUDENT_TRIAL = "student_trial"


def generate_uuid():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(String, default=ROLE_STUDENT_PAID, nullable=False)  # "student_paid" | "student_trial"
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    attempts = relationship("QuestionAttempt", back_populates="user")


class Question(Base):
    """Published NCLEX item. Owned by the authoring workflow, read-only here."""
    __tablename__ = "questions"

    id = Column(String, primary_key=True, default=generate_uuid)
    status = Column(String, default="draft", nullable=False, index=True)
    question_type = Column(String, nullable=True, index=True)  # NGN format, e.g. "Multiple Choice", "Bowtie"
    category = Column(String, nullable=True, index=True)  # Blueprint domain; None is treated as "Other"
    stem = Column(Text, nullable=False)
    options = Column(JSON, nullable=True)  # [{"id": "a", "text": "..."}]
    correct_answer = Column(JSON, nullable=False)  # "a" or ["a", "c"] for select-all-that-apply
    rationale = Column(Text, nullable=True)
    exam_profile = Column(String, default="nclex_2026")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    attempts = relationship("QuestionAttempt", back_populates="question")


class QuestionAttempt(Base):
    """Append-only answer log. One row per submission."""
    __tablename__ = "question_attempts"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    question_id = Column(String, ForeignKey("questions.id"), nullable=False, index=True)
    selected_answer = Column(JSON, nullable=True)  # String or list of strings
    is_correct = Column(Boolean, nullable=False)
    time_spent_seconds = Column(Integer, default=0, nullable=False)
    attempt_number = Column(Integer, default=1, nullable=False)  # 1 = first try at this question
    attempted_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="attempts")
    question = relationship("Question", back_populates="attempts")
