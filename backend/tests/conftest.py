"""
Pytest configuration and fixtures for the practice engine tests.

Provides:
- Test database setup/teardown
- FastAPI test client
- User, catalog and attempt-history fixtures
"""

import pytest
import os
from typing import Generator
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test_nclex_practice.db"

from app.main import app
from app.database import Base, build_engine, get_db, init_db
from app.models.models import (
    User, Question, QuestionAttempt,
    PUBLISHED_STUDENT, PUBLISHED_TRIAL, ROLE_STUDENT_TRIAL,
)
from app.services.exam_blueprint import NCLEX_2026_BLUEPRINT


# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_nclex_practice.db"
test_engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

QUESTION_TYPES = ["Multiple Choice", "Select All That Apply", "Bowtie", "Matrix", "Drag and Drop"]


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database tables once per test session"""
    init_db(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()
    if os.path.exists("./test_nclex_practice.db"):
        os.remove("./test_nclex_practice.db")


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Provide a database session for each test, with rollback after"""
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Provide FastAPI test client with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =========================================================================
# User Fixtures
# =========================================================================

@pytest.fixture
def test_user(db: Session) -> User:
    user = User(
        id="test-user-123",
        full_name="Test Student",
        email="student@nclex.test",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def trial_user(db: Session) -> User:
    user = User(
        id="trial-user-123",
        full_name="Trial Student",
        email="trial@nclex.test",
        role=ROLE_STUDENT_TRIAL,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# =========================================================================
# Catalog Fixtures
# =========================================================================

@pytest.fixture
def test_question(db: Session) -> Question:
    question = Question(
        id="test-question-123",
        status=PUBLISHED_STUDENT,
        question_type="Multiple Choice",
        category="Pharmacological Therapies",
        stem="A client receiving digoxin reports nausea and yellow-tinged vision. Which action should the nurse take first?",
        options=[
            {"id": "a", "text": "Administer the next scheduled dose"},
            {"id": "b", "text": "Hold the medication and check the apical pulse"},
            {"id": "c", "text": "Encourage potassium-rich foods"},
            {"id": "d", "text": "Document the finding as an expected effect"},
        ],
        correct_answer="b",
        rationale="Visual disturbances and GI upset suggest digoxin toxicity; hold the dose and assess.",
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


@pytest.fixture
def sata_question(db: Session) -> Question:
    question = Question(
        id="test-sata-123",
        status=PUBLISHED_STUDENT,
        question_type="Select All That Apply",
        category="Safety and Infection Control",
        stem="Which precautions apply to a client with suspected tuberculosis? Select all that apply.",
        options=[
            {"id": "a", "text": "Negative-pressure room"},
            {"id": "b", "text": "N95 respirator"},
            {"id": "c", "text": "Droplet precautions only"},
            {"id": "d", "text": "Surgical mask on the client during transport"},
        ],
        correct_answer=["a", "b", "d"],
        rationale="Tuberculosis requires airborne precautions.",
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


@pytest.fixture
def published_catalog(db: Session) -> list[Question]:
    """Three published items per blueprint domain, rotating item types"""
    questions = []
    for d, domain in enumerate(NCLEX_2026_BLUEPRINT.domains):
        for i in range(3):
            q = Question(
                id=f"catalog-{d}-{i}",
                status=PUBLISHED_STUDENT,
                question_type=QUESTION_TYPES[(d + i) % len(QUESTION_TYPES)],
                category=domain,
                stem=f"{domain} item {i}",
                correct_answer="a",
                created_at=datetime.utcnow() - timedelta(minutes=100 - (d * 3 + i)),
            )
            questions.append(q)
            db.add(q)

    # Unpublished and trial-only content
    db.add(Question(id="draft-1", status="draft", question_type="Bowtie",
                    category="Management of Care", stem="Draft item", correct_answer="a"))
    db.add(Question(id="trial-1", status=PUBLISHED_TRIAL, question_type="Multiple Choice",
                    category="Management of Care", stem="Trial item", correct_answer="a"))
    db.commit()
    return questions


# =========================================================================
# Attempt Fixtures
# =========================================================================

@pytest.fixture
def test_attempts_history(db: Session, test_user: User, published_catalog: list[Question]) -> list[QuestionAttempt]:
    """
    Twelve Management of Care answers (9 correct) spread over the last weeks,
    plus a retried Pharmacological Therapies item.
    """
    now = datetime.utcnow()
    attempts = []

    for i in range(12):
        q = Question(
            id=f"moc-history-{i}",
            status=PUBLISHED_STUDENT,
            question_type=QUESTION_TYPES[i % 2],
            category="Management of Care",
            stem=f"Management of Care history item {i}",
            correct_answer="a",
        )
        db.add(q)
        attempts.append(QuestionAttempt(
            id=f"history-attempt-{i}",
            user_id=test_user.id,
            question_id=q.id,
            selected_answer="a" if i < 9 else "b",
            is_correct=i < 9,
            time_spent_seconds=45 + i,
            attempt_number=1,
            attempted_at=now - timedelta(days=20 - i),
        ))

    pharm = published_catalog[5 * 3]  # Pharmacological Therapies, first item
    attempts.append(QuestionAttempt(
        id="history-retry-1", user_id=test_user.id, question_id=pharm.id,
        selected_answer="b", is_correct=False, time_spent_seconds=80,
        attempt_number=1, attempted_at=now - timedelta(days=3),
    ))
    attempts.append(QuestionAttempt(
        id="history-retry-2", user_id=test_user.id, question_id=pharm.id,
        selected_answer="a", is_correct=True, time_spent_seconds=40,
        attempt_number=2, attempted_at=now - timedelta(days=1),
    ))

    for a in attempts:
        db.add(a)
    db.commit()
    return attempts
