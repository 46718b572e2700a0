"""
Database setup for the attempt log and question catalog.

SQLite locally, Postgres when DATABASE_URL points at one. Every engine built
here carries the slow-query timer.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
import os
import time
import logging

query_logger = logging.getLogger("sqlalchemy.query_timing")
query_logger.setLevel(logging.DEBUG if os.getenv("DEBUG_QUERIES") else logging.WARNING)

SLOW_QUERY_THRESHOLD_MS = int(os.getenv("SLOW_QUERY_THRESHOLD_MS", "100"))

DEFAULT_DATABASE_URL = "sqlite:///./nclex_practice.db"


def normalize_database_url(url: str) -> str:
    """Hosted Postgres hands out postgres:// URLs; SQLAlchemy only accepts postgresql://"""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _attach_query_timer(target_engine):
    @event.listens_for(target_engine, "before_cursor_execute")
    def start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(target_engine, "after_cursor_execute")
    def log_duration(conn, cursor, statement, parameters, context, executemany):
        started = conn.info.get("query_start_time")
        if not started:
            return
        elapsed_ms = (time.perf_counter() - started.pop()) * 1000

        if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
            shown = statement if len(statement) <= 500 else statement[:500] + "..."
            query_logger.warning(f"SLOW QUERY ({elapsed_ms:.2f}ms): {shown}")
        else:
            query_logger.debug(f"Query ({elapsed_ms:.2f}ms): {statement[:120]}")


def build_engine(url: str):
    """Create an engine for the given URL with the query timer attached."""
    if url.startswith("sqlite"):
        # Requests may be served from a different thread than the one that opened the connection
        new_engine = create_engine(url, connect_args={"check_same_thread": False}, pool_pre_ping=True)
    else:
        new_engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=1800,  # 30 minutes
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
        )
    _attach_query_timer(new_engine)
    return new_engine


DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))

engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create any missing tables."""
    # Model classes register themselves on Base when imported
    import app.models.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency for FastAPI routes"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
