# .env must be loaded before app.database reads DATABASE_URL
from dotenv import load_dotenv
load_dotenv()

import os
import logging
from contextlib import asynccontextmanager
from typing import List

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.database import DATABASE_URL, init_db
from app.routers import practice, progress

API_TITLE = "NCLEX Practice Engine API"
API_VERSION = "1.0.0"

# Student portal dev servers
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:3001"]


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def init_error_monitoring() -> bool:
    """Report unhandled errors to Sentry when a DSN is configured."""
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.1,
        environment=os.getenv("ENVIRONMENT", "development"),
    )
    return True


def cors_origins() -> List[str]:
    """Default portal origins plus any comma-separated CORS_ALLOWED_ORIGINS."""
    extra = os.getenv("CORS_ALLOWED_ORIGINS", "")
    return DEFAULT_CORS_ORIGINS + [origin.strip() for origin in extra.split(",") if origin.strip()]


configure_logging()
logger = logging.getLogger(__name__)

monitoring_enabled = init_error_monitoring()
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    backend = "sqlite" if DATABASE_URL.startswith("sqlite") else DATABASE_URL.split(":", 1)[0]
    logger.info("Practice engine starting (database backend: %s)", backend)
    if not monitoring_enabled:
        logger.info("Error monitoring disabled (no SENTRY_DSN)")

    yield

    logger.info("Practice engine stopped")


app = FastAPI(
    title=API_TITLE,
    description="""
## NCLEX Practice Engine

Adaptive practice and progress analytics for NCLEX nursing-exam preparation.

- **Recommended Practice** - Question sets targeting weak domains and blueprint gaps
- **Domain Mastery** - Five-level mastery per client-needs category
- **Blueprint Alignment** - Practice distribution vs. the NCLEX test plan
- **Time Efficiency** - Speed/accuracy quadrants per domain
- **Readiness** - Pass probability and readiness level
- **Trends** - Daily accuracy with a 7-date rolling average
    """,
    version=API_VERSION,
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "practice",
            "description": "Recommended practice sets prioritized by weak areas, blueprint gaps and spaced repetition.",
        },
        {
            "name": "progress",
            "description": "Answer submission, readiness metrics, accuracy trends and advanced NCLEX analytics.",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

app.include_router(practice.router)
app.include_router(progress.router)


@app.get("/")
def root():
    return {"message": API_TITLE, "version": API_VERSION, "docs": "/docs"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
