# Services module

# Analytics core
from app.services.mastery import compute_mastery, compute_item_type_performance
from app.services.blueprint_alignment import compute_blueprint_alignment
from app.services.time_efficiency import compute_time_efficiency
from app.services.recommended_practice import compute_recommendations
from app.services.performance_metrics import compute_performance_metrics
from app.services.advanced_analytics import compute_advanced_metrics

# Configuration
from app.services.exam_blueprint import (
    ExamBlueprint,
    MasteryScale,
    NCLEX_2026_BLUEPRINT,
    DEFAULT_MASTERY_SCALE,
)

__all__ = [
    "compute_mastery",
    "compute_item_type_performance",
    "compute_blueprint_alignment",
    "compute_time_efficiency",
    "compute_recommendations",
    "compute_performance_metrics",
    "compute_advanced_metrics",
    "ExamBlueprint",
    "MasteryScale",
    "NCLEX_2026_BLUEPRINT",
    "DEFAULT_MASTERY_SCALE",
]
