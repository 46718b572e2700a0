"""
Exam Blueprint Configuration

Immutable configuration objects consumed by the analytics calculators:
- ExamBlueprint: target share of the exam per content domain
- MasteryScale: accuracy thresholds for the 5-level mastery classification

Calculators take these as keyword arguments defaulting to the NCLEX 2026+
test plan, so alternate blueprints can be injected without patching globals.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class ExamBlueprint:
    """Target practice distribution across content domains (weights sum to 100)."""

    name: str
    weights: Mapping[str, float]
    aligned_tolerance: float = 3.0

    def __post_init__(self):
        total = sum(self.weights.values())
        if abs(total - 100) > 1e-6:
            raise ValueError(f"Blueprint '{self.name}' weights sum to {total}, expected 100")
        # Shared across requests, so the mapping is read-only
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def domains(self):
        return tuple(self.weights.keys())


@dataclass(frozen=True)
class MasteryScale:
    """Accuracy thresholds (percent) for mastery levels."""

    min_attempts: int = 10
    developing: float = 60.0
    proficient: float = 75.0
    mastery: float = 90.0


# NCLEX 2026+ test plan weights
NCLEX_2026_BLUEPRINT = ExamBlueprint(
    name="nclex_2026",
    weights={
        "Management of Care": 17,
        "Safety and Infection Control": 9,
        "Health Promotion and Maintenance": 6,
        "Psychosocial Integrity": 6,
        "Basic Care and Comfort": 6,
        "Pharmacological Therapies": 12,
        "Reduction of Risk Potential": 9,
        "Physiological Adaptation": 11,
        "Other": 24,
    },
)

DEFAULT_MASTERY_SCALE = MasteryScale()

DEFAULT_CATEGORY = "Other"
DEFAULT_QUESTION_TYPE = "Unknown"
