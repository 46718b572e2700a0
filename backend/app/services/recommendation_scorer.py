"""
Recommendation Scorer

Assigns every catalog question an integer priority score and a reason tag.
Scoring is an ordered list of rules; each rule sees the running score before
it and returns a RuleOutcome:

    1. Weak area            0..+40   (accuracy < 70 claims weak_area)
    2. Blueprint alignment  -10..+30 (large under-practice gap may claim blueprint_gap)
    3. Spaced repetition    -5..+20  (> 14 days since last attempt may claim spaced_repetition)
    4. Item-type diversity  -5..+10  (under-represented format may claim item_type)
    5. Previous performance -5..+10

Points are summed; the reason is the claimed reason with the highest priority,
"new" when nothing claims. Conditional claims only fire while the running
score (including the rule's own points) is below the rule's threshold.
"""

from dataclasses import dataclass
from datetime import datetime
from functools import cached_property
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from app.services.attempt_history import attempts_by_question, latest_attempts, to_naive_utc
from app.services.practice_types import (
    AttemptRecord,
    BlueprintCategory,
    CatalogQuestion,
    DomainMastery,
    ScoredQuestion,
)

DEFAULT_REASON = "new"

REASON_PRIORITY = {
    "weak_area": 4,
    "blueprint_gap": 3,
    "spaced_repetition": 2,
    "item_type": 1,
}

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass(frozen=True)
class RuleOutcome:
    points: int = 0
    reason: Optional[str] = None

    @property
    def priority(self) -> int:
        return REASON_PRIORITY.get(self.reason, 0)


@dataclass
class ScoringContext:
    question: CatalogQuestion
    history: List[AttemptRecord]
    mastery: Dict[str, DomainMastery]
    alignment: Dict[str, BlueprintCategory]
    type_counts: Dict[str, int]
    now: datetime

    @cached_property
    def last_attempt(self) -> Optional[AttemptRecord]:
        if not self.history:
            return None
        return latest_attempts(self.history)[0]


def _claim(points: int, reason: str, running: int, below: int) -> RuleOutcome:
    if running + points < below:
        return RuleOutcome(points, reason)
    return RuleOutcome(points)


# =============================================================================
# SCORING RULES
# =============================================================================

def weak_area_rule(ctx: ScoringContext, running: int) -> RuleOutcome:
    performance = ctx.mastery.get(ctx.question.category)
    if performance is None:
        return RuleOutcome(5)  # Domain not practiced yet
    if performance.accuracy < 70:
        return RuleOutcome(40, "weak_area")
    if performance.accuracy < 75:
        return RuleOutcome(20)
    if performance.accuracy < 80:
        return RuleOutcome(10)
    return RuleOutcome(0)


def blueprint_rule(ctx: ScoringContext, running: int) -> RuleOutcome:
    category = ctx.alignment.get(ctx.question.category)
    if category is None:
        return RuleOutcome(0)
    if category.status == "under_practiced" and category.gap < -5:
        return _claim(30, "blueprint_gap", running, below=40)
    if category.status == "under_practiced":
        return RuleOutcome(15)
    if category.status == "over_practiced":
        return RuleOutcome(-10)
    return RuleOutcome(0)


def spaced_repetition_rule(ctx: ScoringContext, running: int) -> RuleOutcome:
    last = ctx.last_attempt
    if last is None:
        return RuleOutcome(5)

    elapsed = to_naive_utc(ctx.now) - to_naive_utc(last.attempted_at)
    days = elapsed.total_seconds() / SECONDS_PER_DAY
    if days > 14:
        return _claim(20, "spaced_repetition", running, below=40)
    if days > 7:
        return RuleOutcome(15)
    if days > 3:
        return RuleOutcome(10)
    if days > 1:
        return RuleOutcome(5)
    return RuleOutcome(-5)


def item_type_rule(ctx: ScoringContext, running: int) -> RuleOutcome:
    attempted = ctx.type_counts.get(ctx.question.question_type)
    total = sum(ctx.type_counts.values())
    if not attempted or total == 0:
        return RuleOutcome(0)

    type_percentage = attempted / total * 100
    expected_percentage = 100 / len(ctx.type_counts)
    if type_percentage < expected_percentage - 5:
        return _claim(10, "item_type", running, below=40)
    if type_percentage > expected_percentage + 5:
        return RuleOutcome(-5)
    return RuleOutcome(0)


def previous_performance_rule(ctx: ScoringContext, running: int) -> RuleOutcome:
    last = ctx.last_attempt
    if last is None:
        return RuleOutcome(0)
    if not last.is_correct:
        return RuleOutcome(10)
    if last.attempt_number == 1:
        return RuleOutcome(-5)  # Already known cold
    return RuleOutcome(0)


ScoringRule = Callable[[ScoringContext, int], RuleOutcome]

SCORING_RULES: Sequence[ScoringRule] = (
    weak_area_rule,
    blueprint_rule,
    spaced_repetition_rule,
    item_type_rule,
    previous_performance_rule,
)


# =============================================================================
# SCORING
# =============================================================================

def score_question(ctx: ScoringContext, rules: Sequence[ScoringRule] = SCORING_RULES) -> ScoredQuestion:
    score = 0
    best: Optional[RuleOutcome] = None
    for rule in rules:
        outcome = rule(ctx, score)
        score += outcome.points
        if outcome.reason and (best is None or outcome.priority > best.priority):
            best = outcome

    return ScoredQuestion(
        question=ctx.question,
        score=score,
        reason=best.reason if best else DEFAULT_REASON,
    )


def score_catalog(
    catalog: Iterable[CatalogQuestion],
    attempts: Iterable[AttemptRecord],
    mastery: Iterable[DomainMastery],
    alignment: Iterable[BlueprintCategory],
    type_counts: Dict[str, int],
    now: datetime,
    rules: Sequence[ScoringRule] = SCORING_RULES,
) -> List[ScoredQuestion]:
    """Score every catalog question against the user's history."""
    history = attempts_by_question(attempts)
    mastery_by_domain = {m.domain: m for m in mastery}
    alignment_by_category = {c.category: c for c in alignment}

    return [
        score_question(
            ScoringContext(
                question=question,
                history=history.get(question.id, []),
                mastery=mastery_by_domain,
                alignment=alignment_by_category,
                type_counts=type_counts,
                now=now,
            ),
            rules,
        )
        for question in catalog
    ]
