"""
Diversity Selector

Picks the top-N scored questions while keeping topic variety:
- at most 40% of N from any one domain
- at most 30% of N of any one item type
- if fewer than 3 domains made it in, backfill one question from each
  unrepresented domain (caps ignored) while room remains

Caps are soft: when the catalog spans fewer domains than the caps allow for,
the selector returns what is available rather than failing.
"""

import logging
import random
from typing import List, Optional, Sequence

from app.services.practice_types import RecommendedQuestion, ScoredQuestion

logger = logging.getLogger(__name__)

MAX_DOMAIN_SHARE = 0.4
MAX_ITEM_TYPE_SHARE = 0.3
MIN_DOMAINS = 3


def select_diverse(
    scored: Sequence[ScoredQuestion],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[RecommendedQuestion]:
    # Stable sort keeps catalog order among equal scores
    ranked = sorted(scored, key=lambda sq: sq.score, reverse=True)

    selected: List[ScoredQuestion] = []
    domain_counts = {}
    type_counts = {}

    for sq in ranked:
        if len(selected) >= count:
            break

        domain = sq.question.category
        item_type = sq.question.question_type
        if domain_counts.get(domain, 0) >= count * MAX_DOMAIN_SHARE:
            continue
        if type_counts.get(item_type, 0) >= count * MAX_ITEM_TYPE_SHARE:
            continue

        selected.append(sq)
        domain_counts[domain] = domain_counts.get(domain, 0) + 1
        type_counts[item_type] = type_counts.get(item_type, 0) + 1

    if len(domain_counts) < MIN_DOMAINS and len(selected) < len(ranked):
        chosen = {id(sq) for sq in selected}
        for sq in ranked:
            if len(selected) >= count:
                break
            if id(sq) in chosen or sq.question.category in domain_counts:
                continue
            selected.append(sq)
            domain_counts[sq.question.category] = 1

    logger.debug(
        "Selected %d of %d candidates across %d domains",
        len(selected), len(ranked), len(domain_counts),
    )

    # Fresh random source per call unless one is injected
    (rng or random.Random()).shuffle(selected)

    return [
        RecommendedQuestion(
            question_id=sq.question.id,
            priority_score=sq.score,
            reason=sq.reason,
            domain=sq.question.category,
            item_type=sq.question.question_type,
        )
        for sq in selected
    ]
