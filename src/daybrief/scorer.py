"""Composite relevance scoring for brief candidates."""

import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .clock import Clock, SystemClock
from .models import ContentItem, category_for_type
from .profile import NEUTRAL_WEIGHT, UserBehaviorProfile

logger = logging.getLogger(__name__)

# Recency is a step function over item age: (max age in hours, contribution)
RECENCY_STEPS = ((6, 0.4), (12, 0.3), (18, 0.2))
RECENCY_FLOOR = 0.1

NEW_SOURCE_BONUS = 0.2
NEW_TYPE_BONUS = 0.1
PREFERENCE_WEIGHT = 0.2
EXPLORATION_WEIGHT = 0.1


@dataclass(frozen=True)
class ScoreBreakdown:
    """The four independent contributions to a candidate's score."""

    recency: float
    diversity: float
    preference: float
    exploration: float

    @property
    def total(self) -> float:
        return self.recency + self.diversity + self.preference + self.exploration


def recency_score(age_hours: float) -> float:
    """Step-function recency contribution, 0.4 for fresh items down to 0.1."""
    for max_age, contribution in RECENCY_STEPS:
        if age_hours < max_age:
            return contribution
    return RECENCY_FLOOR


class ContentScorer:
    """Scores a candidate from recency, diversity, preference and exploration.

    Each factor is bounded (0.4, 0.3, 0.2, 0.1) so no single one dominates.
    The exploration term draws from the injected random source; pass a
    seeded ``random.Random`` or ``ZeroRandom`` for reproducible scores.
    """

    def __init__(
        self, clock: Optional[Clock] = None, rng: Optional[random.Random] = None
    ):
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()

    def breakdown(
        self,
        item: ContentItem,
        already_selected: Sequence[ContentItem],
        profile: UserBehaviorProfile,
    ) -> ScoreBreakdown:
        age_hours = item.age_hours(self.clock.now())

        diversity = 0.0
        if all(other.source_id != item.source_id for other in already_selected):
            diversity += NEW_SOURCE_BONUS
        if all(other.content_type != item.content_type for other in already_selected):
            diversity += NEW_TYPE_BONUS

        weight = profile.preference_for(category_for_type(item.content_type))
        if weight is None:
            weight = NEUTRAL_WEIGHT

        return ScoreBreakdown(
            recency=recency_score(age_hours),
            diversity=diversity,
            preference=weight * PREFERENCE_WEIGHT,
            exploration=self.rng.random() * EXPLORATION_WEIGHT,
        )

    def score(
        self,
        item: ContentItem,
        already_selected: Sequence[ContentItem],
        profile: UserBehaviorProfile,
    ) -> float:
        """Score one candidate against the running selection and profile."""
        parts = self.breakdown(item, already_selected, profile)
        logger.debug(
            f"Scored '{item.title[:40]}': recency={parts.recency:.2f} "
            f"diversity={parts.diversity:.2f} preference={parts.preference:.2f} "
            f"exploration={parts.exploration:.3f}"
        )
        return parts.total
