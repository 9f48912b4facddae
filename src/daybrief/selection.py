"""Greedy constrained selection of brief items."""

import logging
from collections import Counter
from typing import List, Optional, Sequence

from .clock import Clock
from .models import (
    BriefMode,
    ContentItem,
    ScoredCandidate,
    SelectedCandidate,
    SelectionReason,
)
from .profile import UserBehaviorProfile
from .scorer import ContentScorer

logger = logging.getLogger(__name__)

MAX_PER_SOURCE = 2
TOP_STORY_COUNT = 3
HIGH_ENGAGEMENT_SCORE = 0.8
RECENT_HOURS = 6


class SelectionEngine:
    """Picks a diverse, bounded, ranked subset of candidates.

    Candidates are scored once against an empty selection and sorted; the
    diversity caps then decide admission while walking that fixed order.
    Diversity affects admission only, never re-ranking.
    """

    def __init__(self, scorer: ContentScorer, clock: Optional[Clock] = None):
        self.scorer = scorer
        self.clock = clock or scorer.clock

    def rank(
        self, candidates: Sequence[ContentItem], profile: UserBehaviorProfile
    ) -> List[ScoredCandidate]:
        """Score every candidate once and sort descending.

        ``sorted`` is stable, so equal scores keep their input order.
        """
        scored = [
            ScoredCandidate(item=item, score=self.scorer.score(item, (), profile))
            for item in candidates
        ]
        return sorted(scored, key=lambda c: c.score, reverse=True)

    def select(
        self,
        candidates: Sequence[ContentItem],
        mode: BriefMode,
        profile: UserBehaviorProfile,
    ) -> List[SelectedCandidate]:
        """Select up to ``mode.max_items`` candidates under the diversity caps.

        A source may appear at most twice and a content type at most
        ``max_items // 2`` times. Never raises for an infeasible pool; it
        returns whatever could be admitted.
        """
        if not candidates or mode.max_items <= 0:
            return []

        type_cap = mode.max_items // 2
        source_counts: Counter = Counter()
        type_counts: Counter = Counter()
        accepted: List[ScoredCandidate] = []
        rejected = 0

        for candidate in self.rank(candidates, profile):
            if len(accepted) >= mode.max_items:
                break
            item = candidate.item
            if (
                source_counts[item.source_id] >= MAX_PER_SOURCE
                or type_counts[item.content_type] >= type_cap
            ):
                rejected += 1
                continue
            accepted.append(candidate)
            source_counts[item.source_id] += 1
            type_counts[item.content_type] += 1

        logger.info(
            f"Selected {len(accepted)} of {len(candidates)} candidates "
            f"for {mode.name} mode ({rejected} rejected by diversity caps)"
        )
        return self.assign_reasons(accepted)

    def assign_reasons(
        self, accepted: Sequence[ScoredCandidate]
    ) -> List[SelectedCandidate]:
        """Tag each accepted candidate with the first matching reason."""
        now = self.clock.now()
        selected = []
        for index, candidate in enumerate(accepted):
            if index < TOP_STORY_COUNT:
                reason = SelectionReason.TOP_STORY
            elif candidate.score > HIGH_ENGAGEMENT_SCORE:
                reason = SelectionReason.HIGH_ENGAGEMENT
            elif candidate.item.age_hours(now) < RECENT_HOURS:
                reason = SelectionReason.RECENTLY_PUBLISHED
            else:
                reason = SelectionReason.DIVERSITY_PICK
            selected.append(
                SelectedCandidate(
                    item=candidate.item, score=candidate.score, reason=reason
                )
            )
        return selected
