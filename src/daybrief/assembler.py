"""Turns selected candidates into the final Brief."""

import logging
from typing import Optional, Sequence

from .clock import Clock, SystemClock
from .models import (
    Brief,
    BriefItem,
    BriefMode,
    ContentItem,
    ContentType,
    SelectedCandidate,
    category_for_type,
)
from .profile import UserBehaviorProfile

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

# Estimated seconds to read or preview one item
READ_TIME_SECONDS = {
    ContentType.ARTICLE: 180,
    ContentType.FORUM_POST: 120,
    ContentType.PODCAST_EPISODE: 60,  # description preview only
    ContentType.SOCIAL_POST: 60,
}


def truncate_summary(text: str, max_chars: int) -> str:
    """Hard-cut ``text`` to ``max_chars`` characters, marking the cut.

    Slicing a ``str`` works on code points, so multi-byte characters are
    never split.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


def summary_source_text(item: ContentItem) -> str:
    """Subtitle when present, otherwise the description, otherwise a stub."""
    text = item.subtitle.strip() or item.description.strip()
    if text:
        return text
    return f"Content from {item.source_name or item.source_id}."


class BriefAssembler:
    """Builds the Brief aggregate: categories, summaries, read time, order."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()

    def personal_context(
        self, item: ContentItem, profile: Optional[UserBehaviorProfile]
    ) -> Optional[str]:
        if profile is None:
            return None
        average = profile.average_dwell_for_source(item.source_id)
        if average is None:
            return None
        return f"You typically spend {int(average // 60)} min on content from this source"

    def assemble(
        self,
        selected: Sequence[SelectedCandidate],
        mode: BriefMode,
        profile: Optional[UserBehaviorProfile] = None,
    ) -> Brief:
        """Assemble a brief in selection order; no re-sorting happens here."""
        items = []
        for position, candidate in enumerate(selected):
            content = candidate.item
            items.append(
                BriefItem(
                    content=content,
                    category=category_for_type(content.content_type),
                    reason=candidate.reason,
                    summary=truncate_summary(
                        summary_source_text(content), mode.max_summary_chars
                    ),
                    priority=position,
                    read_time_seconds=READ_TIME_SECONDS[content.content_type],
                    context=self.personal_context(content, profile),
                )
            )

        total = sum(item.read_time_seconds for item in items)
        if total > mode.target_read_time_seconds:
            logger.debug(
                f"Brief runs {total}s, over the {mode.name} target of "
                f"{mode.target_read_time_seconds}s"
            )

        return Brief(
            generated_at=self.clock.now(),
            items=tuple(items),
            mode=mode,
            total_read_time_seconds=total,
        )
