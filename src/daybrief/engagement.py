"""Records user interactions and feeds them back into the profile."""

import logging
from typing import Callable, Optional

from .clock import Clock, SystemClock
from .models import Brief, EngagementAction, EngagementEvent
from .observability import ENGAGEMENT_RECORDED, EventLog
from .profile import UserBehaviorProfile

logger = logging.getLogger(__name__)


class EngagementRecorder:
    """Appends engagement events and updates category weights.

    ``brief_lookup`` returns the most recent brief (or None). Events for a
    brief item that is not in that brief are kept in history but leave the
    category weights alone.
    """

    def __init__(
        self,
        profile: UserBehaviorProfile,
        brief_lookup: Callable[[], Optional[Brief]],
        clock: Optional[Clock] = None,
        event_log: Optional[EventLog] = None,
    ):
        self.profile = profile
        self.brief_lookup = brief_lookup
        self.clock = clock or SystemClock()
        self.event_log = event_log or EventLog(clock=self.clock)

    def record_engagement(
        self,
        brief_item_id: str,
        content_item_id: str,
        dwell_time: float,
        action: EngagementAction,
    ) -> EngagementEvent:
        now = self.clock.now()
        brief = self.brief_lookup()
        brief_item = brief.find_item(brief_item_id) if brief else None

        event = EngagementEvent(
            brief_item_id=brief_item_id,
            content_item_id=content_item_id,
            timestamp=now,
            dwell_time=dwell_time,
            action=EngagementAction(action),
            source_id=brief_item.content.source_id if brief_item else None,
        )

        if brief_item is None:
            logger.info(
                f"Brief item {brief_item_id} not in the current brief, "
                "recording history only"
            )
            category = None
        else:
            category = brief_item.category

        self.profile.record_engagement(event, category, now)

        self.event_log.emit(
            ENGAGEMENT_RECORDED,
            brief_item_id=brief_item_id,
            content_item_id=content_item_id,
            action=event.action.value,
            dwell_time=dwell_time,
            category=category.value if category else None,
        )
        return event
