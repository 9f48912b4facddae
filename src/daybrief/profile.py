"""User behavior profile: engagement history and learned category weights."""

import logging
import threading
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .errors import ProfileCorruptionError
from .models import Category, EngagementAction, EngagementEvent

logger = logging.getLogger(__name__)

RETENTION_DAYS = 30
NEUTRAL_WEIGHT = 0.5

# Preference delta per action; anything not listed counts as mild interest
ACTION_DELTAS = {
    EngagementAction.CLICKED: 0.1,
    EngagementAction.DISMISSED: -0.1,
}
DEFAULT_DELTA = 0.05


def normalize_preferences(weights: Mapping[Category, float]) -> Dict[Category, float]:
    """Scale weights so they sum to 1.

    Returns an unchanged copy when the total is zero.
    """
    total = sum(weights.values())
    if total <= 0:
        return dict(weights)
    return {category: value / total for category, value in weights.items()}


def adjust_preference(
    weights: Mapping[Category, float], category: Category, action: EngagementAction
) -> Dict[Category, float]:
    """Apply one engagement to a copy of the weights, then renormalize.

    Unseen categories start from the neutral weight. The adjusted weight is
    clamped to [0, 1] before normalization.
    """
    updated = dict(weights)
    current = updated.get(category, NEUTRAL_WEIGHT)
    delta = ACTION_DELTAS.get(action, DEFAULT_DELTA)
    updated[category] = min(1.0, max(0.0, current + delta))
    return normalize_preferences(updated)


class UserBehaviorProfile:
    """One user's engagement history plus derived category preferences.

    Writes go through ``record_engagement`` and replace the internal state
    wholesale under a lock, so concurrent readers always see either the old
    or the new weights, never a half-normalized map.
    """

    def __init__(
        self,
        engagement_history: Iterable[EngagementEvent] = (),
        category_preference: Optional[Mapping[Category, float]] = None,
        last_brief_at: Optional[datetime] = None,
        retention_days: int = RETENTION_DAYS,
    ):
        self._history: Tuple[EngagementEvent, ...] = tuple(engagement_history)
        self._preferences: Mapping[Category, float] = MappingProxyType(
            dict(category_preference or {})
        )
        self.last_brief_at = last_brief_at
        self.retention_days = retention_days
        self._lock = threading.Lock()

    @property
    def engagement_history(self) -> Tuple[EngagementEvent, ...]:
        return self._history

    @property
    def category_preference(self) -> Mapping[Category, float]:
        return self._preferences

    def preference_for(self, category: Category) -> Optional[float]:
        """Learned weight for a category, or None if never engaged."""
        return self._preferences.get(category)

    def record_engagement(
        self, event: EngagementEvent, category: Optional[Category], now: datetime
    ) -> None:
        """Append an event, prune old history and update preferences.

        Args:
            event: The engagement to append
            category: Category of the engaged brief item, or None when the
                brief item is unknown (history only, weights untouched)
            now: Current time, used for the retention cutoff
        """
        cutoff = now - timedelta(days=self.retention_days)
        with self._lock:
            history = tuple(e for e in self._history if e.timestamp >= cutoff)
            if event.timestamp >= cutoff:
                history = history + (event,)
            pruned = len(self._history) + 1 - len(history)
            if pruned:
                logger.debug(f"Pruned {pruned} engagement events older than {cutoff}")

            preferences = self._preferences
            if category is not None:
                preferences = MappingProxyType(
                    adjust_preference(self._preferences, category, event.action)
                )

            self._history = history
            self._preferences = preferences

    def mark_brief_generated(self, at: datetime) -> None:
        self.last_brief_at = at

    def average_dwell_for_source(self, source_id: str) -> Optional[float]:
        """Mean dwell time in seconds across events for one source."""
        dwell = [e.dwell_time for e in self._history if e.source_id == source_id]
        if not dwell:
            return None
        return sum(dwell) / len(dwell)

    def to_dict(self) -> dict:
        return {
            "engagement_history": [e.to_dict() for e in self._history],
            "category_preference": {
                category.value: weight for category, weight in self._preferences.items()
            },
            "last_brief_at": self.last_brief_at.isoformat()
            if self.last_brief_at
            else None,
        }

    @classmethod
    def from_dict(
        cls, data: dict, retention_days: int = RETENTION_DAYS
    ) -> "UserBehaviorProfile":
        """Rebuild a profile from its serialized form.

        ``retention_days`` is configuration, not stored state, so the caller
        supplies it on every load.

        Raises:
            ProfileCorruptionError: If the data is malformed
        """
        try:
            history = [
                EngagementEvent.from_dict(e) for e in data.get("engagement_history", [])
            ]
            preferences = {
                Category(key): float(value)
                for key, value in data.get("category_preference", {}).items()
            }
            last_brief_at = data.get("last_brief_at")
            return cls(
                engagement_history=history,
                category_preference=preferences,
                last_brief_at=datetime.fromisoformat(last_brief_at)
                if last_brief_at
                else None,
                retention_days=retention_days,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProfileCorruptionError(f"Invalid profile data: {e}") from e
