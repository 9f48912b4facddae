"""Data models for the daybrief curation engine."""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class ContentType(str, Enum):
    """Kinds of content a source can produce."""

    ARTICLE = "article"
    FORUM_POST = "forum_post"
    SOCIAL_POST = "social_post"
    PODCAST_EPISODE = "podcast_episode"


class Category(str, Enum):
    """Brief sections, also the keys of the learned preference map."""

    TOP_STORIES = "top_stories"
    UPDATES = "updates"
    TRENDING = "trending"
    PODCASTS = "podcasts"
    SOCIAL = "social"
    DISCOVERY = "discovery"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]


_CATEGORY_NAMES = {
    Category.TOP_STORIES: "Top Stories",
    Category.UPDATES: "Updates",
    Category.TRENDING: "Trending",
    Category.PODCASTS: "Audio",
    Category.SOCIAL: "Social",
    Category.DISCOVERY: "Discover",
}

CATEGORY_BY_TYPE = {
    ContentType.ARTICLE: Category.TOP_STORIES,
    ContentType.FORUM_POST: Category.TRENDING,
    ContentType.PODCAST_EPISODE: Category.PODCASTS,
    ContentType.SOCIAL_POST: Category.SOCIAL,
}


def category_for_type(content_type: ContentType) -> Category:
    """Map a content type to the brief section it is filed under."""
    return CATEGORY_BY_TYPE[content_type]


class SelectionReason(str, Enum):
    """Why an item made it into the brief."""

    TOP_STORY = "top_story"
    HIGH_ENGAGEMENT = "high_engagement"
    RECENTLY_PUBLISHED = "recently_published"
    DIVERSITY_PICK = "diversity_pick"

    @property
    def explanation(self) -> str:
        return _REASON_TEXT[self]


_REASON_TEXT = {
    SelectionReason.TOP_STORY: "Top story from your sources",
    SelectionReason.HIGH_ENGAGEMENT: "Getting lots of discussion",
    SelectionReason.RECENTLY_PUBLISHED: "Just published",
    SelectionReason.DIVERSITY_PICK: "Different perspective",
}


class EngagementAction(str, Enum):
    """User interactions tracked against a brief item."""

    VIEWED = "viewed"
    CLICKED = "clicked"
    SHARED = "shared"
    SAVED = "saved"
    DISMISSED = "dismissed"


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ContentItem:
    """A normalized unit of content fetched from any source.

    Items are value objects: created by a fetcher once per fetch cycle and
    never mutated afterwards.
    """

    source_id: str  # publication, subreddit, account or show
    content_type: ContentType
    published_at: datetime
    title: str
    description: str = ""
    subtitle: str = ""
    source_name: str = ""
    url: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        # Naive timestamps are taken as UTC
        if self.published_at.tzinfo is None:
            object.__setattr__(
                self, "published_at", self.published_at.replace(tzinfo=timezone.utc)
            )

    def age_hours(self, now: datetime) -> float:
        """Hours elapsed between publication and ``now``."""
        return (now - self.published_at).total_seconds() / 3600

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "source_id": self.source_id,
            "content_type": self.content_type.value,
            "published_at": self.published_at.isoformat(),
            "title": self.title,
            "description": self.description,
            "subtitle": self.subtitle,
            "source_name": self.source_name,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentItem":
        return cls(
            id=data["id"],
            source_id=data["source_id"],
            content_type=ContentType(data["content_type"]),
            published_at=_parse_datetime(data["published_at"]),
            title=data["title"],
            description=data.get("description", ""),
            subtitle=data.get("subtitle", ""),
            source_name=data.get("source_name", ""),
            url=data.get("url", ""),
        )


@dataclass(frozen=True)
class EngagementEvent:
    """One recorded interaction with a brief item."""

    brief_item_id: str
    content_item_id: str
    timestamp: datetime
    dwell_time: float  # seconds
    action: EngagementAction
    source_id: Optional[str] = None  # filled in when the brief item is known

    def to_dict(self) -> dict:
        return {
            "brief_item_id": self.brief_item_id,
            "content_item_id": self.content_item_id,
            "timestamp": self.timestamp.isoformat(),
            "dwell_time": self.dwell_time,
            "action": self.action.value,
            "source_id": self.source_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngagementEvent":
        return cls(
            brief_item_id=data["brief_item_id"],
            content_item_id=data["content_item_id"],
            timestamp=_parse_datetime(data["timestamp"]),
            dwell_time=float(data["dwell_time"]),
            action=EngagementAction(data["action"]),
            source_id=data.get("source_id"),
        )


@dataclass(frozen=True)
class BriefMode:
    """Named constraint bundle controlling the size of a brief."""

    name: str
    display_name: str
    max_items: int
    target_read_time_seconds: int
    max_summary_chars: int

    @classmethod
    def from_name(cls, name: str) -> "BriefMode":
        """Look up one of the fixed modes by name.

        Raises:
            ValueError: If the name is not a known mode
        """
        try:
            return MODES[name.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown brief mode '{name}', expected one of: {', '.join(MODES)}"
            )


RUSH = BriefMode("rush", "Quick Brief", 5, 120, 50)
STANDARD = BriefMode("standard", "Standard Brief", 10, 300, 100)
LEISURELY = BriefMode("leisurely", "Extended Brief", 15, 900, 150)
COMMUTE = BriefMode("commute", "Commute Brief", 8, 600, 80)
WEEKEND = BriefMode("weekend", "Weekend Brief", 12, 1200, 120)

MODES: Dict[str, BriefMode] = {
    mode.name: mode for mode in (RUSH, STANDARD, LEISURELY, COMMUTE, WEEKEND)
}


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate paired with its score for one selection pass."""

    item: ContentItem
    score: float


@dataclass(frozen=True)
class SelectedCandidate:
    """An admitted candidate with the reason it was picked."""

    item: ContentItem
    score: float
    reason: SelectionReason


@dataclass(frozen=True)
class BriefItem:
    """One entry of a generated brief."""

    content: ContentItem
    category: Category
    reason: SelectionReason
    summary: str
    priority: int
    read_time_seconds: int
    context: Optional[str] = None  # personal relevance line
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content.to_dict(),
            "category": self.category.value,
            "reason": self.reason.value,
            "summary": self.summary,
            "priority": self.priority,
            "read_time_seconds": self.read_time_seconds,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BriefItem":
        return cls(
            id=data["id"],
            content=ContentItem.from_dict(data["content"]),
            category=Category(data["category"]),
            reason=SelectionReason(data["reason"]),
            summary=data["summary"],
            priority=int(data["priority"]),
            read_time_seconds=int(data["read_time_seconds"]),
            context=data.get("context"),
        )


@dataclass(frozen=True)
class Brief:
    """The generated digest for one cycle. Superseded, never mutated."""

    generated_at: datetime
    items: Tuple[BriefItem, ...]
    mode: BriefMode
    total_read_time_seconds: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def read_time_minutes(self) -> int:
        return math.ceil(self.total_read_time_seconds / 60)

    def find_item(self, brief_item_id: str) -> Optional[BriefItem]:
        for item in self.items:
            if item.id == brief_item_id:
                return item
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "generated_at": self.generated_at.isoformat(),
            "mode": self.mode.name,
            "total_read_time_seconds": self.total_read_time_seconds,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Brief":
        return cls(
            id=data["id"],
            generated_at=_parse_datetime(data["generated_at"]),
            mode=BriefMode.from_name(data["mode"]),
            total_read_time_seconds=int(data["total_read_time_seconds"]),
            items=tuple(BriefItem.from_dict(item) for item in data["items"]),
        )
