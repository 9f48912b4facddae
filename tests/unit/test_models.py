"""Unit tests for data models."""

import dataclasses
from datetime import datetime, timezone

import pytest

from daybrief.models import (
    MODES,
    Brief,
    BriefItem,
    BriefMode,
    Category,
    ContentItem,
    ContentType,
    EngagementAction,
    EngagementEvent,
    SelectionReason,
    category_for_type,
)


def test_content_item_to_dict_round_trip(make_item) -> None:
    """ContentItem survives to_dict/from_dict with all fields intact."""
    item = make_item(
        content_type=ContentType.PODCAST_EPISODE,
        subtitle="45 minutes • Interview",
        source_name="Talk Python",
        url="https://talkpython.fm/episodes/1",
    )

    data = item.to_dict()
    assert data["content_type"] == "podcast_episode"
    assert ContentItem.from_dict(data) == item


def test_content_item_is_immutable(make_item) -> None:
    item = make_item()
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.source_id = "other"


def test_naive_published_at_is_read_as_utc() -> None:
    item = ContentItem(
        source_id="s",
        content_type=ContentType.ARTICLE,
        published_at=datetime(2024, 1, 17, 8, 0),
        title="Naive",
    )

    assert item.published_at == datetime(2024, 1, 17, 8, 0, tzinfo=timezone.utc)
    assert item.age_hours(datetime(2024, 1, 17, 10, 0, tzinfo=timezone.utc)) == pytest.approx(2)


def test_content_item_ids_are_unique(make_item) -> None:
    assert make_item().id != make_item().id


def test_naive_timestamps_are_read_as_utc() -> None:
    item = ContentItem.from_dict(
        {
            "id": "x",
            "source_id": "s",
            "content_type": "article",
            "published_at": "2024-01-15T10:30:00",
            "title": "Naive",
        }
    )
    assert item.published_at.tzinfo == timezone.utc


def test_brief_mode_constants() -> None:
    """The five modes carry fixed limits."""
    assert MODES["rush"].max_items == 5
    assert MODES["standard"].max_items == 10
    assert MODES["leisurely"].max_items == 15
    assert MODES["commute"].max_items == 8
    assert MODES["weekend"].max_items == 12

    assert MODES["rush"].target_read_time_seconds == 120
    assert MODES["standard"].target_read_time_seconds == 300
    assert MODES["weekend"].target_read_time_seconds == 1200

    assert MODES["rush"].max_summary_chars == 50
    assert MODES["leisurely"].max_summary_chars == 150


def test_brief_mode_from_name() -> None:
    assert BriefMode.from_name("Rush") is MODES["rush"]
    with pytest.raises(ValueError, match="Unknown brief mode"):
        BriefMode.from_name("marathon")


def test_category_mapping_and_names() -> None:
    assert category_for_type(ContentType.ARTICLE) == Category.TOP_STORIES
    assert category_for_type(ContentType.FORUM_POST) == Category.TRENDING
    assert category_for_type(ContentType.PODCAST_EPISODE) == Category.PODCASTS
    assert category_for_type(ContentType.SOCIAL_POST) == Category.SOCIAL
    assert Category.PODCASTS.display_name == "Audio"


def test_selection_reason_explanations() -> None:
    assert SelectionReason.TOP_STORY.explanation == "Top story from your sources"
    assert SelectionReason.DIVERSITY_PICK.explanation == "Different perspective"


def test_engagement_event_round_trip(now) -> None:
    event = EngagementEvent(
        brief_item_id="b1",
        content_item_id="c1",
        timestamp=now,
        dwell_time=42.5,
        action=EngagementAction.SAVED,
        source_id="source-a",
    )
    assert EngagementEvent.from_dict(event.to_dict()) == event


def test_brief_round_trip_and_read_time(make_item, now) -> None:
    item = BriefItem(
        content=make_item(),
        category=Category.TOP_STORIES,
        reason=SelectionReason.TOP_STORY,
        summary="Summary",
        priority=0,
        read_time_seconds=180,
    )
    brief = Brief(
        generated_at=now,
        items=(item,),
        mode=MODES["standard"],
        total_read_time_seconds=181,
    )

    assert brief.read_time_minutes == 4  # rounds up
    assert brief.find_item(item.id) is item
    assert brief.find_item("missing") is None

    restored = Brief.from_dict(brief.to_dict())
    assert restored == brief
    assert restored.mode is MODES["standard"]


def test_empty_brief_has_zero_read_time(now) -> None:
    brief = Brief(
        generated_at=now, items=(), mode=MODES["rush"], total_read_time_seconds=0
    )
    assert brief.read_time_minutes == 0
    assert Brief.from_dict(brief.to_dict()).items == ()


def test_age_hours(make_item, now) -> None:
    assert make_item(hours_ago=5).age_hours(now) == pytest.approx(5)
    item = make_item()
    assert item.age_hours(datetime(2024, 1, 17, 9, 0, tzinfo=timezone.utc)) == pytest.approx(0)
