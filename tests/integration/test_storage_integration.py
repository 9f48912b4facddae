"""Integration tests for Storage with a real SQLite database."""

from datetime import timedelta
from pathlib import Path

import pytest

from daybrief.database import get_db_connection, init_db
from daybrief.errors import ProfileCorruptionError
from daybrief.models import (
    RUSH,
    STANDARD,
    Brief,
    BriefItem,
    Category,
    EngagementAction,
    EngagementEvent,
    SelectionReason,
)
from daybrief.profile import UserBehaviorProfile
from daybrief.storage import Storage


def make_brief(make_item, generated_at, mode=STANDARD) -> Brief:
    item = BriefItem(
        content=make_item(),
        category=Category.TOP_STORIES,
        reason=SelectionReason.TOP_STORY,
        summary="Summary",
        priority=0,
        read_time_seconds=180,
        context="You typically spend 2 min on content from this source",
    )
    return Brief(
        generated_at=generated_at, items=(item,), mode=mode, total_read_time_seconds=180
    )


def test_init_db_is_idempotent(test_db: Path) -> None:
    init_db(test_db)
    init_db(test_db)

    conn = get_db_connection(test_db)
    tables = {
        row["name"]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    conn.close()
    assert {"profiles", "briefs"} <= tables


def test_default_path_follows_xdg_data_home(isolated_dirs) -> None:
    with Storage() as storage:
        assert storage.db_path == isolated_dirs / "data" / "daybrief" / "daybrief.db"
        assert storage.db_path.exists()


def test_profile_round_trip(test_db: Path, now) -> None:
    event = EngagementEvent(
        brief_item_id="b",
        content_item_id="c",
        timestamp=now,
        dwell_time=61.5,
        action=EngagementAction.SHARED,
        source_id="news",
    )
    profile = UserBehaviorProfile(
        engagement_history=[event],
        category_preference={Category.TOP_STORIES: 0.7, Category.SOCIAL: 0.3},
        last_brief_at=now,
    )

    with Storage(test_db) as storage:
        storage.put_profile("alice", profile)
        loaded = storage.get_profile("alice")

    assert loaded.engagement_history == (event,)
    assert dict(loaded.category_preference) == dict(profile.category_preference)
    assert loaded.last_brief_at == now


def test_put_profile_overwrites(test_db: Path) -> None:
    with Storage(test_db) as storage:
        storage.put_profile("alice", UserBehaviorProfile())
        storage.put_profile(
            "alice", UserBehaviorProfile(category_preference={Category.SOCIAL: 1.0})
        )

        loaded = storage.get_profile("alice")
        count = storage.conn.execute("SELECT COUNT(*) FROM profiles").fetchone()[0]

    assert dict(loaded.category_preference) == {Category.SOCIAL: 1.0}
    assert count == 1


def test_missing_profile(test_db: Path) -> None:
    with Storage(test_db) as storage:
        assert storage.get_profile("nobody") is None
        fresh = storage.load_profile("nobody")

    assert fresh.engagement_history == ()
    assert dict(fresh.category_preference) == {}


def test_load_profile_keeps_configured_retention(test_db: Path, now) -> None:
    stale = EngagementEvent(
        brief_item_id="b",
        content_item_id="c",
        timestamp=now - timedelta(days=8),
        dwell_time=10.0,
        action=EngagementAction.VIEWED,
    )
    fresh = EngagementEvent(
        brief_item_id="b",
        content_item_id="d",
        timestamp=now,
        dwell_time=10.0,
        action=EngagementAction.VIEWED,
    )

    with Storage(test_db) as storage:
        storage.put_profile("alice", UserBehaviorProfile(engagement_history=[stale]))
        loaded = storage.load_profile("alice", retention_days=7)
        missing = storage.load_profile("nobody", retention_days=7)

    loaded.record_engagement(fresh, None, now)

    assert loaded.retention_days == 7
    assert missing.retention_days == 7
    assert loaded.engagement_history == (fresh,)


@pytest.mark.parametrize(
    "data",
    ["{not json", '{"category_preference": {"bogus": 1}}'],
)
def test_corrupt_profile_is_replaced_on_load(test_db: Path, data: str) -> None:
    with Storage(test_db) as storage:
        storage.conn.execute(
            "INSERT INTO profiles (user_id, data) VALUES (?, ?)", ("alice", data)
        )
        storage.conn.commit()

        with pytest.raises(ProfileCorruptionError):
            storage.get_profile("alice")

        fallback = storage.load_profile("alice")

    assert fallback.engagement_history == ()
    assert dict(fallback.category_preference) == {}


def test_brief_round_trip(test_db: Path, make_item, now) -> None:
    brief = make_brief(make_item, now)

    with Storage(test_db) as storage:
        storage.put_brief(brief, "alice")
        loaded = storage.get_brief(brief.id)

    assert loaded == brief
    assert loaded.items[0].context == brief.items[0].context


def test_get_brief_unknown_id(test_db: Path) -> None:
    with Storage(test_db) as storage:
        assert storage.get_brief("missing") is None
        assert storage.get_latest_brief("alice") is None


def test_latest_and_listing_are_newest_first(test_db: Path, make_item, now) -> None:
    older = make_brief(make_item, now - timedelta(hours=5), RUSH)
    newest = make_brief(make_item, now)
    middle = make_brief(make_item, now - timedelta(hours=1))
    other_user = make_brief(make_item, now + timedelta(hours=1))

    with Storage(test_db) as storage:
        for brief in (older, newest, middle):
            storage.put_brief(brief, "alice")
        storage.put_brief(other_user, "bob")

        assert storage.get_latest_brief("alice") == newest
        assert [b.id for b in storage.list_briefs("alice")] == [
            newest.id,
            middle.id,
            older.id,
        ]
        assert [b.id for b in storage.list_briefs("alice", limit=2)] == [
            newest.id,
            middle.id,
        ]
        assert storage.get_latest_brief("bob") == other_user
