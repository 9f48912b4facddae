"""Unit tests for ContentScorer."""

import random

import pytest

from daybrief.clock import ZeroRandom
from daybrief.models import Category, ContentType
from daybrief.profile import UserBehaviorProfile
from daybrief.scorer import ContentScorer, recency_score


@pytest.fixture
def scorer(clock):
    return ContentScorer(clock=clock, rng=ZeroRandom())


@pytest.mark.parametrize(
    "age_hours, expected",
    [
        (0, 0.4),
        (5.99, 0.4),
        (6, 0.3),
        (11.5, 0.3),
        (12, 0.2),
        (17.9, 0.2),
        (18, 0.1),
        (24, 0.1),
        (200, 0.1),
    ],
)
def test_recency_steps(age_hours, expected) -> None:
    assert recency_score(age_hours) == expected


def test_recency_is_non_increasing() -> None:
    ages = [h / 4 for h in range(0, 200)]
    scores = [recency_score(age) for age in ages]
    assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_fresh_item_with_empty_selection(scorer, make_item, profile) -> None:
    """Fresh + both diversity bonuses + neutral preference, no noise."""
    parts = scorer.breakdown(make_item(hours_ago=1), [], profile)

    assert parts.recency == 0.4
    assert parts.diversity == pytest.approx(0.3)
    assert parts.preference == pytest.approx(0.1)
    assert parts.exploration == 0.0
    assert scorer.score(make_item(hours_ago=1), [], profile) == pytest.approx(0.8)


def test_diversity_bonus_depends_on_running_selection(scorer, make_item, profile) -> None:
    item = make_item(source_id="a", content_type=ContentType.ARTICLE)

    same_source = [make_item(source_id="a", content_type=ContentType.SOCIAL_POST)]
    same_type = [make_item(source_id="b", content_type=ContentType.ARTICLE)]
    same_both = [make_item(source_id="a", content_type=ContentType.ARTICLE)]

    assert scorer.breakdown(item, same_source, profile).diversity == pytest.approx(0.1)
    assert scorer.breakdown(item, same_type, profile).diversity == pytest.approx(0.2)
    assert scorer.breakdown(item, same_both, profile).diversity == 0.0


def test_learned_preference_replaces_neutral(scorer, make_item) -> None:
    profile = UserBehaviorProfile(
        category_preference={Category.TOP_STORIES: 1.0, Category.SOCIAL: 0.0}
    )

    article = make_item(content_type=ContentType.ARTICLE)
    social = make_item(content_type=ContentType.SOCIAL_POST)
    podcast = make_item(content_type=ContentType.PODCAST_EPISODE)

    assert scorer.breakdown(article, [], profile).preference == pytest.approx(0.2)
    assert scorer.breakdown(social, [], profile).preference == 0.0
    # Never engaged with podcasts: neutral
    assert scorer.breakdown(podcast, [], profile).preference == pytest.approx(0.1)


def test_exploration_stays_within_bounds(clock, make_item, profile) -> None:
    scorer = ContentScorer(clock=clock, rng=random.Random(7))
    item = make_item()
    values = [scorer.breakdown(item, [], profile).exploration for _ in range(500)]

    assert all(0.0 <= v < 0.1 for v in values)
    assert len(set(values)) > 1


def test_seeded_scores_are_reproducible(clock, make_item, profile) -> None:
    item = make_item()
    first = ContentScorer(clock=clock, rng=random.Random(42))
    second = ContentScorer(clock=clock, rng=random.Random(42))

    assert [first.score(item, [], profile) for _ in range(10)] == [
        second.score(item, [], profile) for _ in range(10)
    ]


def test_total_score_is_bounded(clock, make_item) -> None:
    scorer = ContentScorer(clock=clock, rng=random.Random(1))
    profile = UserBehaviorProfile(category_preference={Category.TOP_STORIES: 1.0})
    for hours_ago in (0, 3, 9, 15, 30):
        score = scorer.score(make_item(hours_ago=hours_ago), [], profile)
        assert 0.1 <= score < 1.0
