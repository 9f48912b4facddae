"""Content fetchers for different source types."""

from .base import ContentSource, create_fetcher, create_fetchers
from .rss import RSSFetcher
from .reddit import RedditFetcher
from .mastodon import MastodonFetcher

__all__ = [
    "ContentSource",
    "create_fetcher",
    "create_fetchers",
    "RSSFetcher",
    "RedditFetcher",
    "MastodonFetcher",
]
