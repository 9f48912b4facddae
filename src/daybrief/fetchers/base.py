"""Content source protocol and fetcher construction from configuration."""

import html
import logging
import re
from datetime import datetime
from typing import List, Optional, Protocol

from ..config import Config, SourceConfig
from ..models import ContentItem
from ..observability import EventLog

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


class ContentSource(Protocol):
    """A single source of normalized content items.

    ``fetch_recent`` raises on failure; the generator treats any exception as
    "no items from this source".
    """

    source_id: str
    name: str

    def fetch_recent(self, since: datetime) -> List[ContentItem]: ...


def clean_html(text: str) -> str:
    """Strip tags, unescape entities and collapse whitespace."""
    if not text:
        return ""
    return _SPACE_RE.sub(" ", html.unescape(_TAG_RE.sub(" ", text))).strip()


def create_fetcher(
    source: SourceConfig, config: Config, event_log: Optional[EventLog] = None
) -> ContentSource:
    """Build the fetcher for one configured source.

    Raises:
        ValueError: If the source type is unknown, or a Reddit source has no
            credentials configured
    """
    # Local imports: fetcher modules import clean_html from here
    if source.type in ("rss", "podcast"):
        from .rss import RSSFetcher

        return RSSFetcher(
            source,
            max_items=config.max_items_per_source,
            timeout=config.fetch_timeout_seconds,
            event_log=event_log,
        )
    if source.type == "reddit":
        if not config.reddit_configured:
            raise ValueError(
                "Reddit credentials missing: set REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET"
            )
        from .reddit import RedditFetcher

        return RedditFetcher(source, config=config, event_log=event_log)
    if source.type == "mastodon":
        from .mastodon import MastodonFetcher

        return MastodonFetcher(
            source,
            max_items=config.max_items_per_source,
            timeout=config.fetch_timeout_seconds,
            event_log=event_log,
        )
    raise ValueError(f"Unknown source type: {source.type}")


def create_fetchers(
    config: Config, event_log: Optional[EventLog] = None
) -> List[ContentSource]:
    """Build fetchers for every configured source, skipping broken ones."""
    fetchers = []
    for source in config.sources:
        try:
            fetchers.append(create_fetcher(source, config, event_log))
            logger.info(f"Created {source.type} fetcher: {source.display_name}")
        except Exception as e:
            logger.error(f"Failed to create fetcher for {source.display_name}: {e}")
    return fetchers
