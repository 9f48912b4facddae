"""RSS/Atom fetcher for articles and podcast episodes."""

import hashlib
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import httpx

from ..config import SourceConfig
from ..errors import SourceFetchError
from ..models import ContentItem, ContentType
from ..observability import FETCHER_COMPLETE, FETCHER_ERROR, EventLog
from .base import clean_html

logger = logging.getLogger(__name__)


class RSSFetcher:
    """Fetches a feed and normalizes its entries into ContentItems.

    Entries become podcast episodes when the source is declared as a podcast
    or the entry carries an audio enclosure; everything else is an article.
    """

    def __init__(
        self,
        source: SourceConfig,
        max_items: int = 25,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
        event_log: Optional[EventLog] = None,
    ):
        """Initialize the RSS fetcher.

        Args:
            source: Configured source with 'url' and optional 'name'
            max_items: Maximum number of entries to keep per fetch
            timeout: Timeout in seconds for the HTTP request
            transport: Optional httpx transport, used by tests
            event_log: Sink for fetch events
        """
        self.source = source
        self.source_id = source.source_id
        self.name = source.display_name
        self.max_items = max_items
        self.timeout = timeout
        self.transport = transport
        self.event_log = event_log or EventLog()

    def fetch_recent(self, since: datetime) -> List[ContentItem]:
        """Fetch entries published at or after ``since``.

        Raises:
            SourceFetchError: If the feed cannot be fetched
        """
        start_time = time.time()
        items = []

        try:
            logger.info(f"Fetching feed: {self.source.url}")
            with httpx.Client(
                timeout=self.timeout, follow_redirects=True, transport=self.transport
            ) as client:
                response = client.get(self.source.url)
                response.raise_for_status()
            feed = feedparser.parse(response.text)

            if feed.bozo:
                logger.warning(
                    f"Feed parsing issues for {self.source.url}: {feed.bozo_exception}"
                )

            feed_title = feed.feed.get("title", "") if hasattr(feed, "feed") else ""
            skipped = 0
            for entry in feed.entries:
                published_at = self._parse_published_date(entry)
                if published_at is None or published_at < since:
                    skipped += 1
                    continue

                items.append(self._to_content_item(entry, published_at, feed_title))
                if len(items) >= self.max_items:
                    break

            if skipped:
                logger.debug(f"Skipped {skipped} undated or old entries from {self.name}")
            logger.info(f"Fetched {len(items)} items from {self.name}")

            self.event_log.emit(
                FETCHER_COMPLETE,
                fetcher_type=self.source.type,
                source_id=self.source_id,
                items_count=len(items),
                duration_ms=int((time.time() - start_time) * 1000),
                status="success",
            )

        except Exception as e:
            self.event_log.emit(
                FETCHER_ERROR,
                fetcher_type=self.source.type,
                source_id=self.source_id,
                error=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
                status="error",
            )
            raise SourceFetchError(self.source_id, e) from e

        return items

    def _to_content_item(
        self, entry, published_at: datetime, feed_title: str
    ) -> ContentItem:
        content_type = (
            ContentType.PODCAST_EPISODE
            if self._is_podcast_entry(entry)
            else ContentType.ARTICLE
        )
        author = entry.get("author", "")
        subtitle = clean_html(entry.get("subtitle", ""))
        if not subtitle and author and content_type == ContentType.ARTICLE:
            subtitle = f"by {author}"

        return ContentItem(
            id=self._get_external_id(entry),
            source_id=self.source_id,
            source_name=self.source.name or feed_title or self.source.url,
            content_type=content_type,
            published_at=published_at,
            title=clean_html(entry.get("title", "")) or "Untitled",
            description=clean_html(entry.get("summary", "")),
            subtitle=subtitle,
            url=entry.get("link", ""),
        )

    def _is_podcast_entry(self, entry) -> bool:
        if self.source.type == "podcast":
            return True
        for enclosure in entry.get("enclosures", []):
            if str(enclosure.get("type", "")).startswith("audio/"):
                return True
        return False

    def _get_external_id(self, entry) -> str:
        """Stable id: entry id, else a hash of the link, else of the title."""
        if entry.get("id"):
            return entry["id"]
        basis = entry.get("link") or entry.get("title") or ""
        return hashlib.sha256(f"{self.source_id}|{basis}".encode()).hexdigest()[:16]

    def _parse_published_date(self, entry) -> Optional[datetime]:
        """Timezone-aware published (or updated) date, or None."""
        for key in ("published_parsed", "updated_parsed"):
            parsed = entry.get(key)
            if parsed:
                try:
                    return datetime(*parsed[:6], tzinfo=timezone.utc)
                except (TypeError, ValueError) as e:
                    logger.debug(f"Could not parse {key}: {e}")
        return None
