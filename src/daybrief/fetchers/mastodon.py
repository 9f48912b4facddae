"""Mastodon fetcher for public account timelines; statuses become social posts."""

import logging
import re
import time
from datetime import datetime
from typing import List, Optional, Tuple

import httpx

from ..config import SourceConfig
from ..errors import SourceFetchError
from ..models import ContentItem, ContentType
from ..observability import FETCHER_COMPLETE, FETCHER_ERROR, EventLog
from .base import clean_html

logger = logging.getLogger(__name__)

TITLE_CHARS = 80


def parse_account_url(url: str) -> Tuple[str, str]:
    """Split an account reference into (instance, username).

    Accepts "https://host/@user", "@user@host" and "user@host".
    Returns ("", "") when the reference cannot be parsed.
    """
    match = re.match(r"^https?://([^/]+)/@([A-Za-z0-9_]+)/?$", url)
    if match:
        return match.group(1), match.group(2)
    match = re.match(r"^@?([A-Za-z0-9_]+)@([^@/\s]+)$", url)
    if match:
        return match.group(2), match.group(1)
    return "", ""


class MastodonFetcher:
    """Fetches an account's recent public statuses via the REST API."""

    def __init__(
        self,
        source: SourceConfig,
        max_items: int = 25,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
        event_log: Optional[EventLog] = None,
    ):
        self.source = source
        self.source_id = source.source_id
        self.name = source.display_name
        self.max_items = max_items
        self.instance, self.username = parse_account_url(source.url)
        self.timeout = timeout
        self.transport = transport
        self.event_log = event_log or EventLog()

    def fetch_recent(self, since: datetime) -> List[ContentItem]:
        """Fetch original (non-boost, non-reply) statuses newer than ``since``.

        Raises:
            SourceFetchError: If the account or its statuses cannot be read
        """
        start_time = time.time()
        items = []

        try:
            if not self.instance:
                raise ValueError(f"Could not parse Mastodon account from: {self.source.url}")

            for status in self._get_statuses():
                published_at = datetime.fromisoformat(status["created_at"])
                if published_at < since:
                    continue
                item = self._to_content_item(status, published_at)
                if item is not None:
                    items.append(item)

            logger.info(f"Fetched {len(items)} statuses from @{self.username}@{self.instance}")
            self.event_log.emit(
                FETCHER_COMPLETE,
                fetcher_type="mastodon",
                source_id=self.source_id,
                items_count=len(items),
                duration_ms=int((time.time() - start_time) * 1000),
                status="success",
            )

        except Exception as e:
            self.event_log.emit(
                FETCHER_ERROR,
                fetcher_type="mastodon",
                source_id=self.source_id,
                error=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
                status="error",
            )
            raise SourceFetchError(self.source_id, e) from e

        return items

    def _get_statuses(self) -> List[dict]:
        """Resolve the account id, then read its recent original statuses."""
        base = f"https://{self.instance}/api/v1"
        with httpx.Client(
            timeout=self.timeout, follow_redirects=True, transport=self.transport
        ) as client:
            lookup = client.get(f"{base}/accounts/lookup", params={"acct": self.username})
            lookup.raise_for_status()
            account_id = lookup.json()["id"]

            response = client.get(
                f"{base}/accounts/{account_id}/statuses",
                params={
                    "limit": min(self.max_items, 40),
                    "exclude_replies": "true",
                    "exclude_reblogs": "true",
                },
            )
            response.raise_for_status()
            return response.json()

    def _to_content_item(
        self, status: dict, published_at: datetime
    ) -> Optional[ContentItem]:
        text = clean_html(status.get("content", ""))
        if not text:
            return None

        title = text if len(text) <= TITLE_CHARS else text[:TITLE_CHARS].rstrip() + "..."
        account = status.get("account", {})

        return ContentItem(
            id=status.get("uri") or status["id"],
            source_id=self.source_id,
            source_name=self.source.name or account.get("display_name", self.username),
            content_type=ContentType.SOCIAL_POST,
            published_at=published_at,
            title=title,
            description=text,
            subtitle=f"@{self.username}@{self.instance}",
            url=status.get("url") or "",
        )
