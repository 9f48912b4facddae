"""Reddit fetcher using PRAW; posts become forum-post items."""

import logging
import re
import time
from datetime import datetime, timezone
from typing import List, Optional

import praw

from ..config import Config, SourceConfig
from ..errors import SourceFetchError
from ..models import ContentItem, ContentType
from ..observability import FETCHER_COMPLETE, FETCHER_ERROR, EventLog

logger = logging.getLogger(__name__)

IMAGE_DOMAINS = (
    "i.redd.it",
    "i.imgur.com",
    "imgur.com",
    "gfycat.com",
    "v.redd.it",
    "youtube.com",
    "youtu.be",
    "streamable.com",
)
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".mp4", ".webm")


class RedditFetcher:
    """Fetches hot posts from one subreddit in read-only mode."""

    def __init__(
        self,
        source: SourceConfig,
        config: Optional[Config] = None,
        max_items: Optional[int] = None,
        reddit: Optional[praw.Reddit] = None,
        event_log: Optional[EventLog] = None,
    ):
        """Initialize the Reddit fetcher.

        Args:
            source: Configured source whose url names the subreddit
            config: Config with Reddit credentials
            max_items: Maximum posts per fetch (uses config if None)
            reddit: Optional preconfigured PRAW client
            event_log: Sink for fetch events
        """
        config = config or Config()
        self.source = source
        self.source_id = source.source_id
        self.name = source.display_name
        self.max_items = max_items or config.max_items_per_source
        self.subreddit_name = self._parse_subreddit_name(source.url)

        if reddit is None:
            reddit = praw.Reddit(
                client_id=config.reddit_client_id,
                client_secret=config.reddit_client_secret,
                user_agent=config.reddit_user_agent,
            )
            reddit.read_only = True
        self.reddit = reddit
        self.event_log = event_log or EventLog()

    def fetch_recent(self, since: datetime) -> List[ContentItem]:
        """Fetch hot, non-stickied text/link posts created at or after ``since``.

        Raises:
            SourceFetchError: If the subreddit cannot be read
        """
        start_time = time.time()
        items = []

        try:
            if not self.subreddit_name:
                raise ValueError(f"Could not parse subreddit from URL: {self.source.url}")

            logger.info(f"Fetching posts from r/{self.subreddit_name}")
            subreddit = self.reddit.subreddit(self.subreddit_name)

            # Extra headroom for posts dropped by the filters below
            for submission in subreddit.hot(limit=self.max_items + 50):
                if submission.stickied or self._is_image_post(submission):
                    continue

                published_at = datetime.fromtimestamp(
                    submission.created_utc, tz=timezone.utc
                )
                if published_at < since:
                    continue

                items.append(self._to_content_item(submission, published_at))
                if len(items) >= self.max_items:
                    break

            logger.info(f"Fetched {len(items)} posts from r/{self.subreddit_name}")
            self.event_log.emit(
                FETCHER_COMPLETE,
                fetcher_type="reddit",
                source_id=self.source_id,
                subreddit=self.subreddit_name,
                items_count=len(items),
                duration_ms=int((time.time() - start_time) * 1000),
                status="success",
            )

        except Exception as e:
            self.event_log.emit(
                FETCHER_ERROR,
                fetcher_type="reddit",
                source_id=self.source_id,
                subreddit=self.subreddit_name,
                error=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
                status="error",
            )
            raise SourceFetchError(self.source_id, e) from e

        return items

    def _parse_subreddit_name(self, url: str) -> str:
        """Subreddit name from a URL, "r/name" or a bare name; "" if none."""
        url = url.replace("https://", "").replace("http://", "").replace("www.", "")

        patterns = [
            r"reddit\.com/r/([a-zA-Z0-9_]+)",
            r"^r/([a-zA-Z0-9_]+)",
            r"^([a-zA-Z0-9_]+)$",
        ]
        for pattern in patterns:
            match = re.search(pattern, url)
            if match:
                return match.group(1)
        return ""

    def _is_image_post(self, submission) -> bool:
        if submission.is_self:
            return False
        url = submission.url.lower()
        return any(domain in url for domain in IMAGE_DOMAINS) or url.endswith(
            IMAGE_EXTENSIONS
        )

    def _to_content_item(self, submission, published_at: datetime) -> ContentItem:
        url = f"https://reddit.com{submission.permalink}"

        if submission.is_self and submission.selftext:
            description = submission.selftext
        else:
            description = f"Link: {submission.url}"
        if description.strip() in ("[deleted]", "[removed]"):
            description = ""

        author = str(submission.author) if submission.author else "[deleted]"
        comments = getattr(submission, "num_comments", 0)

        return ContentItem(
            id=url,
            source_id=self.source_id,
            source_name=self.source.name or f"r/{self.subreddit_name}",
            content_type=ContentType.FORUM_POST,
            published_at=published_at,
            title=submission.title,
            description=description,
            subtitle=f"Posted by u/{author} • {comments} comments",
            url=url,
        )
