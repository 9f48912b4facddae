"""Brief generation: fan-out fetch, score, select, assemble."""

import asyncio
import logging
import random
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console

from .assembler import BriefAssembler
from .clock import Clock, SystemClock
from .engagement import EngagementRecorder
from .fetchers.base import ContentSource
from .models import Brief, BriefMode, ContentItem, EngagementAction, EngagementEvent
from .modes import select_mode
from .observability import (
    BRIEF_COMPLETE,
    BRIEF_DISCARDED,
    SOURCE_FETCH_ERROR,
    SOURCE_FETCH_TIMEOUT,
    EventLog,
)
from .profile import UserBehaviorProfile
from .scorer import ContentScorer
from .selection import SelectionEngine
from .storage import Storage

logger = logging.getLogger(__name__)


class BriefGenerator:
    """Caller-facing API for generating briefs and recording engagement.

    All collaborators are injected: content sources, the user's profile,
    the clock and the random source for exploration noise. Storage is
    optional; when given, briefs and profile updates are persisted.

    Only the source fan-out runs concurrently. Each generation gets its own
    thread pool and every fetch runs there under its own timeout; a failing
    or slow source simply contributes no candidates. The pool is shut down
    without waiting, so an overrunning fetch never holds up the caller. A generation that has been superseded by a
    newer one (e.g. ``refresh_brief``) still returns its brief but does not
    replace ``current_brief``.
    """

    def __init__(
        self,
        sources: Sequence[ContentSource],
        profile: UserBehaviorProfile,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        lookback_hours: int = 24,
        fetch_timeout_seconds: float = 15,
        storage: Optional[Storage] = None,
        user_id: str = "default",
        console: Optional[Console] = None,
        event_log: Optional[EventLog] = None,
    ):
        self.sources = list(sources)
        self.profile = profile
        self.clock = clock or SystemClock()
        self.lookback_hours = lookback_hours
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.storage = storage
        self.user_id = user_id
        self.console = console
        self.event_log = event_log or EventLog(clock=self.clock)

        self.scorer = ContentScorer(clock=self.clock, rng=rng)
        self.selection = SelectionEngine(self.scorer, clock=self.clock)
        self.assembler = BriefAssembler(clock=self.clock)
        self.recorder = EngagementRecorder(
            profile,
            brief_lookup=lambda: self.current_brief,
            clock=self.clock,
            event_log=self.event_log,
        )

        self.current_brief: Optional[Brief] = None
        self.last_stats: Dict[str, Any] = {}
        self._ticket = 0
        self._lock = threading.Lock()

    def _print(self, message: str) -> None:
        if self.console:
            self.console.print(message)

    async def _fetch_source(
        self,
        source: ContentSource,
        since: datetime,
        stats: Dict[str, Any],
        executor: Executor,
    ) -> List[ContentItem]:
        """Fetch one source; any failure or timeout yields no items."""
        loop = asyncio.get_running_loop()
        try:
            items = await asyncio.wait_for(
                loop.run_in_executor(executor, source.fetch_recent, since),
                timeout=self.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            error_msg = f"Timed out after {self.fetch_timeout_seconds}s fetching {source.name}"
            logger.warning(error_msg)
            self.event_log.emit(SOURCE_FETCH_TIMEOUT, source_id=source.source_id)
            stats["errors"].append(error_msg)
            stats["sources_failed"] += 1
            self._print(f"  [yellow]⏱  {error_msg}[/yellow]")
            return []
        except Exception as e:
            error_msg = f"Failed to fetch from {source.name}: {e}"
            logger.warning(error_msg)
            self.event_log.emit(SOURCE_FETCH_ERROR, source_id=source.source_id, error=str(e))
            stats["errors"].append(error_msg)
            stats["sources_failed"] += 1
            self._print(f"  [red]{error_msg}[/red]")
            return []

        stats["sources_ok"] += 1
        self._print(f"  📰 Fetched {len(items)} items from {source.name}")
        return list(items)

    async def gather_candidates(
        self, since: datetime, stats: Optional[Dict[str, Any]] = None
    ) -> List[ContentItem]:
        """Fetch all sources concurrently and merge their items.

        Items are de-duplicated by id, keeping the first occurrence in
        source order.
        """
        if stats is None:
            stats = {"sources_ok": 0, "sources_failed": 0, "errors": []}

        executor = ThreadPoolExecutor(
            max_workers=max(len(self.sources), 1), thread_name_prefix="daybrief-fetch"
        )
        try:
            batches = await asyncio.gather(
                *(
                    self._fetch_source(source, since, stats, executor)
                    for source in self.sources
                )
            )
        finally:
            # Timed-out fetches keep running in their threads; do not wait
            executor.shutdown(wait=False, cancel_futures=True)

        seen = set()
        candidates = []
        for batch in batches:
            for item in batch:
                if item.id in seen:
                    continue
                seen.add(item.id)
                candidates.append(item)
        return candidates

    async def generate_brief(self, mode: Optional[BriefMode] = None) -> Brief:
        """Generate a new brief, in ``mode`` or the mode for the current time.

        Raises:
            TypeError: If ``mode`` is not a BriefMode
        """
        if mode is not None and not isinstance(mode, BriefMode):
            raise TypeError(f"mode must be a BriefMode, got {type(mode).__name__}")

        with self._lock:
            self._ticket += 1
            ticket = self._ticket

        start_time = time.time()
        now = self.clock.now()
        mode = mode or select_mode(now)
        since = now - timedelta(hours=self.lookback_hours)
        stats: Dict[str, Any] = {
            "mode": mode.name,
            "sources_ok": 0,
            "sources_failed": 0,
            "candidates": 0,
            "selected": 0,
            "errors": [],
        }

        self._print(
            f"📡 Fetching from {len(self.sources)} source(s) for a {mode.display_name}..."
        )
        candidates = await self.gather_candidates(since, stats)
        stats["candidates"] = len(candidates)

        selected = self.selection.select(candidates, mode, self.profile)
        brief = self.assembler.assemble(selected, mode, self.profile)
        stats["selected"] = len(brief.items)

        with self._lock:
            superseded = ticket != self._ticket
            if not superseded:
                self.current_brief = brief
                self.last_stats = stats

        if superseded:
            logger.info(f"Discarding brief {brief.id}: superseded by a newer generation")
            self.event_log.emit(BRIEF_DISCARDED, brief_id=brief.id, mode=mode.name)
            return brief

        self.profile.mark_brief_generated(brief.generated_at)
        if self.storage is not None:
            self.storage.put_brief(brief, self.user_id)
            self.storage.put_profile(self.user_id, self.profile)

        logger.info(
            f"Generated {mode.name} brief with {len(brief.items)} items "
            f"from {len(candidates)} candidates"
        )
        self.event_log.emit(
            BRIEF_COMPLETE,
            brief_id=brief.id,
            mode=mode.name,
            candidates=len(candidates),
            items=len(brief.items),
            sources_failed=stats["sources_failed"],
            read_time_seconds=brief.total_read_time_seconds,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return brief

    async def refresh_brief(self) -> Brief:
        """Drop the current brief and generate a fresh one."""
        with self._lock:
            self.current_brief = None
        return await self.generate_brief()

    def record_engagement(
        self,
        brief_item_id: str,
        content_item_id: str,
        dwell_time: float,
        action: EngagementAction,
    ) -> EngagementEvent:
        """Record an interaction and persist the updated profile."""
        event = self.recorder.record_engagement(
            brief_item_id, content_item_id, dwell_time, action
        )
        if self.storage is not None:
            self.storage.put_profile(self.user_id, self.profile)
        return event
