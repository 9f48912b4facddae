"""Structured event log: one JSON object per line, one file per day.

Components receive an ``EventLog`` through their constructor. Events are
written under $XDG_DATA_HOME/daybrief/events/YYYY-MM-DD.jsonl, which keeps
generation and engagement history greppable without a database.
"""

import fcntl
import json
import logging
import os
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from .clock import Clock, SystemClock

logger = logging.getLogger(__name__)

# Event names written by daybrief
FETCHER_COMPLETE = "fetcher.complete"
FETCHER_ERROR = "fetcher.error"
SOURCE_FETCH_ERROR = "source.fetch.error"
SOURCE_FETCH_TIMEOUT = "source.fetch.timeout"
BRIEF_COMPLETE = "brief.generate.complete"
BRIEF_DISCARDED = "brief.generate.discarded"
ENGAGEMENT_RECORDED = "engagement.recorded"


def default_log_dir() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    return Path(data_home) / "daybrief" / "events"


class EventLog:
    """Append-only JSONL event sink shared by the generator, recorder and fetchers.

    Writes take an exclusive ``flock`` so concurrent CLI runs interleave whole
    lines. A failed write is reported through ``logging`` and never raised.
    """

    def __init__(self, base_dir: Optional[Path] = None, clock: Optional[Clock] = None):
        self.base_dir = base_dir or default_log_dir()
        self.clock = clock or SystemClock()

    def path_for(self, day: date) -> Path:
        return self.base_dir / f"{day.isoformat()}.jsonl"

    def emit(self, event: str, **fields: Any) -> None:
        """Append ``event`` with ``fields`` to the current day's file."""
        now = self.clock.now()
        line = json.dumps({"ts": now.isoformat(), "event": event, **fields}, default=str)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            with open(self.path_for(now.date()), "a") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    f.write(line + "\n")
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            logger.warning(f"Could not write event '{event}': {e}")

    def prune(self, retention_days: int) -> int:
        """Delete day files older than ``retention_days``. Returns the count removed."""
        if not self.base_dir.exists():
            return 0

        cutoff = self.clock.now().date() - timedelta(days=retention_days)
        removed = 0
        for path in self.base_dir.glob("*.jsonl"):
            try:
                day = datetime.strptime(path.stem, "%Y-%m-%d").date()
            except ValueError:
                continue
            if day < cutoff:
                path.unlink(missing_ok=True)
                removed += 1

        if removed:
            logger.debug(f"Pruned {removed} event files older than {cutoff}")
        return removed
