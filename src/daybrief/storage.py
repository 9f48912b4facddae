"""Repository pattern storage for profiles and briefs."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from .database import default_db_path, get_db_connection, init_db
from .errors import ProfileCorruptionError
from .models import Brief
from .profile import RETENTION_DAYS, UserBehaviorProfile

logger = logging.getLogger(__name__)


class Storage:
    """Key-value persistence for user profiles and generated briefs.

    All SQL stays in this class. Documents are stored as JSON.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize storage, creating the database if needed.

        Args:
            db_path: Optional custom database path for testing.
                     Defaults to $XDG_DATA_HOME/daybrief/daybrief.db
        """
        self.db_path = db_path or default_db_path()
        init_db(self.db_path)
        self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Lazily opened connection, reused across operations."""
        if self._conn is None:
            self._conn = get_db_connection(self.db_path)
        return self._conn

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_profile(
        self, user_id: str, retention_days: int = RETENTION_DAYS
    ) -> Optional[UserBehaviorProfile]:
        """Load a stored profile that keeps ``retention_days`` of history.

        Returns:
            The profile, or None if the user has none yet

        Raises:
            ProfileCorruptionError: If the stored document is unreadable
        """
        row = self.conn.execute(
            "SELECT data FROM profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        try:
            data = json.loads(row["data"])
        except json.JSONDecodeError as e:
            raise ProfileCorruptionError(f"Profile for {user_id} is not JSON: {e}") from e
        return UserBehaviorProfile.from_dict(data, retention_days=retention_days)

    def load_profile(
        self, user_id: str, retention_days: int = RETENTION_DAYS
    ) -> UserBehaviorProfile:
        """Load a profile, substituting an empty one if missing or corrupt."""
        try:
            profile = self.get_profile(user_id, retention_days)
        except ProfileCorruptionError as e:
            logger.warning(f"Discarding corrupt profile for {user_id}: {e}")
            profile = None
        return profile or UserBehaviorProfile(retention_days=retention_days)

    def put_profile(self, user_id: str, profile: UserBehaviorProfile) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO profiles (user_id, data, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id) DO UPDATE SET
                    data = excluded.data,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (user_id, json.dumps(profile.to_dict())),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise sqlite3.Error(f"Failed to save profile: {e}")

    def put_brief(self, brief: Brief, user_id: str = "default") -> None:
        try:
            self.conn.execute(
                """
                INSERT OR REPLACE INTO briefs (id, user_id, generated_at, mode, data)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    brief.id,
                    user_id,
                    brief.generated_at.isoformat(),
                    brief.mode.name,
                    json.dumps(brief.to_dict()),
                ),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise sqlite3.Error(f"Failed to save brief: {e}")

    def get_brief(self, brief_id: str) -> Optional[Brief]:
        row = self.conn.execute(
            "SELECT data FROM briefs WHERE id = ?", (brief_id,)
        ).fetchone()
        return Brief.from_dict(json.loads(row["data"])) if row else None

    def get_latest_brief(self, user_id: str = "default") -> Optional[Brief]:
        briefs = self.list_briefs(user_id, limit=1)
        return briefs[0] if briefs else None

    def list_briefs(self, user_id: str = "default", limit: int = 10) -> List[Brief]:
        """Most recent briefs first."""
        rows = self.conn.execute(
            """
            SELECT data FROM briefs
            WHERE user_id = ?
            ORDER BY generated_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
        return [Brief.from_dict(json.loads(row["data"])) for row in rows]
