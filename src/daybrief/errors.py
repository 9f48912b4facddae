"""Exception types for daybrief.

Only ``ConfigError`` is expected to reach a user. Source and profile
failures are absorbed below the generation boundary.
"""


class DayBriefError(Exception):
    """Base class for daybrief errors."""


class SourceFetchError(DayBriefError):
    """A single content source failed or timed out."""

    def __init__(self, source_id: str, cause: BaseException):
        super().__init__(f"Source {source_id} failed: {cause}")
        self.source_id = source_id
        self.cause = cause


class ProfileCorruptionError(DayBriefError):
    """Persisted profile data could not be deserialized."""


class ConfigError(DayBriefError, ValueError):
    """Configuration file is missing required fields or holds bad values."""
