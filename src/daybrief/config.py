"""Configuration loading from TOML."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .defaults import config_dir
from .errors import ConfigError

SOURCE_TYPES = ("rss", "podcast", "reddit", "mastodon")


def expand_env_var(value: str) -> str:
    """Resolve "env:NAME" references, leaving the reference if unset."""
    if isinstance(value, str) and value.startswith("env:"):
        return os.environ.get(value[4:], value)
    return value


@dataclass
class SourceConfig:
    """One configured content source."""

    type: str  # rss, podcast, reddit, mastodon
    url: str
    name: Optional[str] = None
    id: Optional[str] = None

    @property
    def source_id(self) -> str:
        return self.id or f"{self.type}:{self.url}"

    @property
    def display_name(self) -> str:
        return self.name or self.url


@dataclass
class Config:
    """Configuration dataclass with validation.

    Loads from ~/.config/daybrief/config.toml.
    """

    user_id: str = "default"
    lookback_hours: int = 24
    fetch_timeout_seconds: float = 15
    max_items_per_source: int = 25
    retention_days: int = 30
    exploration_seed: Optional[int] = None

    reddit_client_id: str = "env:REDDIT_CLIENT_ID"
    reddit_client_secret: str = "env:REDDIT_CLIENT_SECRET"
    reddit_user_agent: str = "daybrief:local:v1.0"

    sources: List[SourceConfig] = field(default_factory=list)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigError: If any configuration values are invalid.
        """
        if not self.user_id:
            raise ConfigError("user_id must not be empty")
        if not 1 <= self.lookback_hours <= 24 * 7:
            raise ConfigError(
                f"lookback_hours must be between 1 and 168, got {self.lookback_hours}"
            )
        if self.fetch_timeout_seconds <= 0:
            raise ConfigError(
                f"fetch_timeout_seconds must be positive, got {self.fetch_timeout_seconds}"
            )
        if not 1 <= self.max_items_per_source <= 100:
            raise ConfigError(
                f"max_items_per_source must be between 1 and 100, got {self.max_items_per_source}"
            )
        if not 1 <= self.retention_days <= 365:
            raise ConfigError(
                f"retention_days must be between 1 and 365, got {self.retention_days}"
            )
        for source in self.sources:
            if source.type not in SOURCE_TYPES:
                raise ConfigError(
                    f"Unknown source type '{source.type}' for {source.url}, "
                    f"expected one of: {', '.join(SOURCE_TYPES)}"
                )
            if not source.url:
                raise ConfigError(f"Source '{source.name}' has no url")

    @property
    def reddit_configured(self) -> bool:
        if not (self.reddit_client_id and self.reddit_client_secret):
            return False
        return not (
            self.reddit_client_id.startswith("env:")
            or self.reddit_client_secret.startswith("env:")
        )

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from a TOML file.

        Args:
            config_path: Optional path to config file.
                Defaults to $XDG_CONFIG_HOME/daybrief/config.toml

        Returns:
            Validated Config instance.
        """
        if config_path is None:
            config_path = config_dir() / "config.toml"

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                "Run 'daybrief init' to create a default configuration."
            )

        try:
            with open(config_path, "rb") as f:
                config_dict = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse config file {config_path}: {e}")

        brief = config_dict.get("brief", {})
        reddit = config_dict.get("reddit", {})
        defaults = cls()

        try:
            sources = [
                SourceConfig(
                    type=entry["type"],
                    url=entry["url"],
                    name=entry.get("name"),
                    id=entry.get("id"),
                )
                for entry in config_dict.get("sources", [])
            ]
        except KeyError as e:
            raise ConfigError(f"Source entry missing required field: {e}")

        config = cls(
            user_id=brief.get("user_id", defaults.user_id),
            lookback_hours=brief.get("lookback_hours", defaults.lookback_hours),
            fetch_timeout_seconds=brief.get(
                "fetch_timeout_seconds", defaults.fetch_timeout_seconds
            ),
            max_items_per_source=brief.get(
                "max_items_per_source", defaults.max_items_per_source
            ),
            retention_days=brief.get("retention_days", defaults.retention_days),
            exploration_seed=brief.get("exploration_seed"),
            reddit_client_id=expand_env_var(
                reddit.get("client_id", defaults.reddit_client_id)
            ),
            reddit_client_secret=expand_env_var(
                reddit.get("client_secret", defaults.reddit_client_secret)
            ),
            reddit_user_agent=reddit.get("user_agent", defaults.reddit_user_agent),
            sources=sources,
        )

        config.validate()
        return config
