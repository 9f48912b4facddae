"""Default configuration file for daybrief."""

import os
from pathlib import Path


DEFAULT_CONFIG_TOML = """# daybrief configuration

[brief]
user_id = "default"  # profile key in the local store
lookback_hours = 24  # only content newer than this is considered
fetch_timeout_seconds = 15  # per-source fetch time box
max_items_per_source = 25  # cap on items a single source may contribute
retention_days = 30  # engagement history window
# exploration_seed = 42  # uncomment for reproducible exploration noise

[reddit]
client_id = "env:REDDIT_CLIENT_ID"  # Reddit API client ID
client_secret = "env:REDDIT_CLIENT_SECRET"  # Reddit API client secret
user_agent = "daybrief:local:v1.0"  # User agent for API requests

# One [[sources]] table per feed. type = rss | podcast | reddit | mastodon

[[sources]]
type = "rss"
name = "Simon Willison"
url = "https://simonwillison.net/atom/everything/"

[[sources]]
type = "reddit"
name = "r/python"
url = "https://reddit.com/r/python"

[[sources]]
type = "podcast"
name = "Talk Python"
url = "https://talkpython.fm/episodes/rss"

[[sources]]
type = "mastodon"
name = "Python Software Foundation"
url = "https://fosstodon.org/@ThePSF"
"""


def config_dir() -> Path:
    """$XDG_CONFIG_HOME/daybrief (or ~/.config/daybrief)."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(xdg_config_home) / "daybrief"


def ensure_config() -> Path:
    """Create the default config file if it does not exist.

    Returns:
        Path to config.toml
    """
    directory = config_dir()
    directory.mkdir(parents=True, exist_ok=True)

    config_file = directory / "config.toml"
    if not config_file.exists():
        config_file.write_text(DEFAULT_CONFIG_TOML)
    return config_file


if __name__ == "__main__":
    print(ensure_config())
