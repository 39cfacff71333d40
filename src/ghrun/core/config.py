"""Configuration management for ghrun.

Configuration is read once at process start from the environment (optionally
seeded from a .env file) and is immutable afterwards.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from ghrun.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


def init_env(dotenv_path: Optional[str] = None) -> None:
    """Load environment variables from a .env file.

    Existing environment variables take precedence over the file.

    Args:
        dotenv_path: Optional path to a specific .env file to load.
    """
    load_dotenv(dotenv_path=dotenv_path)


def _env_number(name: str, default: float, cast=float):
    """Parse a positive numeric environment variable, falling back to default."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Invalid value for %s '%s', using default %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, got '%s', using default %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class GitHubConfig:
    """Target repository and credentials.

    Attributes:
        owner: Repository owner (user or organization)
        repo: Repository name
        token: Personal access token or app token
        api_url: Base URL of the GitHub REST API
        timeout: HTTP timeout in seconds
    """

    owner: str
    repo: str
    token: str
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0

    def __post_init__(self):
        """Validate configuration values."""
        if not self.owner:
            raise ConfigurationError("owner cannot be empty")
        if not self.repo:
            raise ConfigurationError("repo cannot be empty")
        if not self.token:
            raise ConfigurationError("token cannot be empty")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    def __repr__(self) -> str:
        return (
            f"GitHubConfig(owner={self.owner!r}, repo={self.repo!r}, "
            f"token=<{len(self.token)} chars>, api_url={self.api_url!r})"
        )

    @classmethod
    def from_env(cls) -> "GitHubConfig":
        """Build configuration from GITHUB_* environment variables.

        Raises:
            ConfigurationError: If any required variable is missing
        """
        owner = os.environ.get("GITHUB_OWNER", "")
        repo = os.environ.get("GITHUB_REPO", "")
        token = os.environ.get("GITHUB_TOKEN", "")

        logger.debug(
            "Reading configuration from environment variables: "
            "has_owner=%s has_repo=%s has_token=%s",
            bool(owner),
            bool(repo),
            bool(token),
        )

        missing = []
        if not owner:
            missing.append("GITHUB_OWNER")
        if not repo:
            missing.append("GITHUB_REPO")
        if not token:
            missing.append("GITHUB_TOKEN")

        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}. "
                f"Please set GITHUB_OWNER, GITHUB_REPO, and GITHUB_TOKEN "
                f"in your environment or .env file."
            )

        return cls(
            owner=owner,
            repo=repo,
            token=token,
            api_url=os.environ.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=_env_number("GHRUN_HTTP_TIMEOUT", 30.0),
        )


@dataclass(frozen=True)
class PollerConfig:
    """Timing knobs for run observation.

    Attributes:
        interval_seconds: Seconds to wait between status checks
        max_attempts: Maximum number of status checks before timing out
        settle_seconds: Delay after pushing before listing runs
    """

    interval_seconds: float = 10.0
    max_attempts: int = 60
    settle_seconds: float = 2.0

    def __post_init__(self):
        """Validate configuration values."""
        if self.interval_seconds < 0:
            raise ConfigurationError("interval_seconds cannot be negative")
        if self.max_attempts <= 0:
            raise ConfigurationError("max_attempts must be positive")
        if self.settle_seconds < 0:
            raise ConfigurationError("settle_seconds cannot be negative")

    @property
    def max_wait_seconds(self) -> float:
        """Upper bound on time spent polling one run."""
        return self.interval_seconds * self.max_attempts

    @classmethod
    def from_env(cls) -> "PollerConfig":
        """Build poller configuration from GHRUN_* environment variables."""
        return cls(
            interval_seconds=_env_number("GHRUN_POLL_INTERVAL", 10.0),
            max_attempts=_env_number("GHRUN_POLL_MAX_ATTEMPTS", 60, cast=int),
            settle_seconds=_env_number("GHRUN_SETTLE_SECONDS", 2.0),
        )
