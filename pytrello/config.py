"""Credentials and settings loaded from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


@dataclass(frozen=True)
class TrelloConfig:
    api_key: str
    token: str
    base_url: str = "https://api.trello.com/1"
    timeout: float = 30.0

    def __repr__(self) -> str:
        # Never print credentials
        return f"TrelloConfig(base_url={self.base_url!r}, timeout={self.timeout!r})"


def load_env_file(path: str | Path) -> int:
    """Copy ``KEY=value`` lines from a .env file into os.environ

    Existing environment variables are never overridden. Blank lines and
    ``#`` comments are skipped.

    Returns:
        Number of variables set
    """
    path = Path(path)
    if not path.exists():
        return 0

    count = 0
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip("'\"")
            if key not in os.environ:
                os.environ[key] = value
                count += 1

    logger.debug("Loaded %d variables from %s", count, path)
    return count


def load_config(env_file: str | Path | None = None) -> TrelloConfig:
    """Build a TrelloConfig from TRELLO_* environment variables

    Args:
        env_file: .env file to merge first. Defaults to $TRELLO_ENV_FILE, or
                  ``.env`` in the working directory.

    Raises:
        ValueError: If TRELLO_API_KEY or TRELLO_TOKEN is missing
    """
    load_env_file(env_file or os.getenv("TRELLO_ENV_FILE", DEFAULT_ENV_FILE))

    api_key = os.getenv("TRELLO_API_KEY")
    token = os.getenv("TRELLO_TOKEN")
    if not api_key or not token:
        raise ValueError(
            "Missing required Trello credentials.\n"
            "Set TRELLO_API_KEY and TRELLO_TOKEN in your environment or a .env file.\n"
            "Get credentials at: https://trello.com/power-ups/admin"
        )

    timeout = os.getenv("TRELLO_TIMEOUT")
    try:
        timeout_value = float(timeout) if timeout else 30.0
    except ValueError as e:
        raise ValueError(f"TRELLO_TIMEOUT must be a number of seconds, got {timeout!r}") from e

    return TrelloConfig(
        api_key=api_key,
        token=token,
        base_url=os.getenv("TRELLO_BASE_URL") or "https://api.trello.com/1",
        timeout=timeout_value,
    )
