"""Runtime configuration from environment variables.

Variables:
- ELOKLINE_DB_PATH: SQLite cache file (default data/elokline.db)
- ELOKLINE_LICHESS_URL: Lichess API base URL
- LICHESS_TOKEN: optional personal API token
- ELOKLINE_TIMEOUT_S: HTTP timeout in seconds
- ELOKLINE_MAX_GAMES: upper bound on games per fetch
- ELOKLINE_LOG_LEVEL: logging level name
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_DB_PATH = Path("data/elokline.db")
DEFAULT_LICHESS_URL = "https://lichess.org/api"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_MAX_GAMES = 100_000
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Resolved settings for the API, worker, and CLI."""

    db_path: Path = DEFAULT_DB_PATH
    lichess_base_url: str = DEFAULT_LICHESS_URL
    lichess_token: str | None = None
    request_timeout_s: float = DEFAULT_TIMEOUT_S
    max_games: int = DEFAULT_MAX_GAMES
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Settings with defaults for unset variables.

        Raises:
            ValueError: If a numeric variable is malformed or out of range.
        """
        env = os.environ if environ is None else environ

        timeout = _parse_number(env, "ELOKLINE_TIMEOUT_S", DEFAULT_TIMEOUT_S, float)
        max_games = _parse_number(env, "ELOKLINE_MAX_GAMES", DEFAULT_MAX_GAMES, int)
        if timeout <= 0:
            raise ValueError(f"ELOKLINE_TIMEOUT_S must be positive, got {timeout}")
        if max_games <= 0:
            raise ValueError(f"ELOKLINE_MAX_GAMES must be positive, got {max_games}")

        return cls(
            db_path=Path(env.get("ELOKLINE_DB_PATH", str(DEFAULT_DB_PATH))),
            lichess_base_url=env.get("ELOKLINE_LICHESS_URL", DEFAULT_LICHESS_URL).rstrip("/"),
            lichess_token=env.get("LICHESS_TOKEN") or None,
            request_timeout_s=timeout,
            max_games=max_games,
            log_level=env.get("ELOKLINE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )


def _parse_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} is not a valid number: {raw!r}") from e
