"""Lichess game export source.

Streams GET /api/games/user/{username} as NDJSON and decodes games
incrementally while the response is still arriving.
"""

from __future__ import annotations

import logging
from typing import Iterator
from urllib.parse import quote

import requests

from elokline.core.config import DEFAULT_LICHESS_URL, DEFAULT_MAX_GAMES, DEFAULT_TIMEOUT_S
from elokline.models.types import Perf, RawGame
from elokline.providers.base import GameSourceBase
from elokline.providers.ndjson import iter_games

logger = logging.getLogger(__name__)

NDJSON_CONTENT_TYPE = "application/x-ndjson"
DEFAULT_CHUNK_SIZE = 8192


class LichessGameSource(GameSourceBase):
    """Game source backed by the Lichess HTTP API.

    The HTTP response is opened lazily on first iteration and closed when
    iteration ends, fails, or the consumer closes the generator.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_LICHESS_URL,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize the source.

        Args:
            base_url: API root, e.g. https://lichess.org/api.
            token: Optional personal access token (raises rate limits).
            session: Optional requests session to reuse connections.
            timeout: Connect/read timeout in seconds.
            chunk_size: Bytes requested per read from the response.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    def _build_params(self, perf: Perf, max_games: int, since_ms: int | None) -> dict:
        params = {
            "rated": "true",
            "perfType": perf,
            "max": max_games,
            "moves": "false",
        }
        if since_ms is not None:
            params["since"] = since_ms
        return params

    def _build_headers(self) -> dict:
        headers = {"Accept": NDJSON_CONTENT_TYPE}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def stream_games(
        self,
        username: str,
        perf: Perf,
        max_games: int = DEFAULT_MAX_GAMES,
        since_ms: int | None = None,
    ) -> Iterator[RawGame]:
        """Stream rated games for a user from Lichess.

        Raises:
            requests.HTTPError: If Lichess answers with an error status.
            requests.RequestException: On connection failures.
            GameDecodeError: If a streamed line is corrupt.
        """
        url = f"{self.base_url}/games/user/{quote(username, safe='')}"
        params = self._build_params(perf, max_games, since_ms)

        logger.info(f"Requesting {perf} games for {username} (max={max_games}, since={since_ms})")
        with self.session.get(
            url,
            params=params,
            headers=self._build_headers(),
            stream=True,
            timeout=self.timeout,
        ) as response:
            response.raise_for_status()
            count = 0
            for game in iter_games(response.iter_content(chunk_size=self.chunk_size), max_games):
                count += 1
                yield game
            logger.info(f"Stream for {username} closed after {count} games")


def stream_user_games(
    username: str,
    perf: Perf,
    max_games: int = DEFAULT_MAX_GAMES,
    since_ms: int | None = None,
    source: GameSourceBase | None = None,
) -> Iterator[RawGame]:
    """Stream games with a default Lichess source.

    Args:
        username: Lichess username.
        perf: Speed category.
        max_games: Upper bound on games yielded.
        since_ms: Optional resume checkpoint (ms since epoch).
        source: Source to use instead of a fresh LichessGameSource.

    Returns:
        Lazy iterator of RawGame.
    """
    source = source or LichessGameSource()
    return source.stream_games(username, perf, max_games=max_games, since_ms=since_ms)
