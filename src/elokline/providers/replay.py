"""Replay source for recorded game exports.

Feeds a saved NDJSON export back through the chunked decoder, applying
the same perf / since / max filters the Lichess endpoint applies. Used
for offline runs and tests without calling the real API.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

from elokline.core.config import DEFAULT_MAX_GAMES
from elokline.models.types import Perf, RawGame
from elokline.providers.base import GameSourceBase
from elokline.providers.ndjson import iter_games


class ReplayGameSource(GameSourceBase):
    """Game source that replays NDJSON bytes in fixed-size chunks.

    Each call records its arguments in `calls` so callers can inspect
    which checkpoint was requested.
    """

    def __init__(self, payload: bytes, chunk_size: int = 64):
        """Initialize replay source.

        Args:
            payload: NDJSON export, one game per line.
            chunk_size: Bytes per replayed chunk. Small values exercise
                line reassembly across chunk boundaries.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.payload = payload
        self.chunk_size = chunk_size
        self.calls: list[dict] = []

    @classmethod
    def from_games(cls, games: list[dict], chunk_size: int = 64) -> ReplayGameSource:
        """Build a source from game dicts in Lichess wire format."""
        payload = "".join(json.dumps(g) + "\n" for g in games).encode("utf-8")
        return cls(payload, chunk_size=chunk_size)

    @classmethod
    def from_file(cls, path: Path, chunk_size: int = 8192) -> ReplayGameSource:
        """Build a source from an NDJSON file on disk."""
        return cls(Path(path).read_bytes(), chunk_size=chunk_size)

    def _chunks(self) -> Iterator[bytes]:
        for start in range(0, len(self.payload), self.chunk_size):
            yield self.payload[start : start + self.chunk_size]

    def stream_games(
        self,
        username: str,
        perf: Perf,
        max_games: int = DEFAULT_MAX_GAMES,
        since_ms: int | None = None,
    ) -> Iterator[RawGame]:
        """Replay games matching perf and since, up to max_games."""
        self.calls.append(
            {"username": username, "perf": perf, "max_games": max_games, "since_ms": since_ms}
        )

        count = 0
        for game in iter_games(self._chunks()):
            if count >= max_games:
                return
            if game.perf != perf:
                continue
            if since_ms is not None and game.created_at < since_ms:
                continue
            count += 1
            yield game
