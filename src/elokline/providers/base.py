"""Base game source interface.

A game source has one narrow job: stream_games(...) -> lazy RawGame iterator.
Sources must not aggregate, persist, or shape output for the UI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from elokline.core.config import DEFAULT_MAX_GAMES
from elokline.models.types import Perf, RawGame


class GameSourceBase(ABC):
    """Abstract base class for game history sources.

    The returned iterator is single-pass and not restartable. Callers that
    need the whole history must materialize it into a list. Closing the
    iterator early must release any underlying connection.
    """

    @abstractmethod
    def stream_games(
        self,
        username: str,
        perf: Perf,
        max_games: int = DEFAULT_MAX_GAMES,
        since_ms: int | None = None,
    ) -> Iterator[RawGame]:
        """Stream rated games of one speed category for a user.

        Args:
            username: Lichess username.
            perf: Speed category to fetch.
            max_games: Upper bound on the number of games yielded.
            since_ms: Only games created at or after this timestamp.

        Returns:
            Iterator of RawGame in upstream order.
        """
        pass
