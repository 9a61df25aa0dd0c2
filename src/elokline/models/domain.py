"""Domain models for elokline.

Pure Python dataclasses used by the aggregation and persistence layers.
These models are independent of SQLAlchemy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from elokline.models.types import DailyRecord, WinLossDraw

# ============================================================================
# Aggregation Domain
# ============================================================================

Outcome = Literal["win", "loss", "draw", "none"]


@dataclass
class DayBucket:
    """Per-day accumulator for one player.

    snapshots[0] is the rating before the day's first game, every later
    entry is the rating after one game.
    """

    day_ms: int
    snapshots: list[float] = field(default_factory=list)
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def game_count(self) -> int:
        return max(len(self.snapshots) - 1, 0)

    def add_game(self, pre_rating: float, post_rating: float, outcome: Outcome) -> None:
        """Append one game's result to the bucket."""
        if not self.snapshots:
            self.snapshots.append(pre_rating)
        self.snapshots.append(post_rating)

        if outcome == "win":
            self.wins += 1
        elif outcome == "loss":
            self.losses += 1
        elif outcome == "draw":
            self.draws += 1

    def to_record(self) -> DailyRecord:
        """Build the candlestick for this day."""
        return DailyRecord(
            day=self.day_ms // 1000,
            open=self.snapshots[0],
            close=self.snapshots[-1],
            high=max(self.snapshots),
            low=min(self.snapshots),
            game_count=self.game_count,
            results=WinLossDraw(
                win_count=self.wins,
                loss_count=self.losses,
                draw_count=self.draws,
            ),
        )


# ============================================================================
# Fetch Log Domain
# ============================================================================

FetchStatus = Literal["created", "completed", "failed"]


@dataclass
class HistoryFetchEntity:
    """Domain model for one refresh attempt."""

    fetch_id: str
    username: str
    perf: str
    status: FetchStatus
    since_ms: int | None = None
    games_fetched: int = 0
    records_added: int = 0
    error_code: str | None = None
    error_detail: str | None = None
    created_at: datetime | None = None
    ended_at: datetime | None = None
