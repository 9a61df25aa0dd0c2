"""Pydantic models for elokline.

RawGame mirrors the Lichess game export (camelCase on the wire).
DailyRecord is the candlestick shape handed to chart consumers.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Perf = Literal["ultraBullet", "bullet", "blitz", "rapid", "classical", "correspondence"]
Color = Literal["white", "black"]


class PlayerUser(BaseModel):
    """Account reference for one side (AI opponents have none)."""

    name: str | None = None
    id: str | None = None


class PlayerSide(BaseModel):
    """One side of a game with its pre-game rating and delta."""

    model_config = ConfigDict(populate_by_name=True)

    user: PlayerUser | None = None
    rating: int | float | None = None
    rating_diff: int | float | None = Field(default=None, alias="ratingDiff")


class GamePlayers(BaseModel):
    """Both sides of a game."""

    white: PlayerSide
    black: PlayerSide


class RawGame(BaseModel):
    """One completed game as streamed by the Lichess export endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: int = Field(alias="createdAt")
    perf: Perf
    players: GamePlayers
    winner: Color | None = None
    # Lichess status name (mate, resign, insufficientMaterialClaim, ...)
    status: str


class WinLossDraw(BaseModel):
    """Result counters for one day."""

    win_count: int
    loss_count: int
    draw_count: int


class DailyRecord(BaseModel):
    """One candlestick: the player's rating over a UTC calendar day.

    Days without games carry the previous close in all four prices
    and leave game_count/results unset.
    """

    day: int  # UTC midnight, seconds since epoch
    open: float
    close: float
    high: float
    low: float
    game_count: int | None = None
    results: WinLossDraw | None = None


class SeriesSummary(BaseModel):
    """Aggregate view over a daily series."""

    day_count: int
    first_day: int | None
    last_day: int | None
    first_open: float | None
    last_close: float | None
    peak: float | None
    trough: float | None
    total_games: int
    wins: int
    losses: int
    draws: int


class RatingHistory(BaseModel):
    """Cached daily series for one (username, perf) pair."""

    username: str
    perf: Perf
    records: list[DailyRecord]
    summary: SeriesSummary


class RefreshResponse(BaseModel):
    """Result of an incremental refresh."""

    username: str
    perf: Perf
    since_ms: int | None
    games_fetched: int
    new_record_count: int
    records: list[DailyRecord]
    summary: SeriesSummary


class HistoryFetchDetail(BaseModel):
    """One entry of the fetch log."""

    fetch_id: str
    username: str
    perf: Perf
    since_ms: int | None
    status: Literal["created", "completed", "failed"]
    games_fetched: int
    records_added: int
    error_code: str | None
    error_detail: str | None
