"""Daily rating candlesticks from a game list.

Turns a time-ordered game history into one DailyRecord per UTC calendar
day, forward-filling days without games from the previous close.
Pure functions - no IO, no database access.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from elokline.core.days import iter_days_ms, utc_day_start_ms
from elokline.models.domain import DayBucket, Outcome
from elokline.models.types import Color, DailyRecord, PlayerSide, RawGame

logger = logging.getLogger(__name__)

DRAW_STATUSES = frozenset({"draw", "stalemate"})


class DataConsistencyError(ValueError):
    """Raised when a game cannot be attributed to the queried player.

    The source only returns games the user played, so a record where
    neither side (or both sides) matches means the input is not this
    user's history. The whole aggregation is aborted.
    """

    def __init__(self, message: str, game_id: str):
        super().__init__(message)
        self.game_id = game_id


def _side_matches(side: PlayerSide, username: str) -> bool:
    """Match a side by display name first, then account id."""
    if side.user is None:
        return False
    if side.user.name and side.user.name.lower() == username:
        return True
    if side.user.id and side.user.id.lower() == username:
        return True
    return False


def resolve_player_color(game: RawGame, username: str) -> Color:
    """Determine which side the queried player had.

    Args:
        game: Game to inspect.
        username: Queried username (any case).

    Returns:
        "white" or "black".

    Raises:
        DataConsistencyError: If zero or both sides match the username.
    """
    wanted = username.lower()
    is_white = _side_matches(game.players.white, wanted)
    is_black = _side_matches(game.players.black, wanted)

    if is_white and is_black:
        raise DataConsistencyError(
            f"Game {game.id}: both sides match user {username!r}", game.id
        )
    if not is_white and not is_black:
        raise DataConsistencyError(
            f"Game {game.id}: no side matches user {username!r}", game.id
        )
    return "white" if is_white else "black"


def post_game_rating(side: PlayerSide) -> float | None:
    """Rating after the game, or None if it cannot be computed."""
    if side.rating is None or side.rating_diff is None:
        return None
    rating = side.rating + side.rating_diff
    if math.isnan(rating):
        return None
    return rating


def classify_outcome(game: RawGame, color: Color) -> Outcome:
    """Classify the game from the player's point of view.

    Draws and stalemates count as draws. Otherwise a declared winner
    decides win or loss. Winner-less games (e.g. aborted) count as none.
    """
    if game.status in DRAW_STATUSES:
        return "draw"
    if game.winner is None:
        return "none"
    return "win" if game.winner == color else "loss"


def bucket_games_by_day(games: Iterable[RawGame], username: str) -> dict[int, DayBucket]:
    """Group games into per-day rating buckets.

    Games are sorted by creation time first (stable, so ties keep their
    input order). Games whose post-game rating cannot be computed are
    skipped.

    Args:
        games: Games in any order.
        username: Player whose rating is tracked.

    Returns:
        Mapping of day key (UTC midnight, ms) to DayBucket.

    Raises:
        DataConsistencyError: If a game does not belong to the player.
    """
    ordered = sorted(games, key=lambda g: g.created_at)
    buckets: dict[int, DayBucket] = {}

    for game in ordered:
        color = resolve_player_color(game, username)
        side = game.players.white if color == "white" else game.players.black

        new_rating = post_game_rating(side)
        if new_rating is None:
            logger.debug(f"Skipping game {game.id}: rating not computable")
            continue

        day_ms = utc_day_start_ms(game.created_at)
        bucket = buckets.get(day_ms)
        if bucket is None:
            bucket = DayBucket(day_ms=day_ms)
            buckets[day_ms] = bucket

        bucket.add_game(side.rating, new_rating, classify_outcome(game, color))

    return buckets


def _flat_record(day_ms: int, rating: float) -> DailyRecord:
    """Synthetic record for a day without games."""
    return DailyRecord(day=day_ms // 1000, open=rating, close=rating, high=rating, low=rating)


def fill_daily_records(buckets: dict[int, DayBucket]) -> list[DailyRecord]:
    """Emit one record per day across the bucket range, forward-filling gaps.

    Args:
        buckets: Per-day buckets keyed by UTC midnight (ms).

    Returns:
        Records sorted by day with no missing day.
    """
    if not buckets:
        return []

    records: list[DailyRecord] = []
    previous_close = 0.0

    for day_ms in iter_days_ms(min(buckets), max(buckets)):
        bucket = buckets.get(day_ms)
        if bucket is None:
            record = _flat_record(day_ms, previous_close)
        else:
            record = bucket.to_record()
        records.append(record)
        previous_close = record.close

    return records


def games_to_daily_records(games: Iterable[RawGame], username: str) -> list[DailyRecord]:
    """Aggregate a game history into daily candlesticks.

    Args:
        games: Complete game list (already drained from the source).
        username: Player whose rating is charted.

    Returns:
        One DailyRecord per UTC day from the first to the last day with
        a rated game, or an empty list if no game carries a usable rating.

    Raises:
        DataConsistencyError: If any game does not belong to the player.
    """
    buckets = bucket_games_by_day(games, username)
    records = fill_daily_records(buckets)
    logger.debug(f"Aggregated {len(buckets)} game days into {len(records)} records for {username}")
    return records
