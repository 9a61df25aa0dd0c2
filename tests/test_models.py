"""Tests for pydantic models and domain buckets.

Tests validate:
1. Wire-format (camelCase) game parsing
2. Literal constraints on perf, status, winner
3. Optional fields default to None
4. DayBucket candle construction
"""

import pytest
from pydantic import ValidationError

from elokline.models.domain import DayBucket
from elokline.models.types import DailyRecord, RawGame

BASE_DAY_MS = 1_700_006_400_000


class TestRawGame:
    """Test RawGame parsing."""

    def test_wire_format(self, make_game_dict):
        """camelCase fields map to snake_case attributes."""
        game = RawGame.model_validate(make_game_dict("g1", BASE_DAY_MS, rating_diff=-4))
        assert game.created_at == BASE_DAY_MS
        assert game.players.white.rating_diff == -4
        assert game.players.white.user.name == "alice"

    def test_draw_has_no_winner(self, make_game_dict):
        """winner is optional."""
        game = RawGame.model_validate(
            make_game_dict("g1", BASE_DAY_MS, winner=None, status="draw")
        )
        assert game.winner is None

    def test_invalid_perf_rejected(self, make_game_dict):
        with pytest.raises(ValidationError):
            RawGame.model_validate(make_game_dict("g1", BASE_DAY_MS, perf="chess960"))

    def test_unlisted_status_accepted(self, make_game_dict):
        """Newer Lichess statuses parse as plain strings."""
        game = RawGame.model_validate(
            make_game_dict("g1", BASE_DAY_MS, winner=None, status="insufficientMaterialClaim")
        )
        assert game.status == "insufficientMaterialClaim"

    def test_invalid_winner_rejected(self, make_game_dict):
        with pytest.raises(ValidationError):
            RawGame.model_validate(make_game_dict("g1", BASE_DAY_MS, winner="green"))

    def test_integer_ratings_stay_integers(self, make_game_dict):
        """Integer ratings are not coerced to float."""
        game = RawGame.model_validate(make_game_dict("g1", BASE_DAY_MS))
        assert isinstance(game.players.white.rating, int)


class TestDailyRecord:
    """Test DailyRecord defaults."""

    def test_counts_optional(self):
        record = DailyRecord(day=0, open=1500, close=1500, high=1500, low=1500)
        assert record.game_count is None
        assert record.results is None


class TestDayBucket:
    """Test per-day accumulation."""

    def test_first_game_seeds_anchor(self):
        """The first game adds its pre-game rating before the post-game one."""
        bucket = DayBucket(day_ms=BASE_DAY_MS)
        bucket.add_game(1500, 1510, "win")
        bucket.add_game(1510, 1505, "loss")

        assert bucket.snapshots == [1500, 1510, 1505]
        assert bucket.game_count == 2

    def test_to_record(self):
        """The candle covers all snapshots and counters."""
        bucket = DayBucket(day_ms=BASE_DAY_MS)
        bucket.add_game(1500, 1490, "loss")
        bucket.add_game(1490, 1490, "draw")
        bucket.add_game(1490, 1495, "none")

        record = bucket.to_record()

        assert record.day == BASE_DAY_MS // 1000
        assert (record.open, record.close, record.high, record.low) == (1500, 1495, 1500, 1490)
        assert record.game_count == 3
        assert record.results.loss_count == 1
        assert record.results.draw_count == 1
        assert record.results.win_count == 0

    def test_empty_bucket_count(self):
        assert DayBucket(day_ms=0).game_count == 0
