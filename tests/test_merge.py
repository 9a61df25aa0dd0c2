"""Tests for merging cached and fresh daily series."""

import pytest

from elokline.aggregation.merge import merge_daily_records
from elokline.models.types import DailyRecord, WinLossDraw

DAY_S = 86_400
BASE_DAY_S = 1_700_006_400


def real_day(day: int, open_: float, close: float) -> DailyRecord:
    return DailyRecord(
        day=day,
        open=open_,
        close=close,
        high=max(open_, close),
        low=min(open_, close),
        game_count=1,
        results=WinLossDraw(win_count=1, loss_count=0, draw_count=0),
    )


class TestMergeDailyRecords:
    """Test series concatenation."""

    def test_empty_cache_returns_fresh(self):
        """No cache means the fresh series as-is."""
        fresh = [real_day(BASE_DAY_S, 1500, 1510)]
        assert merge_daily_records([], fresh) == fresh

    def test_no_fresh_returns_cache(self):
        """No new records leaves the cache unchanged."""
        cached = [real_day(BASE_DAY_S, 1500, 1510)]
        assert merge_daily_records(cached, []) == cached

    def test_adjacent_days_concatenate(self):
        """Fresh series starting the next day is appended directly."""
        cached = [real_day(BASE_DAY_S, 1500, 1510)]
        fresh = [real_day(BASE_DAY_S + DAY_S, 1510, 1520)]

        merged = merge_daily_records(cached, fresh)

        assert [r.day for r in merged] == [BASE_DAY_S, BASE_DAY_S + DAY_S]

    def test_gap_bridged_with_cached_close(self):
        """Missing days between the series are forward-filled."""
        cached = [real_day(BASE_DAY_S, 1500, 1510)]
        fresh = [real_day(BASE_DAY_S + 3 * DAY_S, 1510, 1490)]

        merged = merge_daily_records(cached, fresh)

        assert [r.day for r in merged] == [BASE_DAY_S + i * DAY_S for i in range(4)]
        for bridge in merged[1:3]:
            assert bridge.open == bridge.close == bridge.high == bridge.low == 1510
            assert bridge.game_count is None
            assert bridge.results is None

    def test_overlap_rejected(self):
        """Fresh series overlapping the cache raises ValueError."""
        cached = [real_day(BASE_DAY_S, 1500, 1510), real_day(BASE_DAY_S + DAY_S, 1510, 1515)]
        fresh = [real_day(BASE_DAY_S + DAY_S, 1515, 1520)]

        with pytest.raises(ValueError):
            merge_daily_records(cached, fresh)
