"""Numeric projections of a daily series for chart consumers.

Row layout follows the candlestick convention used by ECharts:
[time_ms, open, close, low, high, game_count, win, loss, draw].
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from elokline.models.types import DailyRecord, SeriesSummary

CHART_COLUMNS = (
    "time_ms",
    "open",
    "close",
    "low",
    "high",
    "game_count",
    "win",
    "loss",
    "draw",
)


def to_chart_rows(records: Sequence[DailyRecord]) -> np.ndarray:
    """Project records into a float array of shape (n, 9).

    Day seconds are converted to milliseconds. Absent counts become 0.
    """
    rows = np.zeros((len(records), len(CHART_COLUMNS)), dtype=np.float64)
    for i, r in enumerate(records):
        results = r.results
        rows[i] = (
            r.day * 1000,
            r.open,
            r.close,
            r.low,
            r.high,
            r.game_count or 0,
            results.win_count if results else 0,
            results.loss_count if results else 0,
            results.draw_count if results else 0,
        )
    return rows


def summarize_records(records: Sequence[DailyRecord]) -> SeriesSummary:
    """Compute series-level statistics.

    Args:
        records: Daily series sorted by day.

    Returns:
        SeriesSummary; price fields are None for an empty series.
    """
    if not records:
        return SeriesSummary(
            day_count=0,
            first_day=None,
            last_day=None,
            first_open=None,
            last_close=None,
            peak=None,
            trough=None,
            total_games=0,
            wins=0,
            losses=0,
            draws=0,
        )

    rows = to_chart_rows(records)
    col = {name: i for i, name in enumerate(CHART_COLUMNS)}
    totals = rows[:, col["game_count"] :].sum(axis=0)

    return SeriesSummary(
        day_count=len(records),
        first_day=records[0].day,
        last_day=records[-1].day,
        first_open=records[0].open,
        last_close=records[-1].close,
        peak=float(np.max(rows[:, col["high"]])),
        trough=float(np.min(rows[:, col["low"]])),
        total_games=int(totals[0]),
        wins=int(totals[1]),
        losses=int(totals[2]),
        draws=int(totals[3]),
    )
