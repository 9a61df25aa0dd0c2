"""Merging a cached daily series with freshly aggregated records."""

from __future__ import annotations

from typing import Sequence

from elokline.core.days import MS_PER_DAY, day_label, iter_days_ms
from elokline.models.types import DailyRecord


def merge_daily_records(
    cached: Sequence[DailyRecord],
    fresh: Sequence[DailyRecord],
) -> list[DailyRecord]:
    """Append a fresh series to a cached one.

    Days strictly between the cached last day and the fresh first day
    are filled with the cached close, keeping the merged series gap-free.
    Overlapping days are not deduplicated.

    Args:
        cached: Previously stored series, sorted by day.
        fresh: Newly aggregated series, sorted by day.

    Returns:
        cached + bridge days + fresh.

    Raises:
        ValueError: If fresh starts on or before the cached last day.
    """
    if not cached:
        return list(fresh)
    if not fresh:
        return list(cached)

    last = cached[-1]
    first_new = fresh[0]
    if first_new.day <= last.day:
        raise ValueError(
            f"Fresh series starts {day_label(first_new.day)}, "
            f"not after cached end {day_label(last.day)}"
        )

    bridge_start = last.day * 1000 + MS_PER_DAY
    bridge_end = first_new.day * 1000 - MS_PER_DAY
    bridge = [
        DailyRecord(
            day=day_ms // 1000,
            open=last.close,
            close=last.close,
            high=last.close,
            low=last.close,
        )
        for day_ms in iter_days_ms(bridge_start, bridge_end)
    ]

    return [*cached, *bridge, *fresh]
