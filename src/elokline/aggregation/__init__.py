"""Aggregation module for daily rating series.

- daily: game list -> gap-filled DailyRecord series
- merge: cached series + fresh series
- chart: numeric projections and summaries
Forbidden here: network calls, database access.
"""
