"""API module for elokline.

API layer:
- Validates inputs, reads the cache, triggers refreshes
- Returns payloads for the chart UI
- Forbidden: aggregation logic, direct SQL
"""
