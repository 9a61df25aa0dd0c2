"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping domain logic pure.
Returns domain models (not SQLAlchemy rows) to external callers.
Usernames are keyed lower-case, matching Lichess' case-insensitive names.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Sequence

from sqlalchemy.orm import Session

from elokline.db.schema import DailyRecordRow, HistoryFetch
from elokline.models.domain import HistoryFetchEntity
from elokline.models.types import DailyRecord, WinLossDraw

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


def normalize_username(username: str) -> str:
    """Cache key for a username."""
    return username.strip().lower()


# ============================================================================
# Converters: SQLAlchemy <-> Domain
# ============================================================================


def _row_to_record(row: DailyRecordRow) -> DailyRecord:
    """Convert a cached row to a DailyRecord."""
    results = None
    if row.win_count is not None:
        results = WinLossDraw(
            win_count=row.win_count,
            loss_count=row.loss_count or 0,
            draw_count=row.draw_count or 0,
        )
    return DailyRecord(
        day=row.day,
        open=row.open,
        close=row.close,
        high=row.high,
        low=row.low,
        game_count=row.game_count,
        results=results,
    )


def _record_to_row(username: str, perf: str, record: DailyRecord) -> DailyRecordRow:
    """Convert a DailyRecord to a row for insertion."""
    results = record.results
    return DailyRecordRow(
        username=username,
        perf=perf,
        day=record.day,
        open=record.open,
        close=record.close,
        high=record.high,
        low=record.low,
        game_count=record.game_count,
        win_count=results.win_count if results else None,
        loss_count=results.loss_count if results else None,
        draw_count=results.draw_count if results else None,
    )


def _fetch_to_entity(fetch: HistoryFetch) -> HistoryFetchEntity:
    """Convert SQLAlchemy HistoryFetch to domain entity."""
    return HistoryFetchEntity(
        fetch_id=fetch.fetch_id,
        username=fetch.username,
        perf=fetch.perf,
        status=fetch.status,
        since_ms=fetch.since_ms,
        games_fetched=fetch.games_fetched,
        records_added=fetch.records_added,
        error_code=fetch.error_code,
        error_detail=fetch.error_detail,
        created_at=fetch.created_at,
        ended_at=fetch.ended_at,
    )


# ============================================================================
# Daily Record Repository
# ============================================================================


def get_daily_records(session: DbSession, username: str, perf: str) -> list[DailyRecord]:
    """Get the cached series for a user and perf, sorted by day."""
    rows = (
        session.query(DailyRecordRow)
        .filter(
            DailyRecordRow.username == normalize_username(username),
            DailyRecordRow.perf == perf,
        )
        .order_by(DailyRecordRow.day)
        .all()
    )
    return [_row_to_record(r) for r in rows]


def get_last_daily_record(session: DbSession, username: str, perf: str) -> DailyRecord | None:
    """Get the latest cached record, if any."""
    row = (
        session.query(DailyRecordRow)
        .filter(
            DailyRecordRow.username == normalize_username(username),
            DailyRecordRow.perf == perf,
        )
        .order_by(DailyRecordRow.day.desc())
        .first()
    )
    return _row_to_record(row) if row else None


def add_daily_records(
    session: DbSession,
    username: str,
    perf: str,
    records: Sequence[DailyRecord],
) -> int:
    """Append records to a cached series.

    Returns:
        Number of rows added.
    """
    key = normalize_username(username)
    session.add_all([_record_to_row(key, perf, r) for r in records])
    session.flush()
    return len(records)


def delete_daily_records(session: DbSession, username: str, perf: str) -> int:
    """Drop the cached series for a user and perf.

    Returns:
        Number of rows deleted.
    """
    return (
        session.query(DailyRecordRow)
        .filter(
            DailyRecordRow.username == normalize_username(username),
            DailyRecordRow.perf == perf,
        )
        .delete(synchronize_session=False)
    )


# ============================================================================
# Fetch Log Repository
# ============================================================================


def create_history_fetch(session: DbSession, entity: HistoryFetchEntity) -> HistoryFetchEntity:
    """Create a fetch log entry."""
    fetch = HistoryFetch(
        fetch_id=entity.fetch_id,
        username=normalize_username(entity.username),
        perf=entity.perf,
        since_ms=entity.since_ms,
        status=entity.status,
        games_fetched=entity.games_fetched,
        records_added=entity.records_added,
    )
    session.add(fetch)
    session.flush()
    return _fetch_to_entity(fetch)


def update_history_fetch(
    session: DbSession,
    fetch_id: str,
    status: str,
    *,
    games_fetched: int | None = None,
    records_added: int | None = None,
    error_code: str | None = None,
    error_detail: str | None = None,
) -> None:
    """Update a fetch log entry and stamp its end time."""
    fetch = session.query(HistoryFetch).filter(HistoryFetch.fetch_id == fetch_id).first()
    if fetch:
        fetch.status = status
        fetch.ended_at = datetime.now(timezone.utc)
        if games_fetched is not None:
            fetch.games_fetched = games_fetched
        if records_added is not None:
            fetch.records_added = records_added
        if error_code is not None:
            fetch.error_code = error_code
        if error_detail is not None:
            fetch.error_detail = error_detail


def get_history_fetch(session: DbSession, fetch_id: str) -> HistoryFetchEntity | None:
    """Get a fetch log entry by ID."""
    fetch = session.query(HistoryFetch).filter(HistoryFetch.fetch_id == fetch_id).first()
    return _fetch_to_entity(fetch) if fetch else None


def get_history_fetches(session: DbSession, username: str, perf: str) -> list[HistoryFetchEntity]:
    """Get the fetch log for a user and perf, oldest first."""
    fetches = (
        session.query(HistoryFetch)
        .filter(
            HistoryFetch.username == normalize_username(username),
            HistoryFetch.perf == perf,
        )
        .order_by(HistoryFetch.created_at)
        .all()
    )
    return [_fetch_to_entity(f) for f in fetches]


def commit(session: DbSession) -> None:
    """Commit the current transaction."""
    session.commit()
