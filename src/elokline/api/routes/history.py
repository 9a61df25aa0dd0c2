"""Rating history API endpoints.

GET  /api/users/{username}/history - Cached daily series
POST /api/users/{username}/history/refresh - Fetch new games and extend the series
GET  /api/users/{username}/history/fetches - Refresh log
"""

from __future__ import annotations

import requests
from fastapi import APIRouter, Depends, HTTPException, Query

from elokline.aggregation.chart import summarize_records
from elokline.aggregation.daily import DataConsistencyError
from elokline.api.app import get_db_session, get_game_source, get_settings
from elokline.db import repo
from elokline.db.repo import DbSession
from elokline.models.types import HistoryFetchDetail, Perf, RatingHistory, RefreshResponse
from elokline.providers.base import GameSourceBase
from elokline.providers.ndjson import GameDecodeError
from elokline.worker.refresher import HistoryRefresher

router = APIRouter()


@router.get("/users/{username}/history", response_model=RatingHistory)
def get_history(
    username: str,
    perf: Perf = Query(...),
    session: DbSession = Depends(get_db_session),
) -> RatingHistory:
    """Get the cached daily series for a user.

    Args:
        username: Lichess username (case-insensitive).
        perf: Speed category.
        session: Database session (injected).

    Returns:
        RatingHistory; records is empty if nothing is cached.
    """
    records = repo.get_daily_records(session, username, perf)
    return RatingHistory(
        username=username,
        perf=perf,
        records=records,
        summary=summarize_records(records),
    )


@router.post("/users/{username}/history/refresh", response_model=RefreshResponse)
def refresh_history(
    username: str,
    perf: Perf = Query(...),
    full: bool = Query(False),
    session: DbSession = Depends(get_db_session),
    source: GameSourceBase = Depends(get_game_source),
) -> RefreshResponse:
    """Fetch games newer than the cache and extend the series.

    Raises:
        HTTPException: 422 if the source returned another player's games,
            502 if the upstream stream or connection failed or resent
            already cached days.
    """
    refresher = HistoryRefresher(session, source, max_games=get_settings().max_games)

    try:
        result = refresher.refresh(username, perf, full=full)
    except DataConsistencyError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except GameDecodeError as e:
        raise HTTPException(status_code=502, detail=f"Corrupt game stream: {e}") from e
    except requests.RequestException as e:
        raise HTTPException(status_code=502, detail=f"Game source unavailable: {e}") from e
    except ValueError as e:
        # Source ignored the since checkpoint and resent cached days
        raise HTTPException(status_code=502, detail=f"Inconsistent game stream: {e}") from e

    return RefreshResponse(
        username=username,
        perf=perf,
        since_ms=result.since_ms,
        games_fetched=result.games_fetched,
        new_record_count=len(result.new_records),
        records=result.records,
        summary=summarize_records(result.records),
    )


@router.get("/users/{username}/history/fetches", response_model=list[HistoryFetchDetail])
def list_fetches(
    username: str,
    perf: Perf = Query(...),
    session: DbSession = Depends(get_db_session),
) -> list[HistoryFetchDetail]:
    """List refresh attempts for a user and perf."""
    fetches = repo.get_history_fetches(session, username, perf)
    return [
        HistoryFetchDetail(
            fetch_id=f.fetch_id,
            username=f.username,
            perf=f.perf,
            since_ms=f.since_ms,
            status=f.status,
            games_fetched=f.games_fetched,
            records_added=f.records_added,
            error_code=f.error_code,
            error_detail=f.error_detail,
        )
        for f in fetches
    ]
