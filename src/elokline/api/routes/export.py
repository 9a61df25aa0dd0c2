"""Export API endpoints.

GET /api/users/{username}/history/chart - Numeric candlestick rows
GET /api/users/{username}/history/export - Downloadable JSON series
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from elokline.aggregation.chart import CHART_COLUMNS, summarize_records, to_chart_rows
from elokline.api.app import get_db_session
from elokline.db import repo
from elokline.db.repo import DbSession
from elokline.models.types import DailyRecord, Perf, SeriesSummary

router = APIRouter()


class ChartPayload(BaseModel):
    """Column-labelled numeric rows."""

    columns: list[str]
    rows: list[list[float]]


class ExportedHistory(BaseModel):
    """Full series export."""

    username: str
    perf: Perf
    records: list[DailyRecord]
    summary: SeriesSummary
    export_version: str = "1.0"


@router.get("/users/{username}/history/chart", response_model=ChartPayload)
def get_chart_rows(
    username: str,
    perf: Perf = Query(...),
    session: DbSession = Depends(get_db_session),
) -> ChartPayload:
    """Get the cached series as candlestick rows (times in ms)."""
    records = repo.get_daily_records(session, username, perf)
    return ChartPayload(columns=list(CHART_COLUMNS), rows=to_chart_rows(records).tolist())


@router.get("/users/{username}/history/export")
def export_history(
    username: str,
    perf: Perf = Query(...),
    session: DbSession = Depends(get_db_session),
) -> JSONResponse:
    """Export the cached series as downloadable JSON.

    Raises:
        HTTPException: 404 if nothing is cached for the user and perf.
    """
    records = repo.get_daily_records(session, username, perf)
    if not records:
        raise HTTPException(status_code=404, detail="No cached history")

    export_data = ExportedHistory(
        username=repo.normalize_username(username),
        perf=perf,
        records=records,
        summary=summarize_records(records),
    )
    filename = f"{repo.normalize_username(username)}_{perf}_history.json"
    return JSONResponse(
        content=export_data.model_dump(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
