"""Incremental refresh of a cached daily rating series.

Flow: last cached day -> since checkpoint -> source stream -> materialize
-> aggregate -> merge -> persist new tail.

Every attempt is logged in history_fetches. A failure rolls back any
pending writes, marks the attempt failed, and re-raises, so a fatal
error never leaves a partial series in the cache.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from elokline.aggregation.daily import games_to_daily_records
from elokline.aggregation.merge import merge_daily_records
from elokline.core.config import DEFAULT_MAX_GAMES
from elokline.core.days import day_label, next_day_ms
from elokline.db import repo
from elokline.db.repo import DbSession
from elokline.models.domain import HistoryFetchEntity
from elokline.models.types import DailyRecord, Perf
from elokline.providers.base import GameSourceBase

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of one refresh.

    Attributes:
        records: Full merged series (cached + new).
        new_records: Records appended by this refresh.
        games_fetched: Games drained from the source.
        since_ms: Checkpoint passed to the source, None for a full fetch.
    """

    username: str
    perf: Perf
    fetch_id: str
    records: list[DailyRecord] = field(default_factory=list)
    new_records: list[DailyRecord] = field(default_factory=list)
    games_fetched: int = 0
    since_ms: int | None = None

    @property
    def has_new_records(self) -> bool:
        return bool(self.new_records)


class HistoryRefresher:
    """Refreshes cached series from a game source."""

    def __init__(
        self,
        session: DbSession,
        source: GameSourceBase,
        max_games: int = DEFAULT_MAX_GAMES,
    ):
        """Initialize refresher.

        Args:
            session: Database session for the cache and fetch log.
            source: Game source to stream from.
            max_games: Upper bound on games per refresh.
        """
        self.session = session
        self.source = source
        self.max_games = max_games

    def refresh(self, username: str, perf: Perf, *, full: bool = False) -> RefreshResult:
        """Fetch games newer than the cache and append their daily records.

        Args:
            username: Lichess username.
            perf: Speed category.
            full: Drop the cached series and rebuild from scratch.

        Returns:
            RefreshResult with the merged series.

        Raises:
            DataConsistencyError: If a fetched game is not the user's.
            GameDecodeError: If the stream contains a corrupt line.
            requests.RequestException: On transport failures.
            ValueError: If the source returned games before the checkpoint.
        """
        fetch_id = str(uuid.uuid4())

        try:
            if full:
                dropped = repo.delete_daily_records(self.session, username, perf)
                logger.info(f"Dropped {dropped} cached records for {username}/{perf}")

            last = repo.get_last_daily_record(self.session, username, perf)
            since_ms = next_day_ms(last.day * 1000) if last else None
            if last:
                logger.info(
                    f"Cache for {username}/{perf} ends {day_label(last.day)}, "
                    f"fetching since {since_ms}"
                )

            # Committed up front so the entry survives a rollback of cache writes.
            # A full rebuild keeps its delete pending until the end instead.
            repo.create_history_fetch(
                self.session,
                HistoryFetchEntity(
                    fetch_id=fetch_id,
                    username=username,
                    perf=perf,
                    status="created",
                    since_ms=since_ms,
                ),
            )
            if not full:
                repo.commit(self.session)

            games = list(
                self.source.stream_games(
                    username, perf, max_games=self.max_games, since_ms=since_ms
                )
            )
            logger.info(f"Fetched {len(games)} {perf} games for {username}")

            fresh = games_to_daily_records(games, username)
            if not fresh:
                logger.warning(f"No new daily records for {username}/{perf}")

            # Only the last cached day is needed to bridge into the fresh series
            anchor = [last] if last else []
            new_records = merge_daily_records(anchor, fresh)[len(anchor) :]
            repo.add_daily_records(self.session, username, perf, new_records)

            repo.update_history_fetch(
                self.session,
                fetch_id,
                "completed",
                games_fetched=len(games),
                records_added=len(new_records),
            )
            repo.commit(self.session)
            records = repo.get_daily_records(self.session, username, perf)

        except Exception as e:
            self.session.rollback()
            self._record_failure(fetch_id, username, perf, e)
            raise

        logger.info(f"Added {len(new_records)} records for {username}/{perf} ({len(records)} total)")
        return RefreshResult(
            username=username,
            perf=perf,
            fetch_id=fetch_id,
            records=records,
            new_records=new_records,
            games_fetched=len(games),
            since_ms=since_ms,
        )

    def _record_failure(self, fetch_id: str, username: str, perf: Perf, error: Exception) -> None:
        """Mark the fetch failed, creating the log entry if it was rolled back."""
        logger.error(f"Refresh failed for {username}/{perf}: {type(error).__name__}: {error}")

        if repo.get_history_fetch(self.session, fetch_id) is None:
            repo.create_history_fetch(
                self.session,
                HistoryFetchEntity(fetch_id=fetch_id, username=username, perf=perf, status="created"),
            )
        repo.update_history_fetch(
            self.session,
            fetch_id,
            "failed",
            error_code=type(error).__name__,
            error_detail=str(error),
        )
        repo.commit(self.session)
