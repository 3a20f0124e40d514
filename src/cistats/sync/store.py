"""SQLite-backed checkpoint store and stats source."""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from ..db import SQLiteStore
from .models import StatsUnit, SyncCheckpoint, utc_hour

__all__ = ["StatsStore", "DEFAULT_BACKFILL"]

logger = logging.getLogger(__name__)

DEFAULT_BACKFILL = timedelta(days=28)


def _to_db(ts: datetime) -> str:
    """Fixed-width UTC text so that string order matches time order."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _from_db(value: str) -> datetime:
    return datetime.fromisoformat(value)


class StatsStore(SQLiteStore):
    """Tracks finished task results and the per-project sync checkpoint.

    Implements both CheckpointStoreProtocol and StatsSourceProtocol.
    """

    def __init__(
        self,
        db_path: Path,
        initial_backfill: timedelta = DEFAULT_BACKFILL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file
            initial_backfill: How far back a never-synced project starts
            clock: Returns the current UTC time (for testing)
        """
        self.initial_backfill = initial_backfill
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        super().__init__(db_path)

    def _init_db(self) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS stats_status (
                    project_id TEXT PRIMARY KEY,
                    processed_until TEXT NOT NULL,
                    last_job_run TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS task_results (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    project_id TEXT NOT NULL,
                    requester TEXT NOT NULL,
                    display_name TEXT NOT NULL,
                    finished_at TEXT NOT NULL
                )
                """
            )
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_task_results_project_finished
                ON task_results(project_id, finished_at)
                """
            )

    # Checkpoint management

    def get_checkpoint(self, project_id: str) -> SyncCheckpoint:
        """Get the sync checkpoint for a project.

        A project that was never synced gets a default checkpoint
        ``initial_backfill`` in the past. The default is not persisted.
        """
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT processed_until, last_job_run FROM stats_status
                WHERE project_id = ?
                """,
                (project_id,),
            )
            row = cursor.fetchone()
        if row:
            return SyncCheckpoint(
                project_id=project_id,
                processed_until=_from_db(row["processed_until"]),
                last_job_run=_from_db(row["last_job_run"]),
            )

        default = self._clock() - self.initial_backfill
        logger.debug(f"No checkpoint for project {project_id}, starting at {default.isoformat()}")
        return SyncCheckpoint(project_id=project_id, processed_until=default, last_job_run=default)

    def set_checkpoint(
        self, project_id: str, run_timestamp: datetime, processed_until: datetime
    ) -> None:
        """Record that a project is synced up to ``processed_until``."""
        now = _to_db(self._clock())
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO stats_status (project_id, processed_until, last_job_run, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(project_id) DO UPDATE SET
                    processed_until = excluded.processed_until,
                    last_job_run = excluded.last_job_run,
                    updated_at = excluded.updated_at
                """,
                (project_id, _to_db(processed_until), _to_db(run_timestamp), now),
            )

    def get_all_checkpoints(self) -> dict[str, datetime]:
        """Get processed-until times for every synced project."""
        with self._cursor() as cursor:
            cursor.execute("SELECT project_id, processed_until FROM stats_status")
            return {
                row["project_id"]: _from_db(row["processed_until"])
                for row in cursor.fetchall()
            }

    # Task results

    def record_task(
        self, project_id: str, requester: str, display_name: str, finished_at: datetime
    ) -> None:
        """Store one finished task."""
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO task_results (project_id, requester, display_name, finished_at)
                VALUES (?, ?, ?, ?)
                """,
                (project_id, requester, display_name, _to_db(finished_at)),
            )

    def fetch_units(
        self, project_id: str, start: datetime, end: datetime
    ) -> list[StatsUnit]:
        """Get hourly units for tasks that finished in ``[start, end)``.

        Units are ordered by hour then requester; task names keep the order
        the tasks were recorded in.
        """
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT requester, display_name, finished_at FROM task_results
                WHERE project_id = ? AND finished_at >= ? AND finished_at < ?
                ORDER BY id ASC
                """,
                (project_id, _to_db(start), _to_db(end)),
            )
            rows = cursor.fetchall()

        grouped: dict[tuple[datetime, str], list[str]] = {}
        for row in rows:
            key = (utc_hour(_from_db(row["finished_at"])), row["requester"])
            grouped.setdefault(key, []).append(row["display_name"])

        return [
            StatsUnit(project_id=project_id, requester=requester, hour=hour, tasks=tuple(tasks))
            for (hour, requester), tasks in sorted(grouped.items())
        ]
