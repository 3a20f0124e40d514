"""Sync orchestrator - one pass of the historical test stats sync."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional

from .dispatcher import GeneratorDispatcher
from .errors import (
    CheckpointError,
    ConfigError,
    SourceFetchError,
    SyncCancelled,
    SyncError,
)
from .ignore import compile_patterns
from .protocols import (
    CheckpointStoreProtocol,
    GeneratorFn,
    ProjectConfigProtocol,
    StatsSourceProtocol,
)
from .rollup import build_daily, filter_units
from .window import MAX_SYNC_WINDOW, compute_range

__all__ = ["SyncOrchestrator", "SyncStats"]

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SyncStats:
    """Statistics from a sync run."""

    project_id: str
    run_timestamp: datetime
    sync_from: Optional[datetime] = None
    sync_to: Optional[datetime] = None
    units_fetched: int = 0
    units_dropped: int = 0
    tasks_ignored: int = 0
    hourly_calls: int = 0
    daily_calls: int = 0
    checkpoint_advanced: bool = False
    error: Optional[SyncError] = None

    @property
    def success(self) -> bool:
        return self.error is None


class SyncOrchestrator:
    """Drives a checkpointed sync of hourly and daily test stats.

    A run reads the checkpoint, plans a bounded window, fetches the hourly
    units in it, and hands them to the generators (hourly first, then
    daily). The checkpoint is written last and only when every step
    succeeded; any failure leaves it alone so the next run repeats the
    same window in full. Generators must therefore tolerate being called
    again for periods they already (partly) wrote.
    """

    def __init__(
        self,
        checkpoints: CheckpointStoreProtocol,
        source: StatsSourceProtocol,
        projects: ProjectConfigProtocol,
        hourly_generators: Mapping[str, GeneratorFn],
        daily_generators: Mapping[str, GeneratorFn],
        max_window: timedelta = MAX_SYNC_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.checkpoints = checkpoints
        self.source = source
        self.projects = projects
        self.hourly_generators = dict(hourly_generators)
        self.daily_generators = dict(daily_generators)
        self.max_window = max_window
        self._clock = clock

    def sync(
        self, project_id: str, cancel_event: Optional[threading.Event] = None
    ) -> SyncStats:
        """Run one sync pass for a project.

        Never raises SyncError; the error that ended the run is returned
        on the stats object instead.
        """
        stats = SyncStats(project_id=project_id, run_timestamp=self._clock())
        try:
            self._run(project_id, stats, cancel_event)
        except SyncError as e:
            stats.error = e
            logger.error(
                f"Sync failed: project_id={project_id} "
                f"sync_from={_iso(stats.sync_from)} sync_to={_iso(stats.sync_to)} "
                f"error_type={type(e).__name__} error={e}"
            )
        return stats

    def _run(
        self,
        project_id: str,
        stats: SyncStats,
        cancel_event: Optional[threading.Event],
    ) -> None:
        def check_cancelled(stage: str) -> None:
            if cancel_event is not None and cancel_event.is_set():
                raise SyncCancelled(f"Sync cancelled before {stage}")

        try:
            checkpoint = self.checkpoints.get_checkpoint(project_id)
        except Exception as e:
            raise CheckpointError(f"Error retrieving last sync date: {e}") from e

        try:
            patterns = self.projects.get_ignore_patterns(project_id)
        except Exception as e:
            raise ConfigError(f"Error retrieving project settings: {e}") from e
        matcher = compile_patterns(patterns)

        sync_from, sync_to = compute_range(
            checkpoint.processed_until, stats.run_timestamp, self.max_window
        )
        stats.sync_from, stats.sync_to = sync_from, sync_to

        if sync_to <= sync_from:
            logger.info(
                f"Nothing to sync: project_id={project_id} "
                f"sync_from={_iso(sync_from)} sync_to={_iso(sync_to)}"
            )
            return

        logger.info(
            f"Running sync: project_id={project_id} "
            f"sync_from={_iso(sync_from)} sync_to={_iso(sync_to)} "
            f"ignore_patterns={len(matcher)}"
        )

        check_cancelled("fetch")
        try:
            units = self.source.fetch_units(project_id, sync_from, sync_to)
        except Exception as e:
            raise SourceFetchError(f"Error finding tasks to update: {e}") from e
        stats.units_fetched = len(units)

        filtered = filter_units(units, matcher)
        stats.units_dropped = len(units) - len(filtered)
        stats.tasks_ignored = sum(len(u.tasks) for u in units) - sum(
            len(u.tasks) for u in filtered
        )

        dispatcher = GeneratorDispatcher(
            project_id,
            stats.run_timestamp,
            self.hourly_generators,
            self.daily_generators,
            cancel_event=cancel_event,
        )
        try:
            check_cancelled("hourly stats")
            dispatcher.run_hourly(filtered)

            daily = build_daily(filtered)

            check_cancelled("daily stats")
            dispatcher.run_daily(daily)
        finally:
            stats.hourly_calls = dispatcher.hourly_calls
            stats.daily_calls = dispatcher.daily_calls

        check_cancelled("checkpoint update")
        try:
            self.checkpoints.set_checkpoint(project_id, stats.run_timestamp, sync_to)
        except Exception as e:
            raise CheckpointError(f"Error updating last synced date: {e}") from e
        stats.checkpoint_advanced = True

        logger.info(
            f"Sync complete: project_id={project_id} units={len(filtered)} "
            f"dropped={stats.units_dropped} hourly_calls={stats.hourly_calls} "
            f"daily_calls={stats.daily_calls} processed_until={_iso(sync_to)}"
        )


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None
