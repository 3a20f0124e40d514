"""Periodic scheduling of the historical test stats sync."""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .sync import SyncOrchestrator, SyncStats

__all__ = ["SyncCoordinator", "JOB_TYPE", "job_id"]

logger = logging.getLogger(__name__)

JOB_TYPE = "cache-historical-test-data"


def job_id(project_id: str) -> str:
    """Scheduler job id for a project's sync."""
    return f"{JOB_TYPE}.{project_id}"


class SyncCoordinator:
    """Owns the scheduler and runs one sync job per project.

    Each project gets an interval job with ``max_instances=1``, and
    ``run_project`` holds a per-project lock, so a project never has two
    syncs in flight. The orchestrator comes from a factory supplied by the
    caller; nothing is registered globally.
    """

    def __init__(
        self,
        orchestrator_factory: Callable[[], SyncOrchestrator],
        interval_seconds: int,
        scheduler: Optional[BackgroundScheduler] = None,
    ) -> None:
        self.orchestrator_factory = orchestrator_factory
        self.interval_seconds = interval_seconds
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)
        self.last_results: dict[str, SyncStats] = {}
        self._cancel_event = threading.Event()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def start(self, projects: Iterable[str], run_immediately: bool = True) -> None:
        """Schedule every project and start the scheduler."""
        self._cancel_event.clear()
        for project_id in projects:
            self.add_project(project_id, run_immediately=run_immediately)
        self.scheduler.start()
        logger.info(f"Sync scheduler started (interval: {self.interval_seconds}s)")

    def stop(self) -> None:
        """Cancel running syncs at their next stage boundary and shut down."""
        self._cancel_event.set()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def add_project(self, project_id: str, run_immediately: bool = True) -> None:
        """Schedule (or reschedule) the periodic sync of one project."""
        kwargs = {}
        if run_immediately:
            kwargs["next_run_time"] = datetime.now(timezone.utc)
        self.scheduler.add_job(
            self.run_project,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            args=[project_id],
            id=job_id(project_id),
            name=f"{JOB_TYPE} {project_id}",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **kwargs,
        )

    def remove_project(self, project_id: str) -> None:
        if self.scheduler.get_job(job_id(project_id)) is not None:
            self.scheduler.remove_job(job_id(project_id))

    def trigger_sync(self, project_id: str) -> None:
        """Move a project's next scheduled sync to now."""
        if self.scheduler.get_job(job_id(project_id)) is not None:
            self.scheduler.modify_job(job_id(project_id), next_run_time=datetime.now(timezone.utc))

    def run_project(self, project_id: str) -> Optional[SyncStats]:
        """Run one sync for a project unless one is already in flight."""
        lock = self._lock_for(project_id)
        if not lock.acquire(blocking=False):
            logger.warning(f"Sync already running for project {project_id}, skipping")
            return None
        try:
            stats = self.orchestrator_factory().sync(project_id, cancel_event=self._cancel_event)
        except Exception as e:
            logger.exception(f"Sync error for project {project_id}: {e}")
            return None
        finally:
            lock.release()

        self.last_results[project_id] = stats
        if stats.success and stats.checkpoint_advanced:
            logger.info(
                f"Project {project_id} synced until {stats.sync_to.isoformat()}: "
                f"{stats.hourly_calls} hourly, {stats.daily_calls} daily generator calls"
            )
        return stats

    def _lock_for(self, project_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(project_id, threading.Lock())
