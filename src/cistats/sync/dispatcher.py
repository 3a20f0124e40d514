"""Dispatch of hourly and daily stats generators."""

import logging
import threading
from datetime import datetime
from typing import Iterable, Mapping, Optional

from .errors import GeneratorError, SyncCancelled
from .models import DailyKey, StatsUnit
from .protocols import GeneratorFn

__all__ = ["GeneratorDispatcher", "STAGE_HOURLY", "STAGE_DAILY"]

logger = logging.getLogger(__name__)

STAGE_HOURLY = "hourly"
STAGE_DAILY = "daily"


class GeneratorDispatcher:
    """Runs the configured generators over one sync window.

    Generators are called strictly one at a time. The first failure stops
    the stage and is raised as GeneratorError, so the daily stage never
    runs on top of incomplete hourly stats.
    """

    def __init__(
        self,
        project_id: str,
        run_timestamp: datetime,
        hourly: Mapping[str, GeneratorFn],
        daily: Mapping[str, GeneratorFn],
        cancel_event: Optional[threading.Event] = None,
    ):
        self.project_id = project_id
        self.run_timestamp = run_timestamp
        self.hourly = dict(hourly)
        self.daily = dict(daily)
        self._cancel_event = cancel_event
        self.hourly_calls = 0
        self.daily_calls = 0

    def run_hourly(self, units: Iterable[StatsUnit]) -> None:
        """Call every hourly generator for every non-empty unit."""
        units = list(units)
        for name, fn in self.hourly.items():
            for unit in units:
                if not unit.tasks:
                    continue
                self._call(
                    STAGE_HOURLY,
                    name,
                    fn,
                    unit.project_id,
                    unit.requester,
                    unit.hour,
                    list(unit.tasks),
                )
                self.hourly_calls += 1

    def run_daily(self, buckets: Mapping[DailyKey, list[str]]) -> None:
        """Call every daily generator for every (day, requester) bucket."""
        keys = sorted(buckets)
        for name, fn in self.daily.items():
            for key in keys:
                tasks = buckets[key]
                if not tasks:
                    continue
                self._call(
                    STAGE_DAILY,
                    name,
                    fn,
                    self.project_id,
                    key.requester,
                    key.day,
                    list(tasks),
                )
                self.daily_calls += 1

    def _call(
        self,
        stage: str,
        name: str,
        fn: GeneratorFn,
        project_id: str,
        requester: str,
        period: datetime,
        tasks: list[str],
    ) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise SyncCancelled(f"Cancelled before {stage} generator '{name}'")

        try:
            fn(project_id, requester, period, tasks, self.run_timestamp)
        except Exception as e:
            logger.warning(
                f"Could not sync {stage} stats: project_id={project_id} "
                f"sync_date={period.isoformat()} job_time={self.run_timestamp.isoformat()} "
                f"generator={name} requester={requester} error={e}"
            )
            raise GeneratorError(name, stage, project_id, period, e) from e
