"""Data types shared by the sync stages."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NamedTuple


@dataclass(frozen=True)
class SyncCheckpoint:
    """How far a project's statistics have been synchronized."""

    project_id: str
    processed_until: datetime
    last_job_run: datetime


@dataclass(frozen=True)
class StatsUnit:
    """One hour of finished task names for a project/requester pair."""

    project_id: str
    requester: str
    hour: datetime
    tasks: tuple[str, ...]

    @property
    def day(self) -> datetime:
        """UTC midnight of the day this hour belongs to."""
        hour = self.hour.astimezone(timezone.utc) if self.hour.tzinfo else self.hour
        return hour.replace(hour=0, minute=0, second=0, microsecond=0)


class DailyKey(NamedTuple):
    """Composite key of a daily bucket."""

    day: datetime
    requester: str


def utc_hour(ts: datetime) -> datetime:
    """Truncate a timestamp to the start of its UTC hour."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)
