"""Errors raised by the historical stats sync job.

None of these are retried inside a run. A failed run leaves the checkpoint
where it was, so the next invocation replays the same window.
"""

from datetime import datetime
from typing import Optional

__all__ = [
    "SyncError",
    "ConfigError",
    "CheckpointError",
    "SourceFetchError",
    "GeneratorError",
    "SyncCancelled",
]


class SyncError(Exception):
    """Base class for errors that end a sync run."""

    pass


class ConfigError(SyncError):
    """Project configuration is unusable (e.g. an invalid ignore pattern)."""

    pass


class CheckpointError(SyncError):
    """Reading or writing the sync checkpoint failed."""

    pass


class SourceFetchError(SyncError):
    """The stats source could not return the units for the window."""

    pass


class GeneratorError(SyncError):
    """A generator function failed for one period."""

    def __init__(
        self,
        generator: str,
        stage: str,
        project_id: str,
        period: datetime,
        cause: Optional[Exception] = None,
    ):
        self.generator = generator
        self.stage = stage
        self.project_id = project_id
        self.period = period
        self.cause = cause
        super().__init__(
            f"Could not sync {stage} stats with generator '{generator}' "
            f"for project {project_id} at {period.isoformat()}: {cause}"
        )


class SyncCancelled(SyncError):
    """The run was cancelled before it finished."""

    pass
