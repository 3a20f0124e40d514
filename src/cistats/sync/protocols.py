"""Protocol types for SyncOrchestrator dependencies.

Defines the interfaces that the orchestrator requires from its collaborators,
enabling easier testing and looser coupling.
"""

from datetime import datetime
from typing import Callable, Protocol, runtime_checkable

from .models import StatsUnit, SyncCheckpoint

# (project_id, requester, period_start, task_names, run_timestamp); raises on failure
GeneratorFn = Callable[[str, str, datetime, list[str], datetime], None]


@runtime_checkable
class CheckpointStoreProtocol(Protocol):
    """Interface for reading and advancing the per-project checkpoint."""

    def get_checkpoint(self, project_id: str) -> SyncCheckpoint: ...

    def set_checkpoint(
        self, project_id: str, run_timestamp: datetime, processed_until: datetime
    ) -> None: ...


@runtime_checkable
class StatsSourceProtocol(Protocol):
    """Interface for fetching hourly units that need their stats regenerated."""

    def fetch_units(
        self, project_id: str, start: datetime, end: datetime
    ) -> list[StatsUnit]: ...


@runtime_checkable
class ProjectConfigProtocol(Protocol):
    """Interface for per-project settings."""

    def get_ignore_patterns(self, project_id: str) -> list[str]: ...
