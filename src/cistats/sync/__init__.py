"""Sync module - incremental hourly and daily test stats generation."""

from .dispatcher import GeneratorDispatcher
from .errors import (
    CheckpointError,
    ConfigError,
    GeneratorError,
    SourceFetchError,
    SyncCancelled,
    SyncError,
)
from .ignore import IgnoreMatcher, compile_patterns
from .models import DailyKey, StatsUnit, SyncCheckpoint
from .orchestrator import SyncOrchestrator, SyncStats
from .protocols import (
    CheckpointStoreProtocol,
    GeneratorFn,
    ProjectConfigProtocol,
    StatsSourceProtocol,
)
from .rollup import build_daily, filter_units
from .store import StatsStore
from .window import MAX_SYNC_WINDOW, compute_range

__all__ = [
    "GeneratorDispatcher",
    "CheckpointError",
    "ConfigError",
    "GeneratorError",
    "SourceFetchError",
    "SyncCancelled",
    "SyncError",
    "IgnoreMatcher",
    "compile_patterns",
    "DailyKey",
    "StatsUnit",
    "SyncCheckpoint",
    "SyncOrchestrator",
    "SyncStats",
    "CheckpointStoreProtocol",
    "GeneratorFn",
    "ProjectConfigProtocol",
    "StatsSourceProtocol",
    "build_daily",
    "filter_units",
    "StatsStore",
    "MAX_SYNC_WINDOW",
    "compute_range",
]
