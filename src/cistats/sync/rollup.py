"""Filtering of hourly stats units and their daily rollup."""

import logging
from dataclasses import replace
from typing import Iterable

from .ignore import IgnoreMatcher
from .models import DailyKey, StatsUnit

__all__ = ["filter_units", "build_daily"]

logger = logging.getLogger(__name__)


def filter_units(units: Iterable[StatsUnit], matcher: IgnoreMatcher) -> list[StatsUnit]:
    """Drop ignored task names, and units left with nothing to generate."""
    filtered = []
    for unit in units:
        if matcher:
            tasks = tuple(t for t in unit.tasks if not matcher.matches(t))
        else:
            tasks = unit.tasks
        if not tasks:
            logger.debug(
                f"Dropping empty unit: project_id={unit.project_id} "
                f"requester={unit.requester} hour={unit.hour.isoformat()}"
            )
            continue
        filtered.append(unit if tasks == unit.tasks else replace(unit, tasks=tasks))
    return filtered


def build_daily(units: Iterable[StatsUnit]) -> dict[DailyKey, list[str]]:
    """Roll hourly units up into one bucket per (day, requester).

    Task names are concatenated in input order and deliberately not
    deduplicated; generators see every occurrence. Keys come back sorted.
    """
    rollup: dict[DailyKey, list[str]] = {}
    for unit in units:
        rollup.setdefault(DailyKey(unit.day, unit.requester), []).extend(unit.tasks)
    return {key: rollup[key] for key in sorted(rollup)}
