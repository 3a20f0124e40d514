"""Sync window planning."""

from datetime import datetime, timedelta

__all__ = ["MAX_SYNC_WINDOW", "compute_range"]

MAX_SYNC_WINDOW = timedelta(days=7)


def compute_range(
    last_processed: datetime,
    now: datetime,
    max_window: timedelta = MAX_SYNC_WINDOW,
) -> tuple[datetime, datetime]:
    """Return the ``[from, to)`` range to sync on this run.

    A project that has fallen behind only catches up ``max_window`` at a
    time; later runs keep advancing from the new checkpoint.
    """
    return last_processed, min(now, last_processed + max_window)
