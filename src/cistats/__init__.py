"""CI Stats Sync - incremental historical test statistics for CI projects."""

__version__ = "0.3.0"
