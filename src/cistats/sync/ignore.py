"""Task-name ignore patterns.

Some tasks always generate unique names, so they never build up any history.
Projects list patterns for those names so they are not tracked at all.
"""

import logging
import re
from typing import Iterable

from .errors import ConfigError

__all__ = ["IgnoreMatcher", "compile_patterns"]

logger = logging.getLogger(__name__)


class IgnoreMatcher:
    """Matches task names against a set of compiled patterns."""

    def __init__(self, patterns: Iterable[re.Pattern] = ()):
        self.patterns = list(patterns)

    def matches(self, name: str) -> bool:
        """True if any pattern matches anywhere in ``name``."""
        return any(pattern.search(name) for pattern in self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __repr__(self) -> str:
        return f"IgnoreMatcher({[p.pattern for p in self.patterns]!r})"


def compile_patterns(patterns: Iterable[str]) -> IgnoreMatcher:
    """Compile configured ignore patterns.

    Blank patterns are skipped. An invalid pattern is a configuration
    error and aborts the run before anything is fetched.

    Raises:
        ConfigError: If a pattern is not a valid regular expression
    """
    compiled = []
    for raw in patterns:
        pattern = raw.strip()
        if not pattern:
            continue
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            logger.warning(f"Could not compile ignore pattern '{pattern}': {e}")
            raise ConfigError(f"Invalid ignore pattern '{pattern}': {e}") from e
    return IgnoreMatcher(compiled)
