"""
Glob matching for instance and table names.

Patterns support ``*`` (zero or more characters) and ``?`` (exactly one
character). Everything else is literal. Matches are anchored to the whole
value and case-insensitive.
"""

from functools import lru_cache
from typing import Iterable, Optional, Pattern
import re


@lru_cache(maxsize=4096)
def compile_glob(pattern: str) -> Pattern:
    """Translate a glob pattern into a compiled, case-insensitive regex."""
    parts = []
    for char in pattern:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile(''.join(parts), re.IGNORECASE | re.DOTALL)


class GlobMatcher:
    """
    Matches values against limited glob patterns.

    Compiled patterns are shared through ``compile_glob``'s cache, so a grant's
    patterns are translated once no matter how many requests they see.
    """

    def matches(self, pattern: str, value: Optional[str]) -> bool:
        """Return True if ``value`` matches ``pattern`` in full."""
        if value is None:
            return False
        return compile_glob(pattern).fullmatch(value) is not None

    def matches_any(self, patterns: Iterable[str], *values: Optional[str]) -> bool:
        """Return True if any of ``values`` matches any of ``patterns``."""
        return any(
            self.matches(pattern, value)
            for pattern in patterns
            for value in values
        )
