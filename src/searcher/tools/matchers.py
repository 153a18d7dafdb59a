"""
Pattern matchers for searcher.

Both matchers compile a user-supplied regex case-insensitively and search
unanchored. An invalid pattern raises PatternError at construction time.
"""

import re
from typing import Optional, Tuple

from ..errors import PatternError


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile a user pattern case-insensitively.

    Raises:
        PatternError: If the pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise PatternError(pattern, e) from e


class NameFilter:
    """Decides which bare filenames are scanned."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self._regex = compile_pattern(pattern)

    def matches(self, filename: str) -> bool:
        return self._regex.search(filename) is not None

    def __repr__(self) -> str:
        return f"NameFilter({self.pattern!r})"


class ContentMatcher:
    """Finds the first occurrence of the content pattern in a line."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self._regex = compile_pattern(pattern)

    def first_match(self, line: str) -> Optional[Tuple[int, int]]:
        """
        Return the (start, end) span of the first match in line.

        Later occurrences on the same line are not reported.
        """
        match = self._regex.search(line)
        if match is None:
            return None
        return match.span()

    def __repr__(self) -> str:
        return f"ContentMatcher({self.pattern!r})"
