"""
Exception types for searcher.

Pattern errors are fatal and abort a run before traversal begins. Scan errors
are recoverable: they are created where a path fails, handed to the output
sink as a diagnostic line, and never propagated further.
"""

import re
from typing import Union


class SearcherError(Exception):
    """Base class for all searcher errors."""
    pass


class PatternError(SearcherError):
    """Raised when a filename or content pattern is not a valid regex."""

    def __init__(self, pattern: str, error: re.error):
        self.pattern = pattern
        self.error = error
        super().__init__(f"Invalid regex pattern '{pattern}': {error}")


def describe_error(error: Union[BaseException, str]) -> str:
    """Return the human readable part of an error, preferring the OS message."""
    if isinstance(error, str):
        return error
    strerror = getattr(error, 'strerror', None)
    if strerror:
        return strerror
    return str(error)


class ScanError(SearcherError):
    """
    A recoverable failure tied to a single path.

    Attributes:
        path: Directory or file the failure belongs to
        reason: Message describing the failure
    """

    template = "Error occurred for '{path}': {reason}"

    def __init__(self, path: str, error: Union[BaseException, str]):
        self.path = str(path)
        self.reason = describe_error(error)
        super().__init__(self.template.format(path=self.path, reason=self.reason))


class TraversalError(ScanError):
    """A directory could not be listed."""
    template = "Error occurred for directory '{path}': {reason}"


class EntryError(TraversalError):
    """A single directory entry could not be read."""
    template = "Error reading entry in '{path}': {reason}"


class FileAccessError(ScanError):
    """A file could not be opened."""
    template = "Error occurred for file '{path}': {reason}"


class MappingError(FileAccessError):
    """A file could not be memory-mapped."""
    template = "Error mapping file '{path}': {reason}"


class DecodingError(FileAccessError):
    """A file is not valid UTF-8 text."""
    template = "Error reading file '{path}': {reason}"
