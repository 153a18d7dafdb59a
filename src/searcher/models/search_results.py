"""
Scan result data models for searcher.

This module defines the transient structures that flow through a scan:
queued scan targets, matched lines and the per-scan statistics.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple
from pydantic import BaseModel, Field, model_validator


class TargetKind(Enum):
    """Kinds of paths queued during traversal."""
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class ScanTarget:
    """
    A filesystem path discovered during traversal.

    Attributes:
        path: Path of the directory or file
        kind: Whether the path is listed or scanned
        ancestors: (device, inode) keys of the directories on the path from
            the root down to this target, itself included for directories
    """
    path: str
    kind: TargetKind
    ancestors: Tuple[Tuple[int, int], ...] = ()


class MatchRecord(BaseModel):
    """
    A single matched line.

    Produced by the file scanner and handed straight to the output sink;
    records are never collected.

    Attributes:
        path: Path of the file the line belongs to
        line_number: Line number of the match (1-based)
        line: Full line text including its terminator
        match_start: Index in the line where the first match starts
        match_end: Index in the line where the first match ends
    """

    path: str = Field(..., description="Path of the file the line belongs to")
    line_number: int = Field(..., ge=1, description="Line number of the match")
    line: str = Field(..., description="Full line text including its terminator")
    match_start: int = Field(..., ge=0, description="Index where the match starts")
    match_end: int = Field(..., ge=0, description="Index where the match ends")

    @model_validator(mode='after')
    def validate_span(self):
        """Validate that the span lies within the line."""
        if self.match_end < self.match_start:
            raise ValueError("Match end must be >= match start")
        if self.match_end > len(self.line):
            raise ValueError("Match end cannot exceed line length")
        return self

    @property
    def span(self) -> Tuple[int, int]:
        return self.match_start, self.match_end

    @property
    def before(self) -> str:
        return self.line[:self.match_start]

    @property
    def matched(self) -> str:
        return self.line[self.match_start:self.match_end]

    @property
    def after(self) -> str:
        return self.line[self.match_end:]


class ScanStats:
    """
    Counters describing one scan.

    Workers update the counters concurrently, so every update goes through
    a lock.
    """

    FIELDS = (
        'directories_traversed',
        'directories_revisited',
        'files_scanned',
        'files_skipped',
        'lines_matched',
        'errors',
    )

    def __init__(self):
        self._lock = threading.Lock()
        self._counts = {name: 0 for name in self.FIELDS}

    def increment(self, name: str, amount: int = 1) -> None:
        """Add amount to the named counter."""
        if name not in self._counts:
            raise KeyError(f"Unknown statistic: {name}")
        with self._lock:
            self._counts[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    def to_dict(self) -> Dict[str, int]:
        """Get a copy of all counters."""
        with self._lock:
            return self._counts.copy()

    def __str__(self) -> str:
        counts = self.to_dict()
        return (
            f"{counts['directories_traversed']} directories, "
            f"{counts['files_scanned']} files scanned, "
            f"{counts['files_skipped']} skipped, "
            f"{counts['lines_matched']} matching lines, "
            f"{counts['errors']} errors"
        )
