"""
Per-file line scanning for searcher.

A FileScanner maps one file into memory, decodes it as UTF-8, walks its lines
in order and streams every matching line to the output sink as soon as it is
found. Failures are reported through the sink and end processing of that file
only.
"""

import os
import mmap
import logging
from typing import Iterator, Optional, Tuple

from ..errors import DecodingError, FileAccessError, MappingError
from ..models.search_results import MatchRecord
from .matchers import ContentMatcher
from .output_sink import OutputSink


logger = logging.getLogger(__name__)


def split_lines(text: str) -> Iterator[str]:
    """
    Split text on '\\n', keeping the terminator on every line.

    Other line break characters (including '\\r') stay part of the line text.
    A trailing segment without a terminator is yielded as the last line.
    """
    start = 0
    length = len(text)
    while start < length:
        end = text.find('\n', start)
        if end < 0:
            yield text[start:]
            return
        yield text[start:end + 1]
        start = end + 1


def number_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line_number, line) pairs numbered from 1."""
    return enumerate(split_lines(text), start=1)


class FileScanner:
    """
    Scans a single file for lines matching the content pattern.

    Attributes:
        matcher: Content matcher applied to every line
        sink: Output sink receiving matches and diagnostics
        colored: Whether matches are rendered with styling
    """

    def __init__(self, matcher: ContentMatcher, sink: OutputSink, colored: bool = True):
        self.matcher = matcher
        self.sink = sink
        self.colored = colored

    def scan(self, path: str) -> int:
        """
        Scan one file and emit its matching lines.

        Args:
            path: Path of the file to scan

        Returns:
            Number of matching lines emitted (0 when the file was skipped)
        """
        text = self.read_text(path)
        if text is None:
            return 0
        return self.scan_text(path, text)

    def read_text(self, path: str) -> Optional[str]:
        """
        Map the file and decode it as UTF-8.

        Returns:
            The decoded text, or None if the file was reported and skipped
        """
        try:
            f = open(path, 'rb')
        except OSError as e:
            self.sink.report_error(FileAccessError(path, e))
            return None

        with f:
            try:
                size = os.fstat(f.fileno()).st_size
                if size == 0:
                    return ""
                mapped = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
            except (OSError, ValueError) as e:
                self.sink.report_error(MappingError(path, e))
                return None

        # decode from the mapping itself
        with mapped:
            try:
                return str(mapped, 'utf-8')
            except UnicodeDecodeError as e:
                self.sink.report_error(DecodingError(path, e))
                return None

    def scan_text(self, path: str, text: str) -> int:
        """Emit every line of text that contains a match, in line order."""
        matched = 0
        for line_number, line in number_lines(text):
            span = self.matcher.first_match(line)
            if span is None:
                continue
            record = MatchRecord(
                path=path,
                line_number=line_number,
                line=line,
                match_start=span[0],
                match_end=span[1],
            )
            self.sink.emit(record, self.colored)
            matched += 1

        if matched:
            logger.debug(f"{matched} matching lines in {path}")
        return matched
