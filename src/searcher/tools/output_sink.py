"""
Serialized output for concurrent scan workers.

Every matched-line rendering and every diagnostic goes through a single
OutputSink. The sink owns one lock and holds it for exactly one rendering or
one diagnostic, so output from different workers never interleaves within a
line.
"""

import sys
import threading
import logging
from typing import Optional, TextIO

from rich.color import ColorSystem
from rich.style import Style

from ..errors import ScanError
from ..models.search_results import MatchRecord


logger = logging.getLogger(__name__)

PREFIX_STYLE = Style(color="color(8)")
MATCH_STYLE = Style(color="green", bold=True)


def render_match(record: MatchRecord, colored: bool) -> str:
    """
    Render one matched line.

    The line keeps its own terminator, so no newline is added. With color the
    `path:line:` prefix is gray and the matched text bold green; each styled
    segment ends with a reset.
    """
    prefix = f"{record.path}:{record.line_number}:"
    if not colored:
        return f"{prefix}{record.line}"

    return "".join([
        PREFIX_STYLE.render(prefix, color_system=ColorSystem.EIGHT_BIT),
        record.before,
        MATCH_STYLE.render(record.matched, color_system=ColorSystem.EIGHT_BIT),
        record.after,
    ])


def _write(stream: TextIO, text: str) -> None:
    binary = getattr(stream, 'buffer', None)
    if binary is None:
        stream.write(text)
        return
    # surrogateescape restores undecodable bytes in file names
    binary.write(text.encode('utf-8', 'surrogateescape'))


class OutputSink:
    """
    The single point through which scan output reaches the process streams.

    Text streams that expose a binary buffer (the process streams) receive
    UTF-8 bytes written to that buffer, so line content passes through
    unchanged whatever the stream encoding or newline translation. Streams
    without a buffer, such as io.StringIO, receive text.

    Attributes:
        stdout: Stream receiving matched lines
        stderr: Stream receiving diagnostics
        lines_emitted: Number of matched lines written
        errors_reported: Number of diagnostics written
    """

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.lines_emitted = 0
        self.errors_reported = 0
        self._lock = threading.Lock()
        for stream in (self.stdout, self.stderr):
            if getattr(stream, 'buffer', None) is not None:
                # keep earlier text-layer output ahead of our bytes
                stream.flush()

    def emit(self, record: MatchRecord, colored: bool) -> None:
        """Write one matched line in a single uninterrupted write."""
        rendering = render_match(record, colored)
        with self._lock:
            _write(self.stdout, rendering)
            self.lines_emitted += 1

    def report_error(self, error: ScanError) -> None:
        """Write one diagnostic line to the diagnostic stream."""
        logger.debug(f"{type(error).__name__}: {error}")
        with self._lock:
            _write(self.stderr, f"{error}\n")
            self.errors_reported += 1

    def flush(self) -> None:
        with self._lock:
            self.stdout.flush()
            self.stderr.flush()
