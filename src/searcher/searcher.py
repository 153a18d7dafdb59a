"""
Top-level search entry point.

Searcher owns the immutable SearchConfig, compiles both patterns up front
(so an invalid pattern fails before any traversal) and wires the matchers,
output sink, file scanner and tree walker together for one scan.
"""

import logging
from typing import Optional, TextIO

from .models.config import SearchConfig
from .models.search_results import ScanStats
from .tools.file_scanner import FileScanner
from .tools.matchers import ContentMatcher, NameFilter
from .tools.output_sink import OutputSink
from .tools.tree_walker import TreeWalker


logger = logging.getLogger(__name__)


class Searcher:
    """
    Recursive, parallel content search over a directory tree.

    Raises:
        PatternError: At construction, if either pattern is invalid
    """

    def __init__(self, config: SearchConfig, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.config = config
        self.name_filter = NameFilter(config.file_pattern)
        self.content_matcher = ContentMatcher(config.content_pattern)
        self.sink = OutputSink(stdout=stdout, stderr=stderr)
        self.scanner = FileScanner(self.content_matcher, self.sink, colored=config.colored)
        self.walker = TreeWalker(self.name_filter, self.scanner, self.sink)

    def search(self, root: Optional[str] = None) -> ScanStats:
        """
        Scan the tree under root (the configured root by default).

        Returns:
            ScanStats describing the scan
        """
        root = root if root is not None else self.config.root
        try:
            stats = self.walker.walk(root)
        finally:
            self.sink.flush()
        logger.debug(f"Scan statistics: {stats.to_dict()}")
        return stats


def search(content_pattern: str, file_pattern: str, root: str = ".", colored: bool = True) -> ScanStats:
    """Convenience function to run one search with the process streams."""
    config = SearchConfig(
        content_pattern=content_pattern,
        file_pattern=file_pattern,
        colored=colored,
        root=root,
    )
    return Searcher(config).search()
