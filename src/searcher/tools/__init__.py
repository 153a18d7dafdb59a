"""
Scanning components for searcher.

This package contains the pattern matchers, the serialized output sink, the
per-file scanner and the parallel tree walker.
"""

from .matchers import ContentMatcher, NameFilter
from .output_sink import OutputSink, render_match
from .file_scanner import FileScanner, split_lines
from .tree_walker import TreeWalker

__all__ = [
    'ContentMatcher',
    'NameFilter',
    'OutputSink',
    'render_match',
    'FileScanner',
    'split_lines',
    'TreeWalker',
]
