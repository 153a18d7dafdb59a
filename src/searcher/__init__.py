"""
searcher - Core Package

Searches for regex matches in files: walks a directory tree in parallel,
selects files by name pattern and reports every line matching a content
pattern.
"""

__version__ = "1.0.0"

from .errors import PatternError, SearcherError
from .models.config import SearchConfig
from .searcher import Searcher, search

__all__ = ['Searcher', 'SearchConfig', 'PatternError', 'SearcherError', 'search', '__version__']
