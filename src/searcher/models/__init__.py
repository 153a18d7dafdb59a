"""
Data models for searcher.

This module contains the configuration and result structures shared by the
scanning components.
"""

from .config import SearchConfig, SearchSettings
from .search_results import MatchRecord, ScanStats, ScanTarget, TargetKind

__all__ = [
    'SearchConfig',
    'SearchSettings',
    'MatchRecord',
    'ScanStats',
    'ScanTarget',
    'TargetKind',
]
