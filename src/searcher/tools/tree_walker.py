"""
Parallel directory traversal for searcher.

This module walks a directory tree with a path-based task queue consumed by a
pool of worker threads. Directory tasks list their entries and enqueue
subdirectories and matching files; file tasks hand the path to the file
scanner. Failures on one directory or entry are reported and never stop the
rest of the walk.
"""

import os
import queue
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from ..errors import EntryError, TraversalError
from ..models.search_results import ScanStats, ScanTarget, TargetKind
from .file_scanner import FileScanner
from .matchers import NameFilter
from .output_sink import OutputSink


logger = logging.getLogger(__name__)


def default_worker_count() -> int:
    """Worker count used for every walk, matching ThreadPoolExecutor's own default."""
    return min(32, (os.cpu_count() or 1) + 4)


class _WalkState:
    """Mutable state shared by the workers of one walk."""

    def __init__(self):
        self.tasks: "queue.Queue[Optional[ScanTarget]]" = queue.Queue()
        self.stats = ScanStats()


class TreeWalker:
    """
    Walks a directory tree and scans files whose names pass the filter.

    Symlinks are followed. Each directory target carries the (device, inode)
    keys of its ancestors, and a directory whose key is already among them is
    not entered again, so symlink loops end while aliases of a directory are
    walked under every path that reaches them.
    """

    def __init__(self, name_filter: NameFilter, scanner: FileScanner, sink: OutputSink):
        """
        Initialize the tree walker.

        Args:
            name_filter: Filter applied to bare filenames
            scanner: Scanner that processes each matching file
            sink: Output sink receiving diagnostics
        """
        self.name_filter = name_filter
        self.scanner = scanner
        self.sink = sink
        self.max_workers = default_worker_count()

    def walk(self, root: str) -> ScanStats:
        """
        Walk the tree under root, blocking until every task is processed.

        Args:
            root: Directory to start from; output paths are built from it as given

        Returns:
            ScanStats for this walk
        """
        state = _WalkState()
        root = str(root)
        errors_before = self.sink.errors_reported
        logger.info(f"Walking directory tree: {root}")

        root_key = self._directory_key(root)
        ancestors = (root_key,) if root_key is not None else ()
        state.tasks.put(ScanTarget(path=root, kind=TargetKind.DIRECTORY, ancestors=ancestors))

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="searcher") as pool:
            for _ in range(self.max_workers):
                pool.submit(self._drain, state)
            state.tasks.join()
            for _ in range(self.max_workers):
                state.tasks.put(None)

        state.stats.increment('errors', self.sink.errors_reported - errors_before)
        logger.info(f"Finished walking {root}: {state.stats}")
        return state.stats

    def _drain(self, state: _WalkState) -> None:
        """Worker loop: process targets until a sentinel arrives."""
        while True:
            target = state.tasks.get()
            try:
                if target is None:
                    return
                self._process(target, state)
            except Exception:
                logger.exception(f"Unexpected failure while processing {target.path}")
                state.stats.increment('errors')
            finally:
                state.tasks.task_done()

    def _process(self, target: ScanTarget, state: _WalkState) -> None:
        if target.kind is TargetKind.DIRECTORY:
            self._list_directory(target, state)
        else:
            matched = self.scanner.scan(target.path)
            state.stats.increment('files_scanned')
            state.stats.increment('lines_matched', matched)

    def _list_directory(self, target: ScanTarget, state: _WalkState) -> None:
        """
        List one directory and enqueue its subdirectories and matching files.

        Args:
            target: Directory to list
            state: State of the walk in progress
        """
        path = target.path
        try:
            entries = os.scandir(path)
        except OSError as e:
            self.sink.report_error(TraversalError(path, e))
            return

        state.stats.increment('directories_traversed')
        with entries:
            while True:
                try:
                    entry = next(entries)
                except StopIteration:
                    break
                except OSError as e:
                    # scandir closes its iterator after a read error, so the
                    # rest of this listing is lost
                    self.sink.report_error(EntryError(path, e))
                    break
                self._dispatch(entry, target, state)

    def _dispatch(self, entry: os.DirEntry, parent: ScanTarget, state: _WalkState) -> None:
        """Queue one directory entry, or skip it if its name is filtered out."""
        try:
            if entry.is_dir():
                stat_result = entry.stat()
                key = (stat_result.st_dev, stat_result.st_ino)
                if key in parent.ancestors:
                    logger.debug(f"Skipping directory loop: {entry.path}")
                    state.stats.increment('directories_revisited')
                    return
                state.tasks.put(ScanTarget(
                    path=entry.path,
                    kind=TargetKind.DIRECTORY,
                    ancestors=parent.ancestors + (key,),
                ))
            elif entry.is_file():
                if not self.name_filter.matches(entry.name):
                    state.stats.increment('files_skipped')
                    return
                state.tasks.put(ScanTarget(path=entry.path, kind=TargetKind.FILE))
        except OSError as e:
            self.sink.report_error(EntryError(parent.path, e))

    @staticmethod
    def _directory_key(path: str) -> Optional[Tuple[int, int]]:
        try:
            stat_result = os.stat(path)
        except OSError:
            # listing the root reports the failure
            return None
        return stat_result.st_dev, stat_result.st_ino
