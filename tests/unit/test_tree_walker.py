"""
Unit tests for the tree walker.

Tests recursive traversal, filename filtering, error isolation between
subtrees and cycle protection of the TreeWalker class.
"""

import io
import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import pytest

from searcher.tools.file_scanner import FileScanner
from searcher.tools.matchers import ContentMatcher, NameFilter
from searcher.tools.output_sink import OutputSink
from searcher.tools.tree_walker import TreeWalker, default_worker_count


_real_scandir = os.scandir


class SortedScandir:
    """os.scandir stand-in yielding a directory's entries in name order."""

    def __init__(self, path):
        self.path = os.fspath(path)
        with _real_scandir(path) as it:
            self._entries = sorted(it, key=lambda e: e.name)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        pass

    def __iter__(self):
        return self

    def __next__(self):
        if not self._entries:
            raise StopIteration
        return self._entries.pop(0)


class TestTreeWalker:
    """Test cases for the TreeWalker class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self._create_test_structure()

        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.sink = OutputSink(stdout=self.stdout, stderr=self.stderr)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _create_test_structure(self):
        """Create a test directory structure with various file types."""
        test_files = {
            "src/main.py": "import os\nTODO: main\n",
            "src/utils.py": "def helper():\n    return 'todo later'\n",
            "src/config.json": '{"todo": true}\n',
            "docs/readme.md": "# Readme\nNothing here\n",
            "docs/api.txt": "api todo\n",
            "tests/deep/nested/test_main.py": "# todo: test\n",
            "requirements.txt": "pydantic\n",
            "setup.py": "setup()\n",
        }
        for file_path, content in test_files.items():
            full_path = self.test_root / file_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content)
        (self.test_root / "empty_dir").mkdir()

    def _walker(self, file_pattern, content_pattern):
        scanner = FileScanner(ContentMatcher(content_pattern), self.sink, colored=False)
        return TreeWalker(NameFilter(file_pattern), scanner, self.sink)

    def _matched_paths(self):
        return sorted(line.split(":")[0] for line in self.stdout.getvalue().splitlines())

    def test_walk_finds_matches_recursively(self):
        """Test that matches are found at every depth."""
        stats = self._walker(r"\.py$", "todo").walk(self.temp_dir)

        assert self._matched_paths() == sorted([
            os.path.join(self.temp_dir, "src", "main.py"),
            os.path.join(self.temp_dir, "src", "utils.py"),
            os.path.join(self.temp_dir, "tests", "deep", "nested", "test_main.py"),
        ])
        assert self.stderr.getvalue() == ""
        assert stats.get('lines_matched') == 3
        assert stats.get('errors') == 0

    def test_name_filter_skips_files(self):
        """Test that files rejected by the name filter are never scanned."""
        with patch.object(FileScanner, "scan", autospec=True, return_value=0) as scan:
            stats = self._walker(r"\.md$", "todo").walk(self.temp_dir)

        scanned = [call.args[1] for call in scan.call_args_list]
        assert scanned == [os.path.join(self.temp_dir, "docs", "readme.md")]
        assert stats.get('files_scanned') == 1
        assert stats.get('files_skipped') == 7

    def test_statistics(self):
        """Test directory and file counters."""
        stats = self._walker(".*", "todo").walk(self.temp_dir)

        counts = stats.to_dict()
        # root, src, docs, tests, tests/deep, tests/deep/nested, empty_dir
        assert counts['directories_traversed'] == 7
        assert counts['files_scanned'] == 8
        assert counts['files_skipped'] == 0
        assert counts['lines_matched'] == 5

    def test_paths_built_from_root_as_given(self, monkeypatch):
        """Test that output paths keep the root spelling, e.g. './'."""
        monkeypatch.chdir(self.temp_dir)
        self._walker(r"^api\.txt$", "todo").walk(".")

        assert self.stdout.getvalue() == os.path.join(".", "docs", "api.txt") + ":1:api todo\n"

    def test_empty_directory_tree(self):
        """Test that an empty directory gives no output and no errors."""
        stats = self._walker(".*", ".*").walk(str(self.test_root / "empty_dir"))

        assert self.stdout.getvalue() == ""
        assert self.stderr.getvalue() == ""
        assert stats.get('directories_traversed') == 1

    def test_missing_root_reported(self):
        """Test that an unlistable root is reported and the walk ends."""
        missing = str(self.test_root / "does_not_exist")
        stats = self._walker(".*", ".*").walk(missing)

        assert self.stdout.getvalue() == ""
        assert self.stderr.getvalue() == f"Error occurred for directory '{missing}': No such file or directory\n"
        assert stats.get('errors') == 1

    def test_root_is_a_file(self):
        """Test that a file given as root is reported as a directory error."""
        root = str(self.test_root / "setup.py")
        self._walker(".*", ".*").walk(root)

        assert self.stdout.getvalue() == ""
        assert self.stderr.getvalue().startswith(f"Error occurred for directory '{root}': ")

    def test_unreadable_subdirectory_does_not_hide_siblings(self):
        """Test that one failing subtree leaves the others untouched."""
        locked = os.path.join(self.temp_dir, "src")
        real_scandir = os.scandir

        def fake_scandir(path):
            if os.fspath(path) == locked:
                raise PermissionError(13, "Permission denied", path)
            return real_scandir(path)

        with patch("searcher.tools.tree_walker.os.scandir", side_effect=fake_scandir):
            stats = self._walker(".*", "todo").walk(self.temp_dir)

        assert self._matched_paths() == sorted([
            os.path.join(self.temp_dir, "docs", "api.txt"),
            os.path.join(self.temp_dir, "tests", "deep", "nested", "test_main.py"),
        ])
        assert self.stderr.getvalue() == f"Error occurred for directory '{locked}': Permission denied\n"
        assert stats.get('errors') == 1

    def test_entry_error_skips_entry_only(self):
        """Test that a failing entry is reported and its siblings still processed."""
        real_scandir = os.scandir

        class FlakyEntry:
            """Wraps a DirEntry and fails for one name."""

            def __init__(self, entry):
                self._entry = entry
                self.name = entry.name
                self.path = entry.path

            def is_dir(self):
                if self.name == "requirements.txt":
                    raise FileNotFoundError(2, "No such file or directory")
                return self._entry.is_dir()

            def is_file(self):
                return self._entry.is_file()

            def stat(self):
                return self._entry.stat()

        class FlakyScandir:
            def __init__(self, path):
                self._it = real_scandir(path)

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self._it.close()

            def __iter__(self):
                return self

            def __next__(self):
                return FlakyEntry(next(self._it))

        with patch("searcher.tools.tree_walker.os.scandir", side_effect=FlakyScandir):
            self._walker(r"\.(txt|py)$", "setup|pydantic").walk(self.temp_dir)

        assert self._matched_paths() == [os.path.join(self.temp_dir, "setup.py")]
        assert self.stderr.getvalue() == f"Error reading entry in '{self.temp_dir}': No such file or directory\n"

    def test_listing_failure_keeps_earlier_entries(self):
        """Test that a read error while listing keeps the entries already yielded."""
        root = self.temp_dir

        class FailingScandir(SortedScandir):
            """Fails on the root's 'requirements.txt' entry, like a mid-listing read error."""

            def __next__(self):
                entry = super().__next__()
                if self.path == root and entry.name == "requirements.txt":
                    self._entries = []
                    raise OSError(5, "Input/output error")
                return entry

        with patch("searcher.tools.tree_walker.os.scandir", side_effect=FailingScandir):
            stats = self._walker(r"\.(txt|py)$", "todo|setup").walk(self.temp_dir)

        # only docs and empty_dir sort before requirements.txt
        assert self._matched_paths() == [os.path.join(self.temp_dir, "docs", "api.txt")]
        assert self.stderr.getvalue() == f"Error reading entry in '{self.temp_dir}': Input/output error\n"
        assert stats.get('errors') == 1

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_directory_alias_walked_under_both_paths(self):
        """Test that a symlinked alias and its target are both walked."""
        alias_root = self.test_root / "alias"
        (alias_root / "a").mkdir(parents=True)
        (alias_root / "a" / "f.txt").write_text("foo\n")
        os.symlink(alias_root / "a", alias_root / "b")

        stats = self._walker("txt", "foo").walk(str(alias_root))

        assert self._matched_paths() == [
            os.path.join(str(alias_root), "a", "f.txt"),
            os.path.join(str(alias_root), "b", "f.txt"),
        ]
        assert self.stderr.getvalue() == ""
        assert stats.get('directories_traversed') == 3
        assert stats.get('directories_revisited') == 0

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_alias_listed_first_does_not_hide_target(self):
        """Test that an alias listed before its target does not hide the target."""
        alias_root = self.test_root / "order"
        (alias_root / "z_real").mkdir(parents=True)
        (alias_root / "z_real" / "f.txt").write_text("foo\n")
        os.symlink(alias_root / "z_real", alias_root / "a_link")

        with patch("searcher.tools.tree_walker.os.scandir", side_effect=SortedScandir):
            stats = self._walker("txt", "foo").walk(str(alias_root))

        assert self._matched_paths() == [
            os.path.join(str(alias_root), "a_link", "f.txt"),
            os.path.join(str(alias_root), "z_real", "f.txt"),
        ]
        assert stats.get('directories_revisited') == 0

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlink_loop_terminates(self):
        """Test that a directory symlink back to the root is listed only once."""
        os.symlink(self.temp_dir, self.test_root / "docs" / "loop")

        stats = self._walker(r"^api\.txt$", "todo").walk(self.temp_dir)

        assert self._matched_paths() == [os.path.join(self.temp_dir, "docs", "api.txt")]
        assert stats.get('directories_revisited') == 1

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinked_file_followed(self):
        """Test that a symlink to a regular file is scanned under its link name."""
        os.symlink(self.test_root / "docs" / "api.txt", self.test_root / "link.txt")

        self._walker(r"^link\.txt$", "todo").walk(self.temp_dir)

        assert self._matched_paths() == [os.path.join(self.temp_dir, "link.txt")]

    def test_unexpected_failure_does_not_stop_walk(self):
        """Test that an exception in one file task is logged and counted."""
        real_scan = FileScanner.scan

        def flaky_scan(scanner, path):
            if path.endswith("main.py"):
                raise RuntimeError("boom")
            return real_scan(scanner, path)

        with patch.object(FileScanner, "scan", autospec=True, side_effect=flaky_scan):
            stats = self._walker(r"\.py$", "todo").walk(self.temp_dir)

        assert self._matched_paths() == [os.path.join(self.temp_dir, "src", "utils.py")]
        assert stats.get('errors') == 2

    def test_default_worker_count(self):
        """Test that the pool is sized like ThreadPoolExecutor's default."""
        assert 1 <= default_worker_count() <= 32
