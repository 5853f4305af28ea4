"""Parsing of git porcelain output and overlay lookups on a fixed snapshot."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fancytree.diagnostics import DiagnosticKind, Diagnostics
from fancytree.git_status import (
    GitFact,
    GitOverlay,
    GitStatus,
    collect_git_overlay,
    parse_ignored_listing,
    parse_porcelain_status,
)


class ParsePorcelainStatusTests(unittest.TestCase):
    def test_index_and_worktree_columns(self) -> None:
        output = "M  staged.py\0 M edited.py\0MM both.py\0?? new.txt\0A  added.py\0 D gone.py\0"
        statuses = parse_porcelain_status(output)
        self.assertEqual(statuses["staged.py"], (GitStatus.MODIFIED, None))
        self.assertEqual(statuses["edited.py"], (None, GitStatus.MODIFIED))
        self.assertEqual(statuses["both.py"], (GitStatus.MODIFIED, GitStatus.MODIFIED))
        self.assertEqual(statuses["new.txt"], (None, GitStatus.ADDED))
        self.assertEqual(statuses["added.py"], (GitStatus.ADDED, None))
        self.assertEqual(statuses["gone.py"], (None, GitStatus.REMOVED))

    def test_rename_records_destination_only(self) -> None:
        statuses = parse_porcelain_status("R  new_name.py\0old_name.py\0 M other.py\0")
        self.assertEqual(statuses["new_name.py"], (GitStatus.RENAMED, None))
        self.assertNotIn("old_name.py", statuses)
        self.assertIn("other.py", statuses)

    def test_garbage_tokens_are_ignored(self) -> None:
        self.assertEqual(parse_porcelain_status("\0bogus\0"), {})


class ParseIgnoredListingTests(unittest.TestCase):
    def test_directories_have_trailing_slash(self) -> None:
        files, dirs = parse_ignored_listing(b"build/\0debug.log\0nested/cache/\0")
        self.assertEqual(files, frozenset({"debug.log"}))
        self.assertEqual(dirs, frozenset({"build", "nested/cache"}))


class GitOverlayLookupTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        self.overlay = GitOverlay(
            repo_root=self.root,
            statuses={"src/app.py": (GitStatus.ADDED, GitStatus.MODIFIED)},
            ignored_files=frozenset({"debug.log"}),
            ignored_dirs=frozenset({"build"}),
        )

    def test_fact_for_known_and_clean_paths(self) -> None:
        fact = self.overlay.fact_for(self.root / "src" / "app.py")
        self.assertEqual(fact, GitFact(status=GitStatus.ADDED, worktree_status=GitStatus.MODIFIED))
        self.assertEqual(self.overlay.fact_for(self.root / "README.md"), GitFact())

    def test_ignored_covers_descendants_of_ignored_directories(self) -> None:
        self.assertTrue(self.overlay.fact_for(self.root / "build" / "out" / "a.o").ignored)
        self.assertTrue(self.overlay.is_ignored(self.root / "debug.log"))
        self.assertFalse(self.overlay.is_ignored(self.root / "src"))
        self.assertFalse(self.overlay.fact_for(self.root).ignored)

    def test_path_outside_repository_is_absent_with_diagnostic(self) -> None:
        diagnostics = Diagnostics()
        with tempfile.TemporaryDirectory() as other:
            self.assertIsNone(self.overlay.fact_for(Path(other) / "x", diagnostics))
            self.assertFalse(self.overlay.is_ignored(Path(other) / "x"))
        self.assertEqual(len(diagnostics.of_kind(DiagnosticKind.GIT)), 1)


class CollectGitOverlayTests(unittest.TestCase):
    def test_no_repository_means_no_overlay(self) -> None:
        with mock.patch("fancytree.git_status.discover_repository", return_value=None):
            self.assertIsNone(collect_git_overlay(Path(".")))

    def test_status_failure_reports_and_disables_overlay(self) -> None:
        diagnostics = Diagnostics()
        with (
            mock.patch("fancytree.git_status.discover_repository", return_value=Path("/repo")),
            mock.patch("fancytree.git_status._run_git", return_value=None),
        ):
            self.assertIsNone(collect_git_overlay(Path("/repo"), diagnostics))
        self.assertEqual(len(diagnostics.of_kind(DiagnosticKind.GIT)), 1)


if __name__ == "__main__":
    unittest.main()
