"""Git status overlay: per-path status and ignored flags.

Queries the ``git`` executable once per run and materializes a snapshot, so
per-entry lookups during traversal are plain dictionary reads. Outside a
repository (or without ``git``) no overlay exists and every lookup is absent.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from .diagnostics import DiagnosticKind, Diagnostics

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10.0


class GitStatus(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"

    @property
    def symbol(self) -> str:
        return _STATUS_SYMBOLS[self]


_STATUS_SYMBOLS = {
    GitStatus.ADDED: "+",
    GitStatus.MODIFIED: "~",
    GitStatus.REMOVED: "-",
    GitStatus.RENAMED: "R",
}

# Porcelain v1 status letters. X is index vs HEAD, Y is worktree vs index.
_INDEX_CODES = {
    "A": GitStatus.ADDED,
    "C": GitStatus.ADDED,
    "M": GitStatus.MODIFIED,
    "T": GitStatus.MODIFIED,
    "U": GitStatus.MODIFIED,
    "D": GitStatus.REMOVED,
    "R": GitStatus.RENAMED,
}
_WORKTREE_CODES = {
    "?": GitStatus.ADDED,
    "A": GitStatus.ADDED,
    "M": GitStatus.MODIFIED,
    "T": GitStatus.MODIFIED,
    "U": GitStatus.MODIFIED,
    "D": GitStatus.REMOVED,
    "R": GitStatus.RENAMED,
}


@dataclass(frozen=True)
class GitFact:
    """Git facts for one path.

    ``status`` is the staged (index vs HEAD) change and ``worktree_status`` the
    unstaged one; both ``None`` with ``ignored`` false means tracked and clean.
    """

    status: GitStatus | None = None
    worktree_status: GitStatus | None = None
    ignored: bool = False


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[bytes] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError):
        return None


def discover_repository(root: Path, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> Path | None:
    """Return the work tree root containing ``root``, or ``None``."""
    if shutil.which("git") is None:
        return None
    proc = _run_git(root, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    top_level = proc.stdout.decode("utf-8", errors="replace").strip()
    if not top_level:
        return None
    return Path(top_level).resolve()


def _iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        records.append((status, token[3:]))

        # For renamed/copied entries, porcelain -z appends an extra token
        # containing the source path; the first path token is the destination.
        if "R" in status or "C" in status:
            index += 1

    return records


def parse_porcelain_status(output: str) -> dict[str, tuple[GitStatus | None, GitStatus | None]]:
    """Map repo-relative POSIX paths to ``(index_status, worktree_status)``."""
    statuses: dict[str, tuple[GitStatus | None, GitStatus | None]] = {}
    for code, rel_path in _iter_porcelain_records(output):
        if not rel_path or code == "!!":
            continue
        index_status = None if code[0] == "?" else _INDEX_CODES.get(code[0])
        worktree_status = _WORKTREE_CODES.get(code[1])
        statuses[rel_path.rstrip("/")] = (index_status, worktree_status)
    return statuses


def parse_ignored_listing(output: bytes) -> tuple[frozenset[str], frozenset[str]]:
    """Split ``ls-files --directory`` output into ignored files and directories."""
    ignored_files: set[str] = set()
    ignored_dirs: set[str] = set()
    for raw in output.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="replace")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        if is_dir:
            ignored_dirs.add(rel)
        else:
            ignored_files.add(rel)
    return frozenset(ignored_files), frozenset(ignored_dirs)


@dataclass(frozen=True)
class GitOverlay:
    """Read-only snapshot of a repository's status and ignore state."""

    repo_root: Path
    statuses: dict[str, tuple[GitStatus | None, GitStatus | None]]
    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def relative_key(self, path: Path) -> str:
        """Return ``path`` relative to the repository as a POSIX string.

        The final component is not resolved so a symlink maps to itself rather
        than its target. Raises ``ValueError`` for paths outside the repository.
        """
        absolute = Path(path).absolute()
        if absolute.name in ("", ".", ".."):
            anchored = absolute.resolve()
        else:
            anchored = absolute.parent.resolve() / absolute.name
        rel = anchored.relative_to(self.repo_root)
        return rel.as_posix() if rel.parts else ""

    def _is_ignored_key(self, key: str) -> bool:
        if not key:
            return False
        if key in self.ignored_files or key in self.ignored_dirs:
            return True
        return any(parent.as_posix() in self.ignored_dirs for parent in PurePosixPath(key).parents)

    def is_ignored(self, path: Path) -> bool:
        try:
            key = self.relative_key(path)
        except (OSError, ValueError):
            return False
        return self._is_ignored_key(key)

    def fact_for(self, path: Path, diagnostics: Diagnostics | None = None) -> GitFact | None:
        """Return the ``GitFact`` for ``path``; ``None`` when it cannot be located."""
        try:
            key = self.relative_key(path)
        except (OSError, ValueError) as exc:
            if diagnostics is not None:
                diagnostics.report(DiagnosticKind.GIT, f"cannot locate path in repository: {exc}", path)
            return None
        index_status, worktree_status = self.statuses.get(key, (None, None))
        return GitFact(
            status=index_status,
            worktree_status=worktree_status,
            ignored=self._is_ignored_key(key),
        )


def collect_git_overlay(
    root: Path,
    diagnostics: Diagnostics | None = None,
    timeout_seconds: float = GIT_TIMEOUT_SECONDS,
) -> GitOverlay | None:
    """Discover the repository around ``root`` and snapshot its state.

    Returns ``None`` when ``root`` is not inside a repository. When git
    commands fail inside a repository, a diagnostic is recorded and ``None`` is
    returned so the run continues without git facts.
    """
    repo_root = discover_repository(root, timeout_seconds)
    if repo_root is None:
        logger.debug("no git repository around %s", root)
        return None

    status_proc = _run_git(
        repo_root,
        ["status", "--porcelain=v1", "-z", "--untracked-files=all"],
        timeout_seconds,
    )
    if status_proc is None or status_proc.returncode != 0:
        if diagnostics is not None:
            diagnostics.report(DiagnosticKind.GIT, "git status failed; git indicators disabled", repo_root)
        return None

    ignored_proc = _run_git(
        repo_root,
        ["ls-files", "-z", "--others", "-i", "--exclude-standard", "--directory"],
        timeout_seconds,
    )
    if ignored_proc is None or ignored_proc.returncode != 0:
        if diagnostics is not None:
            diagnostics.report(DiagnosticKind.GIT, "git ls-files failed; ignored paths not marked", repo_root)
        ignored_files: frozenset[str] = frozenset()
        ignored_dirs: frozenset[str] = frozenset()
    else:
        ignored_files, ignored_dirs = parse_ignored_listing(ignored_proc.stdout)

    return GitOverlay(
        repo_root=repo_root,
        statuses=parse_porcelain_status(status_proc.stdout.decode("utf-8", errors="replace")),
        ignored_files=ignored_files,
        ignored_dirs=ignored_dirs,
    )
