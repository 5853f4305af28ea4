"""Iterative directory walk producing resolved, ordered tree rows.

Each directory's children are resolved, filtered by the skip decision, and
sorted as one sibling group before any of them is descended into. The walk
uses an explicit stack, never follows symlinks for recursion, and reports
per-path problems to ``Diagnostics`` instead of stopping.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .attributes import Entry, LanguageDetector, resolve_entry
from .colors import EntryColors, resolve_icon_color, resolve_tracked_color, resolve_untracked_color
from .config import Config
from .diagnostics import DiagnosticKind, Diagnostics, RootError
from .git_status import GitFact, GitOverlay
from .hooks import apply_hook
from .icons import resolve_icon
from .language import detect_language
from .sorting import sort_entries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeRow:
    """One rendered line: an entry plus everything resolved for it."""

    entry: Entry
    depth: int
    is_last: bool
    # For each ancestor below the root, whether it was the last of its siblings.
    ancestors_last: tuple[bool, ...]
    git: GitFact | None
    icon: str | None
    colors: EntryColors

    @property
    def is_root(self) -> bool:
        return self.depth == 0


def ensure_root_directory(root: Path) -> None:
    """Raise ``RootError`` unless ``root`` is an existing directory."""
    try:
        is_dir = root.is_dir()
    except OSError as exc:
        raise RootError(f"cannot access {root}: {exc}") from exc
    if is_dir:
        return
    if root.exists() or root.is_symlink():
        raise RootError(f"not a directory: {root}")
    raise RootError(f"no such directory: {root}")


class TreeWalker:
    """Walks one root with a fixed ``Config`` and optional git overlay."""

    def __init__(
        self,
        config: Config,
        overlay: GitOverlay | None = None,
        diagnostics: Diagnostics | None = None,
        resolve_colors: bool = True,
        language_for: LanguageDetector = detect_language,
    ) -> None:
        self.config = config
        self.overlay = overlay
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.resolve_colors = resolve_colors
        self.language_for = language_for

    def walk(self, root: Path) -> Iterator[TreeRow]:
        """Yield rows in display order, starting with ``root`` itself.

        Raises ``RootError`` before yielding anything when ``root`` is missing
        or is not a directory. Icon and color hooks run for a whole sibling
        group before the first of those siblings is yielded.
        """
        root_entry = self._resolve_root(root)
        yield self._row(root_entry, depth=0, is_last=True, ancestors_last=())
        if not self._may_expand(0):
            return

        stack: list[Iterator[TreeRow]] = [iter(self._children(root, 1, ()))]
        while stack:
            row = next(stack[-1], None)
            if row is None:
                stack.pop()
                continue
            yield row
            if row.entry.is_dir and self._may_expand(row.depth):
                ancestors_last = row.ancestors_last + (row.is_last,)
                stack.append(iter(self._children(row.entry.path, row.depth + 1, ancestors_last)))

    def _resolve_root(self, root: Path) -> Entry:
        ensure_root_directory(root)
        try:
            return resolve_entry(root, self.language_for)
        except OSError as exc:
            raise RootError(f"cannot access {root}: {exc}") from exc

    def _may_expand(self, depth: int) -> bool:
        level = self.config.level
        return level is None or depth < level

    def _children(self, directory: Path, depth: int, ancestors_last: tuple[bool, ...]) -> list[TreeRow]:
        """Resolve, filter and sort the visible children of ``directory`` into rows."""
        try:
            with os.scandir(directory) as it:
                names = [child.name for child in it]
        except OSError as exc:
            self.diagnostics.report(
                DiagnosticKind.FILESYSTEM, f"cannot read directory: {exc.strerror or exc}", directory
            )
            return []

        entries: list[Entry] = []
        for name in names:
            path = directory / name
            try:
                entry = resolve_entry(path, self.language_for)
            except OSError as exc:
                self.diagnostics.report(DiagnosticKind.FILESYSTEM, f"cannot stat: {exc.strerror or exc}", path)
                continue
            if self._skipped(entry):
                continue
            entries.append(entry)

        ordered = sort_entries(entries, self.config.sorting, self.diagnostics)
        last_index = len(ordered) - 1
        return [
            self._row(entry, depth, index == last_index, ancestors_last) for index, entry in enumerate(ordered)
        ]

    def _skipped(self, entry: Entry) -> bool:
        default = entry.is_hidden
        args = (str(entry.path), entry.attributes(), default)
        return bool(apply_hook(self.config.skip, args, default, self.diagnostics))

    def _git_fact(self, entry: Entry) -> GitFact | None:
        if self.overlay is None:
            return None
        return self.overlay.fact_for(entry.path, self.diagnostics)

    def _row(self, entry: Entry, depth: int, is_last: bool, ancestors_last: tuple[bool, ...]) -> TreeRow:
        config = self.config
        fact = self._git_fact(entry)
        icon = resolve_icon(entry, config.icon, self.diagnostics, config.icon_rules)
        if self.resolve_colors:
            colors = EntryColors(
                icon=resolve_icon_color(entry, config.icon_color, self.diagnostics, config.color_rules),
                untracked=resolve_untracked_color(fact, config.untracked_color, self.diagnostics),
                tracked=resolve_tracked_color(fact, config.tracked_color, self.diagnostics),
            )
        else:
            colors = EntryColors()
        return TreeRow(
            entry=entry,
            depth=depth,
            is_last=is_last,
            ancestors_last=ancestors_last,
            git=fact,
            icon=icon,
            colors=colors,
        )


def walk_tree(
    root: Path,
    config: Config | None = None,
    overlay: GitOverlay | None = None,
    diagnostics: Diagnostics | None = None,
    resolve_colors: bool = True,
) -> list[TreeRow]:
    """Materialize the full walk of ``root``."""
    walker = TreeWalker(config if config is not None else Config(), overlay, diagnostics, resolve_colors)
    rows = list(walker.walk(root))
    logger.debug("walked %d entries under %s", len(rows), root)
    return rows
