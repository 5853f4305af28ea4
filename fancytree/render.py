"""Plain-text rendering of walker rows."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from .color import ColorChoice
from .icons import EMPTY_ICON
from .tree import TreeRow

NO_STATUS = " "


@dataclass(frozen=True)
class Charset:
    """Connector pieces drawn in front of each name."""

    branch: str = "├── "
    last_branch: str = "└── "
    vertical: str = "│   "
    blank: str = "    "


DEFAULT_CHARSET = Charset()


def _prefix(row: TreeRow, charset: Charset) -> str:
    if row.is_root:
        return ""
    parts = [charset.blank if last else charset.vertical for last in row.ancestors_last]
    parts.append(charset.last_branch if row.is_last else charset.branch)
    return "".join(parts)


def _status_columns(row: TreeRow, choice: ColorChoice) -> str:
    fact = row.git
    if fact is None:
        return NO_STATUS * 2
    # Blank columns stay unpainted; ignored rows carry an untracked color too.
    worktree = NO_STATUS
    if fact.worktree_status is not None:
        worktree = choice.paint(fact.worktree_status.symbol, row.colors.untracked)
    index = NO_STATUS
    if fact.status is not None:
        index = choice.paint(fact.status.symbol, row.colors.tracked)
    return worktree + index


def render_row(
    row: TreeRow,
    choice: ColorChoice,
    show_status: bool,
    root_label: str | None = None,
    charset: Charset = DEFAULT_CHARSET,
) -> str:
    """Format one row without a trailing newline.

    ``root_label`` replaces the root's name so the root is shown exactly as it
    was given on the command line.
    """
    parts = [_prefix(row, charset)]
    if show_status:
        parts.append(_status_columns(row, choice))
    icon = row.icon if row.icon is not None else EMPTY_ICON
    parts.append(choice.paint(icon, row.colors.icon))
    parts.append(" ")
    name = root_label if row.is_root and root_label is not None else row.entry.name
    if not row.is_root and row.git is not None and row.git.ignored:
        name = choice.paint(name, row.colors.untracked)
    parts.append(name)
    return "".join(parts)


def write_tree(
    rows: Iterable[TreeRow],
    out: TextIO,
    choice: ColorChoice,
    show_status: bool = False,
    root_label: str | None = None,
    charset: Charset = DEFAULT_CHARSET,
) -> int:
    """Write every row to ``out``; returns the number of rows written."""
    count = 0
    for row in rows:
        out.write(render_row(row, choice, show_status, root_label, charset))
        out.write("\n")
        count += 1
    return count
