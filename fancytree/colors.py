"""Color resolution for icons and git status indicators.

Three independent layers, each computing a default and then offering it to its
hook: the icon color, the untracked (worktree/ignored) color, and the tracked
(staged) color. A hook returning ``None`` turns its layer off.
"""

from __future__ import annotations

from dataclasses import dataclass

from .attributes import Entry
from .color import AnsiColor, Color, color_to_script
from .diagnostics import Diagnostics
from .git_status import GitFact, GitStatus
from .hooks import Hook, apply_hook
from .rules import COLOR_RULES, LANGUAGE_COLORS, RuleTable

STATUS_COLORS: dict[GitStatus, Color] = {
    GitStatus.ADDED: AnsiColor.GREEN,
    GitStatus.MODIFIED: AnsiColor.YELLOW,
    GitStatus.REMOVED: AnsiColor.RED,
    GitStatus.RENAMED: AnsiColor.CYAN,
}
IGNORED_COLOR: Color = AnsiColor.BRIGHT_BLACK


@dataclass(frozen=True)
class EntryColors:
    icon: Color | None = None
    untracked: Color | None = None
    tracked: Color | None = None


def default_icon_color(
    entry: Entry,
    rules: RuleTable[Color] = COLOR_RULES,
    language_colors: dict[str, Color] = LANGUAGE_COLORS,
) -> Color | None:
    color = rules.lookup(entry.name)
    if color is not None:
        return color
    if entry.language is not None:
        return language_colors.get(entry.language)
    return None


def resolve_icon_color(
    entry: Entry,
    hook: Hook | None = None,
    diagnostics: Diagnostics | None = None,
    rules: RuleTable[Color] = COLOR_RULES,
) -> Color | None:
    default = default_icon_color(entry, rules)
    args = (str(entry.path), entry.attributes(), color_to_script(default))
    return apply_hook(hook, args, default, diagnostics)


def default_untracked_color(fact: GitFact) -> Color | None:
    if fact.ignored:
        return IGNORED_COLOR
    if fact.worktree_status is not None:
        return STATUS_COLORS[fact.worktree_status]
    return None


def resolve_untracked_color(
    fact: GitFact | None,
    hook: Hook | None = None,
    diagnostics: Diagnostics | None = None,
) -> Color | None:
    """Color for the worktree column; not evaluated for clean or absent facts."""
    if fact is None or (fact.worktree_status is None and not fact.ignored):
        return None
    default = default_untracked_color(fact)
    status = fact.worktree_status.value if fact.worktree_status is not None else None
    return apply_hook(hook, (status, color_to_script(default)), default, diagnostics)


def resolve_tracked_color(
    fact: GitFact | None,
    hook: Hook | None = None,
    diagnostics: Diagnostics | None = None,
) -> Color | None:
    """Color for the staged column; only evaluated when a staged status exists."""
    if fact is None or fact.status is None:
        return None
    default = STATUS_COLORS[fact.status]
    return apply_hook(hook, (fact.status.value, color_to_script(default)), default, diagnostics)
