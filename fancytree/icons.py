"""Icon resolution: rule-table cascade, language glyph, fallback, then hook."""

from __future__ import annotations

from .attributes import Entry, FileType
from .diagnostics import Diagnostics
from .hooks import Hook, apply_hook
from .rules import ICON_RULES, LANGUAGE_ICONS, Glyphs, RuleTable

EMPTY_ICON = " "


def fallback_icon(entry: Entry) -> str:
    """Generic glyph keyed by file type."""
    if entry.file_type is FileType.DIRECTORY:
        return Glyphs.DIRECTORY
    if entry.file_type is FileType.SYMLINK:
        return Glyphs.SYMLINK
    if entry.is_executable:
        return Glyphs.EXECUTABLE
    return Glyphs.FILE


def default_icon(
    entry: Entry,
    rules: RuleTable[str] = ICON_RULES,
    language_icons: dict[str, str] = LANGUAGE_ICONS,
) -> str:
    """Literal name, extension, glob, language, then the generic fallback."""
    glyph = rules.lookup(entry.name)
    if glyph is not None:
        return glyph
    if entry.language is not None:
        glyph = language_icons.get(entry.language)
        if glyph is not None:
            return glyph
    return fallback_icon(entry)


def resolve_icon(
    entry: Entry,
    hook: Hook | None = None,
    diagnostics: Diagnostics | None = None,
    rules: RuleTable[str] = ICON_RULES,
) -> str | None:
    """Return the glyph to render, or ``None`` when the hook disabled it."""
    default = default_icon(entry, rules)
    return apply_hook(hook, (entry.name, entry.attributes(), default), default, diagnostics)
