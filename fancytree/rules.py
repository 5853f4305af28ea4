"""Static pattern tables mapping filenames to default icons and colors.

Each ``RuleTable`` holds three ordered sequences: literal filenames,
extensions, and globs. Lookup tries them in that order and the first match
wins; within the glob table, earlier patterns are tried first. Tables are
built once at import and never mutated.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .color import AnsiColor, Color, Rgb

T = TypeVar("T")


def glob_matches(pattern: str, string: str) -> bool:
    """Case-sensitive shell-style match; exposed to config modules."""
    return fnmatch.fnmatchcase(string, pattern)


def extension_candidates(filename: str) -> list[str]:
    """Return compound extensions of ``filename``, longest first.

    ``archive.tar.gz`` yields ``["tar.gz", "gz"]``. Leading dots belong to the
    name, so ``.bashrc`` has no extension.
    """
    stem = filename.lstrip(".")
    parts = stem.split(".")
    if len(parts) < 2:
        return []
    return [".".join(parts[index:]) for index in range(1, len(parts))]


@dataclass(frozen=True)
class RuleTable(Generic[T]):
    """Ordered literal/extension/glob rules; construct once and share."""

    filenames: tuple[tuple[str, T], ...] = ()
    extensions: tuple[tuple[str, T], ...] = ()
    globs: tuple[tuple[str, T], ...] = ()
    _filename_index: dict[str, T] = field(init=False, repr=False, compare=False)
    _extension_index: dict[str, T] = field(init=False, repr=False, compare=False)
    _compiled_globs: tuple[tuple[re.Pattern[str], T], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        filename_index: dict[str, T] = {}
        for name, value in self.filenames:
            filename_index.setdefault(name, value)
        extension_index: dict[str, T] = {}
        for extension, value in self.extensions:
            extension_index.setdefault(extension, value)
        compiled = tuple(
            (re.compile(fnmatch.translate(pattern), re.IGNORECASE), value) for pattern, value in self.globs
        )
        object.__setattr__(self, "_filename_index", filename_index)
        object.__setattr__(self, "_extension_index", extension_index)
        object.__setattr__(self, "_compiled_globs", compiled)

    def for_filename(self, filename: str) -> T | None:
        return self._filename_index.get(filename)

    def for_extension(self, filename: str) -> T | None:
        for candidate in extension_candidates(filename):
            value = self._extension_index.get(candidate)
            if value is not None:
                return value
        return None

    def for_glob(self, filename: str) -> T | None:
        for pattern, value in self._compiled_globs:
            if pattern.match(filename):
                return value
        return None

    def lookup(self, filename: str) -> T | None:
        """Literal, then extension, then glob; ``None`` when nothing matches."""
        value = self.for_filename(filename)
        if value is None:
            value = self.for_extension(filename)
        if value is None:
            value = self.for_glob(filename)
        return value


class Glyphs:
    """Nerd Font glyphs shared by several rules."""

    ARCHIVE = "\uea98"
    CONFIG = "\ue615"
    DOC = "\ueaa4"
    IMAGE = "\uf1c5"
    LICENSE = "\ue60a"
    LOCK = "\ue672"

    DIRECTORY = "\U000f024b"
    FILE = "\U000f0214"
    EXECUTABLE = "\U000f070e"
    SYMLINK = "\uf481"


# Literal names are kept alphabetical ignoring any leading ``.``.
ICON_RULES: RuleTable[str] = RuleTable(
    filenames=(
        ("Cargo.lock", Glyphs.LOCK),
        ("CONTRIBUTING.md", Glyphs.DOC),
        (".editorconfig", "\ue652"),
        (".git", "\ue702"),
        (".github", "\ue709"),
        (".gitignore", "\ue702"),
        ("LICENCE", Glyphs.LICENSE),
        ("LICENSE", Glyphs.LICENSE),
        ("licence", Glyphs.LICENSE),
        ("license", Glyphs.LICENSE),
        ("package-lock.json", Glyphs.LOCK),
        ("pnpm-lock.yaml", Glyphs.LOCK),
        ("README", Glyphs.DOC),
        ("README.md", Glyphs.DOC),
        (".vscode", "\ue8da"),
    ),
    extensions=(
        ("7z", Glyphs.ARCHIVE),
        ("cfg", Glyphs.CONFIG),
        ("gif", Glyphs.IMAGE),
        ("ini", Glyphs.CONFIG),
        ("jpeg", Glyphs.IMAGE),
        ("jpg", Glyphs.IMAGE),
        ("lock", Glyphs.LOCK),
        ("png", Glyphs.IMAGE),
        ("tar", Glyphs.ARCHIVE),
        ("tar.gz", Glyphs.ARCHIVE),
        ("tgz", Glyphs.ARCHIVE),
        ("zip", Glyphs.ARCHIVE),
    ),
    globs=(
        ("LICEN[CS]E-*", Glyphs.LICENSE),
        ("*.env.*", Glyphs.CONFIG),
    ),
)

COLOR_RULES: RuleTable[Color] = RuleTable(
    filenames=(
        (".git", AnsiColor.RED),
        (".github", AnsiColor.BLACK),
        (".vscode", AnsiColor.BLUE),
    ),
    extensions=(
        ("7z", AnsiColor.BLACK),
        ("gif", AnsiColor.GREEN),
        ("jpeg", AnsiColor.YELLOW),
        ("jpg", AnsiColor.YELLOW),
        ("png", AnsiColor.CYAN),
        ("sqlite", AnsiColor.BLUE),
        ("sqlite3", AnsiColor.BLUE),
        ("tar", AnsiColor.GREEN),
        ("tar.gz", AnsiColor.GREEN),
        ("zip", AnsiColor.BLUE),
    ),
    globs=(("LICEN[CS]E-*", AnsiColor.YELLOW),),
)

# Keyed by Pygments lexer display names.
LANGUAGE_ICONS: dict[str, str] = {
    "Bash": "\ue795",
    "C": "\ue61e",
    "C++": "\ue61d",
    "CSS": "\ue749",
    "Docker": "\uf308",
    "Go": "\ue627",
    "HTML": "\ue736",
    "Java": "\ue738",
    "JavaScript": "\ue74e",
    "JSON": "\ue60b",
    "Lua": "\ue620",
    "Makefile": "\ue779",
    "Markdown": "\ue609",
    "Nix": "\uf313",
    "Python": "\ue73c",
    "Ruby": "\ue739",
    "Rust": "\ue7a8",
    "TOML": Glyphs.CONFIG,
    "TypeScript": "\ue628",
    "YAML": Glyphs.CONFIG,
}

LANGUAGE_COLORS: dict[str, Color] = {
    "Bash": Rgb(137, 224, 81),
    "C": Rgb(85, 85, 85),
    "C++": Rgb(243, 75, 125),
    "CSS": Rgb(86, 61, 124),
    "Docker": Rgb(56, 77, 84),
    "Go": Rgb(0, 173, 216),
    "HTML": Rgb(227, 76, 38),
    "Java": Rgb(176, 114, 25),
    "JavaScript": Rgb(241, 224, 90),
    "JSON": Rgb(41, 41, 41),
    "Lua": Rgb(0, 0, 128),
    "Makefile": Rgb(66, 120, 25),
    "Markdown": Rgb(8, 63, 161),
    "Nix": Rgb(126, 126, 255),
    "Python": Rgb(53, 114, 165),
    "Ruby": Rgb(112, 21, 22),
    "Rust": Rgb(222, 165, 132),
    "TOML": Rgb(156, 66, 33),
    "TypeScript": Rgb(49, 120, 198),
    "YAML": Rgb(203, 23, 30),
}
