"""Per-entry intrinsic facts: type, hidden, executable, and language.

``resolve_entry`` is called once per traversed path. It uses ``lstat`` so a
symlink is classified as a symlink; the link target is only consulted to
classify language and whether the link points at a directory.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

from .language import detect_language

FILE_ATTRIBUTE_HIDDEN = 0x2
IS_WINDOWS = os.name == "nt"

LanguageDetector = Callable[[Path], "str | None"]


class FileType(Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class FileAttributes:
    """Attribute view handed to config hooks."""

    file_type: str
    is_hidden: bool
    is_executable: bool
    language: str | None


@dataclass(frozen=True)
class Entry:
    """One filesystem node with attributes resolved for this run."""

    path: Path
    file_type: FileType
    is_hidden: bool
    is_executable: bool
    language: str | None = None
    target_is_dir: bool = False

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def is_dir(self) -> bool:
        return self.file_type is FileType.DIRECTORY

    @property
    def sorts_as_dir(self) -> bool:
        """Directories and symlinks to directories group together when sorting."""
        return self.is_dir or (self.file_type is FileType.SYMLINK and self.target_is_dir)

    def attributes(self) -> FileAttributes:
        return FileAttributes(
            file_type=self.file_type.value,
            is_hidden=self.is_hidden,
            is_executable=self.is_executable,
            language=self.language,
        )


def has_hidden_marker(path: Path, st: os.stat_result) -> bool:
    """Dot-prefixed basename on POSIX, the hidden attribute on Windows."""
    if IS_WINDOWS:
        return bool(getattr(st, "st_file_attributes", 0) & FILE_ATTRIBUTE_HIDDEN)
    return path.name.startswith(".")


@lru_cache(maxsize=1)
def _windows_executable_suffixes() -> frozenset[str]:
    raw = os.environ.get("PATHEXT", "")
    return frozenset(part.strip().lower() for part in raw.split(";") if part.strip())


def has_executable_marker(path: Path, st: os.stat_result) -> bool:
    """Any execute bit on POSIX, a ``%PATHEXT%`` suffix on Windows."""
    if not stat.S_ISREG(st.st_mode):
        return False
    if IS_WINDOWS:
        return path.suffix.lower() in _windows_executable_suffixes()
    return bool(st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def resolve_entry(path: Path, language_for: LanguageDetector = detect_language) -> Entry:
    """Build the ``Entry`` for ``path``.

    Raises ``OSError`` when ``path`` cannot be stat'ed; callers treat that as a
    per-path diagnostic.
    """
    st = path.lstat()
    mode = st.st_mode
    hidden = has_hidden_marker(path, st)

    if stat.S_ISLNK(mode):
        try:
            target = path.stat()
        except OSError:
            # Dangling link: still listed, classified only as a symlink.
            return Entry(path=path, file_type=FileType.SYMLINK, is_hidden=hidden, is_executable=False)
        language = language_for(path) if stat.S_ISREG(target.st_mode) else None
        return Entry(
            path=path,
            file_type=FileType.SYMLINK,
            is_hidden=hidden,
            is_executable=has_executable_marker(path, target),
            language=language,
            target_is_dir=stat.S_ISDIR(target.st_mode),
        )

    if stat.S_ISDIR(mode):
        return Entry(path=path, file_type=FileType.DIRECTORY, is_hidden=hidden, is_executable=False)

    language = language_for(path) if stat.S_ISREG(mode) else None
    return Entry(
        path=path,
        file_type=FileType.FILE,
        is_hidden=hidden,
        is_executable=has_executable_marker(path, st),
        language=language,
    )
