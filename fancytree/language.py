"""Language classification backed by Pygments lexer lookup.

The lexer's display name is used as the language label. Plain text, binary
content, and lookup failures all mean "no language" rather than an error.
"""

from __future__ import annotations

from pathlib import Path

READ_LIMIT = 16 * 1024

_PYGMENTS_READY = False
_PYGMENTS_AVAILABLE = False
_PYGMENTS_GET_LEXER_FOR_FILENAME = None
_PYGMENTS_GUESS_LEXER = None
_PYGMENTS_CLASS_NOT_FOUND: type[Exception] = LookupError
_PLAIN_TEXT_NAMES = frozenset({"Text only", "Text output"})


def _ensure_pygments_loaded() -> bool:
    """Lazily import and cache the Pygments lookup callables."""
    global _PYGMENTS_READY
    global _PYGMENTS_AVAILABLE
    global _PYGMENTS_GET_LEXER_FOR_FILENAME
    global _PYGMENTS_GUESS_LEXER
    global _PYGMENTS_CLASS_NOT_FOUND

    if _PYGMENTS_READY:
        return _PYGMENTS_AVAILABLE

    _PYGMENTS_READY = True
    try:
        from pygments.lexers import get_lexer_for_filename, guess_lexer
        from pygments.util import ClassNotFound
    except ImportError:
        _PYGMENTS_AVAILABLE = False
        return False

    _PYGMENTS_GET_LEXER_FOR_FILENAME = get_lexer_for_filename
    _PYGMENTS_GUESS_LEXER = guess_lexer
    _PYGMENTS_CLASS_NOT_FOUND = ClassNotFound
    _PYGMENTS_AVAILABLE = True
    return True


def read_sample(path: Path, limit: int = READ_LIMIT) -> str | None:
    """Return the decoded head of ``path``, or ``None`` for binary/unreadable files."""
    try:
        with path.open("rb") as handle:
            raw = handle.read(limit)
    except OSError:
        return None
    if b"\x00" in raw:
        return None
    return raw.decode("utf-8", errors="replace")


def _label(lexer: object) -> str | None:
    name = getattr(lexer, "name", None)
    if not isinstance(name, str) or name in _PLAIN_TEXT_NAMES:
        return None
    return name


def detect_language(path: Path) -> str | None:
    """Return the language label for a regular file, or ``None``."""
    if not _ensure_pygments_loaded():
        return None

    sample = read_sample(path)
    if sample is None:
        return None

    assert _PYGMENTS_GET_LEXER_FOR_FILENAME is not None
    try:
        return _label(_PYGMENTS_GET_LEXER_FOR_FILENAME(path.name, sample))
    except _PYGMENTS_CLASS_NOT_FOUND:
        pass
    except Exception:
        return None

    # Extensionless scripts are only classified by their interpreter line.
    if not sample.startswith("#!"):
        return None
    assert _PYGMENTS_GUESS_LEXER is not None
    try:
        return _label(_PYGMENTS_GUESS_LEXER(sample))
    except Exception:
        return None
