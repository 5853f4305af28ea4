"""Recoverable-problem side channel for a single run.

Per-path filesystem failures, git lookups, hook faults, and config problems are
recorded here instead of interrupting traversal. The CLI surfaces them after
the tree has been written.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class FancyTreeError(Exception):
    """Base class for errors raised by fancytree."""


class RootError(FancyTreeError):
    """The traversal root is missing or is not a directory."""


class DiagnosticKind(Enum):
    FILESYSTEM = "filesystem"
    GIT = "git"
    HOOK = "hook"
    CONFIG = "config"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    path: Path | None = None

    def format(self) -> str:
        if self.path is None:
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value}: {self.path}: {self.message}"


@dataclass
class Diagnostics:
    """Ordered collector of diagnostics with optional per-key deduplication."""

    records: list[Diagnostic] = field(default_factory=list)
    _seen_keys: set[Hashable] = field(default_factory=set, repr=False)

    def report(self, kind: DiagnosticKind, message: str, path: Path | None = None) -> Diagnostic:
        record = Diagnostic(kind=kind, message=message, path=path)
        self.records.append(record)
        logger.debug("recorded %s", record.format())
        return record

    def report_once(
        self,
        key: Hashable,
        kind: DiagnosticKind,
        message: str,
        path: Path | None = None,
    ) -> Diagnostic | None:
        """Record a diagnostic only the first time ``key`` is seen."""
        if key in self._seen_keys:
            return None
        self._seen_keys.add(key)
        return self.report(kind, message, path)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [record for record in self.records if record.kind is kind]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)
