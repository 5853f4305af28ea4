"""Ordering of sibling entries.

The active policy is either a structured ``SortSpec`` or a comparator hook
that receives two path strings. Sorting is stable, so entries that compare
equal keep their directory-listing order.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from functools import cmp_to_key
from typing import Union

from .attributes import Entry
from .diagnostics import Diagnostics
from .hooks import Hook, apply_hook

_DIGITS_RE = re.compile(r"[0-9]+")


class Method(Enum):
    NAIVE = "naive"
    NATURAL = "natural"


class Direction(Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: str) -> Direction:
        """Accept ``asc``/``ascending`` and ``desc``/``descending``."""
        try:
            return _DIRECTION_NAMES[raw]
        except KeyError:
            raise ValueError(f"direction must be 'asc' or 'desc', got {raw!r}") from None


_DIRECTION_NAMES = {
    "asc": Direction.ASC,
    "ascending": Direction.ASC,
    "desc": Direction.DESC,
    "descending": Direction.DESC,
}


class Directories(Enum):
    MIXED = "mixed"
    FIRST = "first"
    LAST = "last"


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def naive_compare(left: str, right: str) -> int:
    """Ordinal comparison by code point."""
    return _cmp(left, right)


def natural_compare(left: str, right: str) -> int:
    """Compare with ASCII digit runs treated as numbers.

    ``file2`` sorts before ``file10``. Names that are equal under this rule
    but differ textually (``file02`` vs ``file2``) fall back to the ordinal
    comparison.
    """
    i = j = 0
    left_len, right_len = len(left), len(right)
    while i < left_len and j < right_len:
        a = left[i]
        b = right[j]
        if "0" <= a <= "9" and "0" <= b <= "9":
            left_run = _DIGITS_RE.match(left, i)
            right_run = _DIGITS_RE.match(right, j)
            assert left_run is not None and right_run is not None
            ordering = _cmp(int(left_run.group()), int(right_run.group()))
            if ordering:
                return ordering
            i = left_run.end()
            j = right_run.end()
            continue
        if a != b:
            return -1 if a < b else 1
        i += 1
        j += 1

    if i < left_len:
        return 1
    if j < right_len:
        return -1
    return _cmp(left, right)


_METHOD_COMPARATORS = {
    Method.NAIVE: naive_compare,
    Method.NATURAL: natural_compare,
}


@dataclass(frozen=True)
class SortSpec:
    """Structured sorting options; unset fields take these defaults."""

    method: Method = Method.NAIVE
    direction: Direction = Direction.ASC
    directories: Directories = Directories.MIXED
    ignore_case: bool = False
    ignore_dot: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> SortSpec:
        """Build from a config mapping; raises ``ValueError`` on bad fields."""
        known = {item.name for item in fields(cls)}
        unknown = sorted(str(key) for key in raw if key not in known)
        if unknown:
            raise ValueError(f"unknown sorting option(s): {', '.join(unknown)}")

        options: dict[str, object] = {}
        for key, value in raw.items():
            if value is None:
                continue
            if key in ("ignore_case", "ignore_dot"):
                if not isinstance(value, bool):
                    raise ValueError(f"sorting.{key} must be a bool, got {value!r}")
                options[key] = value
                continue
            if not isinstance(value, str):
                raise ValueError(f"sorting.{key} must be a string, got {value!r}")
            try:
                if key == "method":
                    options[key] = Method(value)
                elif key == "direction":
                    options[key] = Direction.parse(value)
                else:
                    options[key] = Directories(value)
            except ValueError:
                raise ValueError(f"invalid sorting.{key}: {value!r}") from None
        return cls(**options)

    def clean(self, name: str) -> str:
        if self.ignore_dot and name.startswith("."):
            name = name[1:]
        if self.ignore_case:
            name = name.lower()
        return name

    def compare_names(self, left: str, right: str) -> int:
        """Method comparison on pre-processed names, honoring ``direction``."""
        ordering = _METHOD_COMPARATORS[self.method](self.clean(left), self.clean(right))
        return -ordering if self.direction is Direction.DESC else ordering

    def compare(self, left: Entry, right: Entry) -> int:
        """Directory placement first (independent of direction), then names."""
        if self.directories is not Directories.MIXED and left.sorts_as_dir != right.sorts_as_dir:
            dirs_first = self.directories is Directories.FIRST
            return -1 if left.sorts_as_dir == dirs_first else 1
        return self.compare_names(left.name, right.name)


DEFAULT_SORT = SortSpec()

SortPolicy = Union[SortSpec, Hook]


def sort_entries(
    entries: list[Entry],
    policy: SortPolicy = DEFAULT_SORT,
    diagnostics: Diagnostics | None = None,
) -> list[Entry]:
    """Return ``entries`` ordered by ``policy``.

    A comparator hook decides every pair on its own; when it faults for a pair
    the built-in default ordering decides that pair instead.
    """
    if isinstance(policy, SortSpec):
        return sorted(entries, key=cmp_to_key(policy.compare))

    hook = policy

    def compare(left: Entry, right: Entry) -> int:
        args = (str(left.path), str(right.path))
        return apply_hook(hook, args, DEFAULT_SORT.compare(left, right), diagnostics)

    return sorted(entries, key=cmp_to_key(compare))
