"""Fault-isolating adapter around user-supplied config hooks.

Every hook follows one contract: it receives a computed default and returns an
override. Calls are converted to a ``HookOutcome`` at this boundary, so an
exception raised by user code or a return value of the wrong shape never
escapes into traversal. Faults fall back to the default and are reported once
per hook per run.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from .color import parse_color
from .diagnostics import DiagnosticKind, Diagnostics

T = TypeVar("T")


class HookKind(Enum):
    ICON = "icon"
    COLOR = "color"
    UNTRACKED_COLOR = "untracked-color"
    TRACKED_COLOR = "tracked-color"
    SKIP = "skip"
    COMPARATOR = "comparator"


class MalformedReturn(ValueError):
    """A hook returned a value outside its declared shape."""


def _convert_icon(value: object) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise MalformedReturn(f"expected a string or None, got {type(value).__name__}")


def _convert_color(value: object):
    if value is None:
        return None
    try:
        return parse_color(value)
    except ValueError as exc:
        raise MalformedReturn(str(exc)) from None


def _convert_skip(value: object) -> bool:
    if isinstance(value, bool):
        return value
    raise MalformedReturn(f"expected a bool, got {type(value).__name__}")


def _convert_ordering(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedReturn(f"expected a number, got {type(value).__name__}")
    if value < 0:
        return -1
    if value > 0:
        return 1
    if value == 0:
        return 0
    raise MalformedReturn(f"expected a comparable number, got {value!r}")


_CONVERTERS: dict[HookKind, Callable[[object], Any]] = {
    HookKind.ICON: _convert_icon,
    HookKind.COLOR: _convert_color,
    HookKind.UNTRACKED_COLOR: _convert_color,
    HookKind.TRACKED_COLOR: _convert_color,
    HookKind.SKIP: _convert_skip,
    HookKind.COMPARATOR: _convert_ordering,
}


@dataclass(frozen=True)
class HookOutcome(Generic[T]):
    """Either a converted return value or a fault description."""

    value: T | None = None
    fault: str | None = None

    @property
    def ok(self) -> bool:
        return self.fault is None


@dataclass(frozen=True)
class Hook:
    """A user function tagged with the contract it is expected to follow.

    ``name`` is the dotted location in the config module, used in diagnostics.
    """

    kind: HookKind
    func: Callable[..., object]
    name: str

    def invoke(self, *args: object) -> HookOutcome:
        try:
            raw = self.func(*args)
        except Exception as exc:
            return HookOutcome(fault=f"{type(exc).__name__}: {exc}")
        try:
            return HookOutcome(value=_CONVERTERS[self.kind](raw))
        except MalformedReturn as exc:
            return HookOutcome(fault=f"malformed return value: {exc}")


def apply_hook(
    hook: Hook | None,
    args: tuple[object, ...],
    default: T,
    diagnostics: Diagnostics | None,
) -> T | None:
    """Run ``hook`` with ``args`` and return its override of ``default``.

    Absent hooks and faulting hooks both yield ``default``; a hook that
    returns ``None`` yields ``None`` (for icon and color hooks this disables
    the layer).
    """
    if hook is None:
        return default
    outcome = hook.invoke(*args)
    if outcome.ok:
        return outcome.value
    if diagnostics is not None:
        diagnostics.report_once(
            ("hook", hook.name),
            DiagnosticKind.HOOK,
            f"{hook.name} failed: {outcome.fault}; falling back to the default",
        )
    return default
