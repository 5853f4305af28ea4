"""Color values, color modes, and SGR escape formatting.

A color is either one of the 16 named ANSI colors or an explicit RGB triple.
``ColorChoice`` decides whether and how colors reach the terminal.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TextIO, Union


class AnsiColor(Enum):
    """Named ANSI colors; values are the tokens used by config modules."""

    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    BRIGHT_BLACK = "bright-black"
    BRIGHT_RED = "bright-red"
    BRIGHT_GREEN = "bright-green"
    BRIGHT_YELLOW = "bright-yellow"
    BRIGHT_BLUE = "bright-blue"
    BRIGHT_MAGENTA = "bright-magenta"
    BRIGHT_CYAN = "bright-cyan"
    BRIGHT_WHITE = "bright-white"

    @property
    def sgr(self) -> str:
        index = _ANSI_ORDER.index(self)
        return str(30 + index) if index < 8 else str(90 + index - 8)


_ANSI_ORDER = tuple(AnsiColor)

# xterm default palette, used to approximate RGB values in ``ansi`` mode.
_ANSI_PALETTE: dict[AnsiColor, tuple[int, int, int]] = {
    AnsiColor.BLACK: (0, 0, 0),
    AnsiColor.RED: (205, 0, 0),
    AnsiColor.GREEN: (0, 205, 0),
    AnsiColor.YELLOW: (205, 205, 0),
    AnsiColor.BLUE: (0, 0, 238),
    AnsiColor.MAGENTA: (205, 0, 205),
    AnsiColor.CYAN: (0, 205, 205),
    AnsiColor.WHITE: (229, 229, 229),
    AnsiColor.BRIGHT_BLACK: (127, 127, 127),
    AnsiColor.BRIGHT_RED: (255, 0, 0),
    AnsiColor.BRIGHT_GREEN: (0, 255, 0),
    AnsiColor.BRIGHT_YELLOW: (255, 255, 0),
    AnsiColor.BRIGHT_BLUE: (92, 92, 255),
    AnsiColor.BRIGHT_MAGENTA: (255, 0, 255),
    AnsiColor.BRIGHT_CYAN: (0, 255, 255),
    AnsiColor.BRIGHT_WHITE: (255, 255, 255),
}


@dataclass(frozen=True)
class Rgb:
    """Explicit 24-bit color."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255:
                raise ValueError(f"RGB channels must be integers in 0..255, got {(self.r, self.g, self.b)!r}")

    def nearest_ansi(self) -> AnsiColor:
        """Return the palette color with the smallest squared distance."""

        def distance(color: AnsiColor) -> int:
            pr, pg, pb = _ANSI_PALETTE[color]
            return (pr - self.r) ** 2 + (pg - self.g) ** 2 + (pb - self.b) ** 2

        return min(_ANSI_ORDER, key=distance)


Color = Union[AnsiColor, Rgb]


def parse_color(value: object) -> Color:
    """Convert a config-module value into a ``Color``.

    Accepts an ANSI token, an ``{"r", "g", "b"}`` mapping, a 3-item sequence,
    or an existing color. Raises ``ValueError`` for anything else.
    """
    if isinstance(value, (AnsiColor, Rgb)):
        return value
    if isinstance(value, str):
        try:
            return AnsiColor(value)
        except ValueError:
            raise ValueError(f"unknown ANSI color name: {value!r}") from None
    if isinstance(value, Mapping):
        try:
            return Rgb(value["r"], value["g"], value["b"])
        except KeyError as exc:
            raise ValueError(f"RGB mapping is missing channel {exc.args[0]!r}") from None
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)) and len(value) == 3:
        return Rgb(*value)
    raise ValueError(f"expected a color, got {type(value).__name__}")


def color_to_script(color: Color | None) -> str | dict[str, int] | None:
    """Convert a host color into the value handed to config modules."""
    if color is None:
        return None
    if isinstance(color, AnsiColor):
        return color.value
    return {"r": color.r, "g": color.g, "b": color.b}


class ColorChoice(Enum):
    """When and how to emit colors."""

    AUTO = "auto"
    ON = "on"
    ANSI = "ansi"
    OFF = "off"

    def resolve(self, stream: TextIO | None = None) -> ColorChoice:
        """Collapse ``auto`` into ``on`` or ``off`` for ``stream``."""
        if self is not ColorChoice.AUTO:
            return self
        if os.environ.get("NO_COLOR"):
            return ColorChoice.OFF
        target = stream if stream is not None else sys.stdout
        try:
            is_tty = target.isatty()
        except (AttributeError, ValueError):
            is_tty = False
        return ColorChoice.ON if is_tty else ColorChoice.OFF

    @property
    def is_off(self) -> bool:
        return self is ColorChoice.OFF

    def sgr_for(self, color: Color | None) -> str:
        """Return the foreground SGR parameters for ``color`` in this mode."""
        if color is None or self is ColorChoice.OFF:
            return ""
        if isinstance(color, Rgb):
            if self is ColorChoice.ANSI:
                return color.nearest_ansi().sgr
            return f"38;2;{color.r};{color.g};{color.b}"
        return color.sgr

    def paint(self, text: str, color: Color | None) -> str:
        """Wrap ``text`` in foreground color escapes when enabled."""
        params = self.sgr_for(color)
        if not params:
            return text
        return f"\033[{params}m{text}\033[0m"
