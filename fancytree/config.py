"""User configuration: location, hook modules, and the run's ``Config`` object.

Three optional Python modules live in the config directory: ``config.py``,
``icons.py`` and ``colors.py``. Each is executed in isolation with a
``fancytree`` helper object injected into its globals. Missing modules mean
built-in defaults; a module that fails to execute is reported once and
replaced by defaults wholesale.
"""

from __future__ import annotations

import importlib.util
import itertools
import os
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import ModuleType

from platformdirs import user_config_dir

from .color import Color, ColorChoice
from .diagnostics import DiagnosticKind, Diagnostics
from .git_status import GitOverlay
from .hooks import Hook, HookKind
from .rules import COLOR_RULES, ICON_RULES, RuleTable, glob_matches
from .sorting import DEFAULT_SORT, SortPolicy, SortSpec

APP_NAME = "fancy-tree"
CONFIG_DIR_ENV = "FANCY_TREE_CONFIG_DIR"

_module_counter = itertools.count()


class ConfigModule(Enum):
    """The three user-editable modules, named by their file stem."""

    MAIN = "config"
    ICONS = "icons"
    COLORS = "colors"

    @property
    def filename(self) -> str:
        return f"{self.value}.py"

    @property
    def template(self) -> str:
        return _TEMPLATES[self]


_MAIN_TEMPLATE = '''\
"""fancy-tree main configuration."""

# "auto", "on", "ansi" or "off".
color = "auto"


def skip(filepath, attributes, default):
    """Return True to hide ``filepath`` (and everything under it).

    ``default`` is True for dotfiles on Unix and files with the hidden
    attribute on Windows. ``fancytree.git`` is None outside a repository;
    inside one, ``fancytree.git.is_ignored(filepath)`` reports git-ignored
    paths.
    """
    return default


# Either None for the built-in order, a dict such as
#   {"method": "natural", "direction": "asc", "directories": "first",
#    "ignore_case": True, "ignore_dot": True}
# or a function (left, right) -> -1, 0 or 1 comparing two paths.
sorting = None

# How many levels deep to descend, or None for no limit.
level = None
'''

_ICONS_TEMPLATE = '''\
"""fancy-tree icon configuration."""


def icon(filename, attributes, default):
    """Return the glyph to show for ``filename``, or None for no icon.

    ``attributes`` has ``file_type``, ``is_hidden``, ``is_executable`` and
    ``language``. ``fancytree.glob_matches(pattern, filename)`` is available
    for pattern checks.
    """
    return default
'''

_COLORS_TEMPLATE = '''\
"""fancy-tree color configuration.

Colors are ANSI names such as "bright-black", or {"r": 0, "g": 0, "b": 0}.
Returning None turns that color off.
"""


def icons(filepath, attributes, default):
    return default


def _untracked(status, default):
    return default


def _tracked(status, default):
    return default


git_statuses = {
    # Worktree changes and ignored files. ``status`` is None for ignored files.
    "untracked": _untracked,
    # Staged changes.
    "tracked": _tracked,
}
'''

_TEMPLATES = {
    ConfigModule.MAIN: _MAIN_TEMPLATE,
    ConfigModule.ICONS: _ICONS_TEMPLATE,
    ConfigModule.COLORS: _COLORS_TEMPLATE,
}


def default_config_dir() -> Path:
    """``$FANCY_TREE_CONFIG_DIR`` when set, else the platform config dir."""
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME, appauthor=False))


def config_path(module: ConfigModule, config_dir: Path | None = None) -> Path:
    base = config_dir if config_dir is not None else default_config_dir()
    return base / module.filename


def ensure_config_file(module: ConfigModule, config_dir: Path | None = None) -> Path:
    """Write the default module when it does not exist yet; return its path."""
    path = config_path(module, config_dir)
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(module.template, encoding="utf-8")
    return path


def _os_name() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return "other"


@dataclass(frozen=True)
class GitApi:
    """Repository queries available to config modules."""

    overlay: GitOverlay

    def is_ignored(self, path: str | os.PathLike[str]) -> bool:
        return self.overlay.is_ignored(Path(path))


@dataclass(frozen=True)
class ScriptApi:
    """The ``fancytree`` object injected into every config module."""

    glob_matches: Callable[[str, str], bool] = glob_matches
    is_unix: bool = os.name == "posix"
    os: str = field(default_factory=_os_name)
    git: GitApi | None = None

    @classmethod
    def for_overlay(cls, overlay: GitOverlay | None) -> ScriptApi:
        return cls(git=GitApi(overlay) if overlay is not None else None)


@dataclass(frozen=True)
class Config:
    """Everything the walker needs to resolve entries; read-only for a run."""

    color: ColorChoice = ColorChoice.AUTO
    skip: Hook | None = None
    sorting: SortPolicy = DEFAULT_SORT
    level: int | None = None
    icon: Hook | None = None
    icon_color: Hook | None = None
    untracked_color: Hook | None = None
    tracked_color: Hook | None = None
    icon_rules: RuleTable[str] = ICON_RULES
    color_rules: RuleTable[Color] = COLOR_RULES


def load_module(
    path: Path,
    api: ScriptApi,
    diagnostics: Diagnostics,
) -> ModuleType | None:
    """Execute the config module at ``path``.

    Returns ``None`` when the file does not exist or fails to execute; the
    latter is recorded as a config diagnostic.
    """
    if not path.is_file():
        return None
    unique_name = f"_fancytree_user_{path.stem}_{next(_module_counter)}"
    spec = importlib.util.spec_from_file_location(unique_name, path)
    if spec is None or spec.loader is None:
        diagnostics.report(DiagnosticKind.CONFIG, "cannot load module; using defaults", path)
        return None

    module = importlib.util.module_from_spec(spec)
    module.fancytree = api  # type: ignore[attr-defined]
    sys.modules[unique_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        diagnostics.report(
            DiagnosticKind.CONFIG,
            f"failed to load: {type(exc).__name__}: {exc}; using defaults",
            path,
        )
        return None
    finally:
        sys.modules.pop(unique_name, None)
    return module


def _hook_attr(
    module: ModuleType,
    attr: str,
    kind: HookKind,
    name: str,
    path: Path,
    diagnostics: Diagnostics,
) -> Hook | None:
    func = getattr(module, attr, None)
    if func is None:
        return None
    if not callable(func):
        diagnostics.report(DiagnosticKind.CONFIG, f"{attr} must be a function; ignoring it", path)
        return None
    return Hook(kind=kind, func=func, name=name)


def _parse_color_choice(raw: object, path: Path, diagnostics: Diagnostics) -> ColorChoice:
    if raw is None:
        return ColorChoice.AUTO
    try:
        return ColorChoice(raw)
    except ValueError:
        diagnostics.report(
            DiagnosticKind.CONFIG,
            f"color must be one of auto, on, ansi, off; got {raw!r}; using auto",
            path,
        )
        return ColorChoice.AUTO


def _parse_level(raw: object, path: Path, diagnostics: Diagnostics) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        diagnostics.report(
            DiagnosticKind.CONFIG,
            f"level must be a non-negative integer or None; got {raw!r}; ignoring it",
            path,
        )
        return None
    return raw


def _parse_sorting(raw: object, path: Path, diagnostics: Diagnostics) -> SortPolicy:
    if raw is None:
        return DEFAULT_SORT
    if isinstance(raw, Mapping):
        try:
            return SortSpec.from_mapping(raw)
        except ValueError as exc:
            diagnostics.report(DiagnosticKind.CONFIG, f"{exc}; using the default sort order", path)
            return DEFAULT_SORT
    if callable(raw):
        return Hook(kind=HookKind.COMPARATOR, func=raw, name="config.sorting")
    diagnostics.report(
        DiagnosticKind.CONFIG,
        f"sorting must be a dict, a function or None; got {type(raw).__name__}; using the default sort order",
        path,
    )
    return DEFAULT_SORT


def _git_status_hook(
    container: object,
    attr: str,
    kind: HookKind,
    path: Path,
    diagnostics: Diagnostics,
) -> Hook | None:
    if isinstance(container, Mapping):
        func = container.get(attr)
    else:
        func = getattr(container, attr, None)
    if func is None:
        return None
    if not callable(func):
        diagnostics.report(DiagnosticKind.CONFIG, f"git_statuses.{attr} must be a function; ignoring it", path)
        return None
    return Hook(kind=kind, func=func, name=f"colors.git_statuses.{attr}")


def load_config(
    config_dir: Path | None = None,
    api: ScriptApi | None = None,
    diagnostics: Diagnostics | None = None,
) -> Config:
    """Load the three config modules from ``config_dir`` into a ``Config``."""
    base = config_dir if config_dir is not None else default_config_dir()
    api = api if api is not None else ScriptApi()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    options: dict[str, object] = {}

    main_path = config_path(ConfigModule.MAIN, base)
    main = load_module(main_path, api, diagnostics)
    if main is not None:
        options["color"] = _parse_color_choice(getattr(main, "color", None), main_path, diagnostics)
        options["skip"] = _hook_attr(main, "skip", HookKind.SKIP, "config.skip", main_path, diagnostics)
        options["sorting"] = _parse_sorting(getattr(main, "sorting", None), main_path, diagnostics)
        options["level"] = _parse_level(getattr(main, "level", None), main_path, diagnostics)

    icons_path = config_path(ConfigModule.ICONS, base)
    icons = load_module(icons_path, api, diagnostics)
    if icons is not None:
        options["icon"] = _hook_attr(icons, "icon", HookKind.ICON, "icons.icon", icons_path, diagnostics)

    colors_path = config_path(ConfigModule.COLORS, base)
    colors = load_module(colors_path, api, diagnostics)
    if colors is not None:
        options["icon_color"] = _hook_attr(
            colors, "icons", HookKind.COLOR, "colors.icons", colors_path, diagnostics
        )
        git_statuses = getattr(colors, "git_statuses", None)
        if git_statuses is not None:
            options["untracked_color"] = _git_status_hook(
                git_statuses, "untracked", HookKind.UNTRACKED_COLOR, colors_path, diagnostics
            )
            options["tracked_color"] = _git_status_hook(
                git_statuses, "tracked", HookKind.TRACKED_COLOR, colors_path, diagnostics
            )

    return Config(**options)  # type: ignore[arg-type]
