"""Command-line front door for fancy-tree.

Parses CLI options, loads the user config, walks the requested directory and
writes the tree to stdout. Diagnostics collected during the run go to stderr
after the tree.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import TextIO

from .color import ColorChoice
from .config import ConfigModule, ScriptApi, default_config_dir, ensure_config_file, load_config
from .diagnostics import Diagnostics, FancyTreeError
from .editor import launch_editor
from .git_status import collect_git_overlay
from .render import write_tree
from .tree import TreeWalker, ensure_root_directory

logger = logging.getLogger("fancytree")

EXIT_ROOT_ERROR = 2


def _non_negative_int(value: str) -> int:
    """argparse type for depth limits."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fancy-tree",
        description="List a directory tree with icons, colors and git status.",
    )
    parser.add_argument("path", nargs="?", default=".", help="Directory to list. Defaults to the current directory.")
    parser.add_argument(
        "--color",
        choices=[choice.value for choice in ColorChoice],
        default=None,
        help="When to use colors (overrides the config file).",
    )
    parser.add_argument(
        "-L",
        "--level",
        type=_non_negative_int,
        default=None,
        help="Descend only this many levels (overrides the config file).",
    )
    parser.add_argument(
        "--edit-config",
        nargs="?",
        const=ConfigModule.MAIN.value,
        choices=[module.value for module in ConfigModule],
        default=None,
        metavar="{config,icons,colors}",
        help="Open a config file in $FANCY_TREE_EDITOR, $VISUAL or $EDITOR and exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")
    return parser


def _configure_logging(verbose: bool, stream: TextIO) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="fancy-tree: %(levelname)s: %(message)s",
        stream=stream,
    )


def _edit_config(name: str) -> int:
    path = ensure_config_file(ConfigModule(name), default_config_dir())
    error = launch_editor(path)
    if error is not None:
        logger.error("%s", error)
        return 1
    return 0


def run(argv: list[str] | None = None, stdout: TextIO | None = None) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)
    out = stdout if stdout is not None else sys.stdout
    _configure_logging(args.verbose, sys.stderr)

    if args.edit_config is not None:
        return _edit_config(args.edit_config)

    root = Path(args.path)
    try:
        ensure_root_directory(root)
    except FancyTreeError as exc:
        logger.error("%s", exc)
        return EXIT_ROOT_ERROR

    diagnostics = Diagnostics()
    overlay = collect_git_overlay(root, diagnostics)
    config = load_config(default_config_dir(), ScriptApi.for_overlay(overlay), diagnostics)
    overrides: dict[str, object] = {}
    if args.color is not None:
        overrides["color"] = ColorChoice(args.color)
    if args.level is not None:
        overrides["level"] = args.level
    if overrides:
        config = dataclasses.replace(config, **overrides)

    choice = config.color.resolve(out)
    walker = TreeWalker(config, overlay, diagnostics, resolve_colors=not choice.is_off)
    try:
        write_tree(walker.walk(root), out, choice, show_status=overlay is not None, root_label=args.path)
    except FancyTreeError as exc:
        logger.error("%s", exc)
        return EXIT_ROOT_ERROR
    out.flush()

    for record in diagnostics:
        logger.warning("%s", record.format())
    return 0


def main(argv: list[str] | None = None) -> None:
    """Console-script entry point."""
    status = run(argv)
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
