"""fancy-tree: directory listings with icons, colors and git status.

``main`` runs the command line; the pipeline pieces live in submodules
(``tree`` for the walk, ``config`` for user hook modules, ``render`` for text).
"""

from __future__ import annotations

__version__ = "0.1.0"


def main(argv: list[str] | None = None) -> None:
    """Run the CLI; imported on call so ``import fancytree`` stays cheap."""
    from .cli import main as _main

    _main(argv)


__all__ = ["__version__", "main"]
