"""Editor launch helper for ``--edit-config``.

The command comes from ``$FANCY_TREE_EDITOR``, then ``$VISUAL``, then
``$EDITOR``. Returns an error message string instead of raising.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path

EDITOR_ENV_VARS = ("FANCY_TREE_EDITOR", "VISUAL", "EDITOR")


def editor_command() -> list[str] | None:
    for name in EDITOR_ENV_VARS:
        raw = os.environ.get(name, "").strip()
        if not raw:
            continue
        cmd = shlex.split(raw)
        if cmd:
            return cmd
    return None


def launch_editor(target: Path) -> str | None:
    cmd = editor_command()
    if cmd is None:
        return "Cannot edit: none of $FANCY_TREE_EDITOR, $VISUAL or $EDITOR is set."
    try:
        completed = subprocess.run([*cmd, str(target)], check=False)
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    if completed.returncode != 0:
        return f"Editor exited with status {completed.returncode}."
    return None
