"""Executable availability probing.

Answers "is this tool on PATH?" for the optional runner wrapper, git, the
Flutter SDK, and the terminal-allocation helper.
"""

from __future__ import annotations

import shutil


def command_exists(name: str) -> bool:
    """Return ``True`` if *name* resolves to an executable on ``PATH``.

    Lookup failures of any kind are reported as "not found"; this function
    never raises.
    """
    if not name:
        return False
    try:
        return shutil.which(name) is not None
    except (OSError, ValueError):
        return False
