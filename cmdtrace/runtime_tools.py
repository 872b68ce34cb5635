"""Deterministic runtime executable resolution helpers.

Responsibilities:
- Locate the shell used to collect snapshots, explicit path first, then PATH.
"""

from __future__ import annotations

import os
import shutil


def resolve_executable(command_name: str, search_path: str | None = None) -> str:
    """Resolve an executable with explicit-path precedence, then PATH.

    Resolution order:
    1. A name containing a path separator, used as given.
    2. `search_path` (or the process `PATH`).
    3. Raw command name (allowing subprocess to raise a native missing-binary error).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    if os.sep in normalized:
        return normalized

    resolved_path = shutil.which(normalized, path=search_path)
    if resolved_path is not None:
        return resolved_path

    return normalized
