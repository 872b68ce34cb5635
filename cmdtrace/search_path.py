"""Search-path splitting and administrative-directory widening policy.

Responsibilities:
- Split `PATH`-style strings with shell semantics (empty element is `.`).
- Widen a base search path with administrative directories, either always or
  only when the command is missing from the base path but present in one of
  them.

Widening always returns a new tuple; the process environment is never touched.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Iterable, Sequence

from .probe.filesystem import is_executable_file

DEFAULT_ADMIN_DIRECTORIES: tuple[str, ...] = (
    "/usr/local/sbin",
    "/usr/sbin",
    "/sbin",
    "/snap/bin",
    "/var/lib/flatpak/exports/bin",
)
ADMIN_PATH_MODES = frozenset({"auto", "always", "never"})


@dataclass(frozen=True, slots=True)
class EffectiveSearchPath:
    """Search path chosen for one command.

    Attributes:
        directories: Ordered directories to scan.
        widened: Whether administrative directories were appended.
        added: Directories appended by widening, in order.
    """

    directories: tuple[str, ...]
    widened: bool = False
    added: tuple[str, ...] = ()


def split_search_path(value: str | None) -> tuple[str, ...]:
    """Split a `PATH` value, keeping duplicates and mapping empty elements to `.`."""

    if not value:
        return ()
    return tuple(directory or "." for directory in value.split(os.pathsep))


def widen_search_path(base: Sequence[str], extra: Iterable[str]) -> tuple[str, ...]:
    """Append each directory of `extra` that `base` does not already contain."""

    widened = list(base)
    for directory in extra:
        if directory not in widened:
            widened.append(directory)
    return tuple(widened)


def _found_in(command: str, directories: Iterable[str]) -> bool:
    return any(
        is_executable_file(str(Path(directory or ".") / command)) for directory in directories
    )


def effective_search_path(
    command: str,
    base: Sequence[str],
    mode: str = "auto",
    admin_directories: Sequence[str] = DEFAULT_ADMIN_DIRECTORIES,
) -> EffectiveSearchPath:
    """Choose the search path to resolve `command` against.

    Modes:
    - `never`: use `base` unchanged.
    - `always`: append administrative directories.
    - `auto`: append them only when `command` is not executable anywhere in
      `base` but is executable in at least one administrative directory.
    """

    if mode not in ADMIN_PATH_MODES:
        supported = ", ".join(sorted(ADMIN_PATH_MODES))
        raise ValueError(f"Unsupported admin path mode `{mode}`; supported: {supported}.")

    base_tuple = tuple(base)
    if mode == "never":
        return EffectiveSearchPath(directories=base_tuple)
    if mode == "auto":
        if _found_in(command, base_tuple) or not _found_in(command, admin_directories):
            return EffectiveSearchPath(directories=base_tuple)

    widened = widen_search_path(base_tuple, admin_directories)
    added = widened[len(base_tuple):]
    return EffectiveSearchPath(directories=widened, widened=bool(added), added=added)
