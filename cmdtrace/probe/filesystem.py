"""Low-level filesystem primitives used by scanning and inspection.

Responsibilities:
- Decide whether `dir/command` is something the kernel would execute.
- Read single symlink hops and walk full symlink chains without looping.
- Canonicalize paths strictly so failures are visible to callers.

Paths cross this module's boundary as `str`; `pathlib.Path` is used inside.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
import stat

from ..models.datatypes import SymlinkHop

# Same ceiling Linux applies before failing with ELOOP.
MAX_SYMLINK_HOPS = 40


def is_executable_file(path: str) -> bool:
    """Return `True` when `path` resolves to an executable regular file.

    Paths the OS cannot represent (for example with an embedded NUL) are
    reported as not executable.
    """

    try:
        status = Path(path).stat()
    except (OSError, ValueError):
        return False
    if not stat.S_ISREG(status.st_mode):
        return False
    return os.access(path, os.X_OK)


def is_symlink(path: str) -> bool:
    """Return `True` when `path` itself is a symbolic link."""

    return Path(path).is_symlink()


def read_link(path: str) -> str | None:
    """Return the raw single-hop target of `path`, or `None` for non-links."""

    link = Path(path)
    if not link.is_symlink():
        return None
    return str(link.readlink())


def canonicalize(path: str) -> str:
    """Return the fully resolved real path of `path`.

    Raises:
        OSError: If any component is missing, unreadable or part of a loop.
    """

    try:
        return str(Path(path).resolve(strict=True))
    except RuntimeError as exc:
        # Python < 3.13 reports symlink loops as RuntimeError.
        raise OSError(errno.ELOOP, os.strerror(errno.ELOOP), path) from exc


def follow_link(source: str, target: str) -> str:
    """Return the absolute path a link at `source` with text `target` points to."""

    parent = Path(source).parent.resolve()
    return os.path.normpath(parent / target)


def walk_symlink_chain(
    start: str, max_hops: int = MAX_SYMLINK_HOPS
) -> tuple[tuple[SymlinkHop, ...], bool]:
    """Walk symlinks from `start` one hop at a time until a non-link is reached.

    Returns:
        The ordered hops and `True` when the walk stopped because a link was
        revisited or the hop ceiling was reached.
    """

    hops: list[SymlinkHop] = []
    visited: set[str] = set()
    current = os.path.normpath(start)
    while Path(current).is_symlink():
        if current in visited or len(hops) >= max_hops:
            return tuple(hops), True
        visited.add(current)
        target = str(Path(current).readlink())
        hops.append(SymlinkHop(source=current, target=target))
        current = follow_link(current, target)
    return tuple(hops), False
