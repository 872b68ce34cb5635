"""Packaging-alternatives and usr-merge detection.

Responsibilities:
- Find the first distro alternatives link in a resolved symlink chain.
- Decide whether legacy root directories (`/bin`, `/sbin`, ...) are merged
  into their `/usr` counterparts.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from ..models.datatypes import AlternativesLink, SymlinkHop

DEFAULT_ALTERNATIVES_DIR = "/etc/alternatives"
LEGACY_ROOT_DIRECTORIES = frozenset({"bin", "sbin", "lib", "lib32", "lib64", "libx32"})


def find_alternatives_link(
    chain: Iterable[SymlinkHop],
    alternatives_dir: str = DEFAULT_ALTERNATIVES_DIR,
) -> AlternativesLink | None:
    """Return the first chain hop whose link lives in `alternatives_dir`.

    The reported target is the link's fully resolved path, or `None` when it
    cannot be resolved (dangling or looping selection).
    """

    real_alternatives_dir = Path(alternatives_dir).resolve()
    for hop in chain:
        link_parent = Path(hop.source).parent.resolve()
        if not link_parent.is_relative_to(real_alternatives_dir):
            continue
        try:
            target: str | None = str(Path(hop.source).resolve(strict=True))
        except (OSError, RuntimeError):
            target = None
        return AlternativesLink(link=hop.source, target=target)
    return None


class UsrMergeDetector:
    """Decide per directory whether a legacy root is the same as `<root>/usr/<name>`.

    Results are memoized per directory so one scan probes each root once.
    """

    def __init__(self, root: str = "/") -> None:
        self._root = Path(os.path.normpath(root))
        self._cache: dict[Path, bool] = {}

    def is_usr_merged(self, directory: str) -> bool:
        """Return `True` when `directory` is a legacy root merged into `usr`."""

        normalized = Path(os.path.normpath(directory or "."))
        if normalized not in self._cache:
            self._cache[normalized] = self._probe(normalized)
        return self._cache[normalized]

    def _probe(self, directory: Path) -> bool:
        if directory.name not in LEGACY_ROOT_DIRECTORIES or directory.parent != self._root:
            return False
        counterpart = self._root / "usr" / directory.name
        # samefile follows links, so `/bin -> usr/bin` and bind mounts both match.
        try:
            return directory.samefile(counterpart)
        except (OSError, ValueError):
            return False
