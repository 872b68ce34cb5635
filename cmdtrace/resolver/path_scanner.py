"""Ordered search-path scanning.

Responsibilities:
- Probe `dir/command` for every search-path directory in order.
- Classify each directory as `not_found`, `file` or `symlink`.
- Mark every match after the first, or every match when a shell mechanism
  already owns the name, as shadowed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..models.datatypes import PathEntry, PathState
from ..probe.filesystem import is_executable_file, is_symlink, read_link
from ..probe.indirection import UsrMergeDetector


class PathScanner:
    """Scan a search path the way the shell hashes a bare command name."""

    def __init__(self, usr_merge: UsrMergeDetector | None = None) -> None:
        self._usr_merge = usr_merge or UsrMergeDetector()

    def scan(
        self,
        command: str,
        search_path: Sequence[str],
        already_won: bool = False,
    ) -> tuple[PathEntry, ...]:
        """Return one entry per directory, in input order.

        The scan never stops at the first match; later matches are kept and
        flagged as shadowed so callers can show every unreachable copy.
        """

        entries: list[PathEntry] = []
        winner_seen = False
        for directory in search_path:
            candidate = str(Path(directory or ".") / command)
            usr_merged = self._usr_merge.is_usr_merged(directory)
            if not is_executable_file(candidate):
                entries.append(
                    PathEntry(dir=directory, state=PathState.NOT_FOUND, usr_merged=usr_merged)
                )
                continue

            if is_symlink(candidate):
                state = PathState.SYMLINK
                target = _single_hop_target(candidate)
            else:
                state = PathState.FILE
                target = None

            shadowed = already_won or winner_seen
            if not shadowed:
                winner_seen = True
            entries.append(
                PathEntry(
                    dir=directory,
                    state=state,
                    symlink_target=target,
                    shadowed=shadowed,
                    usr_merged=usr_merged,
                )
            )
        return tuple(entries)


def _single_hop_target(candidate: str) -> str | None:
    # The link may vanish between the stat and the readlink.
    try:
        return read_link(candidate)
    except OSError:
        return None
