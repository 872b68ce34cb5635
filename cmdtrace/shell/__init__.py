"""Shell-state snapshot collection and parsing for bash."""

from .snapshot import (
    BASH_SPECIAL_BUILTINS,
    BASH_SYNTAX_TOKENS,
    SHELL_HOOK,
    SNAPSHOT_MARKER,
    SNAPSHOT_SCRIPT,
    collect_snapshot,
    default_snapshot,
    load_snapshot,
    parse_snapshot_dump,
    snapshot_from_payload,
    snapshot_to_payload,
)

__all__ = [
    "BASH_SPECIAL_BUILTINS",
    "BASH_SYNTAX_TOKENS",
    "SHELL_HOOK",
    "SNAPSHOT_MARKER",
    "SNAPSHOT_SCRIPT",
    "collect_snapshot",
    "default_snapshot",
    "load_snapshot",
    "parse_snapshot_dump",
    "snapshot_from_payload",
    "snapshot_to_payload",
]
