"""Filesystem and binary probes applied to search-path candidates."""

from .binary import ElfFormatError, is_elf, read_elf_interpreter, read_shebang
from .filesystem import (
    MAX_SYMLINK_HOPS,
    canonicalize,
    is_executable_file,
    is_symlink,
    read_link,
    walk_symlink_chain,
)
from .indirection import (
    DEFAULT_ALTERNATIVES_DIR,
    UsrMergeDetector,
    find_alternatives_link,
)

__all__ = [
    "DEFAULT_ALTERNATIVES_DIR",
    "ElfFormatError",
    "MAX_SYMLINK_HOPS",
    "UsrMergeDetector",
    "canonicalize",
    "find_alternatives_link",
    "is_elf",
    "is_executable_file",
    "is_symlink",
    "read_elf_interpreter",
    "read_link",
    "read_shebang",
    "walk_symlink_chain",
]
