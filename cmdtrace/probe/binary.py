"""Executable format probes: ELF program interpreter and script shebang.

Responsibilities:
- Recognize ELF binaries from their magic bytes.
- Extract the `PT_INTERP` segment from 32- and 64-bit ELF files of either byte order.
- Extract the interpreter line of `#!` scripts.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO

ELF_MAGIC = b"\x7fELF"
PT_INTERP = 3

_ELFCLASS32 = 1
_ELFCLASS64 = 2
_ELFDATA2LSB = 1
_ELFDATA2MSB = 2
_MAX_INTERP_BYTES = 4096
_MAX_SHEBANG_BYTES = 4096


class ElfFormatError(ValueError):
    """Raised when a file has ELF magic but malformed or truncated headers."""


def is_elf(path: str) -> bool:
    """Return `True` when the file at `path` starts with the ELF magic bytes."""

    with Path(path).open("rb") as handle:
        return handle.read(len(ELF_MAGIC)) == ELF_MAGIC


def read_elf_interpreter(path: str) -> str | None:
    """Return the program interpreter of an ELF file, `None` if it has none.

    Statically linked binaries carry no `PT_INTERP` segment.

    Raises:
        ElfFormatError: If the file is not a well-formed ELF image.
        OSError: If the file cannot be read.
    """

    with Path(path).open("rb") as handle:
        ident = handle.read(16)
        if len(ident) < 16 or not ident.startswith(ELF_MAGIC):
            raise ElfFormatError(f"`{path}` is not an ELF file.")
        elf_class = ident[4]
        data_encoding = ident[5]
        if data_encoding == _ELFDATA2LSB:
            order = "<"
        elif data_encoding == _ELFDATA2MSB:
            order = ">"
        else:
            raise ElfFormatError(f"`{path}` has unknown ELF data encoding {data_encoding}.")

        if elf_class == _ELFCLASS64:
            header_format = order + "HHIQQQIHHHHHH"
            phdr_format = order + "IIQQQQQQ"
        elif elf_class == _ELFCLASS32:
            header_format = order + "HHIIIIIHHHHHH"
            phdr_format = order + "IIIIIIII"
        else:
            raise ElfFormatError(f"`{path}` has unknown ELF class {elf_class}.")

        header = _read_exact(handle, struct.calcsize(header_format), path)
        fields = struct.unpack(header_format, header)
        phoff = fields[4]
        phentsize = fields[8]
        phnum = fields[9]
        phdr_size = struct.calcsize(phdr_format)
        if phnum and phentsize < phdr_size:
            raise ElfFormatError(f"`{path}` has program headers of {phentsize} bytes.")

        for index in range(phnum):
            handle.seek(phoff + index * phentsize)
            segment = struct.unpack(phdr_format, _read_exact(handle, phdr_size, path))
            if segment[0] != PT_INTERP:
                continue
            offset, filesz = _segment_span(segment, elf_class)
            handle.seek(offset)
            payload = _read_exact(handle, min(filesz, _MAX_INTERP_BYTES), path)
            return payload.split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    return None


def _segment_span(fields: tuple[int, ...], elf_class: int) -> tuple[int, int]:
    """Return `(p_offset, p_filesz)`; field order differs between ELF classes."""

    if elf_class == _ELFCLASS64:
        return fields[2], fields[5]
    return fields[1], fields[4]


def _read_exact(handle: BinaryIO, size: int, path: str) -> bytes:
    data = handle.read(size)
    if len(data) != size:
        raise ElfFormatError(f"`{path}` is truncated.")
    return data


def read_shebang(path: str) -> str | None:
    """Return the interpreter line of a `#!` script without the prefix.

    Returns:
        Interpreter and optional argument, or `None` when the file does not
        start with `#!` or the line is empty.
    """

    with Path(path).open("rb") as handle:
        first_line = handle.readline(_MAX_SHEBANG_BYTES)
    if not first_line.startswith(b"#!"):
        return None
    interpreter = first_line[2:].decode("utf-8", errors="replace").strip()
    return interpreter or None
