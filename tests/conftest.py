"""Shared pytest fixtures for the full cmdtrace test suite."""

from __future__ import annotations

from pathlib import Path
import struct
from typing import Callable

import pytest

from cmdtrace.models.datatypes import ShellStateSnapshot
from cmdtrace.shell.snapshot import default_snapshot

ExecutableFactory = Callable[..., Path]
ElfFactory = Callable[..., bytes]


@pytest.fixture
def make_executable() -> ExecutableFactory:
    """Return a factory that writes an executable file into a directory."""

    def _make(
        directory: Path,
        name: str,
        content: bytes = b"#!/bin/sh\nexit 0\n",
        mode: int = 0o755,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(content)
        path.chmod(mode)
        return path

    return _make


@pytest.fixture
def elf_factory() -> ElfFactory:
    """Return a builder for minimal ELF images with an optional `PT_INTERP` segment."""

    def _build(
        interpreter: str | None = "/lib64/ld-linux-x86-64.so.2",
        elf_class: int = 64,
        byteorder: str = "<",
    ) -> bytes:
        data_encoding = 1 if byteorder == "<" else 2
        ident = b"\x7fELF" + bytes([2 if elf_class == 64 else 1, data_encoding, 1, 0]) + b"\x00" * 8
        interp_bytes = b"" if interpreter is None else interpreter.encode() + b"\x00"
        if elf_class == 64:
            header_size, phentsize = 64, 56
            header_format, phdr_format = "HHIQQQIHHHHHH", "IIQQQQQQ"
        else:
            header_size, phentsize = 52, 32
            header_format, phdr_format = "HHIIIIIHHHHHH", "IIIIIIII"

        phnum = 2 if interpreter is not None else 1
        interp_offset = header_size + phnum * phentsize
        header = ident + struct.pack(
            byteorder + header_format,
            2, 62, 1, 0, header_size, 0, 0, header_size, phentsize, phnum, 0, 0, 0,
        )
        if elf_class == 64:
            load = struct.pack(byteorder + phdr_format, 1, 5, 0, 0, 0, 0, 0, 0x1000)
            interp = struct.pack(
                byteorder + phdr_format,
                3, 4, interp_offset, 0, 0, len(interp_bytes), len(interp_bytes), 1,
            )
        else:
            load = struct.pack(byteorder + phdr_format, 1, 0, 0, 0, 0, 0, 5, 0x1000)
            interp = struct.pack(
                byteorder + phdr_format,
                3, interp_offset, 0, 0, len(interp_bytes), len(interp_bytes), 4, 1,
            )
        program_headers = load + (interp if interpreter is not None else b"")
        return header + program_headers + interp_bytes

    return _build


@pytest.fixture
def bash_snapshot() -> Callable[..., ShellStateSnapshot]:
    """Return a factory for snapshots carrying bash's fixed special-builtin and token sets."""

    def _snapshot(**overrides: object) -> ShellStateSnapshot:
        return default_snapshot(**overrides)

    return _snapshot
