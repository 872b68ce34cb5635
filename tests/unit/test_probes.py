"""Unit tests for filesystem, binary-format and indirection probes."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from cmdtrace.models.datatypes import SymlinkHop
from cmdtrace.probe.binary import ElfFormatError, is_elf, read_elf_interpreter, read_shebang
from cmdtrace.probe.filesystem import (
    canonicalize,
    is_executable_file,
    read_link,
    walk_symlink_chain,
)
from cmdtrace.probe.indirection import UsrMergeDetector, find_alternatives_link


@pytest.mark.parametrize(
    ("elf_class", "byteorder"),
    [(64, "<"), (64, ">"), (32, "<"), (32, ">")],
)
def test_read_elf_interpreter_handles_every_class_and_byte_order(
    tmp_path: Path, elf_factory, elf_class: int, byteorder: str
) -> None:
    """`PT_INTERP` is extracted from 32/64-bit images of both endiannesses."""

    binary = tmp_path / "prog"
    binary.write_bytes(elf_factory("/lib/ld-musl-x86_64.so.1", elf_class, byteorder))

    assert is_elf(str(binary)) is True
    assert read_elf_interpreter(str(binary)) == "/lib/ld-musl-x86_64.so.1"


def test_read_elf_interpreter_returns_none_for_static_binary(tmp_path: Path, elf_factory) -> None:
    """Static binaries have no interpreter segment."""

    binary = tmp_path / "static"
    binary.write_bytes(elf_factory(None))

    assert read_elf_interpreter(str(binary)) is None


def test_read_elf_interpreter_rejects_truncated_headers(tmp_path: Path, elf_factory) -> None:
    """A file cut off inside its program headers is malformed, not silently empty."""

    binary = tmp_path / "truncated"
    binary.write_bytes(elf_factory()[:80])

    with pytest.raises(ElfFormatError):
        read_elf_interpreter(str(binary))


def test_read_shebang_returns_interpreter_and_argument(tmp_path: Path) -> None:
    """The remainder of a `#!` line is returned with surrounding whitespace trimmed."""

    script = tmp_path / "script"
    script.write_text("#! /usr/bin/env -S python3 -u\nprint('hi')\n", encoding="utf-8")
    plain = tmp_path / "plain"
    plain.write_text("echo hi\n", encoding="utf-8")

    assert is_elf(str(script)) is False
    assert read_shebang(str(script)) == "/usr/bin/env -S python3 -u"
    assert read_shebang(str(plain)) is None


def test_is_executable_file_follows_links(tmp_path: Path, make_executable) -> None:
    """Executability is judged on what the link points to."""

    target = make_executable(tmp_path / "real", "tool")
    link = tmp_path / "link"
    link.symlink_to(target)

    assert is_executable_file(str(link)) is True
    assert is_executable_file(str(tmp_path / "missing")) is False
    assert is_executable_file(str(tmp_path / "a\x00b")) is False
    assert read_link(str(link)) == str(target)
    assert read_link(str(target)) is None


def test_walk_symlink_chain_records_every_hop(tmp_path: Path, make_executable) -> None:
    """Each hop is recorded with its raw link text until a regular file is reached."""

    target = make_executable(tmp_path / "real", "tool")
    middle = tmp_path / "middle"
    middle.symlink_to(target)
    start = tmp_path / "start"
    start.symlink_to("middle")

    hops, cycle = walk_symlink_chain(str(start))

    assert cycle is False
    assert hops == (
        SymlinkHop(source=str(start), target="middle"),
        SymlinkHop(source=os.path.join(os.path.realpath(tmp_path), "middle"), target=str(target)),
    )


def test_walk_symlink_chain_terminates_on_cycle(tmp_path: Path) -> None:
    """A link loop stops the walk and is reported instead of looping forever."""

    (tmp_path / "a").symlink_to("b")
    (tmp_path / "b").symlink_to("a")

    hops, cycle = walk_symlink_chain(str(tmp_path / "a"))

    assert cycle is True
    assert len(hops) >= 2
    with pytest.raises(OSError):
        canonicalize(str(tmp_path / "a"))


def test_find_alternatives_link_reports_first_alternatives_hop(
    tmp_path: Path, make_executable
) -> None:
    """The first link living in the alternatives directory is reported with its real target."""

    provider = make_executable(tmp_path / "jvm" / "bin", "java")
    alternatives = tmp_path / "alternatives"
    alternatives.mkdir()
    (alternatives / "java").symlink_to(provider)
    chain = (
        SymlinkHop(source=str(tmp_path / "usr" / "bin" / "java"), target=str(alternatives / "java")),
        SymlinkHop(source=str(alternatives / "java"), target=str(provider)),
    )

    link = find_alternatives_link(chain, str(alternatives))

    assert link is not None
    assert link.link == str(alternatives / "java")
    assert link.target == os.path.realpath(provider)
    assert find_alternatives_link(chain[:1], str(alternatives)) is None


def test_usr_merge_detector_only_considers_legacy_roots(tmp_path: Path) -> None:
    """Only root-level legacy directories identical to their `usr` twin are merged."""

    (tmp_path / "usr" / "bin").mkdir(parents=True)
    (tmp_path / "usr" / "sbin").mkdir(parents=True)
    (tmp_path / "bin").symlink_to("usr/bin")
    (tmp_path / "sbin").mkdir()
    (tmp_path / "opt" / "bin").mkdir(parents=True)
    detector = UsrMergeDetector(root=str(tmp_path))

    assert detector.is_usr_merged(str(tmp_path / "bin")) is True
    assert detector.is_usr_merged(str(tmp_path / "bin") + "/") is True
    assert detector.is_usr_merged(str(tmp_path / "sbin")) is False
    assert detector.is_usr_merged(str(tmp_path / "usr" / "bin")) is False
    assert detector.is_usr_merged(str(tmp_path / "opt" / "bin")) is False
    assert detector.is_usr_merged(str(tmp_path / "lib")) is False
