"""Unit tests for ordered search-path scanning."""

from __future__ import annotations

import os
from pathlib import Path

from cmdtrace.models.datatypes import PathState
from cmdtrace.probe.indirection import UsrMergeDetector
from cmdtrace.resolver.path_scanner import PathScanner


def test_scan_keeps_one_entry_per_directory_including_duplicates(
    tmp_path: Path, make_executable
) -> None:
    """Entries mirror the search path exactly, duplicates and order included."""

    first = tmp_path / "first"
    second = tmp_path / "second"
    make_executable(second, "tool")
    search_path = [str(first), str(second), str(first), str(second)]

    entries = PathScanner().scan("tool", search_path)

    assert [entry.dir for entry in entries] == search_path
    assert [entry.state for entry in entries] == [
        PathState.NOT_FOUND,
        PathState.FILE,
        PathState.NOT_FOUND,
        PathState.FILE,
    ]
    assert [entry.shadowed for entry in entries] == [False, False, False, True]


def test_scan_skips_non_executable_files_and_directories(tmp_path: Path, make_executable) -> None:
    """Plain files and directories named like the command are not candidates."""

    plain = tmp_path / "plain"
    make_executable(plain, "tool", mode=0o644)
    dirs = tmp_path / "dirs"
    (dirs / "tool").mkdir(parents=True)
    real = tmp_path / "real"
    make_executable(real, "tool")

    entries = PathScanner().scan("tool", [str(plain), str(dirs), str(real)])

    assert [entry.state for entry in entries] == [
        PathState.NOT_FOUND,
        PathState.NOT_FOUND,
        PathState.FILE,
    ]
    assert entries[2].shadowed is False


def test_scan_records_single_hop_symlink_target(tmp_path: Path, make_executable) -> None:
    """A symlinked candidate is classified as `symlink` with its raw link text."""

    target = make_executable(tmp_path / "opt" / "tool" / "bin", "tool")
    link_dir = tmp_path / "bin"
    link_dir.mkdir()
    relay = tmp_path / "relay"
    relay.symlink_to(target)
    (link_dir / "tool").symlink_to("../relay")

    entries = PathScanner().scan("tool", [str(link_dir)])

    assert entries[0].state is PathState.SYMLINK
    assert entries[0].symlink_target == "../relay"
    assert entries[0].shadowed is False


def test_scan_treats_dangling_symlink_as_not_found(tmp_path: Path) -> None:
    """A link pointing nowhere cannot be executed and is not a candidate."""

    link_dir = tmp_path / "bin"
    link_dir.mkdir()
    (link_dir / "tool").symlink_to(tmp_path / "missing")

    entries = PathScanner().scan("tool", [str(link_dir)])

    assert entries[0].state is PathState.NOT_FOUND
    assert entries[0].symlink_target is None


def test_scan_marks_everything_shadowed_when_shell_mechanism_won(
    tmp_path: Path, make_executable
) -> None:
    """When an alias/function/builtin owns the name no path entry is reachable."""

    bin_dir = tmp_path / "bin"
    make_executable(bin_dir, "tool")

    entries = PathScanner().scan("tool", [str(bin_dir), str(bin_dir)], already_won=True)

    assert [entry.shadowed for entry in entries] == [True, True]
    assert all(entry.found for entry in entries)


def test_scan_resolves_empty_directory_against_cwd(
    tmp_path: Path, make_executable, monkeypatch
) -> None:
    """An empty search-path element means the current directory."""

    make_executable(tmp_path, "tool")
    monkeypatch.chdir(tmp_path)

    entries = PathScanner().scan("tool", ["", "."])

    assert entries[0].dir == ""
    assert entries[0].state is PathState.FILE
    assert entries[1].shadowed is True


def test_scan_annotates_usr_merged_legacy_roots(tmp_path: Path, make_executable) -> None:
    """`<root>/bin -> usr/bin` is flagged so duplicate hits are explained."""

    usr_bin = tmp_path / "usr" / "bin"
    make_executable(usr_bin, "ls")
    os.symlink("usr/bin", tmp_path / "bin")
    scanner = PathScanner(usr_merge=UsrMergeDetector(root=str(tmp_path)))

    entries = scanner.scan("ls", [str(usr_bin), str(tmp_path / "bin")])

    assert [entry.usr_merged for entry in entries] == [False, True]
    assert [entry.shadowed for entry in entries] == [False, True]
    assert entries[1].state is PathState.FILE
