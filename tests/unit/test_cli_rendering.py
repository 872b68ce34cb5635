"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from cmdtrace.cli_rendering import exit_with_command_error, render_report_lines, report_to_payload
from cmdtrace.errors import CommandTraceError, InvalidCommandError
from cmdtrace.models.datatypes import FunctionLocation
from cmdtrace.resolver.tracer import CommandTracer
from cmdtrace.search_path import EffectiveSearchPath


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = InvalidCommandError("foo/bar", "Command `foo/bar` contains a path separator.")

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("resolve", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "resolve failed at stage `validate`" in captured.err
    assert "Hint: Pass a bare command name" in captured.err


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-stage failures."""

    with pytest.raises(typer.Exit):
        exit_with_command_error("snapshot", RuntimeError("unexpected failure"))

    captured = capsys.readouterr()
    assert "snapshot failed: unexpected failure" in captured.err
    assert isinstance(InvalidCommandError("x/y", "bad"), CommandTraceError)


def test_render_report_lines_marks_winner_and_shadowed_entries(
    tmp_path: Path, make_executable, bash_snapshot
) -> None:
    """Text output names the winner and flags every unreachable mechanism."""

    bin_dir = tmp_path / "bin"
    make_executable(bin_dir, "greet")
    snapshot = bash_snapshot(
        functions={"greet": FunctionLocation(source_file="/home/x/.bashrc", line_number=7)}
    )
    report = CommandTracer().trace("greet", snapshot, [str(bin_dir)])

    lines = render_report_lines(report)

    assert lines[0] == "greet: function"
    assert "  function  found, /home/x/.bashrc:7, winner" in lines
    assert "  path      found, shadowed" in lines
    assert "  alias     -" in lines
    assert f"  {bin_dir}  file  (shadowed)" in lines
    assert not any(line.startswith("Kernel:") for line in lines)


def test_render_report_lines_shows_widening_and_kernel_details(
    tmp_path: Path, make_executable, bash_snapshot
) -> None:
    """Path winners list kernel details and any admin directories that were added."""

    admin = tmp_path / "sbin"
    make_executable(admin, "fstrim", b"#!/bin/sh\n")
    search = EffectiveSearchPath(directories=(str(admin),), widened=True, added=(str(admin),))
    report = CommandTracer().trace("fstrim", bash_snapshot(), search.directories)

    lines = render_report_lines(report, search)

    assert f"Search path widened with: {admin}" in lines
    assert "Kernel:" in lines
    assert "  shebang: /bin/sh" in lines


def test_report_to_payload_uses_null_for_absent_values(bash_snapshot) -> None:
    """Absent values serialize as `None` while booleans stay concrete."""

    report = CommandTracer().trace("fg", bash_snapshot(builtins={"fg": True}), [])

    payload = report_to_payload(report)

    assert payload["winner"] == "builtin"
    assert payload["kernel"] is None
    assert payload["mechanisms"]["alias"] == {"found": False, "shadowed": False, "definition": None}
    assert payload["mechanisms"]["function"]["line_number"] is None
    assert payload["mechanisms"]["builtin"] == {
        "found": True,
        "shadowed": False,
        "enabled": True,
        "special": False,
    }
    assert payload["path_entries"] == []
    assert "search_path" not in payload


def test_render_report_lines_lists_every_mechanism_in_precedence_order(bash_snapshot) -> None:
    """One row per mechanism, aligned, with mechanism-specific details."""

    snapshot = bash_snapshot(
        posix_mode=True,
        aliases={"eval": "echo no"},
        builtins={"eval": True},
        keywords=frozenset({"eval"}),
    )
    report = CommandTracer().trace("eval", snapshot, [])

    assert render_report_lines(report) == [
        "eval: builtin",
        "  alias     found, `echo no`, shadowed",
        "  function  -",
        "  keyword   found, shadowed",
        "  builtin   found, enabled, special, winner",
        "  path      -",
    ]
