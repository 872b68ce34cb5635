"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
text reports and JSON report payloads.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn, Sequence

import typer

from .errors import CommandTraceError
from .models.datatypes import (
    KernelInfo,
    Mechanism,
    PathEntry,
    ResolutionReport,
    ResolutionResult,
)
from .search_path import EffectiveSearchPath


def echo_command_error(command_name: str, exc: Exception) -> None:
    """Print concise diagnostics for one failure without exiting."""

    if isinstance(exc, CommandTraceError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    echo_command_error(command_name, exc)
    raise typer.Exit(code=1) from exc


def _flags(found: bool, shadowed: bool, winner: bool, extra: Sequence[str] = ()) -> str:
    if not found:
        return "-"
    parts = ["found", *extra]
    if winner:
        parts.append("winner")
    if shadowed:
        parts.append("shadowed")
    return ", ".join(parts)


def _entry_line(entry: PathEntry) -> str:
    if not entry.found:
        line = f"{entry.dir}  -"
    elif entry.symlink_target is not None:
        line = f"{entry.dir}  symlink -> {entry.symlink_target}"
    else:
        line = f"{entry.dir}  {entry.state.value}"
    if entry.shadowed:
        line += "  (shadowed)"
    if entry.usr_merged:
        line += "  (usr-merged)"
    return line


def _kernel_lines(kernel: KernelInfo) -> list[str]:
    lines = [
        "Kernel:",
        f"  resolved path: {kernel.resolved_path}",
        f"  canonical path: {kernel.canonical_path or '(unavailable)'}",
    ]
    for hop in kernel.symlink_chain:
        lines.append(f"  link: {hop.source} -> {hop.target}")
    if kernel.cycle_detected:
        lines.append("  symlink cycle detected")
    if kernel.alternatives is not None:
        target = kernel.alternatives.target or "(unresolved)"
        lines.append(f"  alternatives: {kernel.alternatives.link} => {target}")
    if kernel.elf_interpreter is not None:
        lines.append(f"  ELF interpreter: {kernel.elf_interpreter}")
    if kernel.shebang is not None:
        lines.append(f"  shebang: {kernel.shebang}")
    if kernel.degraded_probes:
        lines.append(f"  unavailable: {', '.join(kernel.degraded_probes)}")
    return lines


_MECHANISM_ROWS = (
    Mechanism.ALIAS,
    Mechanism.FUNCTION,
    Mechanism.KEYWORD,
    Mechanism.BUILTIN,
    Mechanism.PATH,
)


def _status_details(result: ResolutionResult, mechanism: Mechanism) -> list[str]:
    if mechanism is Mechanism.ALIAS and result.alias.definition is not None:
        return [f"`{result.alias.definition}`"]
    if mechanism is Mechanism.FUNCTION and result.function.location is not None:
        location = result.function.location
        return [f"{location.source_file}:{location.line_number}"]
    if mechanism is Mechanism.KEYWORD and result.keyword.syntax_token:
        return ["syntax token"]
    if mechanism is Mechanism.BUILTIN and result.builtin.found:
        details = ["enabled" if result.builtin.enabled else "disabled"]
        if result.builtin.special:
            details.append("special")
        return details
    return []


def render_report_lines(
    report: ResolutionReport, search: EffectiveSearchPath | None = None
) -> list[str]:
    """Render a report into deterministic plain-text lines."""

    result = report.result
    lines = [f"{result.command}: {result.winner.value}"]
    for mechanism in _MECHANISM_ROWS:
        status = result.status_for(mechanism)
        if status is None:
            continue
        flags = _flags(
            status.found,
            status.shadowed,
            result.winner is mechanism,
            _status_details(result, mechanism),
        )
        lines.append(f"  {mechanism.value:<10}{flags}")

    if search is not None and search.widened:
        lines.append(f"Search path widened with: {', '.join(search.added)}")
    if report.path_entries:
        lines.append("Search path:")
        lines.extend(f"  {_entry_line(entry)}" for entry in report.path_entries)
    if report.kernel is not None:
        lines.extend(_kernel_lines(report.kernel))
    return lines


def echo_report(report: ResolutionReport, search: EffectiveSearchPath | None = None) -> None:
    """Print a text report, highlighting the winner line."""

    lines = render_report_lines(report, search)
    colour = (
        typer.colors.RED if report.winner is Mechanism.NOT_FOUND else typer.colors.GREEN
    )
    typer.secho(lines[0], fg=colour, bold=True)
    for line in lines[1:]:
        typer.echo(line)


def report_to_payload(
    report: ResolutionReport, search: EffectiveSearchPath | None = None
) -> dict[str, Any]:
    """Serialize a report into a JSON-ready mapping; absent values become `None`."""

    result = report.result
    location = result.function.location
    payload: dict[str, Any] = {
        "command": result.command,
        "winner": result.winner.value,
        "mechanisms": {
            "alias": {
                "found": result.alias.found,
                "shadowed": result.alias.shadowed,
                "definition": result.alias.definition,
            },
            "function": {
                "found": result.function.found,
                "shadowed": result.function.shadowed,
                "source_file": location.source_file if location is not None else None,
                "line_number": location.line_number if location is not None else None,
            },
            "keyword": {
                "found": result.keyword.found,
                "shadowed": result.keyword.shadowed,
                "syntax_token": result.keyword.syntax_token,
            },
            "builtin": {
                "found": result.builtin.found,
                "shadowed": result.builtin.shadowed,
                "enabled": result.builtin.enabled,
                "special": result.builtin.special,
            },
            "path": {
                "found": result.path.found,
                "shadowed": result.path.shadowed,
                "resolved_path": result.path.resolved_path,
            },
        },
        "path_entries": [
            {
                "dir": entry.dir,
                "state": entry.state.value,
                "symlink_target": entry.symlink_target,
                "shadowed": entry.shadowed,
                "usr_merged": entry.usr_merged,
            }
            for entry in report.path_entries
        ],
        "kernel": _kernel_payload(report.kernel),
    }
    if search is not None:
        payload["search_path"] = {"widened": search.widened, "added": list(search.added)}
    return payload


def _kernel_payload(kernel: KernelInfo | None) -> dict[str, Any] | None:
    if kernel is None:
        return None
    alternatives = kernel.alternatives
    return {
        "resolved_path": kernel.resolved_path,
        "canonical_path": kernel.canonical_path,
        "symlink_chain": [
            {"source": hop.source, "target": hop.target} for hop in kernel.symlink_chain
        ],
        "cycle_detected": kernel.cycle_detected,
        "elf_interpreter": kernel.elf_interpreter,
        "shebang": kernel.shebang,
        "alternatives": (
            {"link": alternatives.link, "target": alternatives.target}
            if alternatives is not None
            else None
        ),
        "degraded_probes": list(kernel.degraded_probes),
    }


def dump_json(payload: Any) -> str:
    """Return deterministic JSON text for CLI output."""

    return json.dumps(payload, indent=2, ensure_ascii=False)
