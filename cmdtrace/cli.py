"""Command-line interface for cmdtrace.

Responsibilities:
- Expose user-facing commands for resolving names and inspecting shell state.
- Convert CLI arguments into `TraceConfig`, snapshots and search paths.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from .cli_rendering import (
    dump_json,
    echo_command_error,
    echo_report,
    exit_with_command_error,
    report_to_payload,
)
from .config import ConfigLoader, TraceConfig
from .errors import CommandTraceError
from .models.datatypes import Mechanism, ShellStateSnapshot
from .resolver.tracer import CommandTracer
from .runtime_tools import resolve_executable
from .search_path import effective_search_path, split_search_path
from .shell.snapshot import SHELL_HOOK, collect_snapshot, load_snapshot, snapshot_to_payload
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="cmdtrace",
    no_args_is_help=True,
    help="Explain how bash resolves a command name and what it would execute.",
)


def _load_config(config_path: Path | None, cli_overrides: dict[str, Any]) -> TraceConfig:
    """Resolve effective config and map failures to stage errors."""

    try:
        return ConfigLoader.resolve(config_path, env=os.environ, cli_overrides=cli_overrides)
    except FileNotFoundError as exc:
        raise CommandTraceError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except yaml.YAMLError as exc:
        raise CommandTraceError(
            stage="config",
            detail=f"Failed to parse config file `{config_path}`: {exc}",
            hint="Verify YAML syntax.",
        ) from exc
    except ValueError as exc:
        raise CommandTraceError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config file, `CMDTRACE_*` environment variables or CLI values.",
        ) from exc


def _load_snapshot(
    snapshot_source: str | None, config: TraceConfig, run_logger: RunLogger
) -> ShellStateSnapshot:
    """Read a snapshot from a file or stdin, or collect one from the configured shell."""

    run_logger.log_stage_start("snapshot", source=snapshot_source or config.shell)
    if snapshot_source == "-":
        snapshot = load_snapshot(sys.stdin.read())
    elif snapshot_source is not None:
        try:
            text = Path(snapshot_source).read_text(encoding="utf-8")
        except OSError as exc:
            raise CommandTraceError(
                stage="snapshot",
                detail=f"Cannot read snapshot file `{snapshot_source}`: {exc.strerror or exc}",
                hint="Pass an existing file, or `-` to read the snapshot from stdin.",
            ) from exc
        snapshot = load_snapshot(text)
    else:
        snapshot = collect_snapshot(
            resolve_executable(config.shell),
            interactive=config.interactive_snapshot,
        )
    run_logger.log_stage_complete(
        "snapshot",
        aliases=len(snapshot.aliases),
        functions=len(snapshot.functions),
        posix=snapshot.posix_mode,
    )
    return snapshot


@app.command("resolve")
def resolve_command(
    names: Annotated[
        list[str],
        typer.Argument(help="Bare command names to resolve."),
    ],
    path: Annotated[
        str | None,
        typer.Option("--path", help="Search path to use instead of `$PATH`."),
    ] = None,
    snapshot_source: Annotated[
        str | None,
        typer.Option(
            "--snapshot",
            help="Snapshot file (JSON or dump format), or `-` for stdin. "
            "Collected from the shell when omitted.",
        ),
    ] = None,
    shell: Annotated[
        str | None,
        typer.Option("--shell", help="Shell executable used to collect the snapshot."),
    ] = None,
    interactive_snapshot: Annotated[
        bool | None,
        typer.Option(
            "--interactive-snapshot/--no-interactive-snapshot",
            help="Collect the snapshot from an interactive shell (reads rc files).",
        ),
    ] = None,
    admin_mode: Annotated[
        str | None,
        typer.Option(
            "--admin-mode",
            help="Widen the search path with admin directories: `auto`, `always` or `never`.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print reports as JSON."),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log resolution stages to stderr."),
    ] = False,
) -> None:
    """Resolve each NAME and show the winner, shadowed mechanisms and the executable."""

    try:
        config = _load_config(
            config_file,
            {
                "shell": shell,
                "interactive_snapshot": interactive_snapshot,
                "admin_path_mode": admin_mode,
                "output_format": "json" if json_output else None,
                "log_level": "DEBUG" if verbose else None,
            },
        )
        run_logger = RunLogger(level=config.log_level)
        snapshot = _load_snapshot(snapshot_source, config, run_logger)
        base_path = split_search_path(path if path is not None else os.environ.get("PATH"))
        tracer = CommandTracer.for_filesystem(
            filesystem_root=config.filesystem_root,
            alternatives_dir=config.alternatives_dir,
            run_logger=run_logger,
        )
    except Exception as exc:
        exit_with_command_error("resolve", exc)

    payloads: list[dict[str, Any]] = []
    failed = False
    for name in names:
        try:
            search = effective_search_path(
                name, base_path, config.admin_path_mode, config.admin_directories
            )
            run_logger.log_stage_complete(
                "search_path",
                command=name,
                mode=config.admin_path_mode,
                widened=search.widened,
                dirs=len(search.directories),
            )
            report = tracer.trace(name, snapshot, search.directories)
        except CommandTraceError as exc:
            echo_command_error("resolve", exc)
            failed = True
            continue

        if report.winner is Mechanism.NOT_FOUND:
            failed = True
        if config.output_format == "json":
            payloads.append(report_to_payload(report, search))
        else:
            echo_report(report, search)

    if config.output_format == "json":
        typer.echo(dump_json(payloads))
    if failed:
        raise typer.Exit(code=1)


@app.command("snapshot")
def snapshot_command(
    shell: Annotated[
        str | None,
        typer.Option("--shell", help="Shell executable to query."),
    ] = None,
    interactive_snapshot: Annotated[
        bool | None,
        typer.Option(
            "--interactive-snapshot/--no-interactive-snapshot",
            help="Query an interactive shell (reads rc files).",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
) -> None:
    """Collect the shell's alias/function/builtin/keyword tables and print them as JSON."""

    try:
        config = _load_config(
            config_file, {"shell": shell, "interactive_snapshot": interactive_snapshot}
        )
        snapshot = _load_snapshot(None, config, RunLogger(level=config.log_level))
    except Exception as exc:
        exit_with_command_error("snapshot", exc)

    typer.echo(dump_json(snapshot_to_payload(snapshot)))


@app.command("hook")
def hook_command() -> None:
    """Print a bash function that resolves names against the live shell session.

    Add `eval "$(cmdtrace hook)"` to `~/.bashrc`, then run `ctrace NAME`.
    """

    typer.echo(SHELL_HOOK, nl=False)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
