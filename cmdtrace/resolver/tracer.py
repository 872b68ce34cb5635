"""Report assembly for one command name.

`CommandTracer` validates the name, runs precedence resolution and, only for
path winners, inspects the selected executable.
"""

from __future__ import annotations

from typing import Sequence

from ..errors import CommandTraceError
from ..models.datatypes import Mechanism, ResolutionReport, ShellStateSnapshot
from ..parsing import validate_command_name
from ..probe.indirection import DEFAULT_ALTERNATIVES_DIR, UsrMergeDetector
from ..telemetry.logger import RunLogger
from .kernel import KernelInspector
from .path_scanner import PathScanner
from .precedence import PrecedenceResolver


class CommandTracer:
    """Turn (command, snapshot, search path) into a `ResolutionReport`."""

    def __init__(
        self,
        resolver: PrecedenceResolver | None = None,
        inspector: KernelInspector | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._resolver = resolver or PrecedenceResolver()
        self._inspector = inspector or KernelInspector(run_logger=run_logger)
        self._run_logger = run_logger

    @classmethod
    def for_filesystem(
        cls,
        filesystem_root: str = "/",
        alternatives_dir: str = DEFAULT_ALTERNATIVES_DIR,
        run_logger: RunLogger | None = None,
    ) -> CommandTracer:
        """Build a tracer whose usr-merge and alternatives probes use the given roots."""

        scanner = PathScanner(usr_merge=UsrMergeDetector(root=filesystem_root))
        return cls(
            resolver=PrecedenceResolver(scanner=scanner),
            inspector=KernelInspector(alternatives_dir=alternatives_dir, run_logger=run_logger),
            run_logger=run_logger,
        )

    def trace(
        self,
        command: str,
        snapshot: ShellStateSnapshot,
        search_path: Sequence[str],
    ) -> ResolutionReport:
        """Resolve `command` and return its full report.

        Raises:
            InvalidCommandError: If `command` is empty or contains `/`.
        """

        try:
            validate_command_name(command)
        except CommandTraceError:
            self._log_failure("validate", "InvalidCommandError")
            raise

        self._log_start("resolve", command=command, path_dirs=len(search_path))
        result = self._resolver.resolve(command, snapshot, search_path)
        self._log_complete(
            "resolve",
            command=command,
            winner=result.winner.value,
            rule=self._resolver.winning_rule(command, snapshot) or "search_path",
        )

        kernel = None
        if result.winner is Mechanism.PATH and result.path.resolved_path is not None:
            self._log_start("inspect", path=result.path.resolved_path)
            kernel = self._inspector.inspect(result.path.resolved_path)
            self._log_complete("inspect", path=result.path.resolved_path)

        return ResolutionReport(result=result, path_entries=result.path.entries, kernel=kernel)

    def _log_start(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, **context)

    def _log_complete(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, **context)

    def _log_failure(self, stage: str, error_type: str) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage, error_type)


def trace_command(
    command: str,
    snapshot: ShellStateSnapshot,
    search_path: Sequence[str],
) -> ResolutionReport:
    """Resolve one command with default probes; see `CommandTracer.trace`."""

    return CommandTracer().trace(command, snapshot, search_path)
