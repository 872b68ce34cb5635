"""Domain exceptions for resolution and CLI diagnostics."""

from __future__ import annotations


class CommandTraceError(RuntimeError):
    """Raised when a specific trace stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped trace error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class InvalidCommandError(CommandTraceError):
    """Raised when a command name cannot be resolved as a bare name."""

    def __init__(self, command: str, detail: str) -> None:
        super().__init__(
            stage="validate",
            detail=detail,
            hint="Pass a bare command name such as `ls`; paths are not looked up.",
        )
        self.command = command


class SnapshotError(CommandTraceError):
    """Raised when shell state cannot be collected or parsed."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="snapshot", detail=detail, hint=hint)
