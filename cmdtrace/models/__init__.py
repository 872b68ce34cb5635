"""Shared typed data models for cmdtrace.

This package contains dataclasses used across resolver, probe and rendering
modules to avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    AliasStatus,
    AlternativesLink,
    BuiltinStatus,
    FunctionLocation,
    FunctionStatus,
    KernelInfo,
    KeywordStatus,
    Mechanism,
    PathEntry,
    PathState,
    PathStatus,
    ResolutionReport,
    ResolutionResult,
    ShellStateSnapshot,
    SymlinkHop,
)

__all__ = [
    "AliasStatus",
    "AlternativesLink",
    "BuiltinStatus",
    "FunctionLocation",
    "FunctionStatus",
    "KernelInfo",
    "KeywordStatus",
    "Mechanism",
    "PathEntry",
    "PathState",
    "PathStatus",
    "ResolutionReport",
    "ResolutionResult",
    "ShellStateSnapshot",
    "SymlinkHop",
]
