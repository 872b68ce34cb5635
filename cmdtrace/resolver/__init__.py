"""Command resolution: precedence rules, search-path scanning and inspection."""

from .kernel import KernelInspector
from .path_scanner import PathScanner
from .precedence import SHELL_RULES, PrecedenceResolver, PrecedenceRule
from .tracer import CommandTracer, trace_command

__all__ = [
    "CommandTracer",
    "KernelInspector",
    "PathScanner",
    "PrecedenceResolver",
    "PrecedenceRule",
    "SHELL_RULES",
    "trace_command",
]
