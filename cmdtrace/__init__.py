"""Top-level package for cmdtrace.

This package explains how bash resolves a bare command name: which mechanism
wins, which same-named mechanisms are shadowed, and what file the kernel would
finally execute. The main entry point is `CommandTracer`.
"""

from .resolver.tracer import CommandTracer, trace_command

__all__ = ["CommandTracer", "__version__", "trace_command"]

__version__ = "0.1.0"
