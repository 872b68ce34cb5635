"""Telemetry and observability helpers.

This package emits deterministic stage events for resolution runs.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
