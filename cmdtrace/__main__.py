"""Module entrypoint for running cmdtrace as ``python -m cmdtrace``."""

from __future__ import annotations

from cmdtrace.cli import main


if __name__ == "__main__":
    main()
