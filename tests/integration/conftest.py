"""Fixtures for CLI integration tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def write_snapshot(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory that writes a JSON snapshot file and returns its path."""

    def _write(**payload: object) -> Path:
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep `CMDTRACE_*` variables from the developer's shell out of CLI runs."""

    for key in (
        "CMDTRACE_ADMIN_PATH_MODE",
        "CMDTRACE_ALTERNATIVES_DIR",
        "CMDTRACE_FILESYSTEM_ROOT",
        "CMDTRACE_SHELL",
        "CMDTRACE_INTERACTIVE_SNAPSHOT",
        "CMDTRACE_OUTPUT_FORMAT",
        "CMDTRACE_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
