"""Configuration model and loaders for cmdtrace.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Load configuration from YAML files and environment variables.
- Apply deterministic precedence: CLI > environment > YAML > defaults.

Key types:
- `TraceConfig`: normalized runtime settings for one invocation.
- `ConfigLoader`: static construction helpers for `TraceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, parse_required_boolean
from .probe.indirection import DEFAULT_ALTERNATIVES_DIR
from .search_path import ADMIN_PATH_MODES, DEFAULT_ADMIN_DIRECTORIES

_OUTPUT_FORMATS = frozenset({"text", "json"})
_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class TraceConfig:
    """Runtime configuration for one cmdtrace invocation.

    Attributes:
        admin_path_mode: `auto`, `always` or `never` widening with admin directories.
        admin_directories: Administrative directories used for widening.
        alternatives_dir: Distro alternatives directory.
        filesystem_root: Root under which legacy directories are checked for usr-merge.
        shell: Shell executable used to collect snapshots.
        interactive_snapshot: Whether snapshot collection runs an interactive shell.
        output_format: `text` or `json`.
        log_level: Minimum loguru level written to stderr.
    """

    admin_path_mode: str = "auto"
    admin_directories: tuple[str, ...] = field(default=DEFAULT_ADMIN_DIRECTORIES)
    alternatives_dir: str = DEFAULT_ALTERNATIVES_DIR
    filesystem_root: str = "/"
    shell: str = "bash"
    interactive_snapshot: bool = True
    output_format: str = "text"
    log_level: str = "WARNING"

    def validate(self) -> None:
        """Validate configuration values before resolution."""

        if self.admin_path_mode not in ADMIN_PATH_MODES:
            supported = ", ".join(sorted(ADMIN_PATH_MODES))
            raise ValueError(
                f"Unsupported `admin_path_mode` value `{self.admin_path_mode}`; "
                f"supported: {supported}."
            )
        if self.output_format not in _OUTPUT_FORMATS:
            supported = ", ".join(sorted(_OUTPUT_FORMATS))
            raise ValueError(
                f"Unsupported `output_format` value `{self.output_format}`; "
                f"supported: {supported}."
            )
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported `log_level` value `{self.log_level}`.")
        for name in ("alternatives_dir", "filesystem_root", "shell"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"`{name}` must be a non-empty string.")

    def with_overrides(self, overrides: Mapping[str, Any]) -> TraceConfig:
        """Return a copy with every non-`None` override applied, then validated."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        if "log_level" in applied:
            applied["log_level"] = str(applied["log_level"]).upper()
        config = replace(self, **applied)
        config.validate()
        return config


class ConfigLoader:
    """Factory methods for creating `TraceConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "admin_path_mode",
            "admin_directories",
            "alternatives_dir",
            "filesystem_root",
            "shell",
            "interactive_snapshot",
            "output_format",
            "log_level",
        }
    )
    _ENV_KEYS = {
        "CMDTRACE_ADMIN_PATH_MODE": "admin_path_mode",
        "CMDTRACE_ALTERNATIVES_DIR": "alternatives_dir",
        "CMDTRACE_FILESYSTEM_ROOT": "filesystem_root",
        "CMDTRACE_SHELL": "shell",
        "CMDTRACE_INTERACTIVE_SNAPSHOT": "interactive_snapshot",
        "CMDTRACE_OUTPUT_FORMAT": "output_format",
        "CMDTRACE_LOG_LEVEL": "log_level",
    }

    @staticmethod
    def from_yaml(path: Path) -> TraceConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None, base: TraceConfig | None = None
    ) -> TraceConfig:
        """Apply `CMDTRACE_*` environment variables on top of `base` (or defaults)."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        overrides: dict[str, Any] = {}
        for env_key, field_name in ConfigLoader._ENV_KEYS.items():
            value = normalize_optional_string(env_map.get(env_key))
            if value is None:
                continue
            if field_name == "interactive_snapshot":
                overrides[field_name] = parse_required_boolean(value, env_key)
            else:
                overrides[field_name] = value
        return (base or TraceConfig()).with_overrides(overrides)

    @staticmethod
    def resolve(
        config_path: Path | None,
        env: Mapping[str, str] | None = None,
        cli_overrides: Mapping[str, Any] | None = None,
    ) -> TraceConfig:
        """Resolve effective config: CLI > environment > YAML > defaults."""

        base = ConfigLoader.from_yaml(config_path) if config_path is not None else TraceConfig()
        with_env = ConfigLoader.from_env(env, base=base)
        return with_env.with_overrides(cli_overrides or {})

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> TraceConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        overrides: dict[str, Any] = {}
        for key in ("admin_path_mode", "alternatives_dir", "filesystem_root", "shell",
                    "output_format", "log_level"):
            if key in payload:
                overrides[key] = normalize_optional_string(payload[key])

        if "interactive_snapshot" in payload:
            overrides["interactive_snapshot"] = parse_required_boolean(
                payload["interactive_snapshot"], "interactive_snapshot"
            )

        if "admin_directories" in payload:
            overrides["admin_directories"] = ConfigLoader._directory_list(
                payload["admin_directories"], source_label
            )

        return TraceConfig().with_overrides(overrides)

    @staticmethod
    def _directory_list(raw: object, source_label: str) -> tuple[str, ...]:
        """Read a list of non-empty directory strings."""

        if not isinstance(raw, list):
            raise ValueError(f"{source_label} field `admin_directories` must be a list.")
        directories: list[str] = []
        for item in raw:
            value = normalize_optional_string(item)
            if value is None:
                raise ValueError(
                    f"{source_label} field `admin_directories` contains a blank entry."
                )
            directories.append(value)
        return tuple(directories)
