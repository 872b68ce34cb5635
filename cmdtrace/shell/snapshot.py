"""Shell-state snapshots: defaults, dump parsing, JSON payloads and collection.

Responsibilities:
- Provide bash's fixed special-builtin and syntax-token sets.
- Parse the line-oriented dump printed by `SNAPSHOT_SCRIPT`.
- Convert snapshots to and from JSON-ready payloads.
- Collect a snapshot by running bash with the dump script.

Key public names:
- `SNAPSHOT_SCRIPT`, `SHELL_HOOK`, `parse_snapshot_dump`, `load_snapshot`,
  `snapshot_to_payload`, `snapshot_from_payload`, `collect_snapshot`.
"""

from __future__ import annotations

import json
import shlex
import subprocess
from typing import Any, Mapping

from ..errors import SnapshotError
from ..models.datatypes import FunctionLocation, ShellStateSnapshot

BASH_SPECIAL_BUILTINS = frozenset(
    {
        ":",
        ".",
        "break",
        "continue",
        "eval",
        "exec",
        "exit",
        "export",
        "readonly",
        "return",
        "set",
        "shift",
        "times",
        "trap",
        "unset",
    }
)
BASH_SYNTAX_TOKENS = frozenset({"{", "}", "(", ")", "[[", "]]", "]", "."})

SNAPSHOT_MARKER = "__cmdtrace_begin"

SNAPSHOT_SCRIPT = r"""
printf '__cmdtrace_begin\n'
if shopt -qo posix; then printf 'posix on\n'; else printf 'posix off\n'; fi
alias -p
shopt -s extdebug
compgen -A function | while IFS= read -r __cmdtrace_fn; do
    case $__cmdtrace_fn in __cmdtrace_*|ctrace) continue ;; esac
    printf 'function %s\n' "$(declare -F -- "$__cmdtrace_fn")"
done
shopt -u extdebug
enable -a
compgen -k | while IFS= read -r __cmdtrace_kw; do printf 'keyword %s\n' "$__cmdtrace_kw"; done
"""

SHELL_HOOK = (
    "__cmdtrace_dump() {\n"
    + SNAPSHOT_SCRIPT.strip("\n")
    + "\n}\n"
    + "ctrace() {\n"
    + '    ( __cmdtrace_dump ) | command cmdtrace resolve --snapshot - --path "$PATH" "$@"\n'
    + "}\n"
)


def default_snapshot(**overrides: Any) -> ShellStateSnapshot:
    """Return a snapshot preloaded with bash's fixed sets, applying `overrides`."""

    values: dict[str, Any] = {
        "special_builtins": BASH_SPECIAL_BUILTINS,
        "syntax_tokens": BASH_SYNTAX_TOKENS,
    }
    values.update(overrides)
    return ShellStateSnapshot(**values)


def parse_snapshot_dump(text: str) -> ShellStateSnapshot:
    """Parse the output of `SNAPSHOT_SCRIPT` into a snapshot.

    Anything up to the last `SNAPSHOT_MARKER` line, such as output printed by
    rc files, is ignored. Multi-line alias definitions are joined until their
    quoting balances.

    Raises:
        SnapshotError: On unrecognized or malformed lines.
    """

    posix_mode = False
    aliases: dict[str, str] = {}
    functions: dict[str, FunctionLocation] = {}
    builtins: dict[str, bool] = {}
    keywords: set[str] = set()
    pending_alias: str | None = None

    lines = text.splitlines()
    if SNAPSHOT_MARKER in lines:
        start = len(lines) - lines[::-1].index(SNAPSHOT_MARKER)
    else:
        start = 0

    for line_number, line in enumerate(lines[start:], start=start + 1):
        if pending_alias is not None:
            pending_alias += "\n" + line
            if _store_alias(pending_alias, aliases):
                pending_alias = None
            continue

        if not line.strip():
            continue
        tag, _, rest = line.partition(" ")
        if tag == "posix":
            posix_mode = rest.strip() == "on"
        elif tag == "alias":
            if not _store_alias(line, aliases):
                pending_alias = line
        elif tag == "function":
            name, location = _parse_function_line(rest, line_number)
            functions[name] = location
        elif tag == "enable":
            tokens = rest.split()
            if len(tokens) == 2 and tokens[0] == "-n":
                builtins[tokens[1]] = False
            elif len(tokens) == 1 and tokens[0] != "-n":
                builtins[tokens[0]] = True
            else:
                raise SnapshotError(f"Malformed builtin line {line_number}: `{line}`.")
        elif tag == "keyword":
            if not rest.strip():
                raise SnapshotError(f"Malformed keyword line {line_number}: `{line}`.")
            keywords.add(rest.strip())
        else:
            raise SnapshotError(f"Unrecognized snapshot line {line_number}: `{line}`.")

    if pending_alias is not None:
        raise SnapshotError("Snapshot ends inside an unterminated alias definition.")

    return default_snapshot(
        posix_mode=posix_mode,
        aliases=aliases,
        functions=functions,
        builtins=builtins,
        keywords=frozenset(keywords),
    )


def _store_alias(raw: str, aliases: dict[str, str]) -> bool:
    """Parse one `alias -p` record; return `False` while its quoting is open."""

    try:
        tokens = shlex.split(raw)
    except ValueError:
        return False
    tokens = [token for token in tokens[1:] if token != "--"]
    if len(tokens) != 1 or "=" not in tokens[0]:
        raise SnapshotError(f"Malformed alias definition: `{raw}`.")
    name, _, definition = tokens[0].partition("=")
    aliases[name] = definition
    return True


def _parse_function_line(rest: str, line_number: int) -> tuple[str, FunctionLocation]:
    parts = rest.split(" ", 2)
    if not parts[0]:
        raise SnapshotError(f"Malformed function line {line_number}: `function {rest}`.")
    name = parts[0]
    line = 0
    if len(parts) > 1:
        try:
            line = int(parts[1])
        except ValueError as exc:
            raise SnapshotError(
                f"Function line {line_number} has a non-numeric line number: `{parts[1]}`."
            ) from exc
    source_file = parts[2] if len(parts) > 2 else ""
    return name, FunctionLocation(source_file=source_file, line_number=line)


def snapshot_to_payload(snapshot: ShellStateSnapshot) -> dict[str, Any]:
    """Serialize a snapshot into a deterministic JSON-ready mapping."""

    return {
        "posix_mode": snapshot.posix_mode,
        "special_builtins": sorted(snapshot.special_builtins),
        "aliases": {name: snapshot.aliases[name] for name in sorted(snapshot.aliases)},
        "functions": {
            name: {
                "source_file": snapshot.functions[name].source_file,
                "line_number": snapshot.functions[name].line_number,
            }
            for name in sorted(snapshot.functions)
        },
        "builtins": {name: snapshot.builtins[name] for name in sorted(snapshot.builtins)},
        "keywords": sorted(snapshot.keywords),
        "syntax_tokens": sorted(snapshot.syntax_tokens),
    }


def snapshot_from_payload(payload: Mapping[str, Any]) -> ShellStateSnapshot:
    """Build a snapshot from a JSON payload; omitted fixed sets use bash defaults.

    Raises:
        SnapshotError: If a field has the wrong shape.
    """

    posix_mode = payload.get("posix_mode", False)
    if not isinstance(posix_mode, bool):
        raise SnapshotError("Snapshot field `posix_mode` must be a boolean.")

    aliases = _string_map(payload, "aliases")
    builtins_raw = payload.get("builtins", {})
    if not isinstance(builtins_raw, Mapping) or not all(
        isinstance(value, bool) for value in builtins_raw.values()
    ):
        raise SnapshotError("Snapshot field `builtins` must map names to booleans.")

    functions_raw = payload.get("functions", {})
    if not isinstance(functions_raw, Mapping):
        raise SnapshotError("Snapshot field `functions` must be a mapping.")
    functions: dict[str, FunctionLocation] = {}
    for name, location in functions_raw.items():
        if not isinstance(location, Mapping):
            raise SnapshotError(f"Snapshot function `{name}` must be a mapping.")
        line_number = location.get("line_number", 0)
        if isinstance(line_number, bool) or not isinstance(line_number, int):
            raise SnapshotError(f"Snapshot function `{name}` has a non-integer line number.")
        functions[str(name)] = FunctionLocation(
            source_file=str(location.get("source_file", "")),
            line_number=line_number,
        )

    return ShellStateSnapshot(
        posix_mode=posix_mode,
        special_builtins=_string_set(payload, "special_builtins", BASH_SPECIAL_BUILTINS),
        aliases=aliases,
        functions=functions,
        builtins={str(name): value for name, value in builtins_raw.items()},
        keywords=_string_set(payload, "keywords", frozenset()),
        syntax_tokens=_string_set(payload, "syntax_tokens", BASH_SYNTAX_TOKENS),
    )


def _string_map(payload: Mapping[str, Any], key: str) -> dict[str, str]:
    raw = payload.get(key, {})
    if not isinstance(raw, Mapping) or not all(isinstance(value, str) for value in raw.values()):
        raise SnapshotError(f"Snapshot field `{key}` must map names to strings.")
    return {str(name): value for name, value in raw.items()}


def _string_set(payload: Mapping[str, Any], key: str, default: frozenset[str]) -> frozenset[str]:
    if key not in payload:
        return default
    raw = payload[key]
    if not isinstance(raw, list) or not all(isinstance(value, str) for value in raw):
        raise SnapshotError(f"Snapshot field `{key}` must be a list of strings.")
    return frozenset(raw)


def load_snapshot(text: str) -> ShellStateSnapshot:
    """Load a snapshot from either a JSON document or `SNAPSHOT_SCRIPT` output."""

    if text.lstrip().startswith("{"):
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"Snapshot JSON is invalid: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise SnapshotError("Snapshot JSON must contain a top-level object.")
        return snapshot_from_payload(payload)
    return parse_snapshot_dump(text)


def collect_snapshot(
    shell_executable: str,
    interactive: bool = True,
    env: Mapping[str, str] | None = None,
    timeout_seconds: float = 10.0,
) -> ShellStateSnapshot:
    """Run `shell_executable` with the dump script and parse its output.

    An interactive shell reads the user's rc files, so their aliases and
    functions appear; state defined only in the calling session does not.
    Use `SHELL_HOOK` to capture that.

    Raises:
        SnapshotError: If the shell is missing, times out or exits non-zero.
    """

    args = [shell_executable]
    if interactive:
        args.append("-i")
    args.extend(["-c", SNAPSHOT_SCRIPT])
    try:
        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            stdin=subprocess.DEVNULL,
            env=None if env is None else dict(env),
            timeout=timeout_seconds,
            check=False,
        )
    except FileNotFoundError as exc:
        raise SnapshotError(
            f"Shell executable `{shell_executable}` was not found.",
            hint="Install bash or pass `--shell <path>`.",
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise SnapshotError(
            f"Shell `{shell_executable}` did not finish within {timeout_seconds:g}s.",
            hint="Check rc files for blocking commands or use `--no-interactive-snapshot`.",
        ) from exc

    if completed.returncode != 0:
        stderr_tail = completed.stderr.strip().splitlines()[-1:] or ["no stderr output"]
        raise SnapshotError(
            f"Shell `{shell_executable}` exited with code {completed.returncode}: "
            f"{stderr_tail[0]}",
        )
    return parse_snapshot_dump(completed.stdout)
