"""Core datatypes shared across cmdtrace modules.

Responsibilities:
- Represent the immutable shell-state snapshot consumed by resolution.
- Represent per-mechanism resolution status, search-path entries and
  filesystem inspection results.

Key types:
- `ShellStateSnapshot`, `FunctionLocation`, `Mechanism`, `PathState`,
  `PathEntry`, `ResolutionResult`, `SymlinkHop`, `AlternativesLink`,
  `KernelInfo` and `ResolutionReport`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class Mechanism(str, Enum):
    """Resolution mechanism that can claim a command name."""

    ALIAS = "alias"
    FUNCTION = "function"
    KEYWORD = "keyword"
    BUILTIN = "builtin"
    PATH = "path"
    NOT_FOUND = "not_found"


class PathState(str, Enum):
    """Classification of `dir/command` for one search-path directory."""

    NOT_FOUND = "not_found"
    FILE = "file"
    SYMLINK = "symlink"


@dataclass(frozen=True, slots=True)
class FunctionLocation:
    """Where a shell function was defined.

    Attributes:
        source_file: File the definition was read from (`main` for interactive input).
        line_number: 1-based line of the definition, `0` when unknown.
    """

    source_file: str
    line_number: int = 0


@dataclass(frozen=True, slots=True)
class ShellStateSnapshot:
    """Immutable view of a shell's name-resolution tables at one point in time.

    Attributes:
        posix_mode: Whether the shell runs in POSIX-compatibility mode.
        special_builtins: POSIX special builtin names known to the shell.
        aliases: Alias name to definition text.
        functions: Function name to definition location.
        builtins: Builtin name to enabled state.
        keywords: Reserved words known to the shell.
        syntax_tokens: Literal tokens always treated as keywords.
    """

    posix_mode: bool = False
    special_builtins: frozenset[str] = field(default_factory=frozenset)
    aliases: Mapping[str, str] = field(default_factory=dict)
    functions: Mapping[str, FunctionLocation] = field(default_factory=dict)
    builtins: Mapping[str, bool] = field(default_factory=dict)
    keywords: frozenset[str] = field(default_factory=frozenset)
    syntax_tokens: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class PathEntry:
    """Outcome of probing one search-path directory for a command.

    Attributes:
        dir: Directory exactly as it appeared in the search path.
        state: `not_found`, `file` or `symlink`.
        symlink_target: Raw single-hop link text when `state` is `symlink`.
        shadowed: Whether an earlier entry or a shell mechanism wins instead.
        usr_merged: Whether `dir` is a legacy root merged into `/usr`.
    """

    dir: str
    state: PathState
    symlink_target: str | None = None
    shadowed: bool = False
    usr_merged: bool = False

    @property
    def found(self) -> bool:
        """Return `True` when the directory holds an executable candidate."""

        return self.state is not PathState.NOT_FOUND


@dataclass(frozen=True, slots=True)
class AliasStatus:
    """Alias mechanism status for one command."""

    found: bool = False
    shadowed: bool = False
    definition: str | None = None


@dataclass(frozen=True, slots=True)
class FunctionStatus:
    """Function mechanism status for one command."""

    found: bool = False
    shadowed: bool = False
    location: FunctionLocation | None = None


@dataclass(frozen=True, slots=True)
class KeywordStatus:
    """Keyword mechanism status; `syntax_token` marks literal grammar tokens."""

    found: bool = False
    shadowed: bool = False
    syntax_token: bool = False


@dataclass(frozen=True, slots=True)
class BuiltinStatus:
    """Builtin mechanism status.

    Attributes:
        found: Whether the shell knows a builtin of this name.
        shadowed: Whether the builtin is enabled but beaten by a higher mechanism.
        enabled: Enabled state, `None` when no such builtin exists.
        special: Whether the name is a POSIX special builtin.
    """

    found: bool = False
    shadowed: bool = False
    enabled: bool | None = None
    special: bool = False


@dataclass(frozen=True, slots=True)
class PathStatus:
    """Search-path mechanism status including every probed directory."""

    found: bool = False
    shadowed: bool = False
    resolved_path: str | None = None
    entries: tuple[PathEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Winner and per-mechanism status for one command name."""

    command: str
    winner: Mechanism
    alias: AliasStatus = field(default_factory=AliasStatus)
    function: FunctionStatus = field(default_factory=FunctionStatus)
    keyword: KeywordStatus = field(default_factory=KeywordStatus)
    builtin: BuiltinStatus = field(default_factory=BuiltinStatus)
    path: PathStatus = field(default_factory=PathStatus)

    def status_for(
        self, mechanism: Mechanism
    ) -> AliasStatus | FunctionStatus | KeywordStatus | BuiltinStatus | PathStatus | None:
        """Return the status record for a mechanism, `None` for `not_found`."""

        return {
            Mechanism.ALIAS: self.alias,
            Mechanism.FUNCTION: self.function,
            Mechanism.KEYWORD: self.keyword,
            Mechanism.BUILTIN: self.builtin,
            Mechanism.PATH: self.path,
        }.get(mechanism)


@dataclass(frozen=True, slots=True)
class SymlinkHop:
    """One symlink indirection: `source` is a link whose text is `target`."""

    source: str
    target: str


@dataclass(frozen=True, slots=True)
class AlternativesLink:
    """Distro alternatives indirection found in a symlink chain."""

    link: str
    target: str | None


@dataclass(frozen=True, slots=True)
class KernelInfo:
    """What the kernel would actually execute for a path winner.

    Attributes:
        resolved_path: `dir/command` of the winning search-path entry.
        canonical_path: Fully resolved real path, `None` if it could not be computed.
        symlink_chain: Ordered link hops starting at `resolved_path`.
        cycle_detected: Whether the chain revisited a link and was cut short.
        elf_interpreter: `PT_INTERP` program interpreter for ELF binaries.
        shebang: Interpreter line of a script, without the `#!` prefix.
        alternatives: First alternatives-directory link in the chain.
        degraded_probes: Names of probes that could not complete.
    """

    resolved_path: str
    canonical_path: str | None = None
    symlink_chain: tuple[SymlinkHop, ...] = field(default_factory=tuple)
    cycle_detected: bool = False
    elf_interpreter: str | None = None
    shebang: str | None = None
    alternatives: AlternativesLink | None = None
    degraded_probes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ResolutionReport:
    """Complete answer for one command: resolution, path entries and kernel view."""

    result: ResolutionResult
    path_entries: tuple[PathEntry, ...]
    kernel: KernelInfo | None = None

    @property
    def command(self) -> str:
        """Return the resolved command name."""

        return self.result.command

    @property
    def winner(self) -> Mechanism:
        """Return the winning mechanism."""

        return self.result.winner
