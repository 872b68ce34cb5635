"""Command-name precedence resolution.

Responsibilities:
- Evaluate bash's lookup rules for a bare name in one fixed order.
- Pick exactly one winning mechanism.
- Flag every other mechanism that exists under the same name as shadowed.

Rule order, highest first:
1. Syntax tokens (`{`, `[[`, ...) are keywords unconditionally.
2. Under POSIX mode an enabled special builtin beats functions.
3. Reserved words.
4. Aliases.
5. Functions.
6. Enabled builtins.
7. The first executable on the search path.
8. Not found.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Sequence

from ..models.datatypes import (
    AliasStatus,
    BuiltinStatus,
    FunctionStatus,
    KeywordStatus,
    Mechanism,
    PathStatus,
    ResolutionResult,
    ShellStateSnapshot,
)
from .path_scanner import PathScanner


@dataclass(frozen=True, slots=True)
class PrecedenceRule:
    """One named lookup rule; `applies` decides whether it claims the name."""

    name: str
    mechanism: Mechanism
    applies: Callable[[str, ShellStateSnapshot], bool]


def _is_syntax_token(command: str, snapshot: ShellStateSnapshot) -> bool:
    return command in snapshot.syntax_tokens


def _is_posix_special_builtin(command: str, snapshot: ShellStateSnapshot) -> bool:
    return (
        snapshot.posix_mode
        and command in snapshot.special_builtins
        and bool(snapshot.builtins.get(command, False))
    )


def _is_keyword(command: str, snapshot: ShellStateSnapshot) -> bool:
    return command in snapshot.keywords


def _is_alias(command: str, snapshot: ShellStateSnapshot) -> bool:
    return command in snapshot.aliases


def _is_function(command: str, snapshot: ShellStateSnapshot) -> bool:
    return command in snapshot.functions


def _is_enabled_builtin(command: str, snapshot: ShellStateSnapshot) -> bool:
    return bool(snapshot.builtins.get(command, False))


SHELL_RULES: tuple[PrecedenceRule, ...] = (
    PrecedenceRule("syntax_token", Mechanism.KEYWORD, _is_syntax_token),
    PrecedenceRule("posix_special_builtin", Mechanism.BUILTIN, _is_posix_special_builtin),
    PrecedenceRule("keyword", Mechanism.KEYWORD, _is_keyword),
    PrecedenceRule("alias", Mechanism.ALIAS, _is_alias),
    PrecedenceRule("function", Mechanism.FUNCTION, _is_function),
    PrecedenceRule("builtin", Mechanism.BUILTIN, _is_enabled_builtin),
)


class PrecedenceResolver:
    """Decide which mechanism bash would use to run a bare command name."""

    def __init__(
        self,
        scanner: PathScanner | None = None,
        rules: Sequence[PrecedenceRule] = SHELL_RULES,
    ) -> None:
        self._scanner = scanner or PathScanner()
        self._rules = tuple(rules)

    def resolve(
        self,
        command: str,
        snapshot: ShellStateSnapshot,
        search_path: Sequence[str],
    ) -> ResolutionResult:
        """Resolve `command` against `snapshot` and `search_path`.

        Callers must pass a bare name; validation happens before this point.
        """

        winner: Mechanism | None = None
        for rule in self._rules:
            if rule.applies(command, snapshot):
                winner = rule.mechanism
                break

        entries = self._scanner.scan(command, search_path, already_won=winner is not None)
        path_found = any(entry.found for entry in entries)
        path_winner = next(
            (entry for entry in entries if entry.found and not entry.shadowed), None
        )
        resolved_path: str | None = None
        if winner is None and path_winner is not None:
            winner = Mechanism.PATH
            resolved_path = os.path.join(path_winner.dir or ".", command)
        if winner is None:
            winner = Mechanism.NOT_FOUND

        alias_found = command in snapshot.aliases
        function_found = command in snapshot.functions
        syntax_token = command in snapshot.syntax_tokens
        keyword_found = syntax_token or command in snapshot.keywords
        builtin_found = command in snapshot.builtins
        builtin_enabled = bool(snapshot.builtins[command]) if builtin_found else None

        return ResolutionResult(
            command=command,
            winner=winner,
            alias=AliasStatus(
                found=alias_found,
                shadowed=alias_found and winner is not Mechanism.ALIAS,
                definition=snapshot.aliases.get(command),
            ),
            function=FunctionStatus(
                found=function_found,
                shadowed=function_found and winner is not Mechanism.FUNCTION,
                location=snapshot.functions.get(command),
            ),
            keyword=KeywordStatus(
                found=keyword_found,
                shadowed=keyword_found and winner is not Mechanism.KEYWORD,
                syntax_token=syntax_token,
            ),
            builtin=BuiltinStatus(
                found=builtin_found,
                # A disabled builtin is out of the race, not beaten in it.
                shadowed=bool(builtin_enabled) and winner is not Mechanism.BUILTIN,
                enabled=builtin_enabled,
                special=command in snapshot.special_builtins,
            ),
            path=PathStatus(
                found=path_found,
                shadowed=path_found and winner is not Mechanism.PATH,
                resolved_path=resolved_path,
                entries=entries,
            ),
        )

    def winning_rule(self, command: str, snapshot: ShellStateSnapshot) -> str | None:
        """Return the name of the shell rule that claims `command`, if any."""

        for rule in self._rules:
            if rule.applies(command, snapshot):
                return rule.name
        return None
