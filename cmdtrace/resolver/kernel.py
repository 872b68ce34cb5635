"""Inspection of the file the kernel would execute for a path winner.

Each probe degrades to "no value" on failure; the failure is recorded in
`KernelInfo.degraded_probes` and logged, and the remaining probes still run.
"""

from __future__ import annotations

from ..models.datatypes import KernelInfo, SymlinkHop
from ..probe.binary import ElfFormatError, is_elf, read_elf_interpreter, read_shebang
from ..probe.filesystem import canonicalize, walk_symlink_chain
from ..probe.indirection import DEFAULT_ALTERNATIVES_DIR, find_alternatives_link
from ..telemetry.logger import RunLogger


class KernelInspector:
    """Build `KernelInfo` for a resolved executable path."""

    def __init__(
        self,
        alternatives_dir: str = DEFAULT_ALTERNATIVES_DIR,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._alternatives_dir = alternatives_dir
        self._run_logger = run_logger

    def inspect(self, resolved_path: str) -> KernelInfo:
        """Inspect `resolved_path`: link chain, real path, interpreter and alternatives."""

        degraded: list[str] = []

        chain: tuple[SymlinkHop, ...] = ()
        cycle_detected = False
        try:
            chain, cycle_detected = walk_symlink_chain(resolved_path)
        except OSError as exc:
            self._degrade(degraded, "symlink_chain", resolved_path, exc)

        canonical_path: str | None = None
        try:
            canonical_path = canonicalize(resolved_path)
        except OSError as exc:
            # A cycle already explains why there is no real path.
            if not cycle_detected:
                self._degrade(degraded, "canonical_path", resolved_path, exc)

        elf_interpreter: str | None = None
        shebang: str | None = None
        if canonical_path is not None:
            try:
                elf = is_elf(canonical_path)
            except OSError as exc:
                self._degrade(degraded, "format", canonical_path, exc)
                elf = None
            if elf:
                try:
                    elf_interpreter = read_elf_interpreter(canonical_path)
                except (OSError, ElfFormatError) as exc:
                    self._degrade(degraded, "elf_interpreter", canonical_path, exc)
            elif elf is False:
                try:
                    shebang = read_shebang(canonical_path)
                except OSError as exc:
                    self._degrade(degraded, "shebang", canonical_path, exc)

        return KernelInfo(
            resolved_path=resolved_path,
            canonical_path=canonical_path,
            symlink_chain=chain,
            cycle_detected=cycle_detected,
            elf_interpreter=elf_interpreter,
            shebang=shebang,
            alternatives=find_alternatives_link(chain, self._alternatives_dir),
            degraded_probes=tuple(degraded),
        )

    def _degrade(self, degraded: list[str], probe: str, path: str, exc: Exception) -> None:
        degraded.append(probe)
        if self._run_logger is not None:
            self._run_logger.log_probe_degraded(probe, path, type(exc).__name__)
