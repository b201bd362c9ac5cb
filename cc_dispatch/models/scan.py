"""Scan state threaded through the argument scanner.

Every transition returns a new ``ScanState``; nothing is mutated in place.
``forced_local`` only ever goes from False to True.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from cc_dispatch.models.job import Argument, ArgumentType, Language


@dataclass(frozen=True)
class ScanState:
    language: Language
    args: tuple[Argument, ...] = ()
    compile_only: bool = False  # -c
    assemble_only: bool = False  # -S
    dependency_file_explicit: bool = False  # -MF
    dependency_gen_requested: bool = False  # -MD / -MMD
    split_debug_info_requested: bool = False  # -gsplit-dwarf
    preprocess_only: bool = False  # -E
    explicit_color: bool = False
    explicit_no_show_caret: bool = False
    forced_local: bool = False
    output_file: str | None = None
    input_candidates: tuple[str, ...] = ()  # operands right after -c / -S
    linker_buffer: str | None = None  # pending "-Wl,..." built from -Xlinker
    aux_files: tuple[str, ...] = ()
    diagnostics: tuple[str, ...] = ()

    def append(self, kind: ArgumentType, *texts: str) -> ScanState:
        return replace(self, args=self.args + tuple(Argument(t, kind) for t in texts))

    def force_local(self, reason: str) -> ScanState:
        return replace(self, forced_local=True, diagnostics=self.diagnostics + (reason,))

    def note(self, message: str) -> ScanState:
        return replace(self, diagnostics=self.diagnostics + (message,))

    def update(self, **changes) -> ScanState:
        if changes.get("forced_local") is False and self.forced_local:
            raise ValueError("forced_local cannot be cleared once set")
        return replace(self, **changes)

    def add_aux_file(self, path: str) -> ScanState:
        return replace(self, aux_files=self.aux_files + (path,))

    def accumulate_linker_flag(self, value: str) -> ScanState:
        current = self.linker_buffer or "-Wl"
        return replace(self, linker_buffer=f"{current},{value}")

    def flush_linker_flag(self) -> ScanState:
        if self.linker_buffer is None:
            return self
        return replace(self.append(ArgumentType.LOCAL, self.linker_buffer), linker_buffer=None)
