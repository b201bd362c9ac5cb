"""Data models for classified arguments and the resulting compile job."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Language(Enum):
    """Source language of a job. CUSTOM jobs are never distributed."""

    C = "c"
    CXX = "c++"
    OBJC = "objective-c"
    CUSTOM = "custom"


class ArgumentType(Enum):
    """Where an argument is needed when the job is split across machines."""

    LOCAL = "local"  # only on the originating machine
    REMOTE = "remote"  # only on the remote worker
    CPP_ONLY = "cpp"  # preprocessor only; merged per preprocessing policy
    REST = "rest"  # every stage, local and remote


@dataclass(frozen=True)
class Argument:
    text: str
    kind: ArgumentType


@dataclass(frozen=True)
class CompileJob:
    """Immutable description of one compiler invocation.

    ``arguments`` holds every classified argument in original relative
    order; CPP_ONLY entries have already been merged into LOCAL or REST.
    The bucket properties are views over it.
    """

    compiler_name: str
    language: Language
    arguments: tuple[Argument, ...] = ()
    input_file: str | None = None
    output_file: str = ""
    split_debug_info: bool = False

    def _bucket(self, kind: ArgumentType) -> tuple[str, ...]:
        return tuple(a.text for a in self.arguments if a.kind is kind)

    @property
    def local_flags(self) -> tuple[str, ...]:
        return self._bucket(ArgumentType.LOCAL)

    @property
    def remote_flags(self) -> tuple[str, ...]:
        return self._bucket(ArgumentType.REMOTE)

    @property
    def rest_flags(self) -> tuple[str, ...]:
        return self._bucket(ArgumentType.REST)

    def remote_argv(self) -> list[str]:
        """Command line the remote worker runs: remote + rest flags, input, output."""
        argv = [self.compiler_name, *self.remote_flags, *self.rest_flags]
        if self.input_file:
            argv.append(self.input_file)
        if self.output_file:
            argv += ["-o", self.output_file]
        return argv

    def to_dict(self) -> dict:
        return {
            "compiler_name": self.compiler_name,
            "language": self.language.value,
            "local_flags": list(self.local_flags),
            "remote_flags": list(self.remote_flags),
            "rest_flags": list(self.rest_flags),
            "input_file": self.input_file,
            "output_file": self.output_file,
            "split_debug_info": self.split_debug_info,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Finalized job plus the authoritative run-locally decision."""

    job: CompileJob
    forced_local: bool
    diagnostics: tuple[str, ...] = field(default_factory=tuple)
    explicit_no_show_caret: bool = False  # caret lines suppressed in relayed diagnostics

    def to_dict(self) -> dict:
        return {
            "forced_local": self.forced_local,
            "diagnostics": list(self.diagnostics),
            "explicit_no_show_caret": self.explicit_no_show_caret,
            "job": self.job.to_dict(),
        }
