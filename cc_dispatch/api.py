"""ArgumentClassifier facade — single entry point for the dispatch layer.

Pipeline:
    1. Program identification (compiler name, initial language)
    2. Argument scan and classification
    3. Input/output resolution
    4. Job finalization

Usage::

    classifier = ArgumentClassifier(Settings.from_env())
    extra_files: list[str] = []
    result = classifier.classify(sys.argv, extra_files=extra_files)
    if result.forced_local:
        ...  # run the original argv unchanged
"""

from __future__ import annotations

import logging
from typing import Sequence

from cc_dispatch.config import Settings
from cc_dispatch.finalizer import finalize_job
from cc_dispatch.models.job import ClassificationResult
from cc_dispatch.program import identify_program
from cc_dispatch.resolver import resolve_job_shape
from cc_dispatch.rules import RuleTable
from cc_dispatch.scanner import scan_arguments, scan_local_only

logger = logging.getLogger(__name__)


class ArgumentClassifier:
    """Decide how one compiler invocation is split, and whether it may leave this machine."""

    def __init__(
        self,
        settings: Settings | None = None,
        table: RuleTable | None = None,
        color_wanted: bool | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.table = table
        self._color_wanted = color_wanted

    @property
    def color_wanted(self) -> bool:
        if self._color_wanted is None:
            self._color_wanted = self.settings.color_wanted()
        return self._color_wanted

    def classify(
        self,
        argv: Sequence[str],
        *,
        compiler_name: str | None = None,
        extra_files: list[str] | None = None,
        local_only: bool = False,
    ) -> ClassificationResult:
        """Classify a full argument vector.

        Args:
            argv: Program name followed by its arguments. When
                ``compiler_name`` is given, ``argv[1]`` is that compiler and
                scanning starts at ``argv[2]``.
            compiler_name: Compiler already known to the caller.
            extra_files: Sink receiving absolute paths of plugin files that
                must be shipped with a remote job.
            local_only: Wrapper mode; nothing is distributed.
        """
        argv = list(argv)
        program = identify_program(compiler_name or (argv[0] if argv else ""))
        tokens = argv[2:] if compiler_name else argv[1:]

        if local_only:
            state = scan_local_only(tokens)
        else:
            state = scan_arguments(
                tokens,
                program.language,
                forced_local=program.forced_local,
                table=self.table,
            )
            if program.forced_local:
                state = state.note(f"custom command {program.compiler_name}")

        if extra_files is not None:
            extra_files.extend(state.aux_files)

        resolution = resolve_job_shape(state)
        result = finalize_job(
            program.compiler_name,
            resolution,
            remote_cpp=self.settings.remote_cpp,
            color_wanted=self.color_wanted,
        )
        logger.debug(
            "Classified %s: forced_local=%s input=%s output=%s",
            program.compiler_name,
            result.forced_local,
            result.job.input_file,
            result.job.output_file,
        )
        return result


def classify_argv(
    argv: Sequence[str],
    *,
    compiler_name: str | None = None,
    extra_files: list[str] | None = None,
    remote_cpp: bool = False,
    color_wanted: bool = False,
    local_only: bool = False,
) -> ClassificationResult:
    """Functional shortcut around ArgumentClassifier with explicit policy."""
    classifier = ArgumentClassifier(Settings(remote_cpp=remote_cpp), color_wanted=color_wanted)
    return classifier.classify(
        argv,
        compiler_name=compiler_name,
        extra_files=extra_files,
        local_only=local_only,
    )
