"""Job finalizer — output path validation, color default, immutable CompileJob."""

from __future__ import annotations

import logging
import os

from cc_dispatch.models.job import (
    Argument,
    ArgumentType,
    ClassificationResult,
    CompileJob,
    Language,
)
from cc_dispatch.program import is_clang
from cc_dispatch.resolver import Resolution

logger = logging.getLogger(__name__)


def output_blocks_remote(output_file: str) -> bool:
    """Empty path, or an existing entry that is not a regular file."""
    if not output_file:
        return True
    return os.path.exists(output_file) and not os.path.isfile(output_file)


def color_flag_for(compiler_name: str) -> str:
    return "-fcolor-diagnostics" if is_clang(compiler_name) else "-fdiagnostics-color"


def merge_cpp_only(args: tuple[Argument, ...], remote_cpp: bool) -> tuple[Argument, ...]:
    """Route preprocessor-only arguments.

    With remote preprocessing the worker needs them too (REST); otherwise
    only the local preprocessor does (LOCAL).
    """
    target = ArgumentType.REST if remote_cpp else ArgumentType.LOCAL
    return tuple(
        Argument(a.text, target) if a.kind is ArgumentType.CPP_ONLY else a for a in args
    )


def finalize_job(
    compiler_name: str,
    resolution: Resolution,
    *,
    remote_cpp: bool = False,
    color_wanted: bool = False,
) -> ClassificationResult:
    forced_local = resolution.forced_local
    diagnostics = list(resolution.diagnostics)
    args = resolution.args

    if output_blocks_remote(resolution.output_file):
        reason = "output file empty or not a regular file"
        if not forced_local:
            logger.info("Building locally: %s (%r)", reason, resolution.output_file)
            diagnostics.append(reason)
        forced_local = True

    # redirected compiler output loses automatic coloring, so ask for it
    if color_wanted and resolution.language is not Language.CUSTOM and not resolution.explicit_color:
        args = args + (Argument(color_flag_for(compiler_name), ArgumentType.REST),)

    job = CompileJob(
        compiler_name=compiler_name,
        language=resolution.language,
        arguments=merge_cpp_only(args, remote_cpp),
        input_file=resolution.input_file,
        output_file=resolution.output_file,
        split_debug_info=resolution.split_debug_info,
    )
    logger.debug(
        "Finalized %s (%s): local=%s remote=%s rest=%s forced_local=%s",
        compiler_name,
        job.language.value,
        job.local_flags,
        job.remote_flags,
        job.rest_flags,
        forced_local,
    )
    return ClassificationResult(
        job=job,
        forced_local=forced_local,
        diagnostics=tuple(diagnostics),
        explicit_no_show_caret=resolution.explicit_no_show_caret,
    )
