"""Input/output resolution — job shape, input file, final language, output names."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from cc_dispatch.models.job import Argument, ArgumentType, Language
from cc_dispatch.models.scan import ScanState

logger = logging.getLogger(__name__)

# Extension (without dot, case-sensitive) -> language override
_EXTENSION_LANGUAGE: dict[str, Language] = {
    **dict.fromkeys(("cc", "cpp", "cxx", "cp", "c++", "C", "ii"), Language.CXX),
    **dict.fromkeys(("mi", "m", "mii", "mm", "M"), Language.OBJC),
}

# Sources a remote worker cannot build: assembly, Ada, Fortran, Ratfor
_LOCAL_ONLY_EXTENSIONS = frozenset(
    ("s", "S", "ads", "adb", "f", "for", "FOR", "F", "fpp", "FPP", "r")
)

# Language decided by the program name
_KEEP_LANGUAGE_EXTENSIONS = frozenset(("c", "i"))


@dataclass(frozen=True)
class Resolution:
    """Outcome of input/output resolution, handed to the finalizer."""

    args: tuple[Argument, ...]
    language: Language
    forced_local: bool
    input_file: str | None
    output_file: str
    split_debug_info: bool
    explicit_color: bool
    diagnostics: tuple[str, ...] = ()
    explicit_no_show_caret: bool = False


def language_for_extension(ext: str, current: Language) -> Language | None:
    """Language implied by a source extension; None when it cannot run remotely."""
    if ext in _EXTENSION_LANGUAGE:
        return _EXTENSION_LANGUAGE[ext]
    if ext in _KEEP_LANGUAGE_EXTENSIONS:
        return current
    return None


def synthesize_output(input_file: str, assemble_only: bool) -> str:
    """``src/foo.cc`` -> ``foo.o`` (or ``foo.s`` with -S), in the working directory."""
    stem = os.path.splitext(os.path.basename(input_file))[0]
    return stem + (".s" if assemble_only else ".o")


def dependency_file_for(output_file: str) -> str:
    return os.path.splitext(output_file)[0] + ".d"


def _remove_input(args: tuple[Argument, ...], candidate: str) -> tuple[Argument, ...] | None:
    for i, arg in enumerate(args):
        if arg.kind is ArgumentType.REST and arg.text == candidate:
            return args[:i] + args[i + 1 :]
    return None


def resolve_job_shape(state: ScanState) -> Resolution:
    """Decide compile vs. assemble, locate the input and name the outputs."""
    args = state.args
    forced_local = state.forced_local
    diagnostics = list(state.diagnostics)
    language = state.language
    output_file = state.output_file or ""
    split_debug_info = False

    def localize(reason: str) -> None:
        nonlocal forced_local
        if not forced_local:
            logger.info("%s, building locally", reason)
        forced_local = True
        diagnostics.append(reason)

    if not state.compile_only and not state.assemble_only:
        localize("neither -c nor -S argument")
    elif state.assemble_only:
        if state.compile_only:
            logger.warning("Can't have both -c and -S, ignoring -c")
            diagnostics.append("both -c and -S given, -c ignored")
        args = args + (Argument("-S", ArgumentType.REMOTE),)
    else:
        args = args + (Argument("-c", ArgumentType.REMOTE),)
        split_debug_info = state.split_debug_info_requested

    input_file: str | None = None
    if not forced_local:
        candidates = set(state.input_candidates)
        if not candidates:
            localize("no input file follows -c/-S")
        elif len(candidates) > 1:
            localize(f"ambiguous input files {sorted(candidates)}")
        else:
            candidate = state.input_candidates[0]
            remaining = _remove_input(args, candidate)
            if remaining is None:
                localize(f"input file {candidate} not found among arguments")
            elif _remove_input(remaining, candidate) is not None:
                localize(f"input file {candidate} given more than once")
            else:
                args = remaining
                input_file = candidate

    if input_file is not None:
        ext = os.path.splitext(input_file)[1][1:]
        resolved = language_for_extension(ext, language)
        if resolved is None:
            if ext in _LOCAL_ONLY_EXTENSIONS:
                localize(f"source file {input_file}")
            else:
                logger.warning("Unknown extension %r for %s", ext, input_file)
                localize(f"unknown extension {ext!r}")
        else:
            if resolved is not language:
                logger.debug("Switching to %s for %s", resolved.value, input_file)
            language = resolved

        if not forced_local and not output_file:
            output_file = synthesize_output(input_file, state.assemble_only)

        if not forced_local and state.dependency_gen_requested and not state.dependency_file_explicit:
            dfile = dependency_file_for(output_file)
            logger.debug("Dependency file: %s", dfile)
            args = args + (
                Argument("-MF", ArgumentType.LOCAL),
                Argument(dfile, ArgumentType.LOCAL),
            )

    return Resolution(
        args=args,
        language=language,
        forced_local=forced_local,
        input_file=input_file,
        output_file=output_file,
        split_debug_info=split_debug_info,
        explicit_color=state.explicit_color,
        diagnostics=tuple(diagnostics),
        explicit_no_show_caret=state.explicit_no_show_caret,
    )
