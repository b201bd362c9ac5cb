"""Program identification — compiler short name and initial language guess."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from cc_dispatch.models.job import Language

logger = logging.getLogger(__name__)

# Single-binary front end whose name carries no language suffix
_FRONTEND_NAMES = {"clang"}


@dataclass(frozen=True)
class ProgramInfo:
    compiler_name: str
    language: Language
    forced_local: bool = False


def identify_program(name: str) -> ProgramInfo:
    """Derive compiler short name and language from an invoked program name.

    ``/usr/bin/g++`` -> ("g++", CXX), ``gcc`` -> ("gcc", C),
    ``clang`` -> ("clang", C); anything else is a custom tool and is
    always run locally.
    """
    compiler_name = os.path.basename(name.rstrip("/")) or name
    suffix = compiler_name[-2:] if len(compiler_name) > 2 else compiler_name

    if suffix in ("++", "CC"):
        return ProgramInfo(compiler_name, Language.CXX)
    if suffix == "cc":
        return ProgramInfo(compiler_name, Language.C)
    if compiler_name in _FRONTEND_NAMES:
        return ProgramInfo(compiler_name, Language.C)

    logger.info("Custom command %s, running locally", compiler_name)
    return ProgramInfo(compiler_name, Language.CUSTOM, forced_local=True)


def is_clang(compiler_name: str) -> bool:
    return "clang" in os.path.basename(compiler_name)
