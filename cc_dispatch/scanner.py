"""Argument scanner — one left-to-right pass over the compiler arguments."""

from __future__ import annotations

import logging
from typing import Sequence

from cc_dispatch.models.job import ArgumentType, Language
from cc_dispatch.models.scan import ScanState
from cc_dispatch.rules import RuleTable, create_default_table, force_local

logger = logging.getLogger(__name__)

_DEFAULT_TABLE = create_default_table()


def scan_arguments(
    tokens: Sequence[str],
    language: Language,
    *,
    forced_local: bool = False,
    table: RuleTable | None = None,
) -> ScanState:
    """Classify ``tokens`` (the arguments after the compiler name).

    Returns the final ScanState: the classified arguments in order, the
    scan flags, the pending output file, input candidates and any plugin
    files that must travel with the job. Never raises for any input.
    """
    if table is None:
        table = _DEFAULT_TABLE
    state = ScanState(language=language, forced_local=forced_local)

    i = 0
    while i < len(tokens):
        token = tokens[i]
        if state.linker_buffer is not None and token != "-Xlinker":
            state = state.flush_linker_flag()

        rule = table.match(token)
        if rule is None:
            state = state.append(ArgumentType.REST, token)
            i += 1
            continue

        state, consumed = rule.apply(state, token, tokens[i + 1 :])
        i += 1 + consumed

    state = state.flush_linker_flag()

    # "-" may also have been consumed as a flag value
    if "-" in tokens and not state.forced_local:
        state = force_local(state, "stdin/stdout argument")

    logger.debug(
        "Scanned %d arguments (forced_local=%s, -c=%s, -S=%s)",
        len(tokens),
        state.forced_local,
        state.compile_only,
        state.assemble_only,
    )
    return state


def scan_local_only(tokens: Sequence[str]) -> ScanState:
    """Wrapper mode: nothing is interpreted, everything stays local."""
    state = ScanState(language=Language.CUSTOM).append(ArgumentType.LOCAL, *tokens)
    return force_local(state, "wrapper mode, running locally")
