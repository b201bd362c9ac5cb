"""Classification table — ordered rules mapping compiler arguments to buckets.

Each rule pairs a matcher over the current token with a handler. The
handler receives the scan state, the token and the tokens that follow it,
and returns the new state plus how many of the following tokens it
consumed. The first matching rule wins, so order matters: specific
spellings come before the prefix families that would also match them.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from cc_dispatch.exceptions import RuleConflictError
from cc_dispatch.models.job import ArgumentType, Language
from cc_dispatch.models.scan import ScanState

logger = logging.getLogger(__name__)

Matcher = Callable[[str], bool]
Handler = Callable[[ScanState, str, Sequence[str]], tuple[ScanState, int]]

LOCAL = ArgumentType.LOCAL
REMOTE = ArgumentType.REMOTE
CPP = ArgumentType.CPP_ONLY
REST = ArgumentType.REST


@dataclass(frozen=True)
class Rule:
    """One entry of the classification table."""

    name: str
    matcher: Matcher
    handler: Handler
    lookahead: int = 0  # most following tokens the handler consumes; listed by `rules`, not enforced
    bucket: ArgumentType | None = None  # None: consumed or captured, never appended
    description: str = ""

    def matches(self, token: str) -> bool:
        return self.matcher(token)

    def apply(self, state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
        return self.handler(state, token, following)


# ── Matchers ─────────────────────────────────────────────────────────────


def exact(*names: str) -> Matcher:
    wanted = frozenset(names)
    return lambda token: token in wanted


def prefix(*prefixes: str) -> Matcher:
    return lambda token: token.startswith(prefixes)


def any_of(*matchers: Matcher) -> Matcher:
    return lambda token: any(m(token) for m in matchers)


# ── Shared helpers ───────────────────────────────────────────────────────


def force_local(state: ScanState, reason: str) -> ScanState:
    logger.info("Building locally: %s", reason)
    return state.force_local(reason)


def _readable(path: str) -> bool:
    return os.access(path, os.R_OK)


def _is_operand(token: str) -> bool:
    return not token.startswith(("-", "@"))


def _resolve_aux_file(state: ScanState, path: str, described: str) -> tuple[ScanState, str]:
    """Record a readable plugin/module file by absolute path, or force local."""
    if _readable(path):
        absolute = os.path.abspath(path)
        return state.add_aux_file(absolute), absolute
    return force_local(state, f"plugin for argument {described} missing"), path


# ── Handler factories ────────────────────────────────────────────────────


def append(kind: ArgumentType, *, values: int = 0, reason: str | None = None, **flags) -> Handler:
    """Append the token and up to ``values`` following tokens to ``kind``.

    ``flags`` are ScanState fields set to the given value; ``reason``
    (formatted with ``arg``) forces the job local.
    """

    def handle(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
        taken = list(following[:values])
        state = state.append(kind, token, *taken)
        if flags:
            state = state.update(**flags)
        if reason:
            state = force_local(state, reason.format(arg=token))
        return state, len(taken)

    return handle


def mark(**flags) -> Handler:
    """Consume the token without appending it, only setting ScanState fields."""

    def handle(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
        return state.update(**flags), 0

    return handle


def drop(*, values: int = 0) -> Handler:
    def handle(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
        return state, len(following[:values])

    return handle


# ── Specific handlers ────────────────────────────────────────────────────


def _toolchain_path(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    # -B changes where the compiler finds its own tools
    used = 1 if token == "-B" and following else 0
    state = state.append(LOCAL, token, *following[:used])
    return force_local(state, f"argument {token}"), used


_WA_LISTING_RE = re.compile(r"-a[a-z]*=")


def references_local_file(token: str) -> bool:
    """True when a ``-Wa,`` option names a file on the local machine.

    Catches ``-a[a-z]*=FILE`` listing options and bare file operands such
    as ``-Wa,src/code16gcc.s``.
    """
    if _WA_LISTING_RE.search(token, 1):
        return True
    first = token[3:].lstrip(", ")
    return bool(first) and not first.startswith("-")


def _assembler_passthrough(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if references_local_file(token):
        return force_local(state.append(LOCAL, token), f"argument {token}"), 0
    return state.append(REMOTE, token), 0


def _stage_marker(field_name: str) -> Handler:
    """-c / -S: consumed; the operand right after it is the input candidate."""

    def handle(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
        state = state.update(**{field_name: True})
        if following and _is_operand(following[0]):
            state = state.update(input_candidates=state.input_candidates + (following[0],))
        return state, 0

    return handle


def _linker_escape(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if not following:
        return state.flush_linker_flag().append(LOCAL, token), 0
    return state.accumulate_linker_flag(following[0]), 1


def _include_path(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    used = 1 if token in ("-I", "-F", "-iquote") and following else 0
    if state.preprocess_only:
        return state, used
    state = state.append(LOCAL, token, *following[:used])
    if used and following[0].startswith("-O"):
        state = force_local(state, f"argument {token} {following[0]}")
    return state, used


_LANGUAGE_NAMES = {
    "c": Language.C,
    "c++": Language.CXX,
    "objective-c": Language.OBJC,
    "objective-c++": Language.OBJC,
}


def _language_override(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if not following:
        return force_local(state.append(REST, token), "unsupported -x option"), 0
    value = following[0]
    state = state.append(REST, token, value)
    language = _LANGUAGE_NAMES.get(value)
    if language is None:
        return force_local(state, f"unsupported -x option {value}"), 1
    return state.update(language=language), 1


def _output(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if token == "-o":
        if not following:
            return state.note("-o given without a value"), 0
        value, used = following[0], 1
    else:
        value, used = token[2:], 0
    state = state.update(output_file=value)
    if value == "-":
        # "-o -" is stdout for some compilers and a file named "-" for others
        state = force_local(state, "output to stdout")
    return state, used


def _include_file(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if not following:
        return force_local(state.append(LOCAL, token), f"argument {token} without a file"), 0
    path = following[0]
    state = state.append(LOCAL, token, path)
    ext = os.path.splitext(path)[1][1:]
    if not ext:
        return force_local(state, f"argument {token} {path} is not a header"), 1
    if ext[0] not in "hH" or not (_readable(path) or _readable(path + ".gch")):
        return force_local(state, f"include file or gch file for argument {token} {path} missing"), 1
    return state, 1


def _include_pch(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    used = 1 if following else 0
    state = state.append(LOCAL, token, *following[:used])
    return force_local(state, f"argument {token}"), used


def _search_path(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if not following:
        return state.append(LOCAL, token), 0
    value = following[0]
    state = state.append(LOCAL, token, value)
    if value.startswith("-O"):
        state = force_local(state, f"argument {token} {value}")
    return state, 1


def _color(*, keep: bool, explicit: bool) -> Handler:
    def handle(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
        if keep:
            state = state.append(REST, token)
        return state.update(explicit_color=explicit), 0

    return handle


def _plugin(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    state, path = _resolve_aux_file(state, token[len("-fplugin="):], token)
    return state.append(REST, "-fplugin=" + path), 0


def _xclang(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    if not following:
        return state.append(REST, token), 0
    inner = following[0]
    if inner != "-load":
        return state.append(REST, token, inner), 1
    if len(following) < 3 or following[1] != "-Xclang":
        return state.append(REST, token, inner), 1
    described = " ".join([token, *following[:3]])
    state, path = _resolve_aux_file(state, following[2], described)
    return state.append(REST, token, inner, following[1], path), 3


def _stdio(state: ScanState, token: str, following: Sequence[str]) -> tuple[ScanState, int]:
    return force_local(state.append(REST, token), "stdin/stdout argument"), 0


# ── Default table ────────────────────────────────────────────────────────

_PROFILING_FLAGS = (
    "-fprofile-arcs",
    "-ftest-coverage",
    "-frepo",
    "-fprofile-generate",
    "-fprofile-use",
    "-save-temps",
    "--save-temps",
    "-fbranch-probabilities",
)

_SEARCH_PATH_FLAGS = (
    "-L",
    "-l",
    "-imacros",
    "-iprefix",
    "-iwithprefix",
    "-isystem",
    "-imultilib",
    "-iwithprefixbefore",
    "-idirafter",
)

_CHARSET_FLAGS = ("-fexec-charset", "-fwide-exec-charset", "-finput-charset")

_COLOR_FLAGS = (
    "-fcolor-diagnostics",
    "-fno-color-diagnostics",
    "-fdiagnostics-color",
    "-fdiagnostics-color=always",
    "-fno-diagnostics-color",
    "-fdiagnostics-color=never",
)

DEFAULT_RULES: list[Rule] = [
    Rule("preprocess-only", exact("-E"),
         append(LOCAL, reason="preprocessing", preprocess_only=True),
         bucket=LOCAL, description="preprocessor output stays on this machine"),
    Rule("dump", any_of(prefix("-fdump"), exact("-combine")),
         append(LOCAL, reason="argument {arg}"), bucket=LOCAL),
    Rule("dependency-gen", exact("-MD", "-MMD"),
         append(LOCAL, dependency_gen_requested=True), bucket=LOCAL,
         description="dependencies written as a side effect of local preprocessing"),
    Rule("dependency-modifier", exact("-MG", "-MP"), append(LOCAL), bucket=LOCAL),
    Rule("dependency-file", exact("-MF"),
         append(LOCAL, values=1, dependency_file_explicit=True), lookahead=1, bucket=LOCAL),
    Rule("dependency-target", exact("-MT", "-MQ"), append(LOCAL, values=1), lookahead=1, bucket=LOCAL),
    Rule("dependency-only", prefix("-M"), append(LOCAL, reason="argument {arg}"), bucket=LOCAL,
         description="other -M* options imply -E"),
    Rule("param", exact("--param"), append(REMOTE, values=1), lookahead=1, bucket=REMOTE),
    Rule("toolchain-path", prefix("-B"), _toolchain_path, lookahead=1, bucket=LOCAL),
    Rule("assembler-passthrough", prefix("-Wa,"), _assembler_passthrough, bucket=REMOTE,
         description="local when it names a listing or source file"),
    Rule("assemble-only", exact("-S"), _stage_marker("assemble_only")),
    Rule("compile-only", exact("-c"), _stage_marker("compile_only")),
    Rule("profiling", exact(*_PROFILING_FLAGS), append(LOCAL, reason="compiler will emit profile info ({arg})"),
         bucket=LOCAL),
    Rule("split-debug-info", exact("-gsplit-dwarf"), mark(split_debug_info_requested=True)),
    Rule("linker-escape", exact("-Xlinker"), _linker_escape, lookahead=1, bucket=LOCAL,
         description="consecutive values folded into one -Wl, flag"),
    Rule("local-diagnostics-file", exact("--serialize-diagnostics"), drop(values=1), lookahead=1),
    Rule("build-session", any_of(exact("-fmodules-validate-once-per-build-session"),
                                 prefix("-fbuild-session-file")), drop()),
    Rule("include-path", any_of(exact("-iquote"), prefix("-I", "-F")), _include_path, lookahead=1,
         bucket=LOCAL, description="dropped after -E"),
    Rule("language", exact("-x"), _language_override, lookahead=1, bucket=REST),
    Rule("native-arch", exact("-march=native", "-mcpu=native", "-mtune=native"),
         append(LOCAL, reason="{arg} optimizes for the local machine"), bucket=LOCAL),
    Rule("charset", any_of(exact(*_CHARSET_FLAGS), prefix(*(f + "=" for f in _CHARSET_FLAGS))),
         append(LOCAL, reason="{arg} assumes charset conversion in the build environment"), bucket=LOCAL),
    Rule("output", prefix("-o"), _output, lookahead=1, description="captured as the output file"),
    Rule("include-file", exact("-include"), _include_file, lookahead=1, bucket=LOCAL),
    Rule("include-pch", exact("-include-pch"), _include_pch, lookahead=1, bucket=LOCAL),
    Rule("macro", exact("-D", "-U"), append(CPP, values=1), lookahead=1, bucket=CPP),
    Rule("search-path", exact(*_SEARCH_PATH_FLAGS), _search_path, lookahead=1, bucket=LOCAL),
    Rule("macro-fused", prefix("-Wp,", "-D", "-U"), append(CPP), bucket=CPP),
    Rule("library-fused", prefix("-l", "-L"), append(LOCAL), bucket=LOCAL),
    Rule("undef", exact("-undef"), append(CPP), bucket=CPP),
    Rule("nostdinc", exact("-nostdinc", "-nostdinc++"), append(LOCAL), bucket=LOCAL),
    Rule("color", exact(*_COLOR_FLAGS), _color(keep=True, explicit=True), bucket=REST),
    Rule("color-auto", exact("-fdiagnostics-color=auto"), _color(keep=False, explicit=False),
         description="dropped so the default color choice applies"),
    Rule("no-show-caret", exact("-fno-diagnostics-show-caret"),
         append(REST, explicit_no_show_caret=True), bucket=REST),
    Rule("lto", exact("-flto"), append(REMOTE), bucket=REMOTE),
    Rule("plugin", prefix("-fplugin="), _plugin, bucket=REST),
    Rule("clang-passthrough", exact("-Xclang"), _xclang, lookahead=3, bucket=REST),
    Rule("stdio", exact("-"), _stdio, bucket=REST),
    Rule("response-file", prefix("@"), append(LOCAL), bucket=LOCAL,
         description="response files are never expanded"),
    Rule("option", prefix("-"), append(REST), bucket=REST),
    Rule("operand", lambda token: True, append(REST), bucket=REST),
]


class RuleTable:
    """Ordered classification rules, matched top to bottom."""

    def __init__(self, rules: Sequence[Rule] = ()) -> None:
        self._rules: list[Rule] = []
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule, *, before: str | None = None) -> None:
        """Add a rule at the end, or just before the rule named ``before``."""
        if self.get(rule.name) is not None:
            raise RuleConflictError(f"Rule already registered: {rule.name}")
        if before is None:
            self._rules.append(rule)
            return
        for i, existing in enumerate(self._rules):
            if existing.name == before:
                self._rules.insert(i, rule)
                return
        raise KeyError(before)

    def get(self, name: str) -> Rule | None:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def list_all(self) -> list[Rule]:
        return list(self._rules)

    def match(self, token: str) -> Rule | None:
        for rule in self._rules:
            if rule.matches(token):
                return rule
        return None

    def __len__(self) -> int:
        return len(self._rules)


def create_default_table() -> RuleTable:
    return RuleTable(DEFAULT_RULES)
