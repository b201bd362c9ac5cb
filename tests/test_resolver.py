"""Tests for input/output resolution."""

from __future__ import annotations

import pytest

from cc_dispatch.models.job import Argument, ArgumentType, Language
from cc_dispatch.models.scan import ScanState
from cc_dispatch.resolver import (
    dependency_file_for,
    language_for_extension,
    resolve_job_shape,
    synthesize_output,
)
from cc_dispatch.scanner import scan_arguments


def _resolve(*tokens: str, language: Language = Language.C):
    return resolve_job_shape(scan_arguments(list(tokens), language))


class TestJobShape:
    def test_compile_marker_goes_remote(self):
        res = _resolve("-c", "foo.c")
        assert not res.forced_local
        assert Argument("-c", ArgumentType.REMOTE) in res.args

    def test_assemble_marker_goes_remote(self):
        res = _resolve("-S", "foo.c")
        assert not res.forced_local
        assert Argument("-S", ArgumentType.REMOTE) in res.args
        assert res.output_file == "foo.s"

    def test_both_markers_assemble_wins(self):
        res = _resolve("-c", "foo.c", "-S")
        remote = [a.text for a in res.args if a.kind is ArgumentType.REMOTE]
        assert remote == ["-S"]
        assert res.output_file == "foo.s"
        assert any("-c ignored" in d for d in res.diagnostics)

    def test_neither_marker_forces_local(self):
        res = _resolve("foo.c", "-o", "foo")
        assert res.forced_local
        assert res.input_file is None
        assert not any(a.kind is ArgumentType.REMOTE for a in res.args)

    def test_split_debug_info_only_with_compile(self):
        assert _resolve("-c", "foo.c", "-gsplit-dwarf").split_debug_info
        assert not _resolve("-S", "foo.c", "-gsplit-dwarf").split_debug_info


class TestInputFile:
    def test_input_removed_from_rest(self):
        res = _resolve("-O2", "-c", "src/foo.c", "-g")
        assert res.input_file == "src/foo.c"
        assert [a.text for a in res.args] == ["-O2", "-g", "-c"]

    def test_no_operand_after_marker(self):
        res = _resolve("foo.c", "-c", "-o", "foo.o")
        assert res.forced_local
        assert res.input_file is None

    def test_input_given_twice(self):
        res = _resolve("-c", "foo.c", "foo.c")
        assert res.forced_local

    def test_conflicting_candidates(self):
        res = _resolve("-c", "a.c", "-S", "b.c")
        assert res.forced_local
        assert any("ambiguous" in d for d in res.diagnostics)

    def test_candidate_consumed_as_value_is_not_found(self):
        # the operand after -c was captured, but never reached the Rest bucket
        state = ScanState(
            language=Language.C,
            compile_only=True,
            input_candidates=("foo.c",),
            output_file="foo.o",
        )
        res = resolve_job_shape(state)
        assert res.forced_local
        assert res.input_file is None

    def test_already_forced_skips_input_lookup(self):
        res = _resolve("-c", "foo.c", "-march=native")
        assert res.forced_local
        assert res.input_file is None


class TestExtensions:
    @pytest.mark.parametrize("ext", ["cc", "cpp", "cxx", "cp", "c++", "C", "ii"])
    def test_cxx(self, ext):
        assert language_for_extension(ext, Language.C) is Language.CXX

    @pytest.mark.parametrize("ext", ["mi", "m", "mii", "mm", "M"])
    def test_objc(self, ext):
        assert language_for_extension(ext, Language.C) is Language.OBJC

    @pytest.mark.parametrize("ext", ["c", "i"])
    def test_keeps_current(self, ext):
        assert language_for_extension(ext, Language.CXX) is Language.CXX

    @pytest.mark.parametrize("ext", ["s", "S", "ads", "adb", "f", "for", "FOR", "F", "fpp", "FPP", "r", "rs", "CPP", ""])
    def test_not_remote(self, ext):
        assert language_for_extension(ext, Language.C) is None

    def test_assembly_source_forces_local(self):
        res = _resolve("-c", "start.S", "-o", "start.o")
        assert res.forced_local
        assert res.input_file == "start.S"

    def test_unknown_extension_forces_local(self):
        res = _resolve("-c", "foo.xyz")
        assert res.forced_local
        assert any("unknown extension" in d for d in res.diagnostics)

    def test_extension_is_case_sensitive(self):
        assert _resolve("-c", "foo.C").language is Language.CXX
        assert _resolve("-c", "foo.c", language=Language.CXX).language is Language.CXX

    def test_dotted_directory_without_extension(self):
        res = _resolve("-c", "src.d/foo")
        assert res.forced_local


class TestOutputSynthesis:
    def test_synthesize_output(self):
        assert synthesize_output("src/foo.cc", assemble_only=False) == "foo.o"
        assert synthesize_output("src/foo.cc", assemble_only=True) == "foo.s"
        assert synthesize_output("a.b.c", assemble_only=False) == "a.b.o"

    def test_explicit_output_kept(self):
        assert _resolve("-c", "foo.c", "-o", "out/bar.o").output_file == "out/bar.o"

    def test_no_synthesis_when_forced(self):
        res = _resolve("-c", "foo.s")
        assert res.output_file == ""

    def test_dependency_file_for(self):
        assert dependency_file_for("out/foo.o") == "out/foo.d"
        assert dependency_file_for("foo") == "foo.d"


class TestDependencyFile:
    def test_synthesized_pair(self):
        res = _resolve("-c", "a.cpp", "-MD", language=Language.CXX)
        assert res.args[-2:] == (
            Argument("-MF", ArgumentType.LOCAL),
            Argument("a.d", ArgumentType.LOCAL),
        )

    def test_follows_explicit_output(self):
        res = _resolve("-c", "a.c", "-MMD", "-o", "build/a.o")
        assert res.args[-1] == Argument("build/a.d", ArgumentType.LOCAL)

    def test_not_added_when_explicit(self):
        res = _resolve("-c", "a.c", "-MD", "-MF", "deps/a.d")
        texts = [a.text for a in res.args]
        assert texts.count("-MF") == 1
        assert "deps/a.d" in texts

    def test_not_added_without_request(self):
        res = _resolve("-c", "a.c")
        assert "-MF" not in [a.text for a in res.args]
