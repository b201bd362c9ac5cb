"""Tests for job finalization — output checks, color default, bucket merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from cc_dispatch.finalizer import (
    color_flag_for,
    finalize_job,
    merge_cpp_only,
    output_blocks_remote,
)
from cc_dispatch.models.job import Argument, ArgumentType, Language
from cc_dispatch.resolver import Resolution


def _resolution(**overrides) -> Resolution:
    values = dict(
        args=(Argument("-O2", ArgumentType.REST), Argument("-c", ArgumentType.REMOTE)),
        language=Language.C,
        forced_local=False,
        input_file="foo.c",
        output_file="foo.o",
        split_debug_info=False,
        explicit_color=False,
    )
    values.update(overrides)
    return Resolution(**values)


class TestOutputValidation:
    def test_empty_output(self):
        assert output_blocks_remote("")

    def test_missing_output_is_fine(self, workdir: Path):
        assert not output_blocks_remote("foo.o")

    def test_existing_regular_file_is_fine(self, workdir: Path):
        (workdir / "foo.o").write_bytes(b"")
        assert not output_blocks_remote("foo.o")

    def test_directory_blocks(self, workdir: Path):
        (workdir / "foo.o").mkdir()
        assert output_blocks_remote("foo.o")

    def test_device_blocks(self):
        assert output_blocks_remote("/dev/null")

    def test_directory_output_forces_local(self, workdir: Path):
        (workdir / "out").mkdir()
        result = finalize_job("gcc", _resolution(output_file="out"))
        assert result.forced_local
        assert "output file empty or not a regular file" in result.diagnostics


class TestColorDefault:
    def test_clang_spelling(self):
        assert color_flag_for("clang++") == "-fcolor-diagnostics"

    def test_gcc_spelling(self):
        assert color_flag_for("gcc") == "-fdiagnostics-color"

    def test_added_when_wanted(self, workdir: Path):
        result = finalize_job("clang", _resolution(), color_wanted=True)
        assert result.job.rest_flags[-1] == "-fcolor-diagnostics"

    def test_not_added_when_explicit(self, workdir: Path):
        result = finalize_job("gcc", _resolution(explicit_color=True), color_wanted=True)
        assert "-fdiagnostics-color" not in result.job.rest_flags

    def test_not_added_when_unwanted(self, workdir: Path):
        result = finalize_job("gcc", _resolution(), color_wanted=False)
        assert result.job.rest_flags == ("-O2",)

    def test_never_for_custom(self, workdir: Path):
        result = finalize_job("ld", _resolution(language=Language.CUSTOM), color_wanted=True)
        assert result.job.rest_flags == ("-O2",)


class TestMergeCppOnly:
    ARGS = (
        Argument("-DFOO", ArgumentType.CPP_ONLY),
        Argument("-O2", ArgumentType.REST),
        Argument("-I", ArgumentType.LOCAL),
    )

    def test_local_preprocessing(self):
        merged = merge_cpp_only(self.ARGS, remote_cpp=False)
        assert merged[0] == Argument("-DFOO", ArgumentType.LOCAL)

    def test_remote_preprocessing(self):
        merged = merge_cpp_only(self.ARGS, remote_cpp=True)
        assert merged[0] == Argument("-DFOO", ArgumentType.REST)

    @pytest.mark.parametrize("remote_cpp", [True, False])
    def test_no_cpp_only_left(self, remote_cpp):
        merged = merge_cpp_only(self.ARGS, remote_cpp=remote_cpp)
        assert all(a.kind is not ArgumentType.CPP_ONLY for a in merged)
        assert [a.text for a in merged] == ["-DFOO", "-O2", "-I"]


class TestCompileJob:
    def test_fields(self, workdir: Path):
        result = finalize_job("gcc", _resolution(split_debug_info=True))
        job = result.job
        assert not result.forced_local
        assert job.compiler_name == "gcc"
        assert job.language is Language.C
        assert job.input_file == "foo.c"
        assert job.output_file == "foo.o"
        assert job.split_debug_info
        assert job.remote_flags == ("-c",)

    def test_immutable(self, workdir: Path):
        job = finalize_job("gcc", _resolution()).job
        with pytest.raises(AttributeError):
            job.output_file = "other.o"

    def test_remote_argv(self, workdir: Path):
        job = finalize_job("gcc", _resolution()).job
        assert job.remote_argv() == ["gcc", "-c", "-O2", "foo.c", "-o", "foo.o"]

    def test_to_dict(self, workdir: Path):
        data = finalize_job("gcc", _resolution()).to_dict()
        assert data["forced_local"] is False
        assert data["job"]["language"] == "c"
        assert data["job"]["rest_flags"] == ["-O2"]
