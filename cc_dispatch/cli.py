"""CLI entry point: cc-dispatch.

Subcommands:
    cc-dispatch classify -- gcc -c foo.c -o foo.o   # Show how an invocation is split
    cc-dispatch rules                               # List the classification table
"""

from __future__ import annotations

import dataclasses
import json
import sys

import click

from cc_dispatch.api import ArgumentClassifier
from cc_dispatch.config import Settings
from cc_dispatch.exceptions import ConfigError
from cc_dispatch.log import setup_logging
from cc_dispatch.rules import create_default_table


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """cc-dispatch: decide whether a compiler invocation can be distributed."""
    settings = _load_settings()
    setup_logging(level="DEBUG" if verbose else settings.log_level, fmt=settings.log_format)
    ctx.obj = settings


@main.command("classify", context_settings={"ignore_unknown_options": True})
@click.option("--compiler", default=None, help="Compiler already known; argv[1] is skipped")
@click.option("--remote-cpp/--local-cpp", default=None, help="Preprocessing runs remotely")
@click.option("--color/--no-color", default=None, help="Want colored diagnostics")
@click.option("--local-only", is_flag=True, help="Wrapper mode: never distribute")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("--fail-if-local", is_flag=True, help="Exit 1 when the job must run locally")
@click.argument("argv", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_obj
def classify(
    settings: Settings,
    compiler: str | None,
    remote_cpp: bool | None,
    color: bool | None,
    local_only: bool,
    as_json: bool,
    fail_if_local: bool,
    argv: tuple[str, ...],
) -> None:
    """Classify ARGV (program name first) and print the decision."""
    if remote_cpp is not None:
        settings = dataclasses.replace(settings, remote_cpp=remote_cpp)
    classifier = ArgumentClassifier(settings, color_wanted=color)
    extra_files: list[str] = []
    result = classifier.classify(
        argv, compiler_name=compiler, extra_files=extra_files, local_only=local_only
    )

    if as_json:
        payload = result.to_dict()
        payload["extra_files"] = extra_files
        click.echo(json.dumps(payload, indent=2))
    else:
        job = result.job
        click.echo(f"Decision: {'local' if result.forced_local else 'remote'}")
        click.echo(f"  Compiler: {job.compiler_name}")
        click.echo(f"  Language: {job.language.value}")
        click.echo(f"  Input: {job.input_file or '-'}")
        click.echo(f"  Output: {job.output_file or '-'}")
        click.echo(f"  Local flags: {' '.join(job.local_flags)}")
        click.echo(f"  Remote flags: {' '.join(job.remote_flags)}")
        click.echo(f"  Rest flags: {' '.join(job.rest_flags)}")
        if job.split_debug_info:
            click.echo("  Split debug info: yes")
        if result.explicit_no_show_caret:
            click.echo("  Diagnostics caret: off")
        for path in extra_files:
            click.echo(f"  Ship: {path}")
        for reason in result.diagnostics:
            click.echo(f"  [!] {reason}")

    if fail_if_local and result.forced_local:
        sys.exit(1)


@main.command("rules")
def rules() -> None:
    """List the classification table in match order."""
    for rule in create_default_table().list_all():
        bucket = rule.bucket.value if rule.bucket else "-"
        detail = f"  {rule.description}" if rule.description else ""
        click.echo(f"  {rule.name:24s} {bucket:7s} +{rule.lookahead}{detail}")


if __name__ == "__main__":
    main()
