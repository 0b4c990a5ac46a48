"""Ruleweave CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from ruleweave import __version__


@click.group()
@click.version_option(version=__version__, prog_name="ruleweave")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Ruleweave - composable predicate rules for structured input."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("schema", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option("--namespace", default=None, help="Message namespace to consult first.")
@click.option("--locale", default=None, help="Message locale (default: from schema or 'en').")
@click.option(
    "--messages",
    "messages_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Extra YAML message file overriding bundled templates.",
)
def check(
    *,
    schema: Path,
    input_file: Path,
    fmt: str | None,
    namespace: str | None,
    locale: str | None,
    messages_path: Path | None,
) -> None:
    """Validate INPUT_FILE (JSON or YAML) against SCHEMA.

    Exit codes: 0 = valid, 1 = validation errors, 2 = configuration error.
    """
    from ruleweave.checker import CheckError
    from ruleweave.checker import check as run_check
    from ruleweave.checker import format_json as _format_json
    from ruleweave.checker import format_porcelain as _format_porcelain
    from ruleweave.checker import format_rich as _format_rich

    # Resolve output format: explicit flag > TTY detection.
    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = run_check(
            schema,
            input_file,
            namespace=namespace,
            locale=locale,
            messages_path=messages_path,
        )
    except CheckError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    formatters = {
        "rich": _format_rich,
        "json": _format_json,
        "porcelain": _format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if not result.valid:
        sys.exit(1)


@main.command("ast")
@click.argument("schema", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def ast_cmd(*, schema: Path) -> None:
    """Compile SCHEMA and print its rules back as a JSON AST."""
    from ruleweave.exceptions import ConfigurationError
    from ruleweave.schema import load_schema

    try:
        compiled = load_schema(schema)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    click.echo(json.dumps(compiled.to_ast(), indent=2, default=str))


@main.command()
@click.option("--json", "output_json", is_flag=True, help="Structured JSON output.")
def predicates(*, output_json: bool) -> None:
    """List the standard predicates and their bound arguments."""
    from ruleweave.logic.predicates import default_registry

    registry = default_registry()

    if output_json:
        data = {pid: list(registry[pid].arg_names) for pid in sorted(registry)}
        click.echo(json.dumps(data, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title="Predicates", box=None, padding=(0, 1))
    table.add_column("predicate", style="cyan")
    table.add_column("arguments")
    for pid in sorted(registry):
        table.add_row(pid, ", ".join(registry[pid].arg_names) or "-")

    Console().print(table)
