"""Command-line interface for Clause."""

from __future__ import annotations

import functools
import json
import logging
import re
from pathlib import Path
from typing import Annotated, Any, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

from clause.checker import CheckReport, IssueKind, check_bundle
from clause.config import LocalizationConfig
from clause.diagnostics import CollectingSink, Diagnostic, Severity
from clause.errors import ClauseError
from clause.interpolation import make_template
from clause.resolver import resolve
from clause.tables import FileStringsTable

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="clause",
    help="Interpolation-based localization: render and check strings tables",
    add_completion=False,
)

F = TypeVar("F", bound=Callable[..., Any])

_INT = re.compile(r"[-+]?\d+")
_FLOAT = re.compile(r"[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?")


def error_boundary(func: F) -> F:
    """Report errors in red and exit with a non-zero code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except ClauseError as e:
            typer.echo(typer.style(f"Error: {e.message}", fg="red"), err=True)
            if e.hint:
                typer.echo(typer.style(f"Hint: {e.hint}", fg="yellow"), err=True)
            raise typer.Exit(2)
        except Exception as e:
            logger.exception("Unexpected error")
            typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
            raise typer.Exit(1)

    return wrapper  # type: ignore


def parse_assignment(text: str) -> tuple[str, Any]:
    """Parse ``name=value``; integers and floats are converted."""
    name, sep, raw = text.partition("=")
    if not sep or not name:
        raise typer.BadParameter(f"Expected name=value, got {text!r}")
    if _INT.fullmatch(raw):
        return name, int(raw)
    if _FLOAT.fullmatch(raw):
        return name, float(raw)
    return name, raw


def echo_diagnostic(diagnostic: Diagnostic) -> None:
    color = "red" if diagnostic.severity is Severity.ERROR else "yellow"
    label = diagnostic.severity.value.capitalize()
    typer.echo(typer.style(f"{label}: {diagnostic.message}", fg=color), err=True)


def _build_config(
    config_file: Path | None,
    sink: CollectingSink,
    **options: Any,
) -> LocalizationConfig:
    base = LocalizationConfig(sink=sink)
    if config_file is not None:
        base = LocalizationConfig.from_file(config_file, base=base)
    return LocalizationConfig.from_mapping(options, base=base)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Clause command-line tools."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command(name="render")
@error_boundary
def render_cmd(
    key: Annotated[str, typer.Argument(help="Template as a format string, e.g. 'Hello, {name}!'")],
    directory: Annotated[
        Path,
        typer.Option("--dir", "-d", help="Directory holding the strings tables"),
    ] = Path("."),
    locale: Annotated[
        Optional[str],
        typer.Option("--locale", "-l", help="Locale to render"),
    ] = None,
    table: Annotated[
        Optional[str],
        typer.Option("--table", "-t", help="Strings table name"),
    ] = None,
    assignments: Annotated[
        Optional[list[str]],
        typer.Option("--set", "-s", help="Interpolated value as name=value (repeatable)"),
    ] = None,
    prefix: Annotated[
        Optional[str],
        typer.Option("--prefix", "-p", help="Key prefix"),
    ] = None,
    escape: Annotated[
        Optional[str],
        typer.Option("--escape", help="Marker escape character"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on the first diagnostic"),
    ] = False,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file (YAML, JSON or TOML)"),
    ] = None,
) -> None:
    """Render a template against a strings directory.

    Examples:
        clause render "Hello, {name}!" --dir locales --locale de --set name=Ada
        clause render "{count:decimal} files" -d locales -s count=12000
    """
    sink = CollectingSink(forward=echo_diagnostic)
    config = _build_config(
        config_file,
        sink,
        locale=locale,
        table=table,
        escape=escape,
        strict=strict or None,
    )
    values = dict(parse_assignment(item) for item in assignments or [])

    template = make_template(key, config=config, **values)
    bundle = FileStringsTable(directory, config=config)
    result = resolve(
        template,
        bundle=bundle,
        prefix=(lambda _key: prefix) if prefix else None,
        config=config,
    )
    typer.echo(result)


@app.command(name="check")
@error_boundary
def check_cmd(
    directory: Annotated[Path, typer.Argument(help="Directory holding the strings tables")],
    base_locale: Annotated[
        str,
        typer.Option("--base-locale", "-b", help="Locale the others are compared with"),
    ] = "en",
    tables: Annotated[
        Optional[list[str]],
        typer.Option("--table", "-t", help="Table to check (repeatable, default: all)"),
    ] = None,
    escape: Annotated[
        str,
        typer.Option("--escape", help="Marker escape character"),
    ] = "@",
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (console, json)"),
    ] = "console",
) -> None:
    """Check translations for missing keys and marker mismatches.

    Exits with code 1 when issues are found.
    """
    if not directory.is_dir():
        typer.echo(typer.style(f"Error: Directory not found: {directory}", fg="red"), err=True)
        raise typer.Exit(2)

    sink = CollectingSink()
    config = LocalizationConfig(escape=escape, sink=sink)
    bundle = FileStringsTable(directory, config=config)
    report = check_bundle(bundle, base_locale=base_locale, tables=tables, escape=config.escape)
    load_failures = sink.diagnostics

    if format == "json":
        data = report.to_dict()
        data["load_failures"] = [d.message for d in load_failures]
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        _print_report(report, load_failures)

    if not report.ok or load_failures:
        raise typer.Exit(1)


def _print_report(report: CheckReport, load_failures: list[Diagnostic]) -> None:
    console = Console()
    for diagnostic in load_failures:
        console.print(f"[red]Error:[/red] {escape_markup(diagnostic.message)}")

    if report.ok:
        console.print(f"[green]OK[/green] {len(report.locales)} locale(s) consistent with '{report.base_locale}'")
        return

    table = Table(title=f"Strings check (base locale: {report.base_locale})")
    table.add_column("Locale", style="cyan")
    table.add_column("Table")
    table.add_column("Issue", no_wrap=True)
    table.add_column("Key")
    table.add_column("Detail", style="dim")
    for issue in report.issues:
        color = "red" if issue.kind.severity is Severity.ERROR else "yellow"
        table.add_row(
            issue.locale,
            issue.table,
            f"[{color}]{issue.kind.value}[/{color}]",
            escape_markup(issue.key),
            escape_markup(issue.detail),
        )
    console.print(table)

    summary = ", ".join(
        f"{report.count(kind)} {kind.value}" for kind in IssueKind if report.count(kind)
    )
    console.print(f"{len(report.issues)} issue(s): {summary}")


if __name__ == "__main__":
    app()
