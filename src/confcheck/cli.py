"""CLI interface for confcheck using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from collections.abc import Iterable
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from confcheck import __description__, __version__
from confcheck.checker import Checker, CheckReport
from confcheck.config import LogLevel, OutputFormat, load_settings
from confcheck.errors import ConfcheckError
from confcheck.loader import import_object, load_config
from confcheck.tags import JSON_SCHEME, YAML_SCHEME

app = typer.Typer(
    name="confcheck",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

SCHEME_PRESETS = {"json": JSON_SCHEME, "yaml": YAML_SCHEME}

# Usage and loading problems, as opposed to rule violations (exit code 1)
EXIT_USAGE = 2


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"confcheck version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """confcheck - Declarative validation of configuration documents."""


def _registration_errors(returned: Any) -> list[Exception]:
    """Errors handed back by a rules callable, e.g. from string_pattern.

    A rules callable may return None, one exception or an iterable whose
    exception entries are collected. Anything else is logged and ignored.
    """
    if returned is None:
        return []
    if isinstance(returned, Exception):
        return [returned]
    if isinstance(returned, Iterable) and not isinstance(returned, (str, bytes)):
        return [error for error in returned if isinstance(error, Exception)]
    logger.warning(f"Ignoring unexpected return value of rules callable: {returned!r}")
    return []


def _output_report(report: CheckReport, output_format: str, document: Path) -> None:
    if output_format == OutputFormat.JSON.value:
        typer.echo(jsonlib.dumps(report.to_dict(), indent=2))
    elif output_format == OutputFormat.MARKDOWN.value:
        console.print("# Configuration Report")
        console.print(f"**Document:** {document}")
        console.print(f"**Status:** {'pass' if report.passed else 'fail'}")
        console.print(f"**Rules Evaluated:** {report.rules_evaluated}")
        console.print()

        if report.messages:
            console.print("## Violations")
            for message in report.messages:
                console.print(f"- {escape(message)}")
    else:  # table format
        status_color = "green" if report.passed else "red"
        status = "PASS" if report.passed else "FAIL"
        console.print(f"[{status_color}]Configuration Status: {status}[/{status_color}]")
        console.print(f"Rules Evaluated: {report.rules_evaluated}")

        if report.messages:
            console.print("\n[blue]Violations Found:[/blue]")
            table = Table()
            table.add_column("#", style="dim", justify="right")
            table.add_column("Message", style="white")

            for index, message in enumerate(report.messages, 1):
                table.add_row(str(index), escape(message))

            console.print(table)
        else:
            console.print("\n[green]No violations found![/green]")


@app.command()
def check(
    document: Annotated[
        Path,
        typer.Argument(help="Configuration document to check (.json, .yaml or .yml)")
    ],
    model: Annotated[
        str,
        typer.Option("--model", "-m", help="Model class as module:Class (pydantic model or dataclass)")
    ],
    rules: Annotated[
        str,
        typer.Option("--rules", "-r", help="Rules callable as module:function, called with (checker, config)")
    ],
    scheme: Annotated[
        Optional[str],
        typer.Option("--scheme", "-s", help="Tag naming scheme: json, yaml (default: from settings)")
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: table, json, markdown (default: from settings)")
    ] = None,
    settings: Annotated[
        Optional[Path],
        typer.Option("--settings", "-c", help="Settings file path (default: search for .confcheck.json)")
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level: error, warn, info, debug (default: from settings)")
    ] = None,
) -> None:
    """Load a configuration document and run a set of rules against it."""
    try:
        confcheck_settings = load_settings(settings)
    except ConfcheckError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE)

    output_format = format or confcheck_settings.output.format
    valid_formats = [f.value for f in OutputFormat]
    if output_format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{output_format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(EXIT_USAGE)

    if scheme is not None and scheme not in SCHEME_PRESETS:
        console.print(f"[red]Error:[/red] Invalid scheme '{scheme}'. Must be one of: {', '.join(SCHEME_PRESETS)}")
        raise typer.Exit(EXIT_USAGE)
    tag_scheme = SCHEME_PRESETS[scheme] if scheme else confcheck_settings.scheme.to_scheme()

    level = confcheck_settings.logging.level
    if log_level is not None:
        try:
            level = LogLevel(log_level)
        except ValueError:
            console.print(f"[red]Error:[/red] Invalid log level '{log_level}'")
            raise typer.Exit(EXIT_USAGE)
    logging.basicConfig(level=level.to_logging(), format="%(levelname)s %(name)s: %(message)s")

    try:
        model_class = import_object(model)
        register = import_object(rules)
        config = load_config(document, model_class, tag_scheme)

        checker = Checker(config, tag_scheme)
        registration_errors = _registration_errors(register(checker, config))
        report = checker.report()
    except ConfcheckError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE)

    for error in registration_errors:
        err_console.print(f"[yellow]Warning:[/yellow] rule not registered: {escape(str(error))}")

    _output_report(report, output_format, document)
    raise typer.Exit(report.exit_code)
