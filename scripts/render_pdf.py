#!/usr/bin/env python3
"""
HTML to PDF Rendering CLI

Renders HTML files (or stdin) to PDF with wkhtmltopdf through the document context.

Commands:
    render   - Render an HTML file or stdin to a PDF file
    command  - Print the wkhtmltopdf command line without running it
    presets  - List available switch presets
    history  - Show recent render events

Examples:\n

    render_pdf.py render page.html page.pdf                          # Render with defaults

    render_pdf.py render - out.pdf < page.html                       # Read HTML from stdin

    render_pdf.py render page.html out.pdf -s page-size=Letter -f grayscale

    render_pdf.py render page.html out.pdf -p page_a4_landscape -p margins_narrow

    render_pdf.py command page.html -s title="Quarterly report"      # Dry run
"""

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from wkpdf.contexts.document import Document, apply_presets
from wkpdf.contexts.document.config_resolver import PRESETS_PATH
from wkpdf.contexts.rendering import (
    ExecutableNotExecutable,
    ExecutableNotFound,
    RenderFailure,
    WKPDFError,
    format_command,
)
from wkpdf.contexts.rendering.logger import setup_rendering_logger
from wkpdf.contexts.rendering.pipeline import DEFAULT_TIMEOUT_S
from wkpdf.utils.event_logging import get_recent_events
from wkpdf.utils.pdf_processing import page_count
from wkpdf.utils.timestamp import format_timestamp, now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


def parse_assignments(values: Optional[List[str]], option: str) -> Dict[str, str]:
    """Parse repeated NAME=VALUE options into a dict (later values win)."""
    parsed = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got '{item}'", param_hint=option)
        parsed[name] = value
    return parsed


def build_document(
    input_path: str,
    settings: Optional[List[str]] = None,
    flags: Optional[List[str]] = None,
    unset: Optional[List[str]] = None,
    replacements: Optional[List[str]] = None,
    presets: Optional[List[str]] = None,
    binary: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_S,
    verbose: bool = False,
) -> Document:
    """Create a Document from CLI options. "-" reads the HTML from stdin."""
    document = Document(binary_path=binary, timeout=timeout, verbose=verbose)

    if input_path == "-":
        document.set_source_string(sys.stdin.buffer.read())
    else:
        document.set_source_file(input_path)

    if presets:
        apply_presets(document, presets)

    for name, value in parse_assignments(settings, "--set").items():
        document.set(name, value)
    for name in flags or []:
        document.set(name, True)
    for name in unset or []:
        document.remove(name)
    for key, value in parse_assignments(replacements, "--replace").items():
        document.replace(key, value)

    return document


app = typer.Typer(
    help="Render HTML to PDF with wkhtmltopdf",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


InputArg = Annotated[str, typer.Argument(help="HTML file to render, or '-' for stdin")]
SetOpt = Annotated[
    Optional[List[str]],
    typer.Option("--set", "-s", help="Switch with a value, as NAME=VALUE (repeatable)"),
]
FlagOpt = Annotated[
    Optional[List[str]],
    typer.Option("--flag", "-f", help="Value-less switch to enable (repeatable)"),
]
UnsetOpt = Annotated[
    Optional[List[str]],
    typer.Option("--unset", "-u", help="Switch to remove, including defaults (repeatable)"),
]
ReplaceOpt = Annotated[
    Optional[List[str]],
    typer.Option("--replace", "-r", help="Header/footer replacement as NAME=VALUE (repeatable)"),
]
PresetOpt = Annotated[
    Optional[List[str]],
    typer.Option("--preset", "-p", help="Switch preset to apply, in order (repeatable)"),
]
BinaryOpt = Annotated[
    Optional[str],
    typer.Option("--binary", "-b", help="wkhtmltopdf path (default: WKHTMLTOPDF_BINARY env)"),
]


@app.command("render")
def render_command(
    input_path: InputArg,
    output_path: Annotated[Path, typer.Argument(help="Where to write the PDF")],
    settings: SetOpt = None,
    flags: FlagOpt = None,
    unset: UnsetOpt = None,
    replacements: ReplaceOpt = None,
    presets: PresetOpt = None,
    binary: BinaryOpt = None,
    timeout: Annotated[
        float,
        typer.Option("--timeout", "-t", help="Seconds before wkhtmltopdf is killed", min=0.1),
    ] = DEFAULT_TIMEOUT_S,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output, including wkhtmltopdf stderr"),
    ] = False,
):
    """
    Render an HTML file (or stdin) to a PDF file.

    Examples:\n

        $ render_pdf.py render page.html page.pdf

        $ render_pdf.py render page.html page.pdf --preset quality_draft --verbose
    """
    setup_rendering_logger(LOGS_PATH / f"render_{now()}", verbose=verbose)

    try:
        document = build_document(
            input_path, settings, flags, unset, replacements, presets, binary, timeout, verbose
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        document.save(output_path)
    except RenderFailure as e:
        typer.secho(f"✗ Render failed with exit code {e.exit_code}", fg=typer.colors.RED, bold=True)
        if e.stderr:
            typer.echo(e.stderr.rstrip(), err=True)
        raise typer.Exit(code=1)
    except (WKPDFError, ValueError, OSError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho("✓ Render succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  PDF: {output_path}")
    typer.echo(f"  Size: {output_path.stat().st_size} bytes")
    pages = page_count(output_path)
    if pages is not None:
        typer.echo(f"  Pages: {pages}")


@app.command("command")
def command_command(
    input_path: InputArg,
    settings: SetOpt = None,
    flags: FlagOpt = None,
    unset: UnsetOpt = None,
    replacements: ReplaceOpt = None,
    presets: PresetOpt = None,
    binary: BinaryOpt = None,
):
    """
    Print the shell-escaped wkhtmltopdf command line without running it.

    Examples:\n

        $ render_pdf.py command page.html -s page-size=Letter -f grayscale
    """
    try:
        document = build_document(input_path, settings, flags, unset, replacements, presets, binary)
        try:
            tokens = document.command()
        except (ExecutableNotFound, ExecutableNotExecutable):
            # Dry run still works without an installed binary
            tokens = [binary or os.getenv("WKHTMLTOPDF_BINARY") or "wkhtmltopdf"]
            tokens += document.arguments()
    except (WKPDFError, ValueError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(format_command(tokens))


@app.command("presets")
def presets_command():
    """List available switch presets and their switches."""
    nested = OmegaConf.to_container(OmegaConf.load(PRESETS_PATH), resolve=True)

    for category, presets in nested.items():
        typer.secho(category, bold=True)
        for name, switches in presets.items():
            summary = ", ".join(f"{key}={value}" for key, value in switches.items())
            typer.echo(f"  {category}_{name}: {summary}")


@app.command("history")
def history_command(
    count: Annotated[int, typer.Option("--count", "-n", help="Number of events", min=1)] = 10,
):
    """Show recent render events (requires RENDER_EVENTS_FILE)."""
    events = get_recent_events(count)

    if not events:
        typer.echo("No render events recorded.")
        raise typer.Exit()

    for event in events:
        when = format_timestamp(event.get("timestamp", ""), relative=True)
        details = ", ".join(
            f"{key}={value}"
            for key, value in event.items()
            if key not in ("timestamp", "event_type", "source")
        )
        typer.echo(f"{when:>10}  {event.get('event_type', '?'):<18} {details}")


if __name__ == "__main__":
    app()
