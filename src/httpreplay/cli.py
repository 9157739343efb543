"""
CLI entry point for httpreplay.

This module provides the Typer-based command-line interface for inspecting
recordings. Recording and replaying happen in code through the clients;
the CLI only reads what they wrote.

Commands:
    list        List the recordings in a directory
    show        Show one recording
    verify      Check that recordings are current and correctly named
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from httpreplay import __version__
from httpreplay.errors import StorageError
from httpreplay.fingerprint import compute_fingerprint
from httpreplay.schema import FORMAT_VERSION, RecordingTarget, StoredEntry
from httpreplay.store import ReplayStore

# Initialize Typer app with metadata
app = typer.Typer(
    name="httpreplay",
    help="Inspect recorded HTTP interactions.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()


@dataclass
class Inspection:
    """What was found in one recording file."""

    path: Path
    entry: StoredEntry | None = None
    error: str | None = None

    @property
    def stale(self) -> bool:
        """Whether the file was written with another format version."""
        return self.error is None and self.entry is None


def inspect_file(store: ReplayStore, path: Path) -> Inspection:
    """Read a recording without failing on stale or malformed files."""
    inspection = Inspection(path=path)
    try:
        inspection.entry = store.load(path)
    except StorageError as e:
        inspection.error = e.message
    return inspection


def _inspect_directory(directory: Path) -> list[Inspection]:
    store = ReplayStore(RecordingTarget.dir(directory))
    return [inspect_file(store, path) for path in store.files()]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]httpreplay[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """
    httpreplay - Record, replay and stub HTTP interactions in tests.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("list")
def list_recordings(
    directory: Annotated[
        Path,
        typer.Argument(
            help="Recording directory.",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """
    List the recordings in a directory.

    Example:
        $ httpreplay list tests/recordings
    """
    inspections = _inspect_directory(directory)
    if not inspections:
        console.print("[dim]No recordings found.[/dim]")
        raise typer.Exit(code=0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("File", style="cyan")
    table.add_column("Method", width=7)
    table.add_column("URL")
    table.add_column("Status", justify="right")
    table.add_column("Version", justify="right")

    for inspection in inspections:
        name = inspection.path.name
        if inspection.entry is not None:
            entry = inspection.entry
            table.add_row(
                name,
                entry.request.method,
                escape(entry.request.url),
                str(entry.response.status),
                str(entry.format_version),
            )
        elif inspection.stale:
            table.add_row(name, "", "[yellow]stale format version[/yellow]", "", "-")
        else:
            table.add_row(name, "", f"[red]{escape(inspection.error)}[/red]", "", "-")

    console.print(table)


@app.command()
def show(
    path: Annotated[
        Path,
        typer.Argument(
            help="Recording file.",
            exists=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
) -> None:
    """
    Show one recording.

    Example:
        $ httpreplay show tests/recordings/3f2a....json
    """
    inspection = inspect_file(ReplayStore(RecordingTarget.file(path)), path)
    if inspection.error is not None:
        console.print(f"[red]{escape(inspection.error)}[/red]")
        raise typer.Exit(code=1)
    if inspection.entry is None:
        console.print(
            f"[yellow]Format version is not current ({FORMAT_VERSION}); "
            "this recording will not be replayed.[/yellow]"
        )
        raise typer.Exit(code=1)

    entry = inspection.entry
    console.print(f"[bold]{entry.request.method} {escape(entry.request.url)}[/bold]")
    for name, value in entry.request.headers.items():
        console.print(f"  {name}: {value}", markup=False)
    if entry.request.body is not None:
        console.print(f"  body: {len(entry.request.body)} bytes")
    console.print()

    console.print(
        f"[bold]Response {entry.response.status}[/bold] from {escape(entry.response.url)}"
    )
    for name, value in entry.response.headers.items():
        console.print(f"  {name}: {value}", markup=False)
    console.print()
    try:
        console.print(entry.response.text(), markup=False)
    except UnicodeDecodeError:
        console.print(f"[dim]<{len(entry.response.body)} bytes of binary data>[/dim]")


@app.command()
def verify(
    directory: Annotated[
        Path,
        typer.Argument(
            help="Recording directory.",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """
    Check that recordings are current and named after their fingerprint.

    Exits with code 1 if any recording would not be replayed.

    Example:
        $ httpreplay verify tests/recordings
    """
    problems: list[str] = []
    inspections = _inspect_directory(directory)

    for inspection in inspections:
        path = inspection.path
        if inspection.error is not None:
            problems.append(f"{path.name}: {inspection.error}")
        elif inspection.entry is None:
            problems.append(f"{path.name}: stale format version, expected {FORMAT_VERSION}")
        else:
            expected = compute_fingerprint(inspection.entry.request).filename
            if path.name != expected:
                problems.append(f"{path.name}: request fingerprint is {expected}")

    if problems:
        for problem in problems:
            console.print(f"[red]✗[/red] {escape(problem)}", highlight=False)
        console.print(f"[red]{len(problems)} of {len(inspections)} recordings have problems[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] {len(inspections)} recordings verified")


if __name__ == "__main__":
    app()
