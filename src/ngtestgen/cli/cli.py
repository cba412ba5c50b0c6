"""
Main CLI application and command definitions.

The ``ngt`` command scans an Angular workspace and writes a Vitest/TestBed
spec beside every component, service, directive, pipe, guard, interceptor,
resolver, model class and module that it finds.

The CLI is built using Typer for command-line parsing and Rich for terminal
output and progress indicators.

Typical usage:
    $ ngt generate
    $ ngt generate --path projects/shop/src/app
    $ ngt config show
"""

# NOTE: anyio.run() is typed as returning T | None; cast() tells the type
# checker that the coroutine always returns a value or raises.

import logging
from pathlib import Path
from typing import Annotated, cast

import anyio
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from ngtestgen import __version__
from ngtestgen.config import WorkspaceSettings, find_workspace_root
from ngtestgen.exceptions import SourcePathNotFoundError, WorkspaceNotFoundError
from ngtestgen.models import GenerationResult, GenerationStatus
from ngtestgen.pipeline import run

from .config import config_app

app = typer.Typer(
    name="ngt",
    help="ngt - generate Angular unit test scaffolding.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")


console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print the application version and exit.

    Raises:
        typer.Exit: Always raised when value is True.
    """
    if value:
        console.print(f"ngtestgen {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = None,
) -> None:
    """
    ngtestgen - Angular unit test generator.

    Sets up logging and handles the global --verbose and --version options.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
    )


def resolve_path(path: Path | None) -> tuple[Path, Path]:
    """Work out the directory to scan and the workspace root to read config from.

    An explicit ``path`` is scanned as given; its workspace root is the
    closest ancestor holding the workspace marker, or the path itself. Without
    ``path`` the workspace root is searched upwards from the current
    directory and scanned whole.

    Returns:
        Tuple of (scan root, workspace root).

    Raises:
        WorkspaceNotFoundError: If no path is given and no workspace is found.
    """
    if path is not None:
        scan_root = path.resolve()
        try:
            return scan_root, find_workspace_root(scan_root)
        except WorkspaceNotFoundError:
            return scan_root, scan_root
    workspace_root = find_workspace_root(Path.cwd())
    console.print(f"Detected Angular workspace at: {workspace_root}")
    return workspace_root, workspace_root


def print_result(result: GenerationResult) -> None:
    """Print one status line per file followed by the tally block."""
    console.print(f"Found {result.files_found} TypeScript file(s) to process.")
    console.print()
    for outcome in result.outcomes:
        if outcome.status == GenerationStatus.GENERATED and outcome.output is not None:
            console.print(f"[green]✓[/green] Generated: {outcome.output.name}")
        elif outcome.status == GenerationStatus.SKIPPED:
            console.print(f"[dim]-[/dim] Skipped: {outcome.source_name} ({outcome.message})")
        else:
            console.print(f"[red]✗[/red] Failed: {outcome.source_name} - {outcome.message}")

    console.print()
    console.print("[bold]Test generation complete:[/bold]")
    console.print(f"  Success: {result.succeeded}")
    console.print(f"  Skipped: {result.skipped}")
    console.print(f"  Failed: {result.failed}")
    console.print(f"  Total: {result.total}")


@app.command()
def generate(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Path to the Angular application directory. Defaults to the "
            "workspace containing the current directory.",
        ),
    ] = None,
) -> None:
    """Generate unit tests for Angular TypeScript files.

    Existing spec files are never overwritten; a numbered spec
    ('x.spec.2.ts') is written next to them instead.

    Raises:
        typer.Exit: Exits with code 1 when no workspace can be resolved, the
            path does not exist, or any file fails to generate.

    Examples:
        $ ngt generate --path src/app
        Found 3 TypeScript file(s) to process.

        ✓ Generated: user.service.spec.ts
        - Skipped: user.model.ts (interface/type only)
        ✓ Generated: widget.component.spec.ts
    """
    try:
        scan_root, workspace_root = resolve_path(path)
    except WorkspaceNotFoundError as e:
        err_console.print(f"[red]✗[/red] Not in an Angular workspace. {e}.")
        err_console.print(
            "Either run this command from within an Angular workspace, "
            "or specify the path with --path option."
        )
        err_console.print()
        err_console.print("Usage: ngt generate --path <path-to-angular-app>")
        raise typer.Exit(1) from e

    workspace_settings = WorkspaceSettings(path=workspace_root)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Generating tests...", total=None)
            result = cast(
                GenerationResult,
                anyio.run(run, scan_root, workspace_settings, workspace_root),
            )
    except SourcePathNotFoundError as e:
        err_console.print(f"[red]✗[/red] Path does not exist: {scan_root}")
        raise typer.Exit(1) from e
    except Exception as e:
        err_console.print(f"[red]✗[/red] Unexpected error: {e}")
        raise typer.Exit(1) from e

    if result.files_found == 0:
        console.print(f"No TypeScript files found in: {scan_root}")
        return

    print_result(result)

    if result.has_failures:
        raise typer.Exit(1)
