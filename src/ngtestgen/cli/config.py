"""CLI commands for inspecting and creating the global configuration file."""

from typing import Annotated

import typer
from rich.console import Console
from rich.syntax import Syntax

from ngtestgen.config import settings

config_app = typer.Typer(
    help="Manage the global ngtestgen configuration.",
    no_args_is_help=True,
)

console = Console()


@config_app.command("show")
def config_show() -> None:
    """Show the global configuration file with syntax highlighting."""
    console.print("[bold]ngtestgen Settings[/bold]")
    console.print(f"Config file: {settings.config_file}")
    console.print()
    if not settings.config_file.exists():
        console.print("[yellow]Config file not found.[/yellow] Run 'ngt config init' to create one.")
        return
    content = settings.config_file.read_text()
    console.print(Syntax(content, "toml", theme="monokai", line_numbers=True))


@config_app.command("path")
def config_path() -> None:
    """Print the path to the global configuration file."""
    print(settings.config_file)


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite an existing config file")
    ] = False,
) -> None:
    """Write the current settings to the global configuration file."""
    if settings.config_file.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {settings.config_file}")
        console.print("Use --force to overwrite it.")
        raise typer.Exit(1)
    try:
        path = settings.save()
    except OSError as e:
        console.print(f"[red]✗[/red] Could not write config file: {e}")
        raise typer.Exit(1) from e
    console.print(f"[green]✓[/green] Wrote {path}")
