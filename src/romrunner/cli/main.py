"""CLI entry points for romrunner.

Implements click-based CLI
"""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from romrunner import __version__
from romrunner.core.command_builder import build_launch_command, split_command
from romrunner.core.config import LauncherConfig, load_config
from romrunner.core.events import EventBus, LaunchEvent
from romrunner.core.exceptions import ConfigurationError, format_error_for_user
from romrunner.core.factory import create_launcher

# Load .env file from current directory or parent directories
load_dotenv()

console = Console()


def display_event(event: LaunchEvent) -> None:
    """Display a lifecycle event on the console (verbose mode)."""
    data = event.data

    if event.type == "launch_command":
        console.print(f"[cyan]  ◆ Executing[/cyan] [dim]{escape(data.get('command', ''))}[/dim]")

    elif event.type == "process_started":
        program = escape(data.get("program", ""))
        console.print(f"[cyan]    ▸ {program}[/cyan] [dim](pid {data.get('pid')})[/dim]")

    elif event.type == "process_failed":
        program = escape(data.get("program", ""))
        console.print(f"[red]    ✗ {program}[/red] [dim red]{data.get('error')}[/dim red]")

    elif event.type == "process_finished":
        exit_code = data.get("exit_code")
        if data.get("exit_status") == "normal":
            console.print(f"[green]    ✓ finished[/green] [dim]exit code {exit_code}[/dim]")
        else:
            console.print(f"[red]    ✗ crashed[/red] [dim]exit code {exit_code}[/dim]")


def _resolve_config(profile: str) -> LauncherConfig:
    try:
        return load_config(profile)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {format_error_for_user(e)}")
        sys.exit(1)


def _resolve_template(cmd: str | None, config: LauncherConfig) -> str:
    template = cmd or config.launch_cmd
    if not template:
        console.print(
            "[bold red]Error:[/bold red] No launch command given "
            "(use --cmd, ROMRUNNER_LAUNCH_CMD or the launch_cmd config key)"
        )
        sys.exit(1)
    return template


@click.group()
@click.version_option(version=__version__, prog_name="romrunner")
def cli() -> None:
    """Launch emulators and games from a command template.

    Templates may use %ROM%, %ROM_RAW% and %BASENAME%.
    """


@cli.command()
@click.argument("rom_path")
@click.option("--cmd", "-c", default=None, help="Launch command template")
@click.option("--profile", "-p", default="default", help="Configuration profile")
@click.option("--verbose", "-v", is_flag=True, help="Show lifecycle events in real-time")
def launch(rom_path: str, cmd: str | None, profile: str, verbose: bool) -> None:
    """Launch ROM_PATH and wait until the program exits.

    Args:
        rom_path: Path of the ROM or program to launch
        cmd: Launch command template (default: from config)
        profile: Configuration profile
        verbose: Print lifecycle events
    """
    config = _resolve_config(profile)
    template = _resolve_template(cmd, config)

    event_bus = EventBus()
    if verbose:
        event_bus.subscribe(display_event)

    launcher = create_launcher(config=config, event_bus=event_bus)
    launcher.launch(template, rom_path)

    if verbose:
        console.print("[dim]Launch finished[/dim]")


@cli.command()
@click.argument("rom_path")
@click.option("--cmd", "-c", default=None, help="Launch command template")
@click.option("--profile", "-p", default="default", help="Configuration profile")
def build(rom_path: str, cmd: str | None, profile: str) -> None:
    """Show the command that would launch ROM_PATH, without running it."""
    config = _resolve_config(profile)
    template = _resolve_template(cmd, config)

    command = build_launch_command(template, rom_path)
    console.print(Panel(escape(command), title="Command", border_style="cyan"))

    table = Table(title="Arguments")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Value")
    for index, arg in enumerate(split_command(command)):
        table.add_row(str(index), escape(arg))
    console.print(table)


@cli.group()
def config() -> None:
    """Manage configuration profiles."""
    pass


@config.command("list")
def config_list() -> None:
    """List available configuration profiles."""
    profiles_dir = Path.home() / ".romrunner" / "profiles"

    if not profiles_dir.exists():
        console.print("[yellow]No profiles directory found[/yellow]")
        console.print(f"[dim]Create profiles in: {profiles_dir}[/dim]")
        return

    profiles = list(profiles_dir.glob("*.json"))

    if not profiles:
        console.print("[yellow]No profiles found[/yellow]")
        return

    console.print("[bold]Available Profiles:[/bold]\n")
    for profile_file in sorted(profiles):
        console.print(f"  • {profile_file.stem}")


@config.command("show")
@click.argument("profile_name", default="default")
def config_show(profile_name: str) -> None:
    """Show configuration profile details."""
    config_data = _resolve_config(profile_name)
    console.print(f"[bold]Profile: {profile_name}[/bold]\n")
    console.print(f"Launch Command: {config_data.launch_cmd or '(not set)'}", markup=False)
    console.print(f"Start Timeout: {config_data.start_timeout_s}s")


if __name__ == "__main__":
    cli()
