"""tgnotify CLI: command line interface."""

import click
from tgnotify import __version__
from .shared import console, run_cli, setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tgnotify")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, verbose):
    """tgnotify: Telegram notifications with safe Markdown/HTML formatting"""
    setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands grouped by category."""
    console.print(f"[bold]tgnotify v{__version__}[/bold], Telegram notifications\n")

    groups = {
        "Send": [
            ("send", "Send a text message to the configured chat"),
            ("photo", "Upload an image with an optional caption"),
            ("selftest", "Send sample plain/markdown/html messages"),
        ],
        "Offline": [
            ("preview", "Show the prepared text and visible length (no network)"),
            ("validate", "Check HTML against the Telegram allowlist"),
        ],
    }

    for category, commands in groups.items():
        console.print(f"  [bold cyan]{category}[/bold cyan]")
        for name, desc in commands:
            console.print(f"    [bold]tgnotify {name:10s}[/bold] {desc}")
        console.print()

    console.print("[dim]Run 'tgnotify <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_send  # noqa: E402, F401
from . import cmd_preview  # noqa: E402, F401
from . import cmd_selftest  # noqa: E402, F401


@cli.command(name="help", hidden=True)
def help_cmd():
    """Show all available commands."""
    _show_help()


def main():
    """CLI entry point."""
    return run_cli(cli)
