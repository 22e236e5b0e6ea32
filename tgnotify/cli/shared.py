"""Shared utilities for tgnotify CLI commands."""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from ..communication.errors import classify_error

console = Console()

PARSE_MODE_OPTION = click.option(
    "--parse-mode", "-m",
    type=click.Choice(["plain", "markdown", "html"], case_sensitive=False),
    default=None,
    help="How to interpret the text (default: TGNOTIFY_PARSE_MODE or plain).",
)

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False):
    """Log to stderr; DEBUG with --verbose, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # python-telegram-bot and httpx are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.WARNING)


def run_or_exit(coro, action: str):
    """Run an async send, printing a classified error and exiting 1 on failure."""
    try:
        return asyncio.run(coro)
    except Exception as e:
        logging.getLogger("tgnotify.cli").debug(f"{action} failed", exc_info=True)
        console.print(f"[red]❌ {action} failed:[/red] {escape(classify_error(e))}")
        sys.exit(1)


def run_cli(group: click.Group):
    """Run ``group`` outside click's standalone mode.

    Usage errors point at 'tgnotify help' for the grouped command list.
    """
    try:
        return group.main(standalone_mode=False)
    except click.UsageError as e:
        if e.ctx:
            click.echo(e.ctx.get_usage(), err=True)
        click.echo(f"Try 'tgnotify help' for help.\n\nError: {e.format_message()}", err=True)
        sys.exit(e.exit_code)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("[yellow]Aborted.[/yellow]")
        sys.exit(1)
