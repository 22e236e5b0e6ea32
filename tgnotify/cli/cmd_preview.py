"""Offline commands: preview prepared text and validate HTML."""

import sys
import click

from . import cli
from .shared import console, PARSE_MODE_OPTION

from rich.markup import escape
from rich.table import Table
from rich.text import Text


@cli.command()
@click.argument("text")
@PARSE_MODE_OPTION
@click.option("--caption", is_flag=True, help="Check against the caption limit (1024) instead of 4096.")
def preview(text, parse_mode, caption):
    """Show how TEXT would be sent, without contacting Telegram."""
    from tgnotify.config import NotifySettings
    from tgnotify.communication import (
        TELEGRAM_CAPTION_MAX_CHARS,
        TELEGRAM_TEXT_MAX_CHARS,
        TelegramFormatError,
        enforce_length,
        normalize_parse_mode,
        prepare_text,
    )

    mode = normalize_parse_mode(parse_mode if parse_mode is not None else NotifySettings().parse_mode)
    label = "caption" if caption else "message"
    max_chars = TELEGRAM_CAPTION_MAX_CHARS if caption else TELEGRAM_TEXT_MAX_CHARS

    try:
        prepared = prepare_text(text, mode)
        enforce_length(prepared.visible_text, max_chars, label)
    except TelegramFormatError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title=f"Prepared {label} ({mode.value})", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    # Text() so brackets in the message are not read as console markup
    table.add_row("parse_mode", Text(prepared.parse_mode or "none"))
    table.add_row("text", Text(prepared.text))
    table.add_row("visible", Text(prepared.visible_text))
    table.add_row("length", f"{len(prepared.visible_text)} / {max_chars}")
    console.print(table)


@cli.command()
@click.argument("html_text")
def validate(html_text):
    """Check HTML_TEXT against the Telegram parse_mode=html allowlist."""
    from tgnotify.communication import is_safe_html

    ok, reason = is_safe_html(html_text.replace("\r\n", "\n"))
    if not ok:
        console.print(f"[red]❌ {escape(reason)}[/red]")
        sys.exit(1)
    console.print("[green]✅ HTML is safe for parse_mode=html[/green]")
