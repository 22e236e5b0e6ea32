"""Send and photo commands."""

import click

from . import cli
from .shared import console, run_or_exit, PARSE_MODE_OPTION


async def _send_message(text: str, parse_mode):
    from tgnotify.config import load_settings
    from tgnotify.channels.telegram import TelegramSender

    settings = load_settings()
    async with TelegramSender(settings) as sender:
        return await sender.send_message(text, parse_mode=parse_mode)


async def _send_photo(path: str, caption, parse_mode):
    from tgnotify.config import load_settings
    from tgnotify.channels.telegram import TelegramSender

    settings = load_settings()
    async with TelegramSender(settings) as sender:
        return await sender.send_photo(path, caption=caption, parse_mode=parse_mode)


@cli.command()
@click.argument("text")
@PARSE_MODE_OPTION
def send(text, parse_mode):
    """Send TEXT to the configured Telegram chat."""
    run_or_exit(_send_message(text, parse_mode), "sendMessage")
    console.print("[green]✅ Message sent[/green]")


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--caption", "-c", default=None, help="Caption for the image.")
@PARSE_MODE_OPTION
def photo(path, caption, parse_mode):
    """Upload the image at PATH to the configured Telegram chat."""
    run_or_exit(_send_photo(path, caption, parse_mode), "sendPhoto")
    console.print("[green]✅ Photo sent[/green]")
