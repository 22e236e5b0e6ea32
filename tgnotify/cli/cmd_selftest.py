"""Self-test command: send one sample per parse mode."""

import asyncio
import logging
import sys
import click

from . import cli
from .shared import console

from rich.markup import escape

logger = logging.getLogger("tgnotify.cli.selftest")

DEFAULT_PLAIN_TEXT = "Task complete. Build passed and your results are ready."
DEFAULT_MARKDOWN_TEXT = "**Self-test** markdown mode: `ok` [link](https://example.com)"
DEFAULT_HTML_TEXT = '<b>Self-test</b> html mode: <code>ok</code> <a href="https://example.com">link</a>'
DEFAULT_PHOTO_CAPTION = "**Self-test** photo caption"


async def run_selftest(sender, photo_path=None) -> list[tuple[str, bool, str]]:
    """Run each step, collecting (step, ok, detail) instead of stopping at the first failure."""
    from tgnotify.communication.errors import classify_error

    steps = [
        ("plain", lambda: sender.send_message(DEFAULT_PLAIN_TEXT, parse_mode="plain")),
        ("markdown", lambda: sender.send_message(DEFAULT_MARKDOWN_TEXT, parse_mode="markdown")),
        ("html", lambda: sender.send_message(DEFAULT_HTML_TEXT, parse_mode="html")),
    ]
    if photo_path:
        steps.append((
            "photo",
            lambda: sender.send_photo(photo_path, caption=DEFAULT_PHOTO_CAPTION, parse_mode="markdown"),
        ))

    results = []
    for name, step in steps:
        try:
            await step()
            results.append((name, True, ""))
        except Exception as e:
            logger.error(f"Self-test step {name} failed: {e}", exc_info=True)
            results.append((name, False, classify_error(e)))
    return results


@cli.command()
@click.option("--photo", "photo_path", default=None, type=click.Path(dir_okay=False),
              help="Also upload this image with a markdown caption.")
def selftest(photo_path):
    """Send sample plain, markdown and html messages to the configured chat."""
    from tgnotify.config import load_settings
    from tgnotify.channels.telegram import TelegramSender

    settings = load_settings()
    if not settings.telegram_configured:
        console.print("[yellow]No Telegram config. Set TGNOTIFY_TELEGRAM_BOT_TOKEN and TGNOTIFY_TELEGRAM_CHAT_ID.[/yellow]")
        return

    async def _run():
        async with TelegramSender(settings) as sender:
            return await run_selftest(sender, photo_path)

    results = asyncio.run(_run())

    failed = False
    for name, ok, detail in results:
        if ok:
            console.print(f"  [green]✅ {name}[/green]")
        else:
            failed = True
            console.print(f"  [red]❌ {name}:[/red] {escape(detail)}")

    if failed:
        sys.exit(1)
