"""tgnotify: Telegram notifications with safe Markdown/HTML formatting."""

__version__ = "0.4.0"
