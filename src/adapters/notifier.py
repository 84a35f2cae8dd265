"""Desktop notifications.

Backends:
- macOS: `osascript -e 'display notification ...'`
- elsewhere: `notify-send` when it is on PATH

Every message is also printed to the console, so the CLI stays usable over
SSH or when no backend exists. Backend failures are logged, never raised.
"""

from __future__ import annotations

import logging
import shutil
import sys

from rich.console import Console
from rich.markup import escape

from core.config import AppSettings

from adapters import process

logger = logging.getLogger(__name__)


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def notification_command(title: str, message: str, *, platform: str | None = None) -> list[str] | None:
    """Build the backend command for the current platform (None: no backend)."""

    platform = platform or sys.platform
    if platform == "darwin":
        script = f"display notification {_applescript_quote(message)} with title {_applescript_quote(title)}"
        return ["osascript", "-e", script]

    notify_send = shutil.which("notify-send")
    if notify_send:
        return [notify_send, title, message]
    return None


class DesktopNotifier:
    """`Notifier` that echoes to the console and posts a desktop notification."""

    def __init__(self, settings: AppSettings, console: Console | None = None) -> None:
        self._enabled = settings.notifications_enabled
        self._title = settings.notification_title
        self._console = console or Console()

    def backend(self) -> str | None:
        argv = notification_command(self._title, "")
        return argv[0] if argv else None

    def notify(self, message: str, *, title: str | None = None) -> None:
        title = title or self._title
        self._console.print(f"[bold]{escape(title)}:[/bold] {escape(message)}", highlight=False, soft_wrap=True)
        if not self._enabled:
            return

        argv = notification_command(title, message)
        if argv is None:
            logger.debug("No notification backend available")
            return
        try:
            result = process.run_command(argv)
        except OSError as exc:
            logger.warning("Notification failed: %s", exc)
            return
        if result.returncode != 0:
            logger.warning(
                "Notification failed: %s",
                process.last_line(result.stderr) or f"exit status {result.returncode}",
            )
