"""Desktop notifications emitted when a tracker record is linked to a PR."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, title: str, message: str, url: str) -> None: ...


class DesktopNotifier:
    """Best-effort notifications through the platform's command-line notifier."""

    def __init__(self, app_name: str = "aha-cli") -> None:
        self.app_name = app_name

    def notify(self, title: str, message: str, url: str) -> None:
        command = self._command(title, f"{message}\n{url}")
        if command is None:
            logger.info("%s: %s (%s)", title, message, url)
            return
        try:
            subprocess.run(command, check=True, capture_output=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Notification failed for %s: %s", title, exc)

    def _command(self, title: str, body: str) -> list[str] | None:
        if sys.platform == "darwin" and shutil.which("osascript"):
            script = f"display notification {_quote(body)} with title {_quote(title)}"
            return ["osascript", "-e", script]
        if shutil.which("notify-send"):
            return ["notify-send", "--app-name", self.app_name, title, body]
        return None


class NullNotifier:
    def notify(self, title: str, message: str, url: str) -> None:
        logger.debug("suppressed notification %s: %s", title, message)


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
