"""
Notifications for Aer.

Upload outcomes are reported through a Notifier. The default sends desktop
notifications via notify-send.
"""

import subprocess
from typing import Protocol


class Notifier(Protocol):
    """Receives one event per upload: success or failure."""

    def notify(self, title: str, body: str = "") -> None: ...


def send_notification(title: str, body: str = "") -> None:
    """Send desktop notification via notify-send."""
    try:
        cmd = ["notify-send", title]
        if body:
            cmd.append(body)
        subprocess.run(cmd, check=False, capture_output=True)
    except OSError:
        pass  # Notifications are best-effort


class DesktopNotifier:
    """Notifier backed by notify-send."""

    def notify(self, title: str, body: str = "") -> None:
        send_notification(title, body)


class NullNotifier:
    """Notifier that drops every event."""

    def notify(self, title: str, body: str = "") -> None:
        return None
