"""
Shortlinks component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from shortlink.components.events.ports import NotificationPort
from shortlink.ports.clock import ClockPort
from shortlink.ports.repo import LinkRepoPort


class BrowserPort(Protocol):
    """Launches a URL. The result only affects the message shown to the user."""

    def open(self, url: str) -> bool:
        ...


__all__ = [
    "BrowserPort",
    "ClockPort",
    "LinkRepoPort",
    "NotificationPort",
]
