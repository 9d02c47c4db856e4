"""
Events component - Port interfaces.
"""

from __future__ import annotations

from typing import Protocol

from shortlink.domain.entities import EventType


class NotificationPort(Protocol):
    """Fire-and-forget sink for link notifications. Must be safe to call when disabled."""

    def notify(
        self, owner_uuid: str | None, short_code: str | None, message: str, kind: EventType
    ) -> None:
        ...
