"""
EventService - Notification log for link lifecycle events.

Records INFO / EXPIRED / LIMIT_REACHED / ERROR events per owner in the
event repository. When disabled, every call is a no-op and queries return
nothing, so producers can notify unconditionally.
"""

from __future__ import annotations

import logging
from datetime import datetime

from shortlink.domain.entities import EventLog, EventType
from shortlink.ports.clock import ClockPort
from shortlink.ports.repo import EventRepoPort

logger = logging.getLogger(__name__)


class EventService:
    def __init__(
        self,
        repo: EventRepoPort | None,
        enabled: bool = True,
        clock: ClockPort | None = None,
    ) -> None:
        self._repo = repo
        self._enabled = enabled and repo is not None
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _now(self) -> datetime:
        return self._clock.now() if self._clock is not None else datetime.now()

    def notify(
        self, owner_uuid: str | None, short_code: str | None, message: str, kind: EventType
    ) -> None:
        if not self._enabled or self._repo is None:
            return
        logger.debug("event %s %s/%s: %s", kind.value, owner_uuid, short_code, message)
        self._repo.add(
            EventLog(
                ts=self._now(),
                type=kind,
                owner_uuid=owner_uuid,
                short_code=short_code,
                message=message,
            )
        )

    def info(self, owner_uuid: str | None, short_code: str | None, message: str) -> None:
        self.notify(owner_uuid, short_code, message, EventType.INFO)

    def expired(self, owner_uuid: str | None, short_code: str | None, message: str) -> None:
        self.notify(owner_uuid, short_code, message, EventType.EXPIRED)

    def limit_reached(self, owner_uuid: str | None, short_code: str | None, message: str) -> None:
        self.notify(owner_uuid, short_code, message, EventType.LIMIT_REACHED)

    def error(self, owner_uuid: str | None, short_code: str | None, message: str) -> None:
        self.notify(owner_uuid, short_code, message, EventType.ERROR)

    def list_by_owner(self, owner_uuid: str) -> list[EventLog]:
        if not self._enabled or self._repo is None:
            return []
        return self._repo.list_by_owner(owner_uuid)

    def recent_by_owner(self, owner_uuid: str, limit: int = 20) -> list[EventLog]:
        """Newest first, at most `limit` events."""
        events = sorted(self.list_by_owner(owner_uuid), key=lambda e: e.ts, reverse=True)
        return events[: max(0, limit)]


class NullNotifier:
    """Notification sink that drops everything."""

    def notify(
        self, owner_uuid: str | None, short_code: str | None, message: str, kind: EventType
    ) -> None:
        pass
