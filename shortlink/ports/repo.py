from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from shortlink.domain.entities import EventLog, ShortLink, User

LinkCallback = Callable[[ShortLink], None]


class LinkRepoPort(Protocol):
    def next_id(self) -> str:
        ...

    def add(self, link: ShortLink) -> None:
        ...

    def update(self, link: ShortLink) -> None:
        ...

    def find_by_short_code(self, code: str) -> ShortLink | None:
        ...

    def list_by_owner(self, owner_uuid: str) -> list[ShortLink]:
        ...

    def list_all(self) -> list[ShortLink]:
        ...

    def delete_by_short_code_for_owner(self, code: str, owner_uuid: str) -> bool:
        ...

    def cleanup_expired(
        self, now: datetime, hard_delete: bool, on_affected: LinkCallback | None = None
    ) -> int:
        ...

    def cleanup_expired_for_owner(
        self,
        now: datetime,
        owner_uuid: str,
        hard_delete: bool,
        on_affected: LinkCallback | None = None,
    ) -> int:
        ...

    def cleanup_limit_reached(
        self, now: datetime, hard_delete: bool, on_affected: LinkCallback | None = None
    ) -> int:
        ...

    def cleanup_limit_reached_for_owner(
        self,
        now: datetime,
        owner_uuid: str,
        hard_delete: bool,
        on_affected: LinkCallback | None = None,
    ) -> int:
        ...


class EventRepoPort(Protocol):
    def add(self, event: EventLog) -> None:
        ...

    def list_all(self) -> list[EventLog]:
        ...

    def list_by_owner(self, owner_uuid: str) -> list[EventLog]:
        ...


class UserRepoPort(Protocol):
    def list_all(self) -> list[User]:
        ...

    def find_by_uuid(self, uuid: str) -> User | None:
        ...

    def upsert_current(self, uuid: str, now: datetime | None = None) -> User:
        ...
