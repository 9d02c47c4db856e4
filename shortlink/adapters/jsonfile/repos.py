"""
JSON-file repositories.

Each repository owns an in-memory list loaded once at construction and
rewrites its whole document through the atomic store after every mutation.
Mutation plus flush happens under one re-entrant lock; reads return copies
so callers can never reach the live cache.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from threading import Lock, RLock
from typing import Generic, TypeVar

from pydantic import BaseModel, TypeAdapter

from shortlink.adapters.fs.json_store import AtomicJsonStore
from shortlink.domain.entities import EventLog, LinkStatus, ShortLink, User
from shortlink.domain.lifecycle import is_expired, is_limit_reached
from shortlink.ports.filestore import JsonStorePort
from shortlink.ports.repo import LinkCallback

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class _JsonListRepo(Generic[M]):
    """Shared cache + flush plumbing for a JSON array document."""

    def __init__(
        self,
        path: str | Path,
        model: type[M],
        store: JsonStorePort | None = None,
    ) -> None:
        self.path = Path(path)
        self._store = store if store is not None else AtomicJsonStore()
        self._lock = RLock()
        self._cache: list[M] = self._store.read_or_default(
            self.path, TypeAdapter(list[model]), []
        )

    def flush(self) -> bool:
        """
        Write the whole cache to disk.

        Failures are logged, not raised: memory stays authoritative and the
        file catches up on the next successful flush.
        """
        with self._lock:
            try:
                self._store.write_atomic(self.path, self._cache)
                return True
            except OSError as e:
                logger.error("Failed to write %s: %s", self.path, e)
                return False

    def list_all(self) -> list[M]:
        with self._lock:
            return [item.model_copy(deep=True) for item in self._cache]


# --- Links ---


def restore_sequence(ids: Iterable[str | None], prefix: str) -> int:
    """Highest numeric suffix among ids shaped like '<prefix>-<digits>' (0 if none)."""
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    highest = 0
    for link_id in ids:
        if not link_id:
            continue
        match = pattern.match(link_id)
        if match is None:
            logger.debug("Skipping malformed link id %r", link_id)
            continue
        highest = max(highest, int(match.group(1)))
    return highest


def _over_quota_only(now: datetime, link: ShortLink) -> bool:
    """At quota and not expired; expiry takes precedence over the quota."""
    return is_limit_reached(link) and not is_expired(now, link.expires_at)


class JsonLinkRepo(_JsonListRepo[ShortLink]):
    """
    Authoritative store of short links backed by links.json.

    Ids look like 'L-000042'. The sequence is restored from the highest
    existing id so the next id is max+1 and ids are never reused within
    the lifetime of the file.
    """

    def __init__(
        self,
        path: str | Path,
        store: JsonStorePort | None = None,
        *,
        id_prefix: str = "L",
    ) -> None:
        super().__init__(path, ShortLink, store)
        self.id_prefix = id_prefix
        self._seq_lock = Lock()
        self._seq = restore_sequence((link.id for link in self._cache), id_prefix)

    def next_id(self) -> str:
        with self._seq_lock:
            self._seq += 1
            n = self._seq
        return f"{self.id_prefix}-{n:06d}"

    def add(self, link: ShortLink) -> None:
        with self._lock:
            self._cache.append(link.model_copy(deep=True))
            self.flush()

    def update(self, link: ShortLink) -> None:
        with self._lock:
            for i, existing in enumerate(self._cache):
                if existing.id == link.id:
                    self._cache[i] = link.model_copy(deep=True)
                    self.flush()
                    return
        logger.warning("Update ignored, link %s is not in the store", link.id)

    def find_by_short_code(self, code: str) -> ShortLink | None:
        if not code:
            return None
        with self._lock:
            for link in self._cache:
                if link.short_code == code:
                    return link.model_copy(deep=True)
        return None

    def list_by_owner(self, owner_uuid: str) -> list[ShortLink]:
        with self._lock:
            return [
                link.model_copy(deep=True)
                for link in self._cache
                if link.owner_uuid == owner_uuid
            ]

    def delete_by_short_code_for_owner(self, code: str, owner_uuid: str) -> bool:
        if not code:
            return False
        with self._lock:
            for i, link in enumerate(self._cache):
                if link.short_code == code and link.owner_uuid == owner_uuid:
                    del self._cache[i]
                    self.flush()
                    return True
        return False

    # --- Cleanup sweeps ---

    def _sweep(
        self,
        matches: Callable[[ShortLink], bool],
        mark: LinkStatus,
        hard_delete: bool,
        owner_uuid: str | None,
        on_affected: LinkCallback | None,
    ) -> int:
        """
        Remove (hard) or mark (soft) every non-deleted link in scope that
        `matches`. A soft sweep only counts links whose status changes, so
        running it twice affects nothing the second time. No flush when
        nothing was affected.
        """
        affected: list[ShortLink] = []
        with self._lock:
            kept: list[ShortLink] = []
            for link in self._cache:
                in_scope = owner_uuid is None or link.owner_uuid == owner_uuid
                if not in_scope or link.status == LinkStatus.DELETED or not matches(link):
                    kept.append(link)
                    continue
                if hard_delete:
                    affected.append(link)
                    continue
                if link.status != mark:
                    link = link.model_copy(update={"status": mark})
                    affected.append(link)
                kept.append(link)

            if affected:
                self._cache = kept
                self.flush()

        if on_affected is not None:
            for link in affected:
                on_affected(link.model_copy(deep=True))
        return len(affected)

    def cleanup_expired(
        self, now: datetime, hard_delete: bool, on_affected: LinkCallback | None = None
    ) -> int:
        return self._sweep(
            lambda link: is_expired(now, link.expires_at),
            LinkStatus.EXPIRED,
            hard_delete,
            None,
            on_affected,
        )

    def cleanup_expired_for_owner(
        self,
        now: datetime,
        owner_uuid: str,
        hard_delete: bool,
        on_affected: LinkCallback | None = None,
    ) -> int:
        return self._sweep(
            lambda link: is_expired(now, link.expires_at),
            LinkStatus.EXPIRED,
            hard_delete,
            owner_uuid,
            on_affected,
        )

    def cleanup_limit_reached(
        self, now: datetime, hard_delete: bool, on_affected: LinkCallback | None = None
    ) -> int:
        return self._sweep(
            lambda link: _over_quota_only(now, link),
            LinkStatus.LIMIT_REACHED,
            hard_delete,
            None,
            on_affected,
        )

    def cleanup_limit_reached_for_owner(
        self,
        now: datetime,
        owner_uuid: str,
        hard_delete: bool,
        on_affected: LinkCallback | None = None,
    ) -> int:
        return self._sweep(
            lambda link: _over_quota_only(now, link),
            LinkStatus.LIMIT_REACHED,
            hard_delete,
            owner_uuid,
            on_affected,
        )


# --- Events ---


class JsonEventRepo(_JsonListRepo[EventLog]):
    def __init__(self, path: str | Path, store: JsonStorePort | None = None) -> None:
        super().__init__(path, EventLog, store)

    def add(self, event: EventLog) -> None:
        with self._lock:
            self._cache.append(event.model_copy(deep=True))
            self.flush()

    def list_by_owner(self, owner_uuid: str) -> list[EventLog]:
        with self._lock:
            return [
                event.model_copy(deep=True)
                for event in self._cache
                if event.owner_uuid == owner_uuid
            ]


# --- Users ---


class JsonUserRepo(_JsonListRepo[User]):
    def __init__(self, path: str | Path, store: JsonStorePort | None = None) -> None:
        super().__init__(path, User, store)

    def find_by_uuid(self, uuid: str) -> User | None:
        with self._lock:
            for user in self._cache:
                if user.uuid == uuid:
                    return user.model_copy(deep=True)
        return None

    def upsert_current(self, uuid: str, now: datetime | None = None) -> User:
        """Create the user if unknown, then stamp last_seen_at."""
        now = now or datetime.now()
        with self._lock:
            for i, user in enumerate(self._cache):
                if user.uuid == uuid:
                    touched = user.model_copy(update={"last_seen_at": now})
                    self._cache[i] = touched
                    break
            else:
                touched = User(uuid=uuid, created_at=now, last_seen_at=now)
                self._cache.append(touched)
            self.flush()
            return touched.model_copy(deep=True)
