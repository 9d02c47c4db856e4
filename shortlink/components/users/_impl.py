"""
UserService - Local user bookkeeping.

Tracks the current user's uuid, registers users in the user repository
(created / last seen) and optionally persists the choice of default user.
"""

from __future__ import annotations

from uuid import uuid4

from shortlink.adapters.local_identity import LocalIdentity
from shortlink.domain.entities import User
from shortlink.ports.clock import ClockPort
from shortlink.ports.repo import UserRepoPort


class UserService:
    def __init__(
        self,
        repo: UserRepoPort,
        current_uuid: str,
        identity: LocalIdentity | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self._repo = repo
        self._identity = identity
        self._clock = clock
        self._current_uuid = current_uuid
        self.touch_last_seen()

    @property
    def current_uuid(self) -> str:
        return self._current_uuid

    def touch_last_seen(self) -> User:
        now = self._clock.now() if self._clock is not None else None
        return self._repo.upsert_current(self._current_uuid, now)

    def list_all(self) -> list[User]:
        return self._repo.list_all()

    def known_uuids(self) -> set[str]:
        return {user.uuid for user in self._repo.list_all() if user.uuid}

    def switch_current(self, new_uuid: str | None) -> bool:
        """Switch for this session only. Blank input is ignored."""
        if not new_uuid or not new_uuid.strip():
            return False
        self._current_uuid = new_uuid.strip()
        self.touch_last_seen()
        return True

    def create_new_user_and_switch(self) -> str:
        new_uuid = str(uuid4())
        self.switch_current(new_uuid)
        return new_uuid

    def make_current_default(self) -> bool:
        """Persist the current uuid as the default for future sessions."""
        if self._identity is None:
            return False
        return self._identity.set_current_user_uuid(self._current_uuid)
