from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shortlink.adapters.browser import NoBrowser, SystemBrowser
from shortlink.adapters.clock import SystemClock
from shortlink.adapters.fs.json_store import AtomicJsonStore
from shortlink.adapters.jsonfile.repos import JsonEventRepo, JsonLinkRepo, JsonUserRepo
from shortlink.adapters.local_identity import LocalIdentity
from shortlink.app_shell.config import DataPaths
from shortlink.components.events import EventService
from shortlink.components.shortlinks import BrowserPort, ShortLinkService
from shortlink.components.users import UserService
from shortlink.ports.clock import ClockPort
from shortlink.rules.models import Rules


@dataclass
class ServiceContext:
    links: ShortLinkService
    events: EventService
    users: UserService
    link_repo: JsonLinkRepo
    event_repo: JsonEventRepo
    user_repo: JsonUserRepo
    paths: DataPaths
    rules: Rules
    clock: ClockPort

    @classmethod
    def create(
        cls,
        rules: Rules,
        data_dir: str | Path | None = None,
        identity: LocalIdentity | None = None,
        clock: ClockPort | None = None,
        browser: BrowserPort | None = None,
        headless: bool = False,
    ) -> ServiceContext:
        """
        Wire repositories and services for one session.

        Raises CorruptStoreError if an existing data file cannot be parsed.
        """
        paths = DataPaths.from_rules(rules, data_dir)
        clock = clock or SystemClock()
        if browser is None:
            browser = NoBrowser() if headless else SystemBrowser()
        identity = identity or LocalIdentity()
        store = AtomicJsonStore()

        # Adapters
        link_repo = JsonLinkRepo(paths.links, store, id_prefix=rules.storage.id_prefix)
        event_repo = JsonEventRepo(paths.events, store)
        user_repo = JsonUserRepo(paths.users, store)

        # Services
        users = UserService(user_repo, identity.ensure_current_user_uuid(), identity, clock)
        events = EventService(event_repo, rules.events.enabled, clock)
        links = ShortLinkService(
            users.current_uuid,
            rules,
            link_repo,
            events,
            clock,
            browser,
            export_dir=paths.data_dir,
            store=store,
        )

        return cls(
            links=links,
            events=events,
            users=users,
            link_repo=link_repo,
            event_repo=event_repo,
            user_repo=user_repo,
            paths=paths,
            rules=rules,
            clock=clock,
        )

    def switch_user(self, new_uuid: str | None) -> bool:
        if not self.users.switch_current(new_uuid):
            return False
        self.links.switch_owner(self.users.current_uuid)
        return True

    def new_user(self) -> str:
        new_uuid = self.users.create_new_user_and_switch()
        self.links.switch_owner(new_uuid)
        return new_uuid
