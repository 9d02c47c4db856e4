from datetime import datetime

import pytest

from shortlink.adapters.clock import FrozenClock
from shortlink.adapters.jsonfile.repos import JsonLinkRepo
from shortlink.components.shortlinks import ShortLinkService
from shortlink.domain.entities import EventType, LinkStatus, ShortLink
from shortlink.rules.models import Rules

T0 = datetime(2025, 1, 1, 12, 0, 0)


class RecordingNotifier:
    """Collects notifications instead of persisting them."""

    def __init__(self):
        self.events: list[tuple[str | None, str | None, str, EventType]] = []

    def notify(self, owner_uuid, short_code, message, kind):
        self.events.append((owner_uuid, short_code, message, kind))

    def kinds(self) -> list[EventType]:
        return [kind for _, _, _, kind in self.events]

    def messages(self) -> list[str]:
        return [message for _, _, message, _ in self.events]


class FakeBrowser:
    def __init__(self, result: bool = True):
        self.result = result
        self.opened: list[str] = []

    def open(self, url: str) -> bool:
        self.opened.append(url)
        return self.result


@pytest.fixture
def clock():
    return FrozenClock(T0)


@pytest.fixture
def rules():
    return Rules()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def browser():
    return FakeBrowser()


@pytest.fixture
def link_repo(tmp_path):
    return JsonLinkRepo(tmp_path / "links.json")


@pytest.fixture
def make_service(tmp_path, rules, link_repo, notifier, clock, browser):
    """Factory for a ShortLinkService bound to an owner, sharing one repo."""

    def _make(owner: str = "alice", **overrides) -> ShortLinkService:
        return ShortLinkService(
            owner,
            overrides.pop("rules", rules),
            overrides.pop("repo", link_repo),
            overrides.pop("events", notifier),
            overrides.pop("clock", clock),
            overrides.pop("browser", browser),
            export_dir=overrides.pop("export_dir", tmp_path / "exports"),
            **overrides,
        )

    return _make


@pytest.fixture
def make_link():
    """Factory for ShortLink records with sensible defaults."""
    counter = {"n": 0}

    def _make(**fields) -> ShortLink:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "id": f"L-{n:06d}",
            "owner_uuid": "alice",
            "long_url": f"https://example.com/{n}",
            "short_code": f"code{n:03d}",
            "created_at": T0,
            "expires_at": datetime(2025, 1, 2, 12, 0, 0),
            "click_limit": 10,
            "click_count": 0,
            "status": LinkStatus.ACTIVE,
        }
        data.update(fields)
        return ShortLink(**data)

    return _make
