"""
ShortLinkService - Short link lifecycle for the current owner.

Creation, open (redirect), owner-only delete and limit editing, cleanup
sweeps, stats, export and integrity validation.

Key behaviors:
- Expiry is checked before the click quota, both boundaries inclusive
- A blocked open never counts a click
- The browser launch outcome never changes stored state
- With cleanup.on_each_op, both global sweeps run before list, create,
  open, stats and export
- Business refusals are returned as LinkValidationError values
"""

from __future__ import annotations

import logging
import random
import string
from datetime import timedelta
from pathlib import Path

from shortlink.adapters.browser import NoBrowser
from shortlink.adapters.clock import SystemClock
from shortlink.adapters.fs.json_store import AtomicJsonStore
from shortlink.components.events import NullNotifier
from shortlink.domain.entities import EventType, LinkStatus, ShortLink
from shortlink.domain.lifecycle import (
    apply_new_limit,
    block,
    check_new_limit,
    decide_open,
    register_click,
)
from shortlink.domain.urls import is_valid_http_url
from shortlink.rules.models import Rules

from ._aggregate import compute_stats
from ._integrity import validate_links
from .models import (
    CleanupOutput,
    LinkStats,
    LinkValidationError,
    OpenResult,
    ValidationReport,
)
from .ports import BrowserPort, ClockPort, LinkRepoPort, NotificationPort

logger = logging.getLogger(__name__)

BASE62 = string.digits + string.ascii_uppercase + string.ascii_lowercase


class ShortLinkService:
    """
    Short link service bound to one owner.

    Not meant to be shared between sessions; the repository it wraps is
    the shared, locked component.
    """

    def __init__(
        self,
        owner_uuid: str,
        rules: Rules,
        repo: LinkRepoPort,
        events: NotificationPort | None = None,
        clock: ClockPort | None = None,
        browser: BrowserPort | None = None,
        *,
        export_dir: str | Path | None = None,
        store: AtomicJsonStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._owner_uuid = owner_uuid
        self._rules = rules
        self._repo = repo
        self._events = events if events is not None else NullNotifier()
        self._clock = clock if clock is not None else SystemClock()
        self._browser = browser if browser is not None else NoBrowser()
        self._export_dir = Path(export_dir or rules.storage.data_dir)
        self._store = store if store is not None else AtomicJsonStore()
        self._rng = rng if rng is not None else random.SystemRandom()

    # --- Session ---

    @property
    def owner_uuid(self) -> str:
        return self._owner_uuid

    @property
    def rules(self) -> Rules:
        return self._rules

    def switch_owner(self, new_uuid: str | None) -> None:
        if not new_uuid or not new_uuid.strip():
            return
        self._owner_uuid = new_uuid.strip()

    def reload_rules(self, rules: Rules | None) -> None:
        if rules is not None:
            self._rules = rules

    # --- Helpers ---

    def normalize_code(self, raw: str | None) -> str:
        """Trim input and strip the configured base URL prefix (e.g. 'cli://')."""
        code = (raw or "").strip()
        prefix = self._rules.links.base_url
        if prefix and prefix.strip() and code.startswith(prefix):
            return code[len(prefix):]
        return code

    def short_url(self, link: ShortLink) -> str:
        return f"{self._rules.links.base_url}{link.short_code}"

    def _random_code(self, length: int) -> str:
        return "".join(self._rng.choice(BASE62) for _ in range(length))

    def _generate_unique_code(self) -> str | None:
        """Random base62 code not used by any stored link; None once attempts run out."""
        links_rules = self._rules.links
        for _ in range(links_rules.short_code_max_attempts):
            code = self._random_code(links_rules.short_code_length)
            if self._repo.find_by_short_code(code) is None:
                return code
        logger.error(
            "No free short code of length %d after %d attempts",
            links_rules.short_code_length,
            links_rules.short_code_max_attempts,
        )
        return None

    # --- Queries ---

    def list_my_links(self) -> list[ShortLink]:
        self.auto_cleanup_if_enabled()
        return self._repo.list_by_owner(self._owner_uuid)

    def find_by_short_code(self, raw_code: str) -> ShortLink | None:
        return self._repo.find_by_short_code(self.normalize_code(raw_code))

    # --- Create ---

    def create(
        self,
        long_url: str,
        limit_override: int | None = None,
    ) -> tuple[ShortLink | None, list[LinkValidationError]]:
        """
        Create a short link for the current owner.

        The click limit is the override if given, else the configured
        default; a default of None means unlimited.

        Returns:
            Tuple of (link, errors). Link is None if refused.
        """
        self.auto_cleanup_if_enabled()
        links_rules = self._rules.links

        if not is_valid_http_url(long_url, links_rules.max_url_length):
            return None, [
                LinkValidationError(
                    code="url_invalid",
                    message="Invalid URL. Only http/https with host are allowed.",
                    field="long_url",
                )
            ]

        limit = limit_override if limit_override is not None else links_rules.default_click_limit
        if limit is not None and limit <= 0:
            return None, [
                LinkValidationError(
                    code="limit_not_positive",
                    message="Click limit must be positive or empty for default.",
                    field="click_limit",
                )
            ]

        code = self._generate_unique_code()
        if code is None:
            return None, [
                LinkValidationError(
                    code="short_code_exhausted",
                    message="Could not generate a unique short code. Try again later.",
                )
            ]

        now = self._clock.now()
        link = ShortLink(
            id=self._repo.next_id(),
            owner_uuid=self._owner_uuid,
            long_url=long_url.strip(),
            short_code=code,
            created_at=now,
            expires_at=now + timedelta(hours=links_rules.default_ttl_hours),
            click_limit=limit,
            click_count=0,
            last_access_at=None,
            status=LinkStatus.ACTIVE,
        )
        self._repo.add(link)
        self._events.notify(
            link.owner_uuid, link.short_code, f"CREATE {self.short_url(link)}", EventType.INFO
        )
        logger.info("Created %s for %s", link.id, link.owner_uuid)
        return link, []

    # --- Open ---

    def open(self, raw_code: str) -> OpenResult:
        """
        Open a short link.

        Expired or over-quota links are tagged (EXPIRED / LIMIT_REACHED),
        a notification is emitted, and the open is blocked. Otherwise one
        click is counted and the browser is asked to open the target.
        """
        self.auto_cleanup_if_enabled()
        code = self.normalize_code(raw_code)
        link = self._repo.find_by_short_code(code)
        if link is None:
            return OpenResult(outcome="not_found", message=f"Link not found: {code}")

        now = self._clock.now()
        decision = decide_open(link, now)

        if decision == "deleted":
            return OpenResult(outcome="deleted", message="Link was deleted by owner.", link=link)

        if decision == "expired":
            step = block(link, LinkStatus.EXPIRED)
            if step.changed:
                self._repo.update(step.link)
            self._events.notify(
                link.owner_uuid,
                link.short_code,
                f"Link expired at {link.expires_at}",
                EventType.EXPIRED,
            )
            return OpenResult(
                outcome="expired",
                message=f"Link {self.short_url(link)} expired at {link.expires_at}.",
                link=step.link,
            )

        if decision == "limit_reached":
            step = block(link, LinkStatus.LIMIT_REACHED)
            if step.changed:
                self._repo.update(step.link)
            usage = f"{link.click_count}/{link.click_limit}"
            self._events.notify(
                link.owner_uuid,
                link.short_code,
                f"Click limit reached ({usage})",
                EventType.LIMIT_REACHED,
            )
            return OpenResult(
                outcome="limit_reached",
                message=f"Click limit reached ({usage}). Link is blocked.",
                link=step.link,
            )

        clicked = register_click(link, now)
        self._repo.update(clicked)
        self._events.notify(
            clicked.owner_uuid,
            clicked.short_code,
            f"OPEN {clicked.click_count}/{clicked.limit_label}",
            EventType.INFO,
        )

        if clicked.long_url and self._browser.open(clicked.long_url):
            return OpenResult(
                outcome="opened", message=f"Opening in browser: {clicked.long_url}", link=clicked
            )
        return OpenResult(
            outcome="manual",
            message=f"Copy and open manually: {clicked.long_url}",
            link=clicked,
        )

    # --- Owner operations ---

    def _owned_link(self, code: str) -> tuple[ShortLink | None, list[LinkValidationError]]:
        link = self._repo.find_by_short_code(code)
        if link is None:
            return None, [
                LinkValidationError(code="link_not_found", message=f"Link not found: {code}")
            ]
        if link.owner_uuid != self._owner_uuid:
            return None, [
                LinkValidationError(
                    code="not_owner", message="Operation allowed for the owner only."
                )
            ]
        return link, []

    def delete(self, raw_code: str) -> tuple[bool, list[LinkValidationError]]:
        """
        Delete one of the owner's links.

        The record is removed from the store, not tagged DELETED.
        """
        code = self.normalize_code(raw_code)
        link, errors = self._owned_link(code)
        if link is None:
            return False, errors

        if not self._repo.delete_by_short_code_for_owner(code, self._owner_uuid):
            return False, [
                LinkValidationError(
                    code="link_not_found", message="Delete failed (race or not found)."
                )
            ]

        self._events.notify(
            self._owner_uuid, code, f"DELETE {self._rules.links.base_url}{code}", EventType.INFO
        )
        return True, []

    def edit_click_limit(
        self, raw_code: str, new_limit: int | None
    ) -> tuple[ShortLink | None, list[LinkValidationError]]:
        """
        Change the click limit of one of the owner's links.

        None means unlimited. A numeric limit must be positive and not below
        the current click count. The status is recomputed (expiry first).
        """
        if not self._rules.links.allow_owner_edit_limit:
            return None, [
                LinkValidationError(
                    code="editing_disabled",
                    message="Editing click limit is disabled by configuration.",
                )
            ]

        code = self.normalize_code(raw_code)
        link, errors = self._owned_link(code)
        if link is None:
            return None, errors

        refusal = check_new_limit(link, new_limit)
        if refusal == "limit_not_positive":
            return None, [
                LinkValidationError(
                    code=refusal, message="New limit must be positive.", field="click_limit"
                )
            ]
        if refusal == "limit_below_clicks":
            return None, [
                LinkValidationError(
                    code=refusal,
                    message=f"New limit must be >= current clicks ({link.click_count}).",
                    field="click_limit",
                )
            ]

        updated = apply_new_limit(link, new_limit, self._clock.now())
        self._repo.update(updated)
        self._events.notify(
            updated.owner_uuid,
            updated.short_code,
            f"EDIT_LIMIT {updated.limit_label}",
            EventType.INFO,
        )
        return updated, []

    # --- Cleanup ---

    def _sweep_expired(self, owner_only: bool, hard_delete: bool) -> int:
        def notify(link: ShortLink) -> None:
            self._events.notify(
                link.owner_uuid,
                link.short_code,
                f"Auto-cleanup: expired at {link.expires_at}",
                EventType.EXPIRED,
            )

        now = self._clock.now()
        if owner_only:
            return self._repo.cleanup_expired_for_owner(
                now, self._owner_uuid, hard_delete, on_affected=notify
            )
        return self._repo.cleanup_expired(now, hard_delete, on_affected=notify)

    def _sweep_limit_reached(self, owner_only: bool, hard_delete: bool) -> int:
        def notify(link: ShortLink) -> None:
            self._events.notify(
                link.owner_uuid,
                link.short_code,
                f"Auto-cleanup: limit reached {link.click_count}/{link.click_limit}",
                EventType.LIMIT_REACHED,
            )

        now = self._clock.now()
        if owner_only:
            return self._repo.cleanup_limit_reached_for_owner(
                now, self._owner_uuid, hard_delete, on_affected=notify
            )
        return self._repo.cleanup_limit_reached(now, hard_delete, on_affected=notify)

    def cleanup_expired(self) -> int:
        """Global expiry sweep using the configured hard/soft policy."""
        return self._sweep_expired(False, self._rules.cleanup.hard_delete_expired)

    def cleanup_limit_reached(self) -> int:
        """Global quota sweep using the configured hard/soft policy."""
        return self._sweep_limit_reached(False, self._rules.cleanup.hard_delete_limit_reached)

    def bulk_delete_expired_mine(self) -> int:
        return self._sweep_expired(True, True)

    def bulk_delete_limit_reached_mine(self) -> int:
        return self._sweep_limit_reached(True, True)

    def auto_cleanup_if_enabled(self) -> CleanupOutput | None:
        if not self._rules.cleanup.on_each_op:
            return None
        return CleanupOutput(
            expired=self.cleanup_expired(),
            limit_reached=self.cleanup_limit_reached(),
        )

    # --- Stats / export / validation ---

    def stats_mine(self, top_n: int = 5) -> LinkStats:
        self.auto_cleanup_if_enabled()
        return compute_stats(self._repo.list_by_owner(self._owner_uuid), top_n)

    def stats_global(self, top_n: int = 5) -> LinkStats:
        self.auto_cleanup_if_enabled()
        return compute_stats(self._repo.list_all(), top_n)

    def export_my_links(self) -> Path | None:
        """
        Write the owner's links to export_<owner>_<yyyyMMdd_HHmmss>.json.

        Returns the written path, or None if the export could not be written.
        """
        self.auto_cleanup_if_enabled()
        mine = self._repo.list_by_owner(self._owner_uuid)
        stamp = self._clock.now().strftime("%Y%m%d_%H%M%S")
        target = self._export_dir / f"export_{self._owner_uuid}_{stamp}.json"
        try:
            self._store.write_atomic(target, mine)
        except OSError as e:
            logger.error("Export to %s failed: %s", target, e)
            self._events.notify(self._owner_uuid, "-", f"EXPORT failed: {e}", EventType.ERROR)
            return None

        self._events.notify(self._owner_uuid, "-", f"EXPORT {len(mine)}", EventType.INFO)
        return target

    def validate_store(self, known_users: set[str]) -> ValidationReport:
        return validate_links(
            self._repo.list_all(), known_users, self._rules.links.max_url_length
        )
