"""
Link lifecycle rules: TTL and click-quota state machine.

Expiry is always evaluated before the quota. Both boundaries are inclusive:
a link is expired when now == expires_at and at quota when
click_count == click_limit.

Transitions:
- ACTIVE -> EXPIRED (terminal for opens)
- ACTIVE -> LIMIT_REACHED (terminal for opens unless the owner raises the limit)
- LIMIT_REACHED -> ACTIVE only through edit_limit on a non-expired link
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from shortlink.domain.entities import LinkStatus, ShortLink

OpenDecision = Literal["deleted", "expired", "limit_reached", "allow"]

LimitRefusal = Literal["limit_not_positive", "limit_below_clicks"]


def is_expired(now: datetime, expires_at: datetime | None) -> bool:
    if expires_at is None:
        return False
    return now >= expires_at


def is_limit_reached(link: ShortLink) -> bool:
    return link.click_limit is not None and link.click_count >= link.click_limit


def derive_status(link: ShortLink, now: datetime) -> LinkStatus:
    """Status implied by the clock and the counters, expiry first."""
    if is_expired(now, link.expires_at):
        return LinkStatus.EXPIRED
    if is_limit_reached(link):
        return LinkStatus.LIMIT_REACHED
    return LinkStatus.ACTIVE


def decide_open(link: ShortLink, now: datetime) -> OpenDecision:
    """
    Decide whether an interactive open may count a click.

    A deleted record is inert. An expired link is blocked even when it is
    also over quota.
    """
    if link.status == LinkStatus.DELETED:
        return "deleted"
    if is_expired(now, link.expires_at):
        return "expired"
    if is_limit_reached(link):
        return "limit_reached"
    return "allow"


@dataclass(frozen=True)
class Transition:
    """Outcome of applying a lifecycle step to a link."""

    link: ShortLink
    changed: bool


def block(link: ShortLink, status: LinkStatus) -> Transition:
    """Tag a blocked link with its terminal status, if not already set."""
    if link.status == status:
        return Transition(link=link, changed=False)
    return Transition(link=link.model_copy(update={"status": status}), changed=True)


def register_click(link: ShortLink, now: datetime) -> ShortLink:
    """
    Count one successful open.

    The returned copy is LIMIT_REACHED when this click used up the quota.
    """
    clicked = link.model_copy(
        update={"click_count": link.click_count + 1, "last_access_at": now}
    )
    status = LinkStatus.LIMIT_REACHED if is_limit_reached(clicked) else LinkStatus.ACTIVE
    return clicked.model_copy(update={"status": status})


def check_new_limit(link: ShortLink, new_limit: int | None) -> LimitRefusal | None:
    """Return the refusal reason for a new click limit, or None if acceptable."""
    if new_limit is None:
        return None
    if new_limit <= 0:
        return "limit_not_positive"
    if new_limit < link.click_count:
        return "limit_below_clicks"
    return None


def apply_new_limit(link: ShortLink, new_limit: int | None, now: datetime) -> ShortLink:
    """
    Set a new click limit and recompute the status.

    Raises ValueError if the limit is refused; use check_new_limit first.
    """
    refusal = check_new_limit(link, new_limit)
    if refusal is not None:
        raise ValueError(f"Click limit {new_limit} refused: {refusal}")

    updated = link.model_copy(update={"click_limit": new_limit})
    return updated.model_copy(update={"status": derive_status(updated, now)})
