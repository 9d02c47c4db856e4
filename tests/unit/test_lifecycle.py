"""
Unit tests for the TTL / click-quota state machine.
"""

from datetime import datetime, timedelta

import pytest

from shortlink.domain.entities import LinkStatus
from shortlink.domain.lifecycle import (
    apply_new_limit,
    block,
    check_new_limit,
    decide_open,
    derive_status,
    is_expired,
    is_limit_reached,
    register_click,
)

NOW = datetime(2025, 1, 1, 12, 0, 0)


def test_expiry_boundary_is_inclusive():
    assert is_expired(NOW, NOW)
    assert is_expired(NOW, NOW - timedelta(seconds=1))
    assert not is_expired(NOW, NOW + timedelta(seconds=1))


def test_missing_expiry_never_expires():
    assert not is_expired(NOW, None)


def test_limit_boundary_is_inclusive(make_link):
    assert is_limit_reached(make_link(click_limit=3, click_count=3))
    assert is_limit_reached(make_link(click_limit=3, click_count=4))
    assert not is_limit_reached(make_link(click_limit=3, click_count=2))
    assert not is_limit_reached(make_link(click_limit=None, click_count=1000))


def test_expiry_is_checked_before_quota(make_link):
    link = make_link(expires_at=NOW, click_limit=1, click_count=1)

    assert decide_open(link, NOW) == "expired"
    assert derive_status(link, NOW) == LinkStatus.EXPIRED


def test_decide_open(make_link):
    assert decide_open(make_link(), NOW) == "allow"
    assert decide_open(make_link(click_limit=2, click_count=2), NOW) == "limit_reached"
    assert decide_open(make_link(status=LinkStatus.DELETED), NOW) == "deleted"


def test_block_reports_whether_status_changed(make_link):
    link = make_link()

    first = block(link, LinkStatus.EXPIRED)
    second = block(first.link, LinkStatus.EXPIRED)

    assert first.changed and first.link.status == LinkStatus.EXPIRED
    assert not second.changed
    # Original snapshot untouched
    assert link.status == LinkStatus.ACTIVE


def test_register_click_counts_and_stamps(make_link):
    link = make_link(click_limit=2, click_count=0)
    later = NOW + timedelta(minutes=5)

    clicked = register_click(link, later)

    assert clicked.click_count == 1
    assert clicked.last_access_at == later
    assert clicked.status == LinkStatus.ACTIVE
    assert link.click_count == 0


def test_register_click_reaching_quota_marks_limit_reached(make_link):
    clicked = register_click(make_link(click_limit=2, click_count=1), NOW)

    assert clicked.click_count == 2
    assert clicked.status == LinkStatus.LIMIT_REACHED


def test_register_click_unlimited_stays_active(make_link):
    clicked = register_click(make_link(click_limit=None, click_count=99), NOW)

    assert clicked.click_count == 100
    assert clicked.status == LinkStatus.ACTIVE


@pytest.mark.parametrize(
    "new_limit,expected",
    [
        (None, None),
        (0, "limit_not_positive"),
        (-3, "limit_not_positive"),
        (4, "limit_below_clicks"),
        (5, None),
        (50, None),
    ],
)
def test_check_new_limit(make_link, new_limit, expected):
    assert check_new_limit(make_link(click_count=5), new_limit) == expected


def test_raising_limit_reactivates(make_link):
    link = make_link(click_limit=3, click_count=3, status=LinkStatus.LIMIT_REACHED)

    updated = apply_new_limit(link, 10, NOW)

    assert updated.click_limit == 10
    assert updated.status == LinkStatus.ACTIVE


def test_limit_equal_to_clicks_stays_limit_reached(make_link):
    updated = apply_new_limit(make_link(click_limit=10, click_count=3), 3, NOW)

    assert updated.status == LinkStatus.LIMIT_REACHED


def test_unlimited_on_expired_link_stays_expired(make_link):
    link = make_link(expires_at=NOW - timedelta(hours=1), status=LinkStatus.EXPIRED)

    updated = apply_new_limit(link, None, NOW)

    assert updated.click_limit is None
    assert updated.status == LinkStatus.EXPIRED


def test_apply_refused_limit_raises(make_link):
    with pytest.raises(ValueError, match="limit_below_clicks"):
        apply_new_limit(make_link(click_count=5), 2, NOW)
