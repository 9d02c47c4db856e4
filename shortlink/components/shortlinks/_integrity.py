"""
Integrity check over the stored links.

Reports problems a hand-edited or partially migrated links.json may carry;
never modifies anything.
"""

from __future__ import annotations

from collections.abc import Iterable

from shortlink.domain.entities import LinkStatus, ShortLink
from shortlink.domain.urls import is_valid_http_url

from .models import ValidationReport


def _safe(value: str | None) -> str:
    return value if value else "-"


def validate_links(
    links: list[ShortLink],
    known_users: Iterable[str],
    max_url_length: int,
) -> ValidationReport:
    report = ValidationReport(total_links=len(links))
    users = set(known_users)
    seen_codes: set[str] = set()

    for link in links:
        code = _safe(link.short_code)

        # Short code presence and uniqueness
        if not link.short_code or not link.short_code.strip():
            report.add(f"Missing shortCode for id={link.id}")
        elif link.short_code in seen_codes:
            report.add(f"Duplicate shortCode: {link.short_code} (id={link.id})")
        else:
            seen_codes.add(link.short_code)

        # Owner known
        if not link.owner_uuid or link.owner_uuid not in users:
            report.add(
                f"Orphan link: id={link.id} shortCode={code} ownerUuid missing/unknown"
            )

        if not is_valid_http_url(link.long_url, max_url_length):
            report.add(f"Invalid URL for shortCode={code}: {link.long_url}")

        # Dates
        if link.created_at is None:
            report.add(f"createdAt is null (shortCode={code})")
        if link.expires_at is None:
            report.add(f"expiresAt is null (shortCode={code})")
        elif link.created_at is not None and link.expires_at < link.created_at:
            report.add(f"expiresAt < createdAt (shortCode={code})")

        # Counters
        if link.click_count < 0:
            report.add(f"clickCount < 0 (shortCode={code})")
        if link.click_limit is not None and link.click_limit <= 0:
            report.add(f"clickLimit <= 0 (shortCode={code})")
        if (
            link.click_limit is not None
            and link.click_count > link.click_limit
            and link.status != LinkStatus.LIMIT_REACHED
        ):
            report.add(
                f"clickCount > clickLimit but status != LIMIT_REACHED (shortCode={code})"
            )

    return report
