"""
Listing helpers: filtering, sorting and statistics over link snapshots.

Pure functions; callers pass copies obtained from the repository.
"""

from __future__ import annotations

from datetime import datetime

from shortlink.domain.entities import LinkStatus, ShortLink

from .models import LinkStats, SortKey


def filter_links(
    links: list[ShortLink],
    status: LinkStatus | None = None,
    query: str | None = None,
    sort: SortKey = "created",
) -> list[ShortLink]:
    """
    Filter by status and by a case-insensitive substring of the short code
    or long URL, then sort:

    - created: newest first
    - clicks: most clicked first
    - expires: soonest expiry first, links without expiry last
    """
    needle = (query or "").strip().lower()

    def keep(link: ShortLink) -> bool:
        if status is not None and link.status != status:
            return False
        if not needle:
            return True
        code = (link.short_code or "").lower()
        url = (link.long_url or "").lower()
        return needle in code or needle in url

    selected = [link for link in links if keep(link)]

    if sort == "clicks":
        selected.sort(key=lambda link: link.click_count, reverse=True)
    elif sort == "expires":
        selected.sort(key=lambda link: (link.expires_at is None, link.expires_at or datetime.min))
    else:
        # created desc, missing timestamps last
        selected.sort(
            key=lambda link: (link.created_at is not None, link.created_at or datetime.min),
            reverse=True,
        )
    return selected


def compute_stats(links: list[ShortLink], top_n: int) -> LinkStats:
    stats = LinkStats(total=len(links))
    for link in links:
        stats.total_clicks += link.click_count
        if link.status == LinkStatus.ACTIVE:
            stats.active += 1
        elif link.status == LinkStatus.EXPIRED:
            stats.expired += 1
        elif link.status == LinkStatus.LIMIT_REACHED:
            stats.limit_reached += 1
        elif link.status == LinkStatus.DELETED:
            stats.deleted += 1

    ranked = sorted(links, key=lambda link: link.click_count, reverse=True)
    stats.top_by_clicks = ranked[: max(0, top_n)]
    return stats
