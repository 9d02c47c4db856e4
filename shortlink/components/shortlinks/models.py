"""
Shortlinks component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from shortlink.domain.entities import LinkStatus, ShortLink

# --- Validation Errors ---


@dataclass(frozen=True)
class LinkValidationError:
    """Refusal of a link operation with a machine-readable reason."""

    code: str
    message: str
    field: str | None = None


# --- Open ---


OpenOutcome = Literal["opened", "manual", "not_found", "deleted", "expired", "limit_reached"]


@dataclass(frozen=True)
class OpenResult:
    """
    Result of an interactive open.

    `opened` and `manual` both counted a click; they only differ in whether
    the browser could be launched.
    """

    outcome: OpenOutcome
    message: str
    link: ShortLink | None = None

    @property
    def counted(self) -> bool:
        return self.outcome in ("opened", "manual")

    @property
    def blocked(self) -> bool:
        return not self.counted


# --- Stats & Reports ---


@dataclass
class LinkStats:
    total: int = 0
    active: int = 0
    expired: int = 0
    limit_reached: int = 0
    deleted: int = 0
    total_clicks: int = 0
    top_by_clicks: list[ShortLink] = field(default_factory=list)


@dataclass
class ValidationReport:
    total_links: int = 0
    issues: int = 0
    messages: list[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.issues += 1
        self.messages.append(message)


# --- Input Models ---


SortKey = Literal["created", "clicks", "expires"]


@dataclass(frozen=True)
class CreateLinkInput:
    long_url: str
    click_limit: int | None = None


@dataclass(frozen=True)
class OpenLinkInput:
    code: str


@dataclass(frozen=True)
class DeleteLinkInput:
    code: str


@dataclass(frozen=True)
class EditLimitInput:
    """`new_limit` None means unlimited."""

    code: str
    new_limit: int | None


@dataclass(frozen=True)
class ListLinksInput:
    status: LinkStatus | None = None
    query: str | None = None
    sort: SortKey = "created"


# --- Output Models ---


@dataclass(frozen=True)
class LinkOperationOutput:
    link: ShortLink | None
    errors: tuple[LinkValidationError, ...]
    success: bool
    message: str = ""


@dataclass(frozen=True)
class LinkListOutput:
    links: tuple[ShortLink, ...]
    total: int


@dataclass(frozen=True)
class CleanupOutput:
    expired: int
    limit_reached: int

    @property
    def total(self) -> int:
        return self.expired + self.limit_reached
