"""
Shortlinks component - Short link lifecycle for the current owner.

Shell Layer - converts input models into service calls and service
results into output models.
"""

from __future__ import annotations

from ._aggregate import filter_links
from ._impl import ShortLinkService
from .models import (
    CleanupOutput,
    CreateLinkInput,
    DeleteLinkInput,
    EditLimitInput,
    LinkListOutput,
    LinkOperationOutput,
    ListLinksInput,
    OpenLinkInput,
    OpenResult,
)

# --- Shell Layer Functions ---


def run_create(
    input_data: CreateLinkInput,
    service: ShortLinkService,
) -> LinkOperationOutput:
    """Create a new short link."""
    link, errors = service.create(input_data.long_url, input_data.click_limit)
    message = f"Short link: {service.short_url(link)}" if link is not None else ""
    return LinkOperationOutput(
        link=link,
        errors=tuple(errors),
        success=link is not None,
        message=message,
    )


def run_open(
    input_data: OpenLinkInput,
    service: ShortLinkService,
) -> OpenResult:
    return service.open(input_data.code)


def run_delete(
    input_data: DeleteLinkInput,
    service: ShortLinkService,
) -> LinkOperationOutput:
    """Delete one of the owner's links."""
    deleted, errors = service.delete(input_data.code)
    return LinkOperationOutput(
        link=None,
        errors=tuple(errors),
        success=deleted,
        message="Deleted." if deleted else "",
    )


def run_edit_limit(
    input_data: EditLimitInput,
    service: ShortLinkService,
) -> LinkOperationOutput:
    """Change the click limit of one of the owner's links."""
    link, errors = service.edit_click_limit(input_data.code, input_data.new_limit)
    message = ""
    if link is not None:
        message = f"Limit updated: {link.limit_label}. Status: {link.status.value}"
    return LinkOperationOutput(
        link=link,
        errors=tuple(errors),
        success=link is not None,
        message=message,
    )


def run_list(
    input_data: ListLinksInput,
    service: ShortLinkService,
) -> LinkListOutput:
    """List the owner's links with optional status/text filter and sort."""
    links = filter_links(
        service.list_my_links(),
        status=input_data.status,
        query=input_data.query,
        sort=input_data.sort,
    )
    return LinkListOutput(links=tuple(links), total=len(links))


def run_cleanup(service: ShortLinkService) -> CleanupOutput:
    """Run both global sweeps regardless of the on_each_op setting."""
    return CleanupOutput(
        expired=service.cleanup_expired(),
        limit_reached=service.cleanup_limit_reached(),
    )


def run_bulk_delete_mine(service: ShortLinkService) -> CleanupOutput:
    """Hard-delete the owner's expired and quota-exhausted links."""
    return CleanupOutput(
        expired=service.bulk_delete_expired_mine(),
        limit_reached=service.bulk_delete_limit_reached_mine(),
    )
