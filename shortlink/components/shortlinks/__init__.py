"""
Shortlinks component - Short link creation, redirect, editing and cleanup.
"""

from ._aggregate import compute_stats, filter_links
from ._impl import BASE62, ShortLinkService
from ._integrity import validate_links
from .component import (
    run_bulk_delete_mine,
    run_cleanup,
    run_create,
    run_delete,
    run_edit_limit,
    run_list,
    run_open,
)
from .models import (
    CleanupOutput,
    CreateLinkInput,
    DeleteLinkInput,
    EditLimitInput,
    LinkListOutput,
    LinkOperationOutput,
    LinkStats,
    LinkValidationError,
    ListLinksInput,
    OpenLinkInput,
    OpenResult,
    ValidationReport,
)
from .ports import BrowserPort

__all__ = [
    # Service
    "ShortLinkService",
    "BASE62",
    # Helpers
    "compute_stats",
    "filter_links",
    "validate_links",
    # Shell functions
    "run_bulk_delete_mine",
    "run_cleanup",
    "run_create",
    "run_delete",
    "run_edit_limit",
    "run_list",
    "run_open",
    # Models
    "CleanupOutput",
    "CreateLinkInput",
    "DeleteLinkInput",
    "EditLimitInput",
    "LinkListOutput",
    "LinkOperationOutput",
    "LinkStats",
    "LinkValidationError",
    "ListLinksInput",
    "OpenLinkInput",
    "OpenResult",
    "ValidationReport",
    # Ports
    "BrowserPort",
]
