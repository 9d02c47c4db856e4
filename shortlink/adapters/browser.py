"""
Browser opener adapter.

Opening the target is a side effect only: the result decides which message
the user sees, never the stored state of the link.
"""

from __future__ import annotations

import logging
import webbrowser

logger = logging.getLogger(__name__)


class SystemBrowser:
    """Opens URLs with the platform's default browser."""

    def open(self, url: str) -> bool:
        try:
            return webbrowser.open(url, new=2)
        except webbrowser.Error as e:
            logger.info("Browser unavailable for %s: %s", url, e)
            return False


class NoBrowser:
    """Opener for headless sessions; always asks the user to open manually."""

    def open(self, url: str) -> bool:
        return False
