"""
Events component - Notification log for link lifecycle events.
"""

from ._impl import EventService, NullNotifier
from .ports import NotificationPort

__all__ = [
    "EventService",
    "NullNotifier",
    "NotificationPort",
]
