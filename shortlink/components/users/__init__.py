"""
Users component - Local user identity and registry.
"""

from ._impl import UserService

__all__ = ["UserService"]
