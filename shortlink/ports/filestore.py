from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class JsonStorePort(Protocol):
    def read_or_default(self, path: Path, shape: TypeAdapter[T], default: T) -> T:
        """Read a JSON document, creating it with `default` when missing."""
        ...

    def write_atomic(self, path: Path, value: Any) -> None:
        """Replace the document so readers never see a partial write."""
        ...


# --- Errors ---


class JsonStoreError(Exception):
    """Base class for JSON store errors."""


class CorruptStoreError(JsonStoreError):
    """An existing document could not be parsed into the expected shape."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt JSON document at {path}: {reason}")
