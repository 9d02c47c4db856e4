"""
Atomic JSON document store.

Reads a JSON document into a typed value and replaces documents through a
sibling temporary file plus os.replace, so a reader (or a crash) only ever
sees the old complete document or the new complete document.

Temporary file: "<dir>/.<name>.tmp", present only while a write is running.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from shortlink.ports.filestore import CorruptStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def temp_path_for(target: Path) -> Path:
    return target.with_name(f".{target.name}.tmp")


class AtomicJsonStore:
    """JSON documents on the local filesystem with atomic replacement."""

    def __init__(self, *, indent: int | None = 2) -> None:
        self.indent = indent

    def _ensure_parent(self, path: Path) -> None:
        if not path.name or path.parent == path:
            raise ValueError(f"Target path has no parent directory: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)

    def encode(self, value: Any) -> str:
        payload = to_jsonable_python(value, by_alias=True)
        return json.dumps(payload, indent=self.indent, ensure_ascii=False)

    def read_or_default(self, path: Path, shape: TypeAdapter[T], default: T) -> T:
        """
        Read `path` as `shape`.

        - Missing file: created containing `default`, which is returned.
        - Empty document or JSON null: `default`.
        - I/O failure: logged, `default` returned.
        - Malformed JSON or wrong shape: CorruptStoreError. Existing user data
          is never overwritten with the default.
        """
        path = Path(path)
        try:
            if not path.exists():
                self.write_atomic(path, default)
                return default
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logger.warning("Failed to read %s: %s", path, e)
            return default

        if not content.strip():
            return default

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptStoreError(path, f"invalid JSON: {e}") from e

        if data is None:
            return default

        try:
            return shape.validate_python(data)
        except ValidationError as e:
            raise CorruptStoreError(path, f"unexpected shape: {e}") from e

    def write_atomic(self, path: Path, value: Any) -> None:
        """
        Serialize `value` and move it into place at `path`.

        Raises ValueError if `path` has no parent directory, OSError on I/O
        failure. The temporary file is removed on failure.
        """
        path = Path(path)
        self._ensure_parent(path)
        data = self.encode(value)

        tmp = temp_path_for(path)
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            if tmp.exists():
                tmp.unlink()
            raise


def create_json_store(*, pretty: bool = True) -> AtomicJsonStore:
    """Factory function to create an AtomicJsonStore."""
    return AtomicJsonStore(indent=2 if pretty else None)
