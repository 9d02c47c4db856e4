"""
Local user identity.

The current user's uuid lives in a one-line file (default .local/user.uuid).
If the file cannot be written, an ephemeral uuid is used for the session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY_PATH = Path(".local") / "user.uuid"


class LocalIdentity:
    def __init__(self, path: str | Path = DEFAULT_IDENTITY_PATH) -> None:
        self.path = Path(path)

    def ensure_current_user_uuid(self) -> str:
        """Read the stored uuid, generating and persisting one if absent."""
        try:
            if self.path.exists():
                value = self.path.read_text(encoding="utf-8").strip()
                if value:
                    return value.splitlines()[0].strip()
            generated = str(uuid4())
            self._write(generated)
            return generated
        except OSError as e:
            fallback = str(uuid4())
            logger.warning("Cannot persist user uuid, using ephemeral %s: %s", fallback, e)
            return fallback

    def set_current_user_uuid(self, uuid: str) -> bool:
        if not uuid or not uuid.strip():
            return False
        try:
            self._write(uuid.strip())
            return True
        except OSError as e:
            logger.error("Failed to write user uuid to %s: %s", self.path, e)
            return False

    def _write(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(value + "\n", encoding="utf-8")
