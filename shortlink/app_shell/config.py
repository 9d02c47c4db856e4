"""
Runtime paths derived from the rules file and command-line overrides.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shortlink.rules.models import Rules

DEFAULT_RULES_PATH = Path("rules.yaml")


@dataclass(frozen=True)
class DataPaths:
    data_dir: Path
    links: Path
    events: Path
    users: Path

    @classmethod
    def from_dir(cls, data_dir: str | Path) -> DataPaths:
        root = Path(data_dir)
        return cls(
            data_dir=root,
            links=root / "links.json",
            events=root / "events.json",
            users=root / "users.json",
        )

    @classmethod
    def from_rules(cls, rules: Rules, override: str | Path | None = None) -> DataPaths:
        return cls.from_dir(override if override is not None else rules.storage.data_dir)
