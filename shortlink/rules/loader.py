import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from shortlink.rules.models import Rules

logger = logging.getLogger(__name__)


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path, encoding="utf-8") as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    # An empty file means "all defaults"
    if data is None:
        data = {}

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def dump_rules(rules: Rules) -> str:
    return yaml.safe_dump(rules.model_dump(mode="json"), sort_keys=False)


def load_or_create_rules(path: Path) -> Rules:
    """
    Load the rules file, writing the defaults first when it does not exist.

    If the defaults cannot be written, in-memory defaults are returned.
    """
    if path.exists():
        return load_rules(path)

    rules = Rules()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dump_rules(rules), encoding="utf-8")
        logger.info("Default rules written to %s", path)
    except OSError as e:
        logger.warning("Could not write default rules to %s: %s", path, e)
    return rules
