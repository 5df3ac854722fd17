"""Project discovery and configuration for turnstile.

Convention-based: a ``.turnstile/`` directory holds ``config.json``, whose
``mandatory_on_transition`` key is the rule table. The table is read and
frozen once by :func:`load_rule_table`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from turnstile.rules import RuleTable
from turnstile.types.core import TurnstileConfig

logger = logging.getLogger(__name__)

TURNSTILE_DIR_NAME = ".turnstile"
CONFIG_FILENAME = "config.json"
CONFIG_KEY = "mandatory_on_transition"

EXAMPLE_RULES: dict[str, dict[str, Any]] = {
    "Helpdesk": {
        "* -> resolved": ["TimeWorked", "CF.Resolution"],
    },
    "*": {
        "* -> resolved": "CF.Category",
    },
}


def find_turnstile_root(start: Path | None = None) -> Path:
    """Walk up from start (default cwd) looking for .turnstile/ directory.

    Returns the .turnstile/ directory path (not the project root).
    """
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / TURNSTILE_DIR_NAME
        if candidate.is_dir():
            return candidate
    msg = f"No {TURNSTILE_DIR_NAME}/ directory found in {current} or any parent"
    raise FileNotFoundError(msg)


def read_config(turnstile_dir: Path) -> TurnstileConfig:
    """Read .turnstile/config.json. Returns defaults if missing or corrupt."""
    defaults = TurnstileConfig(version=1, mandatory_on_transition={})
    config_path = turnstile_dir / CONFIG_FILENAME
    if not config_path.exists():
        return defaults
    try:
        result = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s, using defaults: %s", config_path, exc)
        return defaults
    if not isinstance(result, dict):
        logger.warning("%s must contain a JSON object, using defaults", config_path)
        return defaults
    config: TurnstileConfig = result  # type: ignore[assignment]
    return config


def write_config(turnstile_dir: Path, config: dict[str, Any] | TurnstileConfig) -> None:
    """Write .turnstile/config.json."""
    config_path = turnstile_dir / CONFIG_FILENAME
    config_path.write_text(json.dumps(config, indent=2) + "\n")


def load_rule_table(turnstile_dir: Path) -> RuleTable:
    """Read config.json and return its frozen rule table."""
    config = read_config(turnstile_dir)
    return RuleTable.from_config(config.get(CONFIG_KEY))
