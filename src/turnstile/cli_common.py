"""Shared CLI helpers.

Provides ``get_turnstile_dir()`` and ``get_rules()`` so every command
discovers the project and loads the rule table the same way.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from turnstile.core import TURNSTILE_DIR_NAME, find_turnstile_root, load_rule_table
from turnstile.logging import setup_logging
from turnstile.rules import RuleTable


def get_turnstile_dir() -> Path:
    """Discover .turnstile/ and attach the JSON log handler to it."""
    try:
        turnstile_dir = find_turnstile_root()
    except FileNotFoundError:
        click.echo(f"No {TURNSTILE_DIR_NAME}/ found. Run 'turnstile init' first.", err=True)
        sys.exit(1)
    setup_logging(turnstile_dir)
    return turnstile_dir


def get_rules() -> RuleTable:
    """Discover .turnstile/ and return its frozen rule table."""
    return load_rule_table(get_turnstile_dir())
