"""Shared pytest fixtures for turnstile tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from turnstile.checker import MandatoryFieldChecker
from turnstile.core import CONFIG_KEY, EXAMPLE_RULES, TURNSTILE_DIR_NAME, write_config
from turnstile.memory import PatternValidator
from turnstile.rules import RuleTable


@pytest.fixture
def helpdesk_rules() -> RuleTable:
    """The Helpdesk / '*' rule table from the README example."""
    return RuleTable.from_config(
        {
            "Helpdesk": {"* -> resolved": ["TimeWorked", "CF.Resolution"]},
            "*": {"* -> resolved": ["CF.Category"]},
        }
    )


@pytest.fixture
def checker(helpdesk_rules: RuleTable) -> MandatoryFieldChecker:
    return MandatoryFieldChecker(helpdesk_rules, PatternValidator())


@pytest.fixture
def turnstile_project(tmp_path: Path) -> Path:
    """A tmp directory set up as a turnstile project (.turnstile/ with example rules).

    Returns the project root (parent of .turnstile/).
    """
    turnstile_dir = tmp_path / TURNSTILE_DIR_NAME
    turnstile_dir.mkdir()
    write_config(turnstile_dir, {"version": 1, CONFIG_KEY: EXAMPLE_RULES})
    return tmp_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()
