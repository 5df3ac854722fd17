"""Fixtures for CLI interface tests."""

from __future__ import annotations

import json
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_in_project(turnstile_project: Path, cli_runner: CliRunner) -> Generator[tuple[CliRunner, Path], None, None]:
    """chdir into a turnstile project with example rules and return (runner, project_root)."""
    original_cwd = os.getcwd()
    os.chdir(str(turnstile_project))
    yield cli_runner, turnstile_project
    os.chdir(original_cwd)


def _write_scenario(root: Path, data: dict[str, Any], name: str = "scenario.json") -> str:
    """Write a scenario document and return its path as a string."""
    path = root / name
    path.write_text(json.dumps(data))
    return str(path)
