"""CLI for turnstile.

Convention-based: discovers .turnstile/ by walking up from cwd.

Usage:
    turnstile init                               # Create .turnstile/config.json
    turnstile init --example                     # ...with example rules
    turnstile rules                              # Show all queues' rules
    turnstile rules --queue Helpdesk             # Effective rules for a queue
    turnstile required open resolved -q Support  # Fields needed for a transition
    turnstile check scenario.json                # Evaluate a transition attempt
"""

from __future__ import annotations

import json as json_mod
import sys
from pathlib import Path
from typing import Any

import click

from turnstile import __version__
from turnstile.checker import MandatoryFieldChecker
from turnstile.cli_common import get_rules
from turnstile.core import CONFIG_FILENAME, CONFIG_KEY, EXAMPLE_RULES, TURNSTILE_DIR_NAME, write_config
from turnstile.memory import PatternValidator, ScenarioError, load_scenario
from turnstile.rules import WILDCARD, RuleTable, TransitionMap


def _transitions_as_dict(transitions: TransitionMap) -> dict[str, list[str]]:
    return {str(key): [ref.config_name for ref in refs] for key, refs in transitions.items()}


@click.group()
@click.version_option(version=__version__, prog_name="turnstile")
def cli() -> None:
    """Turnstile: mandatory fields on ticket status transitions."""


@cli.command()
@click.option("--example", is_flag=True, help="Seed config.json with example rules")
def init(example: bool) -> None:
    """Initialize .turnstile/ in the current directory."""
    turnstile_dir = Path.cwd() / TURNSTILE_DIR_NAME
    if (turnstile_dir / CONFIG_FILENAME).exists():
        click.echo(f"{TURNSTILE_DIR_NAME}/ already initialized")
        return
    turnstile_dir.mkdir(exist_ok=True)
    write_config(turnstile_dir, {"version": 1, CONFIG_KEY: EXAMPLE_RULES if example else {}})
    click.echo(f"Initialized {TURNSTILE_DIR_NAME}/ in {Path.cwd()}")


@cli.command()
@click.option("--queue", "-q", default=None, help="Show effective rules for one queue")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def rules(queue: str | None, as_json: bool) -> None:
    """Show configured transition rules."""
    table = get_rules()
    if queue is not None:
        data: dict[str, Any] = {queue: _transitions_as_dict(table.transitions_for(queue))}
    else:
        data = {q: _transitions_as_dict(table.transitions_for(q)) for q in table.queues()}

    if as_json:
        click.echo(json_mod.dumps(data, indent=2))
        return
    if not any(data.values()):
        click.echo("No rules configured")
        return
    for name, transitions in data.items():
        click.echo(f"{name}:")
        for key, fields in transitions.items():
            click.echo(f"  {key:<28} {', '.join(fields) if fields else '(nothing)'}")


@cli.command()
@click.argument("from_status")
@click.argument("to_status")
@click.option("--queue", "-q", default=WILDCARD, help="Queue name (default: the '*' rules)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def required(from_status: str, to_status: str, queue: str, as_json: bool) -> None:
    """Show fields required to move from FROM_STATUS to TO_STATUS."""
    table: RuleTable = get_rules()
    result = table.required_fields(queue, from_status, to_status)
    core = [f.value for f in result.core]
    custom = list(result.custom)

    if as_json:
        click.echo(json_mod.dumps({"core": core, "custom": custom}, indent=2))
        return
    if not result:
        click.echo(f"Nothing required for {from_status} -> {to_status}")
        return
    if core:
        click.echo(f"Core fields:   {', '.join(core)}")
    if custom:
        click.echo(f"Custom fields: {', '.join(custom)}")


@cli.command()
@click.argument("scenario", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(scenario: Any, as_json: bool) -> None:
    """Evaluate the transition attempt described in SCENARIO ('-' for stdin).

    Exits 1 when the transition would be blocked.
    """
    try:
        attempt = load_scenario(json_mod.load(scenario))
    except json_mod.JSONDecodeError as exc:
        click.echo(f"Invalid scenario JSON: {exc}", err=True)
        sys.exit(1)
    except ScenarioError as exc:
        click.echo(f"Invalid scenario: {exc}", err=True)
        sys.exit(1)

    checker = MandatoryFieldChecker(get_rules(), PatternValidator())
    errors = checker.check(
        attempt.submitted,
        ticket=attempt.ticket,
        queue=attempt.queue,
        from_status=attempt.from_status,
        to_status=attempt.to_status,
    )

    if as_json:
        click.echo(json_mod.dumps({"allowed": not errors, "errors": [e.to_dict() for e in errors]}, indent=2))
    elif errors:
        for e in errors:
            click.echo(e.message)
    else:
        click.echo(f"Transition to {attempt.to_status} allowed")
    if errors:
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
