"""In-memory host objects implementing the turnstile.types.host protocols.

Used by the ``turnstile check`` command to evaluate a transition described in
a JSON scenario, and by the test suite. A real host passes its own ticket,
queue and custom field objects to the checker instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from turnstile.checker import submitted_custom_value

logger = logging.getLogger(__name__)


class ScenarioError(ValueError):
    """Raised when a scenario document does not describe a valid transition."""


@dataclass
class Ticket:
    """An existing ticket. Mutable, like the host's own domain entity."""

    id: int | str
    status: str
    queue_name: str
    time_worked: float = 0
    custom_field_values: dict[str, list[str]] = field(default_factory=dict)
    catalog: CustomFieldCatalog | None = None

    def custom_fields(self) -> CustomFieldCatalog | None:
        return self.catalog


@dataclass(frozen=True)
class CustomField:
    """A custom field definition with an optional validation pattern."""

    id: int | str
    name: str
    pattern: str | None = None

    def value_count_for(self, ticket: Any) -> int:
        """Number of stored values on *ticket*, matched by field name in any case."""
        values: Mapping[str, list[str]] = getattr(ticket, "custom_field_values", {})
        wanted = self.name.lower()
        return sum(len(v) for k, v in values.items() if k.lower() == wanted)


class CustomFieldCatalog:
    """Ordered collection of custom fields."""

    def __init__(self, fields: Iterable[CustomField] = ()) -> None:
        self._fields = list(fields)

    def __iter__(self) -> Iterator[CustomField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def limit_to_names(self, names: Iterable[str]) -> CustomFieldCatalog:
        wanted = {n.lower() for n in names}
        return CustomFieldCatalog(f for f in self._fields if f.name.lower() in wanted)


@dataclass
class Queue:
    name: str
    catalog: CustomFieldCatalog | None = None

    def ticket_custom_fields(self) -> CustomFieldCatalog | None:
        return self.catalog


class PatternValidator:
    """Validates submitted custom field values against each field's regex pattern.

    Only values present in the submission are checked; a field that was not
    submitted at all is left to the mandatory check.
    """

    def validate(
        self,
        catalog: CustomFieldCatalog,
        name_prefix: str,
        submitted: Mapping[str, Any],
    ) -> tuple[bool, dict[int | str, str]]:
        messages: dict[int | str, str] = {}
        for cf in catalog:
            if not cf.pattern:
                continue
            value = submitted_custom_value(submitted, name_prefix, cf.id)
            if value is None:
                continue
            values = value if isinstance(value, list | tuple) else [value]
            try:
                compiled = re.compile(cf.pattern)
            except re.error as exc:
                logger.warning("Invalid pattern for custom field '%s': %s", cf.name, exc)
                continue
            if not all(compiled.search(str(v)) for v in values):
                messages[cf.id] = f"Input must match {cf.pattern}"
        return (not messages, messages)


# ---------------------------------------------------------------------------
# Scenario documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Scenario:
    """A transition attempt: who, from where, to where, with what input."""

    to_status: str
    submitted: Mapping[str, Any]
    from_status: str | None = None
    ticket: Ticket | None = None
    queue: Queue | None = None


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        msg = f"{where}: '{key}' must be a non-empty string"
        raise ScenarioError(msg)
    return value


def _require_number(data: Mapping[str, Any], key: str, where: str, default: float = 0) -> float:
    value = data.get(key, default)
    # bool is an int subclass; true/false are not durations.
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"{where}: '{key}' must be a number, got {type(value).__name__}"
        raise ScenarioError(msg)
    return value


def _parse_catalog(raw: Any) -> CustomFieldCatalog:
    if raw is None:
        return CustomFieldCatalog()
    if not isinstance(raw, list):
        msg = f"scenario: 'custom_fields' must be a list, got {type(raw).__name__}"
        raise ScenarioError(msg)
    fields: list[CustomField] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or "id" not in item or "name" not in item:
            msg = f"scenario: custom field at index {i} must be an object with 'id' and 'name'"
            raise ScenarioError(msg)
        fields.append(CustomField(id=item["id"], name=str(item["name"]), pattern=item.get("pattern")))
    return CustomFieldCatalog(fields)


def load_scenario(data: Any) -> Scenario:
    """Build a Scenario from a JSON-compatible dict.

    With a ``ticket`` object the scenario is an update and the ticket's queue
    and status are used. Without one it is a create in ``queue``.

    Raises:
        ScenarioError: If the document is malformed.
    """
    if not isinstance(data, dict):
        msg = f"scenario must be a JSON object, got {type(data).__name__}"
        raise ScenarioError(msg)

    to_status = _require_str(data, "to", "scenario")
    submitted = data.get("submitted", {})
    if not isinstance(submitted, dict):
        msg = f"scenario: 'submitted' must be an object, got {type(submitted).__name__}"
        raise ScenarioError(msg)
    catalog = _parse_catalog(data.get("custom_fields"))

    raw_ticket = data.get("ticket")
    if raw_ticket is not None:
        if not isinstance(raw_ticket, dict) or "id" not in raw_ticket:
            msg = "scenario: 'ticket' must be an object with an 'id'"
            raise ScenarioError(msg)
        values = raw_ticket.get("custom_field_values", {})
        if not isinstance(values, dict):
            msg = "scenario: ticket 'custom_field_values' must be an object"
            raise ScenarioError(msg)
        ticket = Ticket(
            id=raw_ticket["id"],
            status=_require_str(raw_ticket, "status", "ticket"),
            queue_name=_require_str(raw_ticket, "queue", "ticket"),
            time_worked=_require_number(raw_ticket, "time_worked", "ticket"),
            custom_field_values={str(k): v if isinstance(v, list) else [v] for k, v in values.items()},
            catalog=catalog,
        )
        return Scenario(to_status=to_status, submitted=submitted, ticket=ticket)

    return Scenario(
        to_status=to_status,
        submitted=submitted,
        from_status=_require_str(data, "from", "scenario"),
        queue=Queue(name=_require_str(data, "queue", "scenario"), catalog=catalog),
    )
