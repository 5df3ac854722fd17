"""Mandatory field checks for status transitions.

MandatoryFieldChecker resolves the required fields for a transition from the
RuleTable, then checks submitted form values and the ticket's current values
for each one. It works for both create (no ticket yet, a queue is given) and
update (an existing ticket).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from turnstile.rules import CoreField, RequiredFields, RuleTable
from turnstile.types.core import ValidationErrorDict
from turnstile.types.host import CustomFieldCatalog, CustomFieldValidator, Queue, Ticket

logger = logging.getLogger(__name__)

REQUIRED_TEMPLATE = "[_1] is required when changing Status to [_2]"

# Form input names for core fields on the update page. Create forms submit
# the bare field name.
CORE_FOR_UPDATE: Mapping[CoreField, str] = {
    CoreField.TIME_WORKED: "UpdateTimeWorked",
    CoreField.TIME_TAKEN: "UpdateTimeWorked",
    CoreField.CONTENT: "UpdateContent",
}

# Core fields that also carry a value on the ticket itself.
CORE_TICKET: Mapping[CoreField, Callable[[Ticket], Any]] = {
    CoreField.TIME_WORKED: lambda ticket: ticket.time_worked,
}

_PLACEHOLDER = re.compile(r"\[_(\d+)\]")
_LABEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")


def default_localize(template: str, *args: object) -> str:
    """Fill ``[_1]``-style positional placeholders without translating.

    Placeholders with no matching argument are left as-is.
    """

    def _sub(match: re.Match[str]) -> str:
        index = int(match.group(1)) - 1
        return str(args[index]) if 0 <= index < len(args) else match.group(0)

    return _PLACEHOLDER.sub(_sub, template)


def field_label(name: str) -> str:
    """``TimeWorked`` -> ``Time Worked``."""
    return _LABEL_BOUNDARY.sub(" ", name)


def _has_value(value: Any) -> bool:
    """A submitted value counts when it is defined and non-empty. ``"0"`` counts."""
    if value is None:
        return False
    if isinstance(value, list | tuple):
        return any(_has_value(v) for v in value)
    if isinstance(value, str | bytes):
        return len(value) > 0
    return len(str(value)) > 0


def submitted_custom_value(submitted: Mapping[str, Any], name_prefix: str, field_id: int | str) -> Any:
    """Pick the submitted value for a custom field.

    Multi-value inputs submit ``...-Values`` together with a ``...-Values-Magic``
    marker; single-value inputs submit ``...-Value``.
    """
    arg = f"{name_prefix}{field_id}-Value"
    if submitted.get(f"{arg}s-Magic") and f"{arg}s" in submitted:
        return submitted[f"{arg}s"]
    return submitted.get(arg)


@dataclass(frozen=True)
class ValidationError:
    """One missing or invalid field, ready to show to the user."""

    field: str
    label: str
    status: str
    message: str

    def to_dict(self) -> ValidationErrorDict:
        return ValidationErrorDict(label=self.label, message=self.message, field=self.field, status=self.status)

    def __str__(self) -> str:
        return self.message


class MandatoryFieldChecker:
    """Checks that required fields have values before a status change.

    Args:
        rules: The frozen rule table.
        validator: Host validator for custom field value formats.
        entity_type: Object type used in custom field form input names.
        localize: ``(template, *args) -> str`` used to render messages.
    """

    def __init__(
        self,
        rules: RuleTable,
        validator: CustomFieldValidator,
        *,
        entity_type: str = "Ticket",
        localize: Callable[..., str] | None = None,
    ) -> None:
        self.rules = rules
        self.validator = validator
        self.entity_type = entity_type
        self._localize = localize or default_localize

    def required_fields(
        self,
        *,
        ticket: Ticket | None = None,
        queue: str | None = None,
        from_status: str | None = None,
        to_status: str | None,
    ) -> RequiredFields:
        """Resolve required fields, taking queue and status from *ticket* when given.

        With a ticket only *to_status* is needed. Without one, *queue*,
        *from_status* and *to_status* are all needed.
        """
        if ticket is not None:
            queue = ticket.queue_name
            from_status = ticket.status
        return self.rules.required_fields(queue, from_status, to_status)

    def name_prefix(self, ticket: Ticket | None) -> str:
        """Form input prefix for custom fields. The id is empty on create."""
        ticket_id = ticket.id if ticket is not None else ""
        return f"Object-{self.entity_type}-{ticket_id}-CustomField-"

    def check(
        self,
        submitted: Mapping[str, Any],
        *,
        ticket: Ticket | None = None,
        queue: Queue | None = None,
        from_status: str | None = None,
        to_status: str,
    ) -> list[ValidationError]:
        """Return one ValidationError per required field that has no value.

        An empty list means the transition may proceed. Core field errors
        come first, then custom field errors, each in configured order.
        """
        required = self.required_fields(
            ticket=ticket,
            queue=queue.name if queue is not None else None,
            from_status=from_status,
            to_status=to_status,
        )
        if not required:
            return []

        status = submitted.get("Status") or to_status
        errors = self._check_core_fields(required.core, submitted, ticket, status)

        if required.custom:
            catalog = self._catalog(ticket, queue)
            if catalog is None:
                # Fail open: core field errors found so far are still returned.
                logger.error(
                    "Custom field catalog required to process mandatory custom fields",
                    extra={"fields": list(required.custom)},
                )
            else:
                errors.extend(
                    self._check_custom_fields(catalog.limit_to_names(required.custom), submitted, ticket, status)
                )

        if errors:
            source = ticket.status if ticket is not None else from_status
            logger.info(
                "Transition to '%s' blocked: %d missing field(s)",
                to_status,
                len(errors),
                extra={"transition": f"{source} -> {to_status}", "fields": [e.field for e in errors]},
            )
        return errors

    # -- Internals ------------------------------------------------------------

    def _required_message(self, label: str, status: str) -> str:
        return self._localize(REQUIRED_TEMPLATE, label, status)

    def _check_core_fields(
        self,
        fields: tuple[CoreField, ...],
        submitted: Mapping[str, Any],
        ticket: Ticket | None,
        status: str,
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []
        for core in fields:
            # A ticket means update, where inputs carry the Update prefix.
            key = CORE_FOR_UPDATE.get(core, core.value) if ticket is not None else core.value
            if _has_value(submitted.get(key)):
                continue

            current = CORE_TICKET.get(core)
            if current is not None and ticket is not None and current(ticket):
                continue

            label = field_label(core.value)
            errors.append(ValidationError(core.value, label, status, self._required_message(label, status)))
        return errors

    @staticmethod
    def _catalog(ticket: Ticket | None, queue: Queue | None) -> CustomFieldCatalog | None:
        if ticket is not None:
            return ticket.custom_fields()
        if queue is not None:
            return queue.ticket_custom_fields()
        return None

    def _check_custom_fields(
        self,
        catalog: CustomFieldCatalog,
        submitted: Mapping[str, Any],
        ticket: Ticket | None,
        status: str,
    ) -> list[ValidationError]:
        prefix = self.name_prefix(ticket)
        all_valid, messages = self.validator.validate(catalog, prefix, submitted)

        errors: list[ValidationError] = []
        for cf in catalog:
            # Format validation failures replace the mandatory check.
            reason = messages.get(cf.id) if not all_valid else None
            if reason:
                label = self._localize(cf.name)
                errors.append(ValidationError(cf.name, label, status, f"{label}: {reason}"))
                continue

            if _has_value(submitted_custom_value(submitted, prefix, cf.id)):
                continue

            # Date fields don't resubmit an unchanged value on update.
            if ticket is not None and cf.value_count_for(ticket):
                continue

            errors.append(ValidationError(cf.name, cf.name, status, self._required_message(cf.name, status)))
        return errors
