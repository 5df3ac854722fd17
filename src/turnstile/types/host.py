"""Protocols for the host application objects the checker reads from.

The checker never constructs these; the host passes its own ticket, queue and
custom field objects in. ``turnstile.memory`` provides plain implementations.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Protocol


class CustomField(Protocol):
    """A single custom field definition."""

    @property
    def id(self) -> int | str: ...

    @property
    def name(self) -> str: ...

    def value_count_for(self, ticket: Ticket) -> int:
        """Number of values currently stored for this field on *ticket*."""
        ...


class CustomFieldCatalog(Protocol):
    """An iterable collection of custom fields that can be narrowed by name."""

    def __iter__(self) -> Iterator[CustomField]: ...

    def limit_to_names(self, names: Iterable[str]) -> CustomFieldCatalog:
        """Return the fields whose name matches any of *names*, case-insensitively."""
        ...


class Ticket(Protocol):
    """An existing work item whose status is about to change."""

    @property
    def id(self) -> int | str: ...

    @property
    def status(self) -> str: ...

    @property
    def queue_name(self) -> str: ...

    @property
    def time_worked(self) -> float: ...

    def custom_fields(self) -> CustomFieldCatalog | None: ...


class Queue(Protocol):
    """The queue a new ticket is being created in."""

    @property
    def name(self) -> str: ...

    def ticket_custom_fields(self) -> CustomFieldCatalog | None: ...


class CustomFieldValidator(Protocol):
    """Host-side format validation of submitted custom field values."""

    def validate(
        self,
        catalog: CustomFieldCatalog,
        name_prefix: str,
        submitted: Mapping[str, Any],
    ) -> tuple[bool, Mapping[int | str, str]]:
        """Return ``(all_valid, messages)`` where *messages* maps field id to a reason."""
        ...
