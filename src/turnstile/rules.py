# src/turnstile/rules.py
"""Transition rule table -- loading, normalization, and resolution.

Provides RuleTable, the frozen per-queue map of status transitions to the
fields that must have values before the transition is allowed. Raw
configuration uses the ``"from -> to"`` key syntax with ``*`` wildcards; keys
are parsed once at load time into TransitionKey pairs.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from turnstile.types.core import RawRuleTable

logger = logging.getLogger(__name__)

WILDCARD = "*"

_CUSTOM_FIELD_PREFIX = re.compile(r"^CF\.", re.IGNORECASE)
_TRANSITION_ARROW = "->"


class CoreField(enum.Enum):
    """Built-in ticket fields that can be required on a transition."""

    CONTENT = "Content"
    TIME_WORKED = "TimeWorked"
    TIME_TAKEN = "TimeTaken"

    @classmethod
    def from_name(cls, name: str) -> CoreField | None:
        """Exact-case lookup by configured name. Unknown names return None."""
        for member in cls:
            if member.value == name:
                return member
        return None


# ---------------------------------------------------------------------------
# Frozen dataclasses
# ---------------------------------------------------------------------------
# Everything reachable from a RuleTable is frozen; the table is built once by
# from_config() and shared read-only for the life of the process.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CoreFieldRef:
    """A required built-in field."""

    field: CoreField

    @property
    def name(self) -> str:
        return self.field.value

    @property
    def config_name(self) -> str:
        return self.field.value


@dataclass(frozen=True)
class CustomFieldRef:
    """A required custom field, by bare name (``CF.`` prefix stripped)."""

    name: str

    @property
    def config_name(self) -> str:
        return f"CF.{self.name}"


FieldReference = CoreFieldRef | CustomFieldRef


@dataclass(frozen=True)
class TransitionKey:
    """A parsed ``"from -> to"`` key. ``None`` on either side is the wildcard."""

    from_state: str | None
    to_state: str | None

    @classmethod
    def parse(cls, raw: str) -> TransitionKey:
        """Parse ``"open -> resolved"`` / ``"* -> resolved"`` syntax.

        Raises:
            ValueError: If the key has no arrow or an empty side.
        """
        if _TRANSITION_ARROW not in raw:
            msg = f"Transition '{raw}' must have the form 'from -> to'"
            raise ValueError(msg)
        left, right = (part.strip() for part in raw.split(_TRANSITION_ARROW, 1))
        if not left or not right:
            msg = f"Transition '{raw}' has an empty status on one side"
            raise ValueError(msg)
        return cls(
            from_state=None if left == WILDCARD else left,
            to_state=None if right == WILDCARD else right,
        )

    def __str__(self) -> str:
        return f"{self.from_state or WILDCARD} {_TRANSITION_ARROW} {self.to_state or WILDCARD}"


@dataclass(frozen=True)
class RequiredFields:
    """Resolved requirements for one transition, split by field class."""

    core: tuple[CoreField, ...] = ()
    custom: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.core or self.custom)


NOTHING_REQUIRED = RequiredFields()


def parse_field_reference(raw: str) -> FieldReference | None:
    """Classify a configured field name.

    ``CF.``-prefixed names (any case) are custom fields; the recognized core
    names are core fields; anything else is unsupported and returns None.

    Raises:
        ValueError: If a ``CF.`` prefix is not followed by a field name.
    """
    if _CUSTOM_FIELD_PREFIX.match(raw):
        name = raw[3:]
        if not name:
            msg = f"Custom field reference '{raw}' has no field name"
            raise ValueError(msg)
        return CustomFieldRef(name)
    core = CoreField.from_name(raw)
    if core is None:
        return None
    return CoreFieldRef(core)


# ---------------------------------------------------------------------------
# RuleTable
# ---------------------------------------------------------------------------


TransitionMap = Mapping[TransitionKey, tuple[FieldReference, ...]]

_EMPTY_TRANSITIONS: TransitionMap = MappingProxyType({})


@dataclass(frozen=True, eq=False)
class RuleTable:
    """Immutable queue -> transition -> required fields table.

    Build with :meth:`from_config`; the constructor expects already-parsed
    data and wraps it in read-only mappings.
    """

    _queues: Mapping[str, TransitionMap] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {queue: MappingProxyType(dict(transitions)) for queue, transitions in self._queues.items()}
        object.__setattr__(self, "_queues", MappingProxyType(frozen))

    # -- Loading --------------------------------------------------------------

    @classmethod
    def from_config(cls, raw: RawRuleTable | None) -> RuleTable:
        """Normalize raw ``mandatory_on_transition`` config into a RuleTable.

        A bare string field spec is treated as a one-element list. Any entry
        with another shape is logged and dropped; loading never fails on a
        bad entry.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            logger.error("Rule table must be a mapping of queue names, got %s. Ignoring.", type(raw).__name__)
            return cls()

        queues: dict[str, TransitionMap] = {}
        for queue, raw_transitions in raw.items():
            if not isinstance(raw_transitions, Mapping):
                logger.error(
                    "Rules for queue '%s' must be a mapping of transitions, got %s. Ignoring.",
                    queue,
                    type(raw_transitions).__name__,
                    extra={"queue": queue},
                )
                continue
            queues[str(queue)] = cls._parse_transitions(str(queue), raw_transitions)

        table = cls(queues)
        logger.debug("Rule table loaded: %d queues", len(queues))
        return table

    @staticmethod
    def _parse_transitions(queue: str, raw_transitions: Mapping[str, Any]) -> dict[TransitionKey, tuple[FieldReference, ...]]:
        transitions: dict[TransitionKey, tuple[FieldReference, ...]] = {}
        for raw_key, spec in raw_transitions.items():
            try:
                key = TransitionKey.parse(str(raw_key))
            except ValueError as exc:
                logger.error("%s in queue '%s'. Ignoring.", exc, queue, extra={"queue": queue})
                continue

            if isinstance(spec, str):
                spec = [spec]
            elif not isinstance(spec, list | tuple):
                logger.error(
                    "Mandatory field definition '%s' must be a single field name or a list of field names. Ignoring.",
                    raw_key,
                    extra={"queue": queue, "transition": str(raw_key)},
                )
                continue

            refs: list[FieldReference] = []
            for item in spec:
                if not isinstance(item, str):
                    logger.error(
                        "Field name %r in '%s' must be a string. Ignoring.",
                        item,
                        raw_key,
                        extra={"queue": queue, "transition": str(raw_key)},
                    )
                    continue
                try:
                    ref = parse_field_reference(item)
                except ValueError as exc:
                    logger.error("%s in '%s'. Ignoring.", exc, raw_key, extra={"queue": queue})
                    continue
                if ref is None:
                    logger.debug("Unsupported core field '%s' in '%s' stripped", item, raw_key)
                    continue
                refs.append(ref)

            if key in transitions:
                logger.error(
                    "Transition '%s' in queue '%s' is already defined as '%s'. Ignoring.",
                    raw_key,
                    queue,
                    key,
                    extra={"queue": queue, "transition": str(raw_key)},
                )
                continue
            transitions[key] = tuple(refs)
        return transitions

    # -- Queries --------------------------------------------------------------

    def queues(self) -> list[str]:
        """Configured queue names, including the ``*`` default if present."""
        return list(self._queues)

    def transitions_for(self, queue: str | None) -> TransitionMap:
        """Transition map for *queue*, falling back to the ``*`` queue.

        An empty or missing queue name goes straight to the default. Returns
        an empty map when neither exists.
        """
        queue = queue or WILDCARD
        if queue in self._queues:
            return self._queues[queue]
        return self._queues.get(WILDCARD, _EMPTY_TRANSITIONS)

    def required_fields(self, queue: str | None, from_status: str | None, to_status: str | None) -> RequiredFields:
        """Fields required to move a ticket in *queue* from one status to another.

        The first transition found in this order is used::

            from -> to
            *    -> to
            from -> *

        A present key wins even when its field list is empty. Destination
        wildcards are tried before source wildcards, so ``* -> resolved``
        beats ``open -> *`` when both are configured.
        """
        if not from_status or not to_status:
            return NOTHING_REQUIRED

        transitions = self.transitions_for(queue)
        if not transitions:
            return NOTHING_REQUIRED

        if from_status == to_status:
            return NOTHING_REQUIRED

        required: tuple[FieldReference, ...] = ()
        for key in (
            TransitionKey(from_status, to_status),
            TransitionKey(None, to_status),
            TransitionKey(from_status, None),
        ):
            if key in transitions:
                required = transitions[key]
                break

        core = tuple(ref.field for ref in required if isinstance(ref, CoreFieldRef))
        custom = tuple(ref.name for ref in required if isinstance(ref, CustomFieldRef))
        return RequiredFields(core=core, custom=custom)
