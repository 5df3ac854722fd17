"""Foundational TypedDicts for configuration and to_dict() returns."""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

# Raw shapes as they appear in config.json, before normalization.
RawTransitionMap = dict[str, Any]
RawRuleTable = dict[str, RawTransitionMap]


class TurnstileConfig(TypedDict, total=False):
    """Shape of .turnstile/config.json."""

    version: int
    mandatory_on_transition: RawRuleTable


class ValidationErrorDict(TypedDict):
    label: str
    message: str
    field: NotRequired[str]
    status: NotRequired[str]
