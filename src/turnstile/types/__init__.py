# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from rules.py, checker.py, or memory.py; this prevents circular imports.
"""Typed contracts shared by the rule engine, the host protocols and the CLI."""

from __future__ import annotations

from turnstile.types.core import (
    RawRuleTable,
    RawTransitionMap,
    TurnstileConfig,
    ValidationErrorDict,
)
from turnstile.types.host import (
    CustomField,
    CustomFieldCatalog,
    CustomFieldValidator,
    Queue,
    Ticket,
)

__all__ = [
    "CustomField",
    "CustomFieldCatalog",
    "CustomFieldValidator",
    "Queue",
    "RawRuleTable",
    "RawTransitionMap",
    "Ticket",
    "TurnstileConfig",
    "ValidationErrorDict",
]
