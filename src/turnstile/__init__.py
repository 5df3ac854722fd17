"""Turnstile: mandatory fields on ticket status transitions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("turnstile")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from turnstile.checker import MandatoryFieldChecker, ValidationError
from turnstile.rules import CoreField, RequiredFields, RuleTable

__all__ = [
    "CoreField",
    "MandatoryFieldChecker",
    "RequiredFields",
    "RuleTable",
    "ValidationError",
    "__version__",
]
