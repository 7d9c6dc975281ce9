"""Validation package for emitted modules."""

from typing import List

from .base import (
    ValidationContext,
    ValidationError,
    ValidationIssue,
    Validator,
    run_validators,
)
from .structure import BracketBalanceValidator, ClassCountValidator, LegacyResidueValidator


def default_validators() -> List[Validator]:
    return [BracketBalanceValidator(), LegacyResidueValidator(), ClassCountValidator()]


__all__ = [
    "BracketBalanceValidator",
    "ClassCountValidator",
    "LegacyResidueValidator",
    "ValidationContext",
    "ValidationError",
    "ValidationIssue",
    "Validator",
    "default_validators",
    "run_validators",
]
