"""Core validation data structures for emitted modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from ..models import UpgradeError


@dataclass
class ValidationIssue:
    """Represents a single problem found in an emitted module."""

    validator: str
    detail: str
    line: Optional[int] = None

    def describe(self) -> str:
        location = f"line {self.line}: " if self.line is not None else ""
        return f"[{self.validator}] {location}{self.detail}"


class ValidationError(UpgradeError):
    """Raised when an emitted module fails one or more validators."""

    def __init__(self, message: str, issues: Sequence[ValidationIssue]) -> None:
        super().__init__(message)
        self.issues = list(issues)


@dataclass
class ValidationContext:
    """Everything a validator may inspect about one migrated file."""

    path: Path
    output: str
    class_names: List[str] = field(default_factory=list)
    stage_name: Optional[str] = None


class Validator(Protocol):
    """Protocol implemented by emitted-module validators."""

    name: str

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        """Run validation and return any issues."""


def run_validators(
    validators: Iterable[Validator], context: ValidationContext
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for validator in validators:
        issues.extend(validator.validate(context))
    return issues
