"""Structural checks that guard against writing a corrupted module."""

from __future__ import annotations

import re
from typing import List

from ..models import DATA_OBJECT, BaseKind
from ..rewriters.scanner import find_unbalanced, line_of, parse_source
from .base import ValidationContext, ValidationIssue


class BracketBalanceValidator:
    """Fails when braces, brackets or parentheses do not pair up."""

    name = "brackets"

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        problem = find_unbalanced(context.output)
        if problem is None:
            return []
        index, message = problem
        return [ValidationIssue(self.name, message, line_of(context.output, index))]


class LegacyResidueValidator:
    """Fails when legacy constructs survived the rewrite."""

    name = "legacy-residue"

    def __init__(self) -> None:
        self._patterns = []
        for kind in BaseKind:
            identifier = re.escape(kind.identifier)
            self._patterns.append(
                (
                    re.compile(rf"(?<![\w$.]){identifier}\.extend\(\s*function\b"),
                    f"{kind.identifier}.extend() definition was not converted",
                )
            )
            self._patterns.append(
                (
                    re.compile(rf"(?<![\w$.]){identifier}\.call\(\s*this\b"),
                    f"{kind.identifier}.call(this) was not converted to super()",
                )
            )

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        output = context.output
        source = parse_source(output)
        issues: List[ValidationIssue] = []
        for pattern, detail in self._patterns:
            for match in pattern.finditer(output):
                if source.is_code(match.start()):
                    issues.append(ValidationIssue(self.name, detail, line_of(output, match.start())))

        if context.stage_name:
            assets = re.compile(
                rf"{DATA_OBJECT}\.lib\.{re.escape(context.stage_name)}\.assets\s*="
            )
            match = assets.search(output)
            if match is not None:
                issues.append(
                    ValidationIssue(
                        self.name,
                        "assets assignment was not replaced by the stage reference",
                        line_of(output, match.start()),
                    )
                )
        return issues


class ClassCountValidator:
    """Fails when the module does not declare one class per converted definition."""

    name = "class-count"

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for name in context.class_names:
            declaration = re.compile(rf"\bclass {re.escape(name)} extends\b")
            if not declaration.search(context.output):
                issues.append(ValidationIssue(self.name, f"class {name} missing from output"))
        return issues
