"""Rewrites legacy `<Base>.extend(function () {...})` definitions into ES6 classes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern

from ..logging import get_logger
from ..models import BaseKind, ClassDefinition, StructureError
from .scanner import find_matching_brace, line_of, search_top_level

_FOOTER_PATTERN = re.compile(r"\}\s*\)[ \t]*;?")


@dataclass
class ClassRewriteResult:
    """Rewritten setup body plus what the rewrite discovered."""

    text: str
    definitions: List[ClassDefinition] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def class_names(self) -> List[str]:
        return [definition.name for definition in self.definitions]

    @property
    def exports(self) -> List[str]:
        """Names of library-table classes, in source order, for named export."""
        return [definition.name for definition in self.definitions if definition.exported]


@dataclass(order=True)
class _Edit:
    start: int
    end: int
    replacement: str = field(compare=False)


class ClassRewriter:
    """Converts extension-pattern definitions into class declarations.

    Definitions are located with a recursive scan that tracks brace depth. A
    nested definition becomes a child of its parent, and each closing ``});``
    is paired with its own header.
    """

    def __init__(self, library_alias: str) -> None:
        self.library_alias = library_alias
        self.logger = get_logger("rewriters.classes")
        bases = "|".join(re.escape(kind.identifier) for kind in BaseKind)
        self._header = re.compile(
            rf"^(?P<indent>[ \t]*)"
            rf"(?P<target>(?:(?P<library>{re.escape(library_alias)})\.|var[ \t]+)"
            rf"(?P<name>[A-Za-z_$][\w$]*))"
            rf"[ \t]*=[ \t]*(?P<base>{bases})\.extend\([ \t]*function[ \t]*"
            rf"\((?P<params>[^)]*)\)[ \t]*\{{",
            re.MULTILINE,
        )
        self._super_calls: Dict[BaseKind, Pattern[str]] = {
            kind: re.compile(
                rf"(?<![\w$.]){re.escape(kind.identifier)}\.call\(\s*this(?=\s*[,)])\s*(?:,\s*)?"
            )
            for kind in BaseKind
        }

    def find_definitions(
        self, text: str, start: int = 0, end: Optional[int] = None
    ) -> List[ClassDefinition]:
        """Return the definitions between ``start`` and ``end`` as a tree."""
        stop = len(text) if end is None else end
        found: List[ClassDefinition] = []
        position = start
        while True:
            match = self._header.search(text, position, stop)
            if match is None:
                break
            definition = self._build_definition(text, match, stop)
            found.append(definition)
            position = definition.footer[1]
        return found

    def rewrite(self, text: str) -> ClassRewriteResult:
        """Rewrite every recognised definition in ``text``."""
        tree = self.find_definitions(text)
        definitions: List[ClassDefinition] = []
        for root in tree:
            definitions.extend(root.walk())
        definitions.sort(key=lambda definition: definition.header[0])

        warnings: List[str] = []
        edits: List[_Edit] = []
        for definition in definitions:
            edits.extend(self._edits_for(definition, text, warnings))
        rewritten = _apply_edits(text, edits)

        for definition in definitions:
            self.logger.debug(
                "Converted %s (extends %s, line %d)",
                definition.name,
                definition.base.identifier,
                line_of(text, definition.header[0]),
            )
        return ClassRewriteResult(text=rewritten, definitions=definitions, warnings=warnings)

    def _build_definition(self, text: str, match: "re.Match[str]", stop: int) -> ClassDefinition:
        open_index = match.end() - 1
        close_index = find_matching_brace(text, open_index, stop)
        footer = _FOOTER_PATTERN.match(text, close_index, stop)
        if footer is None:
            raise StructureError(
                f"Definition of '{match.group('name')}' on line {line_of(text, match.start())} "
                f"is not closed with '}})' (line {line_of(text, close_index)})"
            )

        base = BaseKind.from_identifier(match.group("base"))
        body = (open_index + 1, close_index)
        super_match = search_top_level(self._super_calls[base], text, *body)
        return ClassDefinition(
            name=match.group("name"),
            target=match.group("target"),
            base=base,
            params=match.group("params").strip(),
            indent=match.group("indent"),
            header=(match.start(), match.end()),
            body=body,
            footer=(footer.start(), footer.end()),
            exported=match.group("library") is not None,
            super_call=(super_match.start(), super_match.end()) if super_match else None,
            children=self.find_definitions(text, *body),
        )

    def _edits_for(
        self, definition: ClassDefinition, text: str, warnings: List[str]
    ) -> List[_Edit]:
        indent = definition.indent
        header = (
            f"{indent}{definition.target} = class {definition.name} extends "
            f"{definition.base.identifier} {{\n"
            f"{indent}    constructor({definition.params}) {{"
        )
        edits = []
        if definition.super_call is None:
            message = (
                f"{definition.name} (line {line_of(text, definition.header[0])}) never calls "
                f"{definition.base.identifier}.call(this); inserted super()"
            )
            self.logger.warning(message)
            warnings.append(message)
            header += f"\n{indent}        super();"
        else:
            edits.append(_Edit(*definition.super_call, "super("))
        edits.append(_Edit(*definition.header, header))
        edits.append(_Edit(*definition.footer, f"}}\n{indent}}}"))
        return edits


def _apply_edits(text: str, edits: List[_Edit]) -> str:
    ordered = sorted(edits, reverse=True)
    result = text
    previous_start: Optional[int] = None
    for edit in ordered:
        if previous_start is not None and edit.end > previous_start:
            raise StructureError(
                f"Overlapping rewrites near line {line_of(text, edit.start)}"
            )
        result = result[: edit.start] + edit.replacement + result[edit.end :]
        previous_start = edit.start
    return result


__all__ = ["ClassRewriteResult", "ClassRewriter"]
