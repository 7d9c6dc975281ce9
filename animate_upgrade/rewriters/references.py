"""Renames legacy symbol references inside the setup body."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Pattern, Tuple

from ..logging import get_logger
from ..models import DATA_OBJECT
from .scanner import parse_source

RENDERING_PRIMITIVES = ("Container", "Sprite", "Text", "Graphics")


@dataclass(frozen=True)
class Substitution:
    """One ordered rewrite applied to the setup body."""

    name: str
    pattern: Pattern[str]
    replacement: str


class ReferenceRewriter:
    """Applies the fixed, ordered list of reference substitutions.

    The local ``shapes`` and ``fromFrame`` bindings are dropped before any
    rename runs.
    """

    def __init__(
        self,
        namespace_alias: str,
        library_alias: str,
        *,
        namespace: str = "animate",
    ) -> None:
        self.namespace_alias = namespace_alias
        self.library_alias = library_alias
        self.namespace = namespace
        self.logger = get_logger("rewriters.references")
        self.substitutions = self._build_substitutions()

    def rewrite(self, body: str) -> str:
        """Apply every substitution, renaming only at code positions.

        Matches that start inside a string, template text, comment or regular
        expression literal are left as they are.
        """
        for substitution in self.substitutions:
            body, count = self._apply(substitution, body)
            if count:
                self.logger.debug("%s: %d replacement(s)", substitution.name, count)
        return body

    def _apply(self, substitution: Substitution, body: str) -> Tuple[str, int]:
        source = parse_source(body)
        count = 0

        def replace(match: "re.Match[str]") -> str:
            nonlocal count
            if not source.is_code(match.start()):
                return match.group(0)
            count += 1
            return match.expand(substitution.replacement)

        return substitution.pattern.sub(replace, body), count

    def _build_substitutions(self) -> List[Substitution]:
        ns = re.escape(self.namespace_alias)
        lib = re.escape(self.library_alias)
        primitives = "|".join(RENDERING_PRIMITIVES)
        return [
            Substitution(
                "drop shapes cache binding",
                re.compile(
                    rf"^[ \t]*var[ \t]+shapes[ \t]*=[ \t]*{ns}\.animate\.ShapesCache;[ \t]*\r?\n?",
                    re.MULTILINE,
                ),
                "",
            ),
            Substitution(
                "drop fromFrame binding",
                re.compile(
                    rf"^[ \t]*var[ \t]+fromFrame[ \t]*=[ \t]*{ns}\.Texture\.fromFrame;[ \t]*\r?\n?",
                    re.MULTILINE,
                ),
                "",
            ),
            Substitution(
                "animate namespace members",
                re.compile(rf"(?<![\w$.]){ns}\.animate\.(?=[A-Za-z_$])"),
                f"{self.namespace}.",
            ),
            Substitution(
                "rendering primitives",
                re.compile(rf"(?<![\w$.]){ns}\.({primitives})(?![\w$])"),
                rf"{self.namespace}.\1",
            ),
            Substitution(
                "library table",
                re.compile(rf"(?<![\w$.]){lib}(?=\.)"),
                f"{DATA_OBJECT}.lib",
            ),
            Substitution(
                "shapes cache",
                re.compile(r"(?<![\w$.])shapes(?=\.)"),
                f"{DATA_OBJECT}.shapes",
            ),
            Substitution(
                "texture lookup",
                re.compile(r"(?<![\w$.])fromFrame(?=\s*\()"),
                f"{DATA_OBJECT}.getTexture",
            ),
            Substitution(
                "var declarations",
                re.compile(r"(?<![\w$.])var(?=\s)"),
                "const",
            ),
        ]


__all__ = ["RENDERING_PRIMITIVES", "ReferenceRewriter", "Substitution"]
