"""Core data models shared across animate-upgrade components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

DATA_OBJECT = "data"


class UpgradeError(RuntimeError):
    """Base class for failures that abandon a single unit of work."""


class StructureError(UpgradeError):
    """Raised when the legacy structure cannot be recognised in a source file."""


class OutputMode(str, Enum):
    """Export convention used for the emitted module."""

    COMMONJS = "commonjs"
    ES6 = "es6"
    ES6_AUTORUN = "es6-autorun"

    @property
    def is_es6(self) -> bool:
        return self is not OutputMode.COMMONJS

    @property
    def autorun(self) -> bool:
        return self is OutputMode.ES6_AUTORUN

    @classmethod
    def parse(cls, value: str) -> "OutputMode":
        normalised = value.strip().lower().replace("_", "-")
        for mode in cls:
            if mode.value == normalised:
                return mode
        raise ValueError(f"Unknown output mode '{value}'")


class BaseKind(Enum):
    """Base classes recognised in legacy `extend` definitions."""

    ANIMATED = "MovieClip"
    GROUPING = "Container"

    @property
    def identifier(self) -> str:
        """JavaScript name of the base class."""
        return self.value

    @classmethod
    def from_identifier(cls, identifier: str) -> "BaseKind":
        for kind in cls:
            if kind.value == identifier:
                return kind
        raise ValueError(f"Unrecognised base class '{identifier}'")


Span = Tuple[int, int]


@dataclass
class SourceUnit:
    """One legacy export file travelling through the pipeline."""

    path: Path
    text: str
    mode: OutputMode


@dataclass
class LibrarySetup:
    """The recovered wrapping block and its two bound parameter names."""

    namespace_alias: str
    library_alias: str
    body: str


@dataclass
class AssetManifest:
    """Assets mapping and stage name recovered from the setup body."""

    stage_name: Optional[str] = None
    assets: str = "{}"
    statement: Optional[str] = None
    shape_files: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.statement is not None


@dataclass
class StageData:
    """Configuration lines copied into the emitted data object."""

    lines: List[str]
    fallback: bool = False
    statement: Optional[str] = None


@dataclass
class ClassDefinition:
    """A legacy `<Base>.extend(function (...) {...})` definition located by the scanner."""

    name: str
    target: str
    base: BaseKind
    params: str
    indent: str
    header: Span
    body: Span
    footer: Span
    exported: bool
    super_call: Optional[Span] = None
    children: List["ClassDefinition"] = field(default_factory=list)

    def walk(self) -> List["ClassDefinition"]:
        """Return this definition followed by every nested definition, depth first."""
        found = [self]
        for child in self.children:
            found.extend(child.walk())
        return found


ShapeRecord = List[object]
ShapeCommandSequence = List[ShapeRecord]


@dataclass
class FileOutcome:
    """Result of migrating a single source file."""

    path: Path
    status: str
    mode: OutputMode
    classes: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    shape_files: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    diff: Optional[str] = None


@dataclass
class BatchReport:
    """Aggregated outcomes for a batch invocation."""

    outcomes: List[FileOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def ok(self) -> bool:
        return all(outcome.status == "migrated" for outcome in self.outcomes)
