"""Migrates shape files to the current drawing-command vocabulary."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

from .logging import get_logger
from .models import ShapeCommandSequence, ShapeRecord, UpgradeError

MOVE_TO = "m"
LEGACY_CLOSE_PATH = "c"
CLOSE_PATH = "cp"
LEGACY_HOLE = "h"
BEGIN_HOLE = "bh"
END_HOLE = "eh"

SHAPE_FORMATS = {".json": "json", ".txt": "txt"}

logger = get_logger("shapes")


class ShapeFormatError(UpgradeError):
    """Raised when a shape payload is not an array of arrays."""


@dataclass
class ShapeMigrationResult:
    """Counts of the legacy codes converted in one shape file."""

    path: Path
    closes: int = 0
    holes: int = 0
    written: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.closes or self.holes)


def migrate_record(record: ShapeRecord) -> Tuple[int, int]:
    """Migrate one shape record in place and return ``(closes, holes)`` converted.

    A legacy hole code closes the path drawn just before it. It becomes an
    end-hole code, and a begin-hole code is inserted in front of the move
    command that starts that path (or at the start of the record when there
    is none), so the pair brackets the hole's own commands.
    """
    closes = holes = 0
    index = 0
    while index < len(record):
        token = record[index]
        if token == LEGACY_CLOSE_PATH:
            record[index] = CLOSE_PATH
            closes += 1
        elif token == LEGACY_HOLE:
            record[index] = END_HOLE
            insert_at = 0
            for previous in range(index - 1, -1, -1):
                if record[previous] == MOVE_TO:
                    insert_at = previous
                    break
            record.insert(insert_at, BEGIN_HOLE)
            # the end-hole code moved one slot to the right
            index += 1
            holes += 1
        index += 1
    return closes, holes


def migrate_shapes(shapes: ShapeCommandSequence) -> Tuple[int, int]:
    """Migrate every record in place and return the total ``(closes, holes)``."""
    closes = holes = 0
    for record in shapes:
        record_closes, record_holes = migrate_record(record)
        closes += record_closes
        holes += record_holes
    return closes, holes


def shape_format(path: Path) -> str:
    try:
        return SHAPE_FORMATS[path.suffix.lower()]
    except KeyError:
        raise ShapeFormatError(f"Unsupported shape file extension for {path}") from None


def parse_shapes(text: str, fmt: str) -> ShapeCommandSequence:
    """Parse shape file text in the given format into a list of records."""
    if fmt == "txt":
        data: Any = [line.rstrip("\r").split(" ") for line in text.split("\n")]
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ShapeFormatError(f"Invalid JSON: {exc}") from exc
    _check_shape_payload(data)
    return data


def dump_shapes(shapes: ShapeCommandSequence, fmt: str) -> str:
    """Serialise records in the same format they were read from."""
    if fmt == "txt":
        return "\n".join(" ".join(str(token) for token in record) for record in shapes)
    return json.dumps(shapes, indent=2)


def load_shapes(path: Path) -> ShapeCommandSequence:
    fmt = shape_format(path)
    return parse_shapes(_read_shape_text(path), fmt)


def migrate_file(path: Path, *, dry_run: bool = False) -> ShapeMigrationResult:
    """Migrate a shape file and overwrite it in place unless ``dry_run`` is set.

    Raises OSError when the file cannot be read or written and
    ShapeFormatError when it is not UTF-8 text or its payload is not an
    array of arrays.
    """
    fmt = shape_format(path)
    shapes = parse_shapes(_read_shape_text(path), fmt)
    closes, holes = migrate_shapes(shapes)
    result = ShapeMigrationResult(path=path, closes=closes, holes=holes)
    if not dry_run:
        path.write_text(dump_shapes(shapes, fmt), encoding="utf-8")
        result.written = True
    logger.debug(
        "Shape file %s: %d close code(s), %d hole(s) migrated%s",
        path,
        closes,
        holes,
        " (dry-run)" if dry_run else "",
    )
    return result


def _read_shape_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ShapeFormatError(f"{path.name} is not UTF-8 text: {exc}") from exc


def _check_shape_payload(data: Any) -> None:
    if not isinstance(data, list) or not data:
        raise ShapeFormatError("Expected a non-empty array of shape records")
    bad: List[int] = [index for index, record in enumerate(data) if not isinstance(record, list)]
    if bad:
        raise ShapeFormatError(f"Shape record {bad[0]} is not an array")


__all__ = [
    "BEGIN_HOLE",
    "CLOSE_PATH",
    "END_HOLE",
    "LEGACY_CLOSE_PATH",
    "LEGACY_HOLE",
    "MOVE_TO",
    "ShapeFormatError",
    "ShapeMigrationResult",
    "dump_shapes",
    "load_shapes",
    "migrate_file",
    "migrate_record",
    "migrate_shapes",
    "parse_shapes",
]
