"""Recovers the library setup block, assets mapping and stage data from legacy exports."""

from __future__ import annotations

import re
from typing import List

from ..logging import get_logger
from ..models import AssetManifest, LibrarySetup, StageData, StructureError

_SETUP_PATTERN = re.compile(r"\(function\s*\(([^)]*)\)\s*\{(.+)\}\)\(", re.DOTALL)
_STAGE_PATTERN = re.compile(r"module\.exports\s*=\s*\{([^}]+)\};")
_SHAPE_FILE_PATTERN = re.compile(r"([\"'])([^\"'\n]+\.shapes\.(?:json|txt))\1")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

_EXCLUDED_STAGE_KEYS = {"stage", "library"}

FALLBACK_STAGE_LINES = [
    "background: 0x000000,",
    "width: 0,",
    "height: 0,",
    "framerate: 24,",
    "totalFrames: 1,",
]

MISSING_ASSETS_WARNING = (
    "Unable to parse library assets (and which item is the stage) from {source}. "
    "You will need to ensure correct loading of assets and stage instantiation. "
    "At any point before instantiation, overwrite 'getTexture' on the asset data "
    "with 'Texture.fromFrame' from PixiJS's Texture class."
)


class ManifestExtractor:
    """Locates the structural landmarks of a legacy export file."""

    def __init__(self) -> None:
        self.logger = get_logger("extractors.manifest")

    def find_library_setup(self, text: str) -> LibrarySetup:
        """Return the wrapping setup block or raise StructureError."""
        match = _SETUP_PATTERN.search(text)
        if match is None:
            raise StructureError("Unable to parse library setup method")

        params = [param.strip() for param in match.group(1).split(",")]
        if len(params) != 2 or not all(_IDENTIFIER.match(param) for param in params):
            raise StructureError(
                f"Library setup method must take exactly two parameters, got '{match.group(1)}'"
            )

        namespace_alias, library_alias = params
        self.logger.debug(
            "Library setup binds namespace '%s' and library '%s'", namespace_alias, library_alias
        )
        return LibrarySetup(
            namespace_alias=namespace_alias,
            library_alias=library_alias,
            body=match.group(2),
        )

    def find_assets(self, text: str, library_alias: str, *, source: str = "<text>") -> AssetManifest:
        """Return the assets mapping and stage name, or an empty manifest with a warning."""
        pattern = re.compile(
            rf"(?<![\w$.]){re.escape(library_alias)}\.([A-Za-z_$][\w$]*)\.assets\s*=\s*(\{{[^}}]*\}});"
        )
        match = pattern.search(text)
        if match is None:
            self.logger.warning(MISSING_ASSETS_WARNING.format(source=source))
            return AssetManifest()

        assets = match.group(2)
        manifest = AssetManifest(
            stage_name=match.group(1),
            assets=assets,
            statement=match.group(0),
            shape_files=_unique(m.group(2) for m in _SHAPE_FILE_PATTERN.finditer(assets)),
        )
        self.logger.debug(
            "Stage '%s' references %d shape file(s)", manifest.stage_name, len(manifest.shape_files)
        )
        return manifest

    def find_stage_data(self, text: str) -> StageData:
        """Return the configuration lines to copy into the emitted data object."""
        match = _STAGE_PATTERN.search(text)
        if match is None:
            self.logger.debug("No stage data literal found; using fallback configuration")
            return StageData(lines=list(FALLBACK_STAGE_LINES), fallback=True)

        lines = []
        for entry in _split_entries(match.group(1)):
            key = entry.split(":", 1)[0].strip()
            if key in _EXCLUDED_STAGE_KEYS:
                continue
            lines.append(entry if entry.endswith(",") else f"{entry},")
        return StageData(lines=lines, statement=match.group(0))


def _split_entries(literal: str) -> List[str]:
    entries = [line.strip() for line in re.split(r"[\r\n]+", literal.strip())]
    entries = [entry for entry in entries if entry]
    if len(entries) == 1 and "," in entries[0]:
        entries = [part.strip() for part in entries[0].split(",") if part.strip()]
    return entries


def _unique(values) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


__all__ = [
    "FALLBACK_STAGE_LINES",
    "MISSING_ASSETS_WARNING",
    "ManifestExtractor",
]
