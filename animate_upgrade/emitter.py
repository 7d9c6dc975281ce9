"""Assembles the migrated module text."""

from __future__ import annotations

import re
from typing import List, Sequence

from .logging import get_logger
from .models import DATA_OBJECT, AssetManifest, OutputMode, StageData

_TEXTURE_ACCESSOR = f"""    getTexture: function(id) {{
        if ({DATA_OBJECT}.textures[id]) {{
            return {DATA_OBJECT}.textures[id];
        }}
        const atlas = {DATA_OBJECT}.spritesheets.find(atlas => !!atlas.textures[id]);
        return atlas ? atlas.textures[id] : null;
    }},"""


class ModuleEmitter:
    """Builds the final module in one of the three output modes."""

    def __init__(self, *, namespace: str = "animate", import_source: str = "pixi-animate") -> None:
        self.namespace = namespace
        self.import_source = import_source
        self.logger = get_logger("emitter")

    def emit(
        self,
        body: str,
        *,
        manifest: AssetManifest,
        stage: StageData,
        mode: OutputMode,
        exports: Sequence[str] = (),
    ) -> str:
        """Return the module text for a rewritten setup body."""
        if manifest.found and manifest.stage_name:
            body = self.attach_stage(body, manifest.stage_name)

        parts: List[str] = []
        if mode.autorun:
            parts.append(f"import {self.namespace} from '{self.import_source}';")
        parts.append(f"const {DATA_OBJECT} = {{")
        parts.append("    stage: null,")
        parts.extend(f"    {line}" for line in stage.lines)
        parts.append(f"    assets: {manifest.assets},")
        parts.append("    lib: {},")
        parts.append("    shapes: {},")
        parts.append("    textures: {},")
        parts.append("    spritesheets: [],")
        parts.append(_TEXTURE_ACCESSOR)
        parts.append(f"    setup: function({self.namespace}) {{")
        parts.append(body.strip("\r\n"))
        parts.append("    }")
        parts.append("};")

        if mode.autorun:
            parts.append(f"{DATA_OBJECT}.setup({self.namespace});")
            for name in exports:
                parts.append(f"const {name} = {DATA_OBJECT}.lib.{name};")
                parts.append(f"export {{{name}}};")

        parts.append("")
        if mode.is_es6:
            parts.append(f"export default {DATA_OBJECT};")
        else:
            parts.append(f"module.exports = {DATA_OBJECT};")
        self.logger.debug(
            "Emitted %s module with %d named export(s)",
            mode.value,
            len(exports) if mode.autorun else 0,
        )
        return "\n".join(parts) + "\n"

    def attach_stage(self, body: str, stage_name: str) -> str:
        """Replace the assets assignment with an assignment of the stage class."""
        pattern = re.compile(
            rf"(?<![\w$.]){DATA_OBJECT}\.lib\.{re.escape(stage_name)}\.assets\s*=\s*\{{[^}}]*\}};?"
        )
        statement = f"{DATA_OBJECT}.stage = {DATA_OBJECT}.lib.{stage_name};"
        updated, count = pattern.subn(lambda _match: statement, body, count=1)
        if not count:
            self.logger.warning("Assets assignment for stage '%s' not found in setup body", stage_name)
        return updated


__all__ = ["ModuleEmitter"]
