"""Tests for module emission in the three output modes."""

from __future__ import annotations

from animate_upgrade.emitter import ModuleEmitter
from animate_upgrade.extractors import FALLBACK_STAGE_LINES
from animate_upgrade.models import AssetManifest, OutputMode, StageData

BODY = (
    "    data.lib.scene = class scene extends MovieClip {\n"
    "        constructor() {\n"
    "        super();\n"
    "    }\n"
    "    }\n"
    "    data.lib.scene.assets = {\n"
    "        \"scene\": \"images/scene.shapes.txt\"\n"
    "    };\n"
)

MANIFEST = AssetManifest(
    stage_name="scene",
    assets='{\n        "scene": "images/scene.shapes.txt"\n    }',
    statement="lib.scene.assets = {...};",
    shape_files=["images/scene.shapes.txt"],
)

STAGE = StageData(lines=["width: 32,", "height: 32,"])


def test_commonjs_module_layout() -> None:
    output = ModuleEmitter().emit(BODY, manifest=MANIFEST, stage=STAGE, mode=OutputMode.COMMONJS)

    lines = output.splitlines()
    assert lines[0] == "const data = {"
    assert lines[1:4] == ["    stage: null,", "    width: 32,", "    height: 32,"]
    assert '    assets: {\n        "scene": "images/scene.shapes.txt"\n    },' in output
    assert "    spritesheets: [],\n    getTexture: function(id) {" in output
    assert "    setup: function(animate) {\n    data.lib.scene = class scene" in output
    assert "    data.stage = data.lib.scene;\n    }\n};\n" in output
    assert ".assets =" not in output
    assert output.endswith("\nmodule.exports = data;\n")
    assert "import " not in output


def test_es6_module_uses_default_export() -> None:
    output = ModuleEmitter().emit(BODY, manifest=MANIFEST, stage=STAGE, mode=OutputMode.ES6)

    assert output.endswith("\nexport default data;\n")
    assert "module.exports" not in output
    assert "data.setup(" not in output


def test_autorun_module_imports_runs_setup_and_exports_classes() -> None:
    output = ModuleEmitter().emit(
        BODY,
        manifest=MANIFEST,
        stage=STAGE,
        mode=OutputMode.ES6_AUTORUN,
        exports=["scene", "overlay"],
    )

    assert output.startswith("import animate from 'pixi-animate';\nconst data = {\n")
    assert output.endswith(
        "};\n"
        "data.setup(animate);\n"
        "const scene = data.lib.scene;\n"
        "export {scene};\n"
        "const overlay = data.lib.overlay;\n"
        "export {overlay};\n"
        "\n"
        "export default data;\n"
    )


def test_missing_manifest_keeps_body_and_empty_assets() -> None:
    body = "    data.lib.scene = 1;\n"

    output = ModuleEmitter().emit(
        body,
        manifest=AssetManifest(),
        stage=StageData(lines=list(FALLBACK_STAGE_LINES), fallback=True),
        mode=OutputMode.COMMONJS,
    )

    assert "    assets: {}," in output
    assert "    background: 0x000000,\n    width: 0," in output
    assert "data.stage =" not in output


def test_custom_namespace_and_import_source() -> None:
    emitter = ModuleEmitter(namespace="anim", import_source="@pixi/animate")

    output = emitter.emit(BODY, manifest=MANIFEST, stage=STAGE, mode=OutputMode.ES6_AUTORUN)

    assert output.startswith("import anim from '@pixi/animate';")
    assert "    setup: function(anim) {" in output
    assert "data.setup(anim);" in output


def test_getter_prefers_textures_then_spritesheets() -> None:
    output = ModuleEmitter().emit(BODY, manifest=MANIFEST, stage=STAGE, mode=OutputMode.ES6)

    accessor = output[output.index("getTexture") : output.index("setup:")]
    assert accessor.index("data.textures[id]") < accessor.index("data.spritesheets.find")
    assert "return atlas ? atlas.textures[id] : null;" in accessor
