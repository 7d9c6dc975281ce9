"""Per-file migration pipeline and batch coordination."""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import UpgradeConfig
from .emitter import ModuleEmitter
from .extractors import MISSING_ASSETS_WARNING, ManifestExtractor
from .logging import get_logger, source_logger
from .models import (
    AssetManifest,
    BatchReport,
    FileOutcome,
    OutputMode,
    SourceUnit,
    StructureError,
)
from .rewriters import ClassRewriter, ReferenceRewriter
from .shapes import ShapeFormatError, ShapeMigrationResult, migrate_file
from .validators import (
    ValidationContext,
    ValidationError,
    Validator,
    default_validators,
    run_validators,
)


@dataclass
class MigrationResult:
    """In-memory result of migrating one source unit."""

    output: str
    manifest: AssetManifest
    classes: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class Orchestrator:
    """Runs the extraction, rewrite and emission pipeline over a batch of files."""

    def __init__(
        self,
        config: UpgradeConfig | None = None,
        *,
        extractor: ManifestExtractor | None = None,
        emitter: ModuleEmitter | None = None,
        validators: Optional[Iterable[Validator]] = None,
    ) -> None:
        self.config = config or UpgradeConfig(root=Path.cwd())
        self.extractor = extractor or ManifestExtractor()
        self.emitter = emitter or ModuleEmitter(
            namespace=self.config.namespace,
            import_source=self.config.import_source,
        )
        self.validators = list(validators) if validators is not None else default_validators()
        self.logger = get_logger("orchestrator")

    def run(
        self, jobs: Sequence[Tuple[Path, OutputMode]], *, dry_run: bool = False
    ) -> BatchReport:
        """Migrate each ``(path, mode)`` job in order; failures never stop the batch."""
        report = BatchReport()
        for path, mode in jobs:
            report.outcomes.append(self.migrate_path(path, mode, dry_run=dry_run))
        self.logger.info(
            "Processed %d file(s): %d migrated, %d skipped, %d failed",
            len(report.outcomes),
            report.count("migrated"),
            report.count("skipped"),
            report.count("failed"),
        )
        return report

    def migrate_path(self, path: Path, mode: OutputMode, *, dry_run: bool = False) -> FileOutcome:
        """Migrate one file on disk and the shape files it references."""
        path = Path(path).expanduser()
        if not path.is_absolute():
            path = (Path.cwd() / path).resolve()
        outcome = FileOutcome(path=path, status="migrated", mode=mode)
        log = source_logger(self.logger, path)

        try:
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.error("Unable to read file: %s", exc)
            outcome.status = "failed"
            outcome.error = str(exc)
            return outcome

        unit = SourceUnit(path=path, text=original, mode=mode)
        try:
            result = self.migrate_source(unit)
        except ValidationError as exc:
            for issue in exc.issues:
                log.error("%s", issue.describe())
            log.error("Not writing: %s", exc)
            outcome.status = "skipped"
            outcome.error = str(exc)
            return outcome
        except StructureError as exc:
            log.error("%s", exc)
            outcome.status = "skipped"
            outcome.error = str(exc)
            return outcome

        outcome.classes = result.classes
        outcome.exports = result.exports
        outcome.warnings = result.warnings

        if dry_run:
            outcome.diff = self._render_diff(path, original, result.output)
        else:
            try:
                path.write_text(result.output, encoding="utf-8")
            except OSError as exc:
                log.error("Unable to write file: %s", exc)
                outcome.status = "failed"
                outcome.error = str(exc)
                return outcome
        log.info(
            "Migrated (%s, %d class(es))%s",
            mode.value,
            len(result.classes),
            " [dry-run]" if dry_run else "",
        )

        for shape_file in result.manifest.shape_files:
            shape_path = Path(shape_file)
            if not shape_path.is_absolute():
                shape_path = (path.parent / shape_path).resolve()
            shape_result = self._migrate_shape_file(shape_path, dry_run=dry_run)
            if shape_result is not None:
                outcome.shape_files.append(shape_path)
        return outcome

    def migrate_source(self, unit: SourceUnit) -> MigrationResult:
        """Run the text pipeline for one source unit without touching the disk."""
        text = unit.text
        setup = self.extractor.find_library_setup(text)
        manifest = self.extractor.find_assets(text, setup.library_alias, source=str(unit.path))
        stage = self.extractor.find_stage_data(text)

        warnings: List[str] = []
        if not manifest.found:
            warnings.append(MISSING_ASSETS_WARNING.format(source=unit.path))

        body = setup.body
        if stage.statement and stage.statement in body:
            body = body.replace(stage.statement, "", 1)

        class_result = ClassRewriter(setup.library_alias).rewrite(body)
        warnings.extend(class_result.warnings)

        references = ReferenceRewriter(
            setup.namespace_alias,
            setup.library_alias,
            namespace=self.config.namespace,
        )
        body = references.rewrite(class_result.text)

        output = self.emitter.emit(
            body,
            manifest=manifest,
            stage=stage,
            mode=unit.mode,
            exports=class_result.exports,
        )

        context = ValidationContext(
            path=unit.path,
            output=output,
            class_names=class_result.class_names,
            stage_name=manifest.stage_name,
        )
        issues = run_validators(self.validators, context)
        if issues:
            raise ValidationError(
                f"{len(issues)} validation issue(s) in emitted module", issues
            )

        return MigrationResult(
            output=output,
            manifest=manifest,
            classes=class_result.class_names,
            exports=class_result.exports,
            warnings=warnings,
        )

    def _migrate_shape_file(self, path: Path, *, dry_run: bool) -> Optional[ShapeMigrationResult]:
        log = source_logger(self.logger, path)
        try:
            result = migrate_file(path, dry_run=dry_run)
        except OSError as exc:
            log.error("Unable to migrate shape file: %s", exc)
            return None
        except ShapeFormatError as exc:
            log.error("Unexpected format for shape file: %s", exc)
            return None
        if result.changed:
            log.info("Updated shapes (%d close, %d hole)", result.closes, result.holes)
        return result

    @staticmethod
    def _render_diff(path: Path, original: str, updated: str) -> str:
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"{path.name} (original)",
            tofile=f"{path.name} (migrated)",
        )
        return "".join(diff)


__all__ = ["MigrationResult", "Orchestrator"]
