"""Extractors that recover structure from legacy export text."""

from .manifest import FALLBACK_STAGE_LINES, MISSING_ASSETS_WARNING, ManifestExtractor

__all__ = ["FALLBACK_STAGE_LINES", "MISSING_ASSETS_WARNING", "ManifestExtractor"]
