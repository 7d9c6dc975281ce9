from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.legacy_builder import LegacyProject


@pytest.fixture
def legacy_project(tmp_path: Path) -> LegacyProject:
    """Provide a reusable legacy export project rooted at the pytest tmp_path."""
    return LegacyProject(tmp_path)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo configure_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger("animate_upgrade")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
