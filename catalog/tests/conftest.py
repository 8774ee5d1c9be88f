"""Shared fixtures: a temporary reports directory and catalog objects over it."""

from __future__ import annotations

import pytest

from cuke_catalog.config import load_catalog_settings
from cuke_catalog.ingestion import CatalogOrchestrator


@pytest.fixture
def reports_dir(tmp_path):
    directory = tmp_path / "TestResultsJsons"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(reports_dir):
    return load_catalog_settings(reports_dir)


@pytest.fixture
def orchestrator(settings):
    return CatalogOrchestrator(settings)
