"""Gateway fixtures: a catalog state over a temporary directory and a TestClient."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from cuke_gateway.app import app
from cuke_gateway.app_state import CatalogState
from cuke_gateway.deps import get_catalog_state

from payloads import feature


@pytest.fixture
def reports_dir(tmp_path):
    directory = tmp_path / "reports"
    directory.mkdir()
    return directory


@pytest.fixture
def state(reports_dir):
    catalog_state = CatalogState(reports_dir, cache_ttl=300, deletion_mode="auto")
    catalog_state.orchestrator.settings.organize_files = False
    return catalog_state


@pytest.fixture
def client(state):
    app.dependency_overrides[get_catalog_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(state, reports_dir):
    """Three indexed reports: a.json, b.json, c.json."""
    for name, status, start in [
        ("a", "passed", "2024-05-01T10:00:00.000Z"),
        ("b", "failed", "2024-05-02T10:00:00.000Z"),
        ("c", "passed", "2024-05-03T10:00:00.000Z"),
    ]:
        (reports_dir / f"{name}.json").write_text(json.dumps([feature(name, status, start)]))
    state.orchestrator.rebuild()
    return state
