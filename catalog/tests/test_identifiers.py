"""Tests for canonical renames."""

import pytest

from cuke_catalog.errors import FilenameCollision
from cuke_catalog.identifiers import assign_identifier
from cuke_catalog.models import ReportMetadata
from cuke_catalog.storage import ReportStore

from report_builders import make_feature, write_report


@pytest.fixture
def store(reports_dir):
    return ReportStore(reports_dir)


def test_rename_to_suggested_filename(store, reports_dir):
    write_report(reports_dir, "upload.json", [make_feature()])
    meta = ReportMetadata(id="upload", suggestedFilename="Feature-2024.json")

    assert assign_identifier(store, meta, "upload.json") == "Feature-2024.json"
    assert meta.id == "Feature-2024"
    assert (reports_dir / "Feature-2024.json").exists()
    assert not (reports_dir / "upload.json").exists()


def test_canonical_name_is_a_no_op(store, reports_dir):
    write_report(reports_dir, "Feature-2024.json", [])
    meta = ReportMetadata(id="Feature-2024", suggestedFilename="Feature-2024.json")
    assert assign_identifier(store, meta, "Feature-2024.json") is None
    assert assign_identifier(store, meta, "Feature-2024.json") is None
    assert (reports_dir / "Feature-2024.json").exists()


def test_collision_keeps_both_blobs(store, reports_dir):
    write_report(reports_dir, "Feature-2024.json", ["original"])
    write_report(reports_dir, "second.json", ["second"])
    meta = ReportMetadata(id="second", suggestedFilename="Feature-2024.json")

    with pytest.raises(FilenameCollision) as info:
        assign_identifier(store, meta, "second.json")

    assert info.value.target == "Feature-2024.json"
    assert meta.id == "second"
    assert store.read_json("Feature-2024.json") == ["original"]
    assert store.read_json("second.json") == ["second"]


def test_reserved_target_is_not_claimed(store, reports_dir):
    write_report(reports_dir, "upload.json", [])
    meta = ReportMetadata(id="upload", suggestedFilename="generate-index-2024.json")

    assert assign_identifier(store, meta, "upload.json") is None
    assert meta.id == "upload"
    assert (reports_dir / "upload.json").exists()
