"""Tests for full index rebuilds."""

import json

from cuke_catalog.config import load_catalog_settings
from cuke_catalog.index_builder import IndexBuilder, format_rate, generate_statistics
from cuke_catalog.models import ReportMetadata
from cuke_catalog.storage import ReportStore

from report_builders import make_feature, make_scenario, make_step, write_report


def _builder(settings):
    return IndexBuilder(settings, ReportStore(settings.reports_dir, settings.reserved_filenames))


def test_format_rate():
    assert format_rate(0, 0) == "0.00"
    assert format_rate(1, 3) == "33.33"
    assert format_rate(3, 3) == "100.00"


def test_statistics_over_reports():
    reports = [
        ReportMetadata(id="a", date="2024-01-01T00:00:00.000Z", steps=4, passed=3, failed=1, duration=10,
                       tags=["smoke"], environment="qa", tool="cypress"),
        ReportMetadata(id="b", date="2024-02-01T00:00:00.000Z", steps=4, passed=2, skipped=2, duration=20,
                       tags=["api", "smoke"], environment="qa"),
    ]
    stats = generate_statistics(reports)
    assert stats.totalReports == 2
    assert stats.totalSteps == 8
    assert stats.passRate == "62.50"
    assert stats.failRate == "12.50"
    assert stats.skipRate == "25.00"
    assert stats.averageDuration == "15.00"
    assert stats.oldestReport.id == "a"
    assert stats.newestReport.id == "b"
    assert stats.allTags == ["api", "smoke"]
    assert stats.environments == ["qa"]
    assert stats.tools == ["cypress"]


def test_empty_statistics():
    stats = generate_statistics([])
    assert stats.totalReports == 0
    assert stats.passRate == "0.00"
    assert stats.oldestReport is None


def test_bad_file_does_not_fail_rebuild(settings, reports_dir):
    write_report(reports_dir, "good.json", [make_feature("Good")])
    (reports_dir / "broken.json").write_text("{not json", encoding="utf-8")
    write_report(reports_dir, "weird.json", {"unexpected": True})

    index = _builder(load_catalog_settings(reports_dir, organize_files=False)).build()

    assert [r.id for r in index.reports] == ["good"]
    assert {e.file for e in index.errors} == {"broken.json", "weird.json"}
    assert index.statistics.totalReports == 1


def test_index_and_stats_are_written(settings, reports_dir):
    write_report(reports_dir, "one.json", {"features": [make_feature("One")]})
    _builder(settings).build()

    index = json.loads(settings.index_path.read_text())
    stats = json.loads(settings.stats_path.read_text())
    assert index["version"] == "2.0.0"
    assert len(index["reports"]) == 1
    assert "errors" not in index
    assert stats["totalReports"] == 1
    assert settings.index_path.read_text().startswith("{\n  ")


def test_catalog_artifacts_are_not_indexed(settings, reports_dir):
    write_report(reports_dir, "one.json", [make_feature()])
    builder = _builder(load_catalog_settings(reports_dir, organize_files=False))
    builder.build()
    write_report(reports_dir, ".deleted-reports.json", [])
    write_report(reports_dir, "generate-index.json", [])

    index = builder.build()
    assert [r.id for r in index.reports] == ["one"]


def test_reports_sorted_newest_first(reports_dir):
    for name, start in [("old", "2024-01-01T00:00:00.000Z"), ("new", "2024-03-01T00:00:00.000Z"),
                        ("mid", "2024-02-01T00:00:00.000Z")]:
        write_report(reports_dir, f"{name}.json", [make_feature(name, [make_scenario(start=start)])])

    index = _builder(load_catalog_settings(reports_dir, organize_files=False)).build()
    assert [r.id for r in index.reports] == ["new", "mid", "old"]


def test_files_are_renamed_and_recorded(settings, reports_dir):
    write_report(reports_dir, "upload-1.json", [make_feature("Checkout", [make_scenario(start="2024-03-01T12:00:00.000Z")])])

    index = _builder(settings).build()

    canonical = "Checkout-2024-03-01T12-00-00-000Z.json"
    assert index.reports[0].id == canonical[:-5]
    assert [(r.from_name, r.to) for r in index.renames] == [("upload-1.json", canonical)]
    assert (reports_dir / canonical).exists()
    assert json.loads(settings.index_path.read_text())["renames"] == [{"from": "upload-1.json", "to": canonical}]

    again = _builder(settings).build()
    assert again.renames is None


def test_colliding_renames_keep_original_names(settings, reports_dir):
    feature = make_feature("Dup", [make_scenario(start="2024-03-01T12:00:00.000Z")])
    write_report(reports_dir, "a.json", [feature])
    write_report(reports_dir, "b.json", [feature])

    index = _builder(settings).build()

    assert sorted(r.id for r in index.reports) == ["Dup-2024-03-01T12-00-00-000Z", "b"]
    assert [e.file for e in index.errors] == ["b.json"]
    assert (reports_dir / "b.json").exists()
    assert index.reports[0].hash == index.reports[1].hash


def test_validation_defects_are_recorded_but_indexed(settings, reports_dir):
    write_report(reports_dir, "partial.json", [{"name": "F", "elements": [{"steps": [{"name": "s"}]}]}])

    index = _builder(load_catalog_settings(reports_dir, organize_files=False)).build()

    assert [r.id for r in index.reports] == ["partial"]
    assert index.errors[0].errors == [
        "Feature 0, Scenario 0: Missing name",
        "Feature 0, Scenario 0, Step 0: Missing result/status",
    ]


def test_rebuild_corrects_counts_without_rewriting_blob(reports_dir):
    original = [make_feature(elements=[make_scenario(steps=[make_step(status="skipped", duration=5)])])]
    write_report(reports_dir, "r.json", original)

    index = _builder(load_catalog_settings(reports_dir, organize_files=False)).build()

    assert index.reports[0].passed == 1
    assert json.loads((reports_dir / "r.json").read_text()) == original


def test_excluded_files_are_hidden(reports_dir):
    write_report(reports_dir, "keep.json", [make_feature()])
    write_report(reports_dir, "hide.json", [make_feature()])

    index = _builder(load_catalog_settings(reports_dir, organize_files=False)).build(excluded={"hide.json"})

    assert [r.id for r in index.reports] == ["keep"]
    assert index.statistics.totalReports == 1
    assert (reports_dir / "hide.json").exists()


def test_load_index_variants(settings):
    builder = _builder(settings)
    assert builder.load_index() == {"reports": [], "statistics": None}

    settings.index_path.write_text("[{\"id\": \"legacy\"}]")
    assert builder.load_index()["reports"] == [{"id": "legacy"}]

    settings.index_path.write_text("{corrupt")
    assert builder.load_index()["reports"] == []


def test_rebuild_is_deterministic(settings, reports_dir):
    write_report(reports_dir, "x.json", [make_feature("X", [make_scenario(start="2024-03-01T12:00:00.000Z")])])
    write_report(reports_dir, "y.json", {"features": [make_feature("Y", [make_scenario(start="2024-03-01T12:00:00.000Z")])]})
    write_report(reports_dir, "z.json", [make_feature("Z")])

    first = _builder(settings).build()
    second = _builder(settings).build()

    assert [r.model_dump() for r in second.reports] == [r.model_dump() for r in first.reports]
    assert second.statistics == first.statistics
