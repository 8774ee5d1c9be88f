"""Full rebuild of the persisted report index and rollup statistics."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from .config import CatalogSettings
from .corrector import fix_skipped_steps_with_duration
from .errors import CatalogError, FilenameCollision, InvalidFormat
from .identifiers import assign_identifier
from .metadata import extract_metadata
from .models import (
    CatalogIndex,
    FileErrors,
    Rename,
    ReportMetadata,
    RollupStatistics,
    parse_timestamp,
    utc_now_iso,
)
from .normalizer import normalize_report
from .storage import ReportStore, write_json_atomic
from .validator import validate_report

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_rate(count: float, total: float) -> str:
    """Percentage with two decimals; ``"0.00"`` when there is nothing to divide by."""
    if not total:
        return "0.00"
    return f"{count / total * 100:.2f}"


def _date_key(report: ReportMetadata) -> datetime:
    return parse_timestamp(report.date) or _EPOCH


def sort_reports_newest_first(reports: list[ReportMetadata]) -> list[ReportMetadata]:
    """Newest date first; ties keep id order so rebuilds are deterministic."""
    by_id = sorted(reports, key=lambda r: r.id)
    return sorted(by_id, key=_date_key, reverse=True)


def generate_statistics(reports: list[ReportMetadata]) -> RollupStatistics:
    """Aggregate counters, rates and distinct sets across indexed reports."""
    stats = RollupStatistics(totalReports=len(reports))
    tags: set[str] = set()
    environments: set[str] = set()
    tools: set[str] = set()

    for report in reports:
        stats.totalFeatures += report.features
        stats.totalScenarios += report.scenarios
        stats.totalSteps += report.steps
        stats.totalPassed += report.passed
        stats.totalFailed += report.failed
        stats.totalSkipped += report.skipped
        stats.totalDuration += report.duration
        stats.totalSize += report.size
        tags.update(report.tags)
        if report.environment:
            environments.add(report.environment)
        if report.tool:
            tools.add(report.tool)

        when = _date_key(report)
        if stats.oldestReport is None or when < _date_key(stats.oldestReport):
            stats.oldestReport = report
        if stats.newestReport is None or when > _date_key(stats.newestReport):
            stats.newestReport = report

    stats.passRate = format_rate(stats.totalPassed, stats.totalSteps)
    stats.failRate = format_rate(stats.totalFailed, stats.totalSteps)
    stats.skipRate = format_rate(stats.totalSkipped, stats.totalSteps)
    if reports:
        stats.averageDuration = f"{stats.totalDuration / len(reports):.2f}"

    stats.allTags = sorted(tags)
    stats.environments = sorted(environments)
    stats.tools = sorted(tools)
    return stats


class IndexBuilder:
    """Rebuilds index.json and stats.json from every stored report."""

    def __init__(self, settings: CatalogSettings, store: ReportStore | None = None) -> None:
        self.settings = settings
        self.store = store or ReportStore(settings.reports_dir, settings.reserved_filenames)

    def process_file(self, filename: str, errors: dict[str, list[str]]) -> tuple[ReportMetadata, str | None]:
        """Run normalize, correct, validate, extract and rename for one blob.

        Validation defects and rename collisions are appended to ``errors``;
        unreadable or unrecognizable files raise.
        """
        try:
            raw = self.store.read_json(filename)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidFormat(f"Invalid JSON: {exc}") from exc

        features = normalize_report(raw)
        fix_skipped_steps_with_duration(features)

        if self.settings.validate_reports:
            defects = validate_report(features)
            if defects:
                errors.setdefault(filename, []).extend(defects)
                logger.info("Validation errors in %s: %s", filename, ", ".join(defects))

        meta = extract_metadata(features, filename, mtime=self.store.mtime(filename))

        renamed_to = None
        if self.settings.organize_files:
            try:
                renamed_to = assign_identifier(self.store, meta, filename)
            except FilenameCollision as exc:
                errors.setdefault(filename, []).append(str(exc))
        return meta, renamed_to

    def build(self, excluded: set[str] | None = None) -> CatalogIndex:
        """Rebuild and persist the index. One bad file never fails the rebuild.

        Args:
            excluded: Filenames hidden by the deletion ledger; their blobs are
                left in place but they do not appear in reports or statistics.
        """
        excluded = excluded or set()
        files = [f for f in self.store.list_report_files() if f not in excluded]
        logger.info("Found %d report files (%d hidden by deletion ledger)", len(files), len(excluded))

        reports: list[ReportMetadata] = []
        renames: list[Rename] = []
        errors: dict[str, list[str]] = {}

        for filename in files:
            try:
                meta, renamed_to = self.process_file(filename, errors)
            except CatalogError as exc:
                errors.setdefault(filename, []).append(str(exc))
                logger.warning("Failed to process %s: %s", filename, exc)
                continue
            reports.append(meta)
            if renamed_to:
                renames.append(Rename(**{"from": filename}, to=renamed_to))

        reports = sort_reports_newest_first(reports)
        statistics = generate_statistics(reports) if self.settings.generate_stats else None

        index = CatalogIndex(
            generated=utc_now_iso(),
            version=self.settings.index_version,
            reports=reports,
            statistics=statistics,
            errors=[FileErrors(file=name, errors=errs) for name, errs in errors.items()] or None,
            renames=renames or None,
        )

        write_json_atomic(self.settings.index_path, index.to_dict())
        if statistics is not None:
            write_json_atomic(self.settings.stats_path, statistics.model_dump())

        logger.info(
            "Generated %s with %d reports (%d files with errors, %d renamed)",
            self.settings.index_filename,
            len(reports),
            len(errors),
            len(renames),
        )
        return index

    def load_index(self) -> dict:
        """Read the persisted index; an absent or unreadable index reads as empty."""
        path = self.settings.index_path
        if not path.exists():
            return {"reports": [], "statistics": None}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Error loading index: %s", exc)
            return {"reports": [], "statistics": None}
        if isinstance(data, list):
            # Legacy index: a bare list of report entries
            return {"reports": data, "statistics": None, "version": "1.0.0"}
        return data
