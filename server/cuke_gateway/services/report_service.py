"""Cached read access to the persisted index, stats and report blobs."""

from __future__ import annotations

import json
import logging
from typing import Any

from cuke_catalog.errors import InvalidFormat
from cuke_catalog.ingestion import CatalogOrchestrator
from cuke_catalog.search import ReportFilters, filter_reports, report_trends, search_reports, sort_reports

from .report_cache import TTLCache

logger = logging.getLogger(__name__)

EMPTY_STATISTICS = {
    "totalReports": 0,
    "totalScenarios": 0,
    "totalSteps": 0,
    "totalPassed": 0,
    "totalFailed": 0,
    "totalSkipped": 0,
    "passRate": "0.00",
    "failRate": "0.00",
    "skipRate": "0.00",
}


class ReportService:
    """Serves catalog reads through a TTL cache; mutations must call ``invalidate``."""

    def __init__(self, orchestrator: CatalogOrchestrator, cache: TTLCache) -> None:
        self.orchestrator = orchestrator
        self.cache = cache

    def load_index(self) -> dict:
        return self.cache.get_or_load("index", self._read_index)

    def _read_index(self) -> dict:
        index = self.orchestrator.load_index()
        if not index.get("reports") and index.get("statistics") is None:
            index = {**index, "statistics": dict(EMPTY_STATISTICS)}
        return index

    def load_report(self, filename: str) -> Any:
        """Stored report content. Raises NotFound / InvalidFormat."""
        def _read() -> Any:
            try:
                return self.orchestrator.store.read_json(filename)
            except json.JSONDecodeError as exc:
                raise InvalidFormat(f"Invalid JSON in {filename}: {exc}") from exc

        return self.cache.get_or_load(f"report-{filename}", _read)

    def load_statistics(self) -> dict | None:
        path = self.orchestrator.settings.stats_path
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Statistics not available: %s", exc)
            return None

    def query(
        self,
        q: str | None = None,
        filters: ReportFilters | None = None,
        sort_by: str | None = None,
        order: str = "desc",
    ) -> list[dict]:
        reports = self.load_index().get("reports") or []
        reports = search_reports(reports, q)
        if filters is not None:
            reports = filter_reports(reports, filters)
        if sort_by:
            reports = sort_reports(reports, sort_by, order)
        return reports

    def trends(self, days: int = 30) -> list[dict]:
        return report_trends(self.load_index().get("reports") or [], days)

    def invalidate(self) -> None:
        self.cache.clear()
