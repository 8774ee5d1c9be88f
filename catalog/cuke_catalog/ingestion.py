"""Ingestion orchestrator: uploads, rebuilds, deletes and restores.

All mutating operations take one rebuild lock so renames and index writes
from different requests never interleave.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

from .config import CatalogSettings
from .corrector import fix_skipped_steps_with_duration
from .deletion import DeletionManager
from .errors import InvalidFormat
from .index_builder import IndexBuilder
from .metadata import filename_timestamp, sanitize_filename
from .models import CatalogIndex, DeletionType, format_timestamp
from .normalizer import normalize_report
from .storage import ReportStore

logger = logging.getLogger(__name__)


class CatalogOrchestrator:
    """Coordinates the per-file pipeline and full index rebuilds for one directory."""

    def __init__(self, settings: CatalogSettings) -> None:
        self.settings = settings
        self.store = ReportStore(settings.reports_dir, settings.reserved_filenames)
        self.builder = IndexBuilder(settings, self.store)
        self.deletions = DeletionManager(settings, self.store)
        self._lock = threading.RLock()

    # ── Rebuild ──────────────────────────────────────────────────────────

    def rebuild(self) -> CatalogIndex:
        """Regenerate index.json and stats.json from every visible blob."""
        with self._lock:
            self.store.ensure_dir()
            return self.builder.build(excluded=self.deletions.soft_deleted_filenames())

    def load_index(self) -> dict:
        return self.builder.load_index()

    # ── Upload ───────────────────────────────────────────────────────────

    def ingest_upload(self, report_id: str, report_data: Any, name: str | None = None) -> dict:
        """Store an uploaded report and rebuild the index.

        The blob is written normalized and corrected under
        ``<reportId>-<timestamp>.json``; the rebuild may then move it to its
        canonical name.

        Raises:
            InvalidFormat: missing id, missing ``features`` array, or an
                unrecognized shape.
        """
        if not report_id or report_data is None:
            raise InvalidFormat("Missing required fields: reportId and reportData")
        if not isinstance(report_data, dict) or not isinstance(report_data.get("features"), list):
            raise InvalidFormat("Invalid report data: missing features array")

        features = normalize_report(report_data)
        fixed = fix_skipped_steps_with_duration(features)

        stem = sanitize_filename(report_id) or "report"
        if not self.store.is_report_name(f"{stem}.json"):
            stem = f"report-{stem}"
        stamp = filename_timestamp(format_timestamp(datetime.now(timezone.utc)))
        with self._lock:
            filename = f"{stem}-{stamp}.json"
            counter = 2
            while self.store.exists(filename):
                filename = f"{stem}-{stamp}-{counter}.json"
                counter += 1
            self.store.write_json(filename, features)
            logger.info("Report saved: %s (format normalized, %d steps fixed)", filename, fixed)

            index = self.rebuild()

        final = filename
        for rename in index.renames or []:
            if rename.from_name == filename:
                final = rename.to
        return {
            "success": True,
            "message": "Report uploaded successfully",
            "filename": final,
            "reportId": report_id,
            "name": name,
            "fixedSteps": fixed,
            "url": f"/TestResultsJsons/{final}",
        }

    # ── Deletion ─────────────────────────────────────────────────────────

    def delete_report(self, filename: str, soft: bool, rebuild: bool = True) -> dict:
        """Apply a soft or hard delete, then rebuild the index.

        Raises:
            NotFound: hard delete of a blob that does not exist.
        """
        with self._lock:
            if soft:
                result = self.deletions.mark_as_deleted(filename)
            else:
                result = self.deletions.delete_report_file(filename)
                result["index"] = self.deletions.remove_from_index(filename)
            result["deletionType"] = result["type"]
            if rebuild:
                self.rebuild()
            return result

    def restore_report(self, filename: str) -> dict:
        """Restore a soft-deleted report and rebuild on success."""
        with self._lock:
            result = self.deletions.restore_report(filename)
            self.rebuild()
            return result

    def cleanup(self) -> dict:
        """Deploy-time sweep: hard-delete everything still marked for cleanup."""
        with self._lock:
            result = self.deletions.sweep()
            self.rebuild()
            return result

    # ── Diagnostics ──────────────────────────────────────────────────────

    def sync_status(self) -> dict:
        """Read-only view over the index and the deletion ledger."""
        index = self.load_index()
        records = self.deletions.get_deleted_reports()
        soft = [r for r in records if r.type == DeletionType.SOFT]
        return {
            "activeReports": len(index.get("reports") or []),
            "softDeleted": len(soft),
            "pendingCleanup": sum(1 for r in records if r.needsCleanup),
            "hardDeleted": len(records) - len(soft),
            "blobsOnDisk": len(self.store.list_report_files()),
            "lastGenerated": index.get("generated"),
        }
