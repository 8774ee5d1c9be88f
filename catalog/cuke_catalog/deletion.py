"""Soft/hard deletion ledger, bounded backups, and index pruning.

Per-report lifecycle::

    active --mark_as_deleted--> soft-deleted --restore_report--> active
    active | soft-deleted --delete_report_file--> hard-deleted (terminal)

The ledger (``.deleted-reports.json``) is the source of truth for visibility;
the index is rebuilt from it, never the other way around.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from pathlib import Path

from .config import CatalogSettings
from .errors import IOFailure, NotFound, NotFoundInDeletedList
from .metadata import filename_timestamp
from .models import DeletionRecord, DeletionType, utc_now_iso
from .storage import ReportStore, write_json_atomic

logger = logging.getLogger(__name__)

BACKUP_MARKER = "-backup-"


class DeletionManager:
    """Maintains the deletion ledger and backup set for one reports directory."""

    def __init__(self, settings: CatalogSettings, store: ReportStore | None = None) -> None:
        self.settings = settings
        self.store = store or ReportStore(settings.reports_dir, settings.reserved_filenames)
        self.ledger_path = settings.ledger_path
        self.backup_dir = settings.backup_dir

    # ── Ledger persistence ───────────────────────────────────────────────

    def get_deleted_reports(self) -> list[DeletionRecord]:
        """All deletion records, in the order they were appended."""
        if not self.ledger_path.exists():
            return []
        try:
            data = json.loads(self.ledger_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Error reading deleted reports: %s", exc)
            return []
        records = []
        for entry in data if isinstance(data, list) else []:
            try:
                records.append(DeletionRecord(**entry))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed deletion record %r: %s", entry, exc)
        return records

    def save_deleted_reports(self, records: list[DeletionRecord]) -> None:
        write_json_atomic(self.ledger_path, [r.to_dict() for r in records])

    def _find(self, records: list[DeletionRecord], filename: str) -> DeletionRecord | None:
        return next((r for r in records if r.filename == filename), None)

    def is_report_deleted(self, filename: str) -> bool:
        return self._find(self.get_deleted_reports(), filename) is not None

    def soft_deleted_filenames(self) -> set[str]:
        """Filenames hidden from the index by a soft-delete record."""
        return {r.filename for r in self.get_deleted_reports() if r.type == DeletionType.SOFT}

    # ── State transitions ────────────────────────────────────────────────

    def mark_as_deleted(self, filename: str) -> dict:
        """Soft delete: record intent, leave the blob untouched. Idempotent.

        A hard record whose blob has since reappeared (re-upload or rename) is
        history, not current state: it is replaced by a fresh soft record.

        Raises:
            NotFound: ``filename`` names a catalog artifact, not a report.
        """
        self.store.path(filename)
        records = self.get_deleted_reports()
        existing = self._find(records, filename)
        if existing is not None and existing.type == DeletionType.HARD and self.store.exists(filename):
            records.remove(existing)
            logger.info("Replacing hard-delete record for reappeared report: %s", filename)
        elif existing is not None:
            return {
                "success": True,
                "type": DeletionType.SOFT.value,
                "filename": filename,
                "message": "Report already marked as deleted",
                "alreadyDeleted": True,
            }

        record = DeletionRecord(filename=filename, needsCleanup=True, type=DeletionType.SOFT)
        records.append(record)
        self.save_deleted_reports(records)
        logger.info("Soft deleted report: %s", filename)
        return {
            "success": True,
            "type": DeletionType.SOFT.value,
            "filename": filename,
            "message": "Report marked for deletion",
            "alreadyDeleted": False,
            "deletionRecord": record.to_dict(),
        }

    def delete_report_file(self, filename: str) -> dict:
        """Hard delete: back up, then remove the blob.

        Raises:
            NotFound: the blob does not exist, or ``filename`` names a catalog artifact.
        """
        if not self.store.exists(filename):
            raise NotFound(f"Report file not found: {filename}")

        backup = self.create_backup(filename)
        self.store.delete(filename)

        records = self.get_deleted_reports()
        record = self._find(records, filename)
        if record is not None:
            record.type = DeletionType.HARD
            record.needsCleanup = False
            record.cleanedUpAt = utc_now_iso()
            self.save_deleted_reports(records)

        logger.info("Hard deleted report file: %s", filename)
        return {
            "success": True,
            "type": DeletionType.HARD.value,
            "filename": filename,
            "message": "Report file deleted successfully",
            "backup": backup.name if backup else None,
        }

    def restore_report(self, filename: str) -> dict:
        """Return a soft-deleted report to the active set.

        Raises:
            NotFoundInDeletedList: ``filename`` is not soft-deleted; this
                includes a report hard-deleted earlier whose blob has reappeared.
            NotFound: the report was hard-deleted and its blob is gone, or
                ``filename`` names a catalog artifact.
        """
        self.store.path(filename)
        records = self.get_deleted_reports()
        record = self._find(records, filename)
        if record is None:
            raise NotFoundInDeletedList(f"Report not found in deleted list: {filename}")
        if record.type == DeletionType.HARD:
            if self.store.exists(filename):
                raise NotFoundInDeletedList(f"Report is active, not soft-deleted: {filename}")
            raise NotFound(f"Report was permanently deleted: {filename}")

        records.remove(record)
        self.save_deleted_reports(records)
        logger.info("Restored report: %s", filename)
        return {"success": True, "filename": filename, "message": "Report restored successfully"}

    def remove_from_index(self, filename: str) -> dict:
        """Drop a report's entry from the persisted index. No-op when absent."""
        index_path = self.settings.index_path
        report_id = re.sub(r"\.json$", "", filename)
        if not index_path.exists():
            return {"success": True, "found": False, "removedCount": 0, "reportId": report_id}
        try:
            index = json.loads(index_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise IOFailure(f"Failed to load index: {exc}") from exc

        reports = index.get("reports") if isinstance(index, dict) else None
        if not reports:
            logger.info("No index found or empty reports array")
            return {"success": True, "found": False, "removedCount": 0, "reportId": report_id}

        kept = [r for r in reports if r.get("id") != report_id]
        removed = len(reports) - len(kept)
        if removed:
            index["reports"] = kept
            if index.get("statistics"):
                index["statistics"]["totalReports"] = len(kept)
            index["generated"] = utc_now_iso()
            write_json_atomic(index_path, index)
            logger.info("Removed %d report(s) from index: %s", removed, report_id)
        else:
            logger.info("Report not found in index: %s", report_id)
        return {"success": True, "found": removed > 0, "removedCount": removed, "reportId": report_id}

    # ── Deploy-time cleanup ──────────────────────────────────────────────

    def get_reports_needing_cleanup(self) -> list[DeletionRecord]:
        return [r for r in self.get_deleted_reports() if r.needsCleanup]

    def mark_reports_as_cleaned_up(self, filenames: list[str]) -> int:
        records = self.get_deleted_reports()
        wanted = set(filenames)
        marked = 0
        for record in records:
            if record.filename in wanted:
                record.needsCleanup = False
                record.cleanedUpAt = utc_now_iso()
                marked += 1
        self.save_deleted_reports(records)
        logger.info("Marked %d reports as cleaned up", marked)
        return marked

    def sweep(self) -> dict:
        """Hard-delete every report accumulated while soft delete was the policy."""
        pending = self.get_reports_needing_cleanup()
        deleted: list[str] = []
        missing: list[str] = []
        failed: list[dict] = []
        for record in pending:
            try:
                self.delete_report_file(record.filename)
                deleted.append(record.filename)
            except NotFound:
                missing.append(record.filename)
            except IOFailure as exc:
                failed.append({"filename": record.filename, "error": str(exc)})
                logger.warning("Cleanup failed for %s: %s", record.filename, exc)

        done = deleted + missing
        records = self.get_deleted_reports()
        for record in records:
            if record.filename in done:
                record.type = DeletionType.HARD
                record.needsCleanup = False
                record.cleanedUpAt = record.cleanedUpAt or utc_now_iso()
        self.save_deleted_reports(records)
        for filename in deleted:
            self.remove_from_index(filename)
        return {"deleted": deleted, "missing": missing, "failed": failed}

    # ── Backups ──────────────────────────────────────────────────────────

    def create_backup(self, filename: str) -> Path | None:
        """Copy a blob into the backup directory. Failures are logged, never raised."""
        try:
            stem = re.sub(r"\.json$", "", filename)
            backup_path = self.backup_dir / f"{stem}{BACKUP_MARKER}{filename_timestamp(utc_now_iso())}.json"
            counter = 2
            while backup_path.exists():
                backup_path = backup_path.with_name(
                    f"{stem}{BACKUP_MARKER}{filename_timestamp(utc_now_iso())}-{counter}.json"
                )
                counter += 1
            newest = self._newest_backup_mtime_ns()
            self.store.copy_to(filename, backup_path)
            # Keep modification times strictly increasing so eviction follows creation order
            stamp = max(time.time_ns(), newest + 1_000)
            os.utime(backup_path, ns=(stamp, stamp))
            logger.info("Created backup: %s", backup_path.name)
            self.clean_old_backups()
            return backup_path
        except OSError as exc:
            logger.error("Error creating backup for %s: %s", filename, exc)
            return None

    def list_backups(self) -> list[Path]:
        """Backup files, newest first by modification time."""
        if not self.backup_dir.is_dir():
            return []
        backups = [p for p in self.backup_dir.iterdir() if p.is_file() and BACKUP_MARKER in p.name]
        return sorted(backups, key=lambda p: (p.stat().st_mtime_ns, p.name), reverse=True)

    def _newest_backup_mtime_ns(self) -> int:
        backups = self.list_backups()
        return backups[0].stat().st_mtime_ns if backups else 0

    def clean_old_backups(self, keep: int | None = None) -> list[str]:
        keep = self.settings.backup_retention if keep is None else keep
        removed = []
        try:
            for path in self.list_backups()[keep:]:
                path.unlink()
                removed.append(path.name)
                logger.info("Cleaned old backup: %s", path.name)
        except OSError as exc:
            logger.error("Error cleaning old backups: %s", exc)
        return removed
