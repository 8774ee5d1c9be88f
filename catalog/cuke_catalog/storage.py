"""Directory-backed blob store for report files.

Each report is a ``*.json`` file directly under the reports directory. Catalog
artifacts (index, stats, ledger) and hidden entries live alongside but are
never listed as reports.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from .errors import FilenameCollision, IOFailure, NotFound

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, data: Any) -> None:
    """Write pretty-printed JSON via a temp file and a single replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise IOFailure(f"Failed to write {path.name}: {exc}") from exc


class ReportStore:
    """Key-value access to report blobs, keyed by filename."""

    def __init__(self, reports_dir: "Path | str", reserved: "set[str] | None" = None) -> None:
        self.reports_dir = Path(reports_dir)
        self.reserved = set(reserved or ())

    def ensure_dir(self) -> None:
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def is_report_name(self, filename: str) -> bool:
        """True for names that address a report blob rather than a catalog artifact."""
        return (
            filename.endswith(".json")
            and not filename.startswith(".")
            and not filename.startswith("generate-index")
            and filename not in self.reserved
        )

    def path(self, filename: str) -> Path:
        """Resolve a report filename to its blob path.

        Raises:
            ValueError: ``filename`` is not a bare name.
            NotFound: ``filename`` names a hidden file or catalog artifact.
        """
        if not filename or filename in (".", "..") or "/" in filename or "\\" in filename:
            raise ValueError(f"Invalid report filename: {filename!r}")
        if not self.is_report_name(filename):
            raise NotFound(f"Not a report file: {filename}")
        return self.reports_dir / filename

    def list_report_files(self) -> list[str]:
        """Report filenames in stable (sorted) order."""
        if not self.reports_dir.is_dir():
            return []
        names = []
        for entry in self.reports_dir.iterdir():
            if entry.is_file() and self.is_report_name(entry.name):
                names.append(entry.name)
        return sorted(names)

    def exists(self, filename: str) -> bool:
        return self.path(filename).is_file()

    def read_bytes(self, filename: str) -> bytes:
        path = self.path(filename)
        if not path.is_file():
            raise NotFound(f"Report file not found: {filename}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise IOFailure(f"Failed to read {filename}: {exc}") from exc

    def read_json(self, filename: str) -> Any:
        """Parse a blob. Malformed JSON propagates as ``json.JSONDecodeError``."""
        return json.loads(self.read_bytes(filename).decode("utf-8"))

    def write_json(self, filename: str, data: Any) -> None:
        self.ensure_dir()
        write_json_atomic(self.path(filename), data)

    def mtime(self, filename: str) -> float:
        try:
            return self.path(filename).stat().st_mtime
        except OSError as exc:
            raise IOFailure(f"Failed to stat {filename}: {exc}") from exc

    def delete(self, filename: str) -> None:
        path = self.path(filename)
        if not path.is_file():
            raise NotFound(f"Report file not found: {filename}")
        try:
            path.unlink()
        except OSError as exc:
            raise IOFailure(f"Failed to delete {filename}: {exc}") from exc

    def copy_to(self, filename: str, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.path(filename), destination)

    def rename_no_clobber(self, source: str, target: str) -> None:
        """Rename ``source`` to ``target``; never overwrites an existing blob.

        A hard link claims the target name atomically, so two renames racing
        for the same target cannot both succeed.
        """
        src = self.path(source)
        dst = self.path(target)
        if not src.is_file():
            raise NotFound(f"Report file not found: {source}")
        try:
            os.link(src, dst)
        except FileExistsError as exc:
            raise FilenameCollision(source, target) from exc
        except OSError as exc:
            raise IOFailure(f"Failed to rename {source} -> {target}: {exc}") from exc
        try:
            src.unlink()
        except OSError as exc:
            dst.unlink(missing_ok=True)
            raise IOFailure(f"Failed to rename {source} -> {target}: {exc}") from exc
        logger.info("Renamed: %s -> %s", source, target)
