"""Catalog settings loader.

Reads optional overrides from ``.cuke/catalog-config.json`` under the reports
directory, merged over the built-in defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CONFIG_RELATIVE_PATH = Path(".cuke") / "catalog-config.json"

DEFAULTS = {
    "index_filename": "index.json",
    "stats_filename": "stats.json",
    "ledger_filename": ".deleted-reports.json",
    "backup_dirname": ".backups",
    "backup_retention": 10,
    "index_version": "2.0.0",
    "validate_reports": True,
    "generate_stats": True,
    "organize_files": True,
}


class CatalogSettings(BaseModel):
    reports_dir: Path
    index_filename: str = DEFAULTS["index_filename"]
    stats_filename: str = DEFAULTS["stats_filename"]
    ledger_filename: str = DEFAULTS["ledger_filename"]
    backup_dirname: str = DEFAULTS["backup_dirname"]
    backup_retention: int = DEFAULTS["backup_retention"]
    index_version: str = DEFAULTS["index_version"]
    validate_reports: bool = DEFAULTS["validate_reports"]
    generate_stats: bool = DEFAULTS["generate_stats"]
    organize_files: bool = DEFAULTS["organize_files"]

    @property
    def index_path(self) -> Path:
        return self.reports_dir / self.index_filename

    @property
    def stats_path(self) -> Path:
        return self.reports_dir / self.stats_filename

    @property
    def ledger_path(self) -> Path:
        return self.reports_dir / self.ledger_filename

    @property
    def backup_dir(self) -> Path:
        return self.reports_dir / self.backup_dirname

    @property
    def reserved_filenames(self) -> set[str]:
        """Files in the reports directory that are catalog artifacts, not reports."""
        return {self.index_filename, self.stats_filename, self.ledger_filename}


def load_catalog_settings(reports_dir: "Path | str", **overrides) -> CatalogSettings:
    """Load settings for a reports directory: defaults, then config file, then overrides."""
    reports_dir = Path(reports_dir)
    effective = dict(DEFAULTS)

    config_path = reports_dir / CONFIG_RELATIVE_PATH
    if config_path.exists():
        try:
            cfg = json.loads(config_path.read_text(encoding="utf-8"))
            for key, value in cfg.items():
                if key in DEFAULTS and value is not None:
                    effective[key] = value
        except (json.JSONDecodeError, OSError, AttributeError) as exc:
            logger.warning("Ignoring unreadable catalog config %s: %s", config_path, exc)

    effective.update({k: v for k, v in overrides.items() if v is not None})
    return CatalogSettings(reports_dir=reports_dir, **effective)
