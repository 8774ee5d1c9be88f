"""Process-wide catalog state shared by the routers."""

from __future__ import annotations

import logging
from pathlib import Path

from cuke_catalog.config import load_catalog_settings
from cuke_catalog.ingestion import CatalogOrchestrator

from .config import config
from .services.report_cache import TTLCache
from .services.report_service import ReportService

logger = logging.getLogger(__name__)


class CatalogState:
    """Holds the orchestrator and cached read service for one reports directory."""

    def __init__(self, reports_dir: Path, cache_ttl: float = 300.0, deletion_mode: str = "auto") -> None:
        self.reports_dir = Path(reports_dir)
        self.deletion_mode = deletion_mode
        self.orchestrator = CatalogOrchestrator(load_catalog_settings(self.reports_dir))
        self.cache = TTLCache(ttl=cache_ttl)
        self.reports = ReportService(self.orchestrator, self.cache)

    def ensure_index(self) -> None:
        """Build the index on first start so list requests never see a missing file."""
        self.orchestrator.store.ensure_dir()
        if not self.orchestrator.settings.index_path.exists():
            logger.info("No index found in %s; generating", self.reports_dir)
            self.orchestrator.rebuild()

    def after_mutation(self) -> None:
        self.reports.invalidate()


_state: CatalogState | None = None


def get_state() -> CatalogState:
    """Lazily create the state from the gateway configuration."""
    global _state
    if _state is None:
        _state = CatalogState(config.reports_dir, config.cache_ttl_seconds, config.deletion_mode)
    return _state
