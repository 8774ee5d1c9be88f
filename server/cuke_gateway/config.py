"""Environment-based configuration for the report gateway."""

from __future__ import annotations

import os
from pathlib import Path

DELETION_MODES = ("auto", "soft", "hard")


class GatewayConfig:
    """Gateway configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.reports_dir = Path(os.environ.get("CUKE_REPORTS_DIR", Path(os.getcwd()) / "public" / "TestResultsJsons"))
        self.host = os.environ.get("CUKE_GATEWAY_HOST", "0.0.0.0")
        self.port = int(os.environ.get("CUKE_GATEWAY_PORT", "3001"))
        self.log_level = os.environ.get("CUKE_LOG_LEVEL", "INFO").upper()

        # Index/report cache lifetime
        self.cache_ttl_seconds = float(os.environ.get("CUKE_CACHE_TTL_SECONDS", "300"))

        # auto: hard delete for requests from this machine, soft delete otherwise
        mode = os.environ.get("CUKE_DELETION_MODE", "auto").lower()
        self.deletion_mode = mode if mode in DELETION_MODES else "auto"

        # CORS origins (comma-separated)
        origins = os.environ.get("CUKE_CORS_ORIGINS", "")
        self.cors_origins: list[str] = [o.strip() for o in origins.split(",") if o.strip()] if origins else ["*"]


# Singleton
config = GatewayConfig()
