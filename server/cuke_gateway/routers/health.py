"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cuke_catalog.models import utc_now_iso

from ..app_state import CatalogState
from ..deps import get_catalog_state

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(state: CatalogState = Depends(get_catalog_state)) -> dict:
    """Report liveness, the reports directory and cache occupancy."""
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": utc_now_iso(),
        "reportsDir": str(state.reports_dir),
        "deletionMode": state.deletion_mode,
        "cache": state.cache.stats(),
    }
