"""Sync status, statistics and manual index regeneration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cuke_catalog.errors import CatalogError

from ..app_state import CatalogState
from ..deps import get_catalog_state, to_http_error

router = APIRouter(prefix="/api", tags=["sync"])


@router.get("/sync/status")
async def sync_status(state: CatalogState = Depends(get_catalog_state)) -> dict:
    """Counts of active, soft-deleted and pending-cleanup reports."""
    return {"success": True, "syncStatus": state.orchestrator.sync_status()}


@router.get("/stats")
async def get_stats(state: CatalogState = Depends(get_catalog_state)) -> dict | None:
    return state.reports.load_statistics()


@router.post("/regenerate-index")
async def regenerate_index(state: CatalogState = Depends(get_catalog_state)) -> dict:
    try:
        index = state.orchestrator.rebuild()
    except CatalogError as exc:
        raise to_http_error(exc)
    finally:
        state.after_mutation()
    return {
        "success": True,
        "message": "Index regenerated successfully",
        "reports": len(index.reports),
        "errors": len(index.errors or []),
        "renames": len(index.renames or []),
    }
