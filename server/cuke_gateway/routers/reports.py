"""Report upload, listing, search, retrieval, deletion and restore."""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cuke_catalog.errors import CatalogError
from cuke_catalog.search import ReportFilters

from ..app_state import CatalogState
from ..deps import get_catalog_state, resolve_soft_delete, to_http_error
from ..models.api import BulkDeleteRequest, UploadReportRequest
from ..services.batching import run_in_batches

router = APIRouter(prefix="/api", tags=["reports"])


@router.post("/upload-report")
async def upload_report(body: UploadReportRequest, state: CatalogState = Depends(get_catalog_state)) -> dict:
    """Store a report, normalize it and rebuild the index."""
    try:
        return state.orchestrator.ingest_upload(body.reportId, body.reportData, body.name)
    except CatalogError as exc:
        raise to_http_error(exc)
    finally:
        state.after_mutation()


@router.get("/reports")
async def list_reports(state: CatalogState = Depends(get_catalog_state)) -> dict:
    """The persisted index, verbatim."""
    return state.reports.load_index()


# Fixed paths are registered before /reports/{filename} so they are not captured by it.


@router.get("/reports/deleted")
async def deleted_reports(state: CatalogState = Depends(get_catalog_state)) -> dict:
    records = state.orchestrator.deletions.get_deleted_reports()
    return {"success": True, "deletedReports": [r.to_dict() for r in records]}


@router.get("/reports/search")
async def search(
    q: str | None = None,
    status: list[str] = Query(default=[]),
    dateFrom: str | None = None,
    dateTo: str | None = None,
    tags: list[str] = Query(default=[]),
    environment: list[str] = Query(default=[]),
    minDuration: float | None = None,
    maxDuration: float | None = None,
    sortBy: str | None = None,
    order: str = "desc",
    state: CatalogState = Depends(get_catalog_state),
) -> dict:
    filters = ReportFilters(
        status=status,
        dateFrom=dateFrom,
        dateTo=dateTo,
        tags=tags,
        environment=environment,
        minDuration=minDuration,
        maxDuration=maxDuration,
    )
    reports = state.reports.query(q, filters, sortBy, order)
    return {"success": True, "total": len(reports), "reports": reports}


@router.get("/reports/trends")
async def trends(days: int = Query(default=30, ge=1), state: CatalogState = Depends(get_catalog_state)) -> dict:
    return {"success": True, "days": days, "trends": state.reports.trends(days)}


@router.post("/reports/bulk-delete")
async def bulk_delete(
    body: BulkDeleteRequest,
    request: Request,
    state: CatalogState = Depends(get_catalog_state),
) -> dict:
    """Delete many reports in bounded batches; the index is rebuilt once at the end."""
    soft = resolve_soft_delete(request, state.deletion_mode, body.soft)

    async def delete_one(filename: str) -> dict:
        return await asyncio.to_thread(state.orchestrator.delete_report, filename, soft, False)

    try:
        outcome = await run_in_batches(body.filenames, delete_one)
        state.orchestrator.rebuild()
    finally:
        state.after_mutation()
    return {"success": True, "deletionType": "soft" if soft else "hard", **outcome}


@router.get("/reports/{filename}")
async def get_report(filename: str, state: CatalogState = Depends(get_catalog_state)) -> Any:
    """A stored report blob."""
    try:
        return state.reports.load_report(filename)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CatalogError as exc:
        raise to_http_error(exc)


@router.delete("/reports/{filename}")
async def delete_report(
    filename: str,
    request: Request,
    soft: bool | None = None,
    state: CatalogState = Depends(get_catalog_state),
) -> dict:
    """Soft- or hard-delete a report, then rebuild the index."""
    use_soft = resolve_soft_delete(request, state.deletion_mode, soft)
    try:
        return state.orchestrator.delete_report(filename, soft=use_soft)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CatalogError as exc:
        raise to_http_error(exc)
    finally:
        state.after_mutation()


@router.post("/reports/{filename}/restore")
async def restore_report(filename: str, state: CatalogState = Depends(get_catalog_state)) -> dict:
    try:
        return state.orchestrator.restore_report(filename)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CatalogError as exc:
        raise to_http_error(exc)
    finally:
        state.after_mutation()
