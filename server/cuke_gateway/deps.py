"""FastAPI dependencies and error mapping for catalog routes."""

from __future__ import annotations

from fastapi import HTTPException, Request

from cuke_catalog.errors import (
    CatalogError,
    FilenameCollision,
    InvalidFormat,
    NotFound,
    NotFoundInDeletedList,
)

from .app_state import CatalogState, get_state

LOCAL_HOSTS = {"127.0.0.1", "::1", "localhost"}


async def get_catalog_state() -> CatalogState:
    return get_state()


def resolve_soft_delete(request: Request, mode: str, soft: bool | None) -> bool:
    """Pick the deletion type: an explicit selector wins, then the configured mode.

    In ``auto`` mode requests from the operator's own machine hard-delete and
    everything else soft-deletes.
    """
    if soft is not None:
        return soft
    if mode == "soft":
        return True
    if mode == "hard":
        return False
    host = request.client.host if request.client else None
    return host not in LOCAL_HOSTS


def to_http_error(exc: CatalogError) -> HTTPException:
    """Map a catalog error onto the HTTP status a caller should see."""
    if isinstance(exc, InvalidFormat):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, (NotFound, NotFoundInDeletedList)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, FilenameCollision):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
