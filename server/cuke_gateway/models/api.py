"""Request bodies for the report API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class UploadReportRequest(BaseModel):
    reportId: str | None = None
    reportData: Any = None
    name: str | None = None


class BulkDeleteRequest(BaseModel):
    filenames: list[str]
    soft: bool | None = None  # None: resolved by the deletion policy
