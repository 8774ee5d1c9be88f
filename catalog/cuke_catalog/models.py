"""Data models for the report catalog.

Field names are camelCase to match the JSON consumed by the viewer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class DeletionType(str, Enum):
    SOFT = "soft"
    HARD = "hard"


class ReportMetadata(BaseModel):
    id: str
    name: str = "Automation Test Results"
    date: str | None = None
    size: int = 0
    features: int = 0
    scenarios: int = 0
    steps: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    duration: float = 0
    tags: list[str] = []
    environment: str | None = None
    tool: str | None = None
    version: str | None = None
    hash: str | None = None
    suggestedFilename: str | None = None


class RollupStatistics(BaseModel):
    totalReports: int = 0
    totalFeatures: int = 0
    totalScenarios: int = 0
    totalSteps: int = 0
    totalPassed: int = 0
    totalFailed: int = 0
    totalSkipped: int = 0
    totalDuration: float = 0
    totalSize: int = 0
    averageDuration: str = "0.00"
    passRate: str = "0.00"
    failRate: str = "0.00"
    skipRate: str = "0.00"
    oldestReport: ReportMetadata | None = None
    newestReport: ReportMetadata | None = None
    allTags: list[str] = []
    environments: list[str] = []
    tools: list[str] = []


class FileErrors(BaseModel):
    file: str
    errors: list[str] = []


class Rename(BaseModel):
    from_name: str = Field(alias="from")
    to: str

    model_config = {"populate_by_name": True}


class CatalogIndex(BaseModel):
    generated: str
    version: str
    reports: list[ReportMetadata] = []
    statistics: RollupStatistics | None = None
    errors: list[FileErrors] | None = None
    renames: list[Rename] | None = None

    def to_dict(self) -> dict:
        """Serialize for index.json; empty error/rename lists are omitted."""
        data = self.model_dump(by_alias=True, exclude={"errors", "renames"})
        if self.errors:
            data["errors"] = [e.model_dump() for e in self.errors]
        if self.renames:
            data["renames"] = [r.model_dump(by_alias=True) for r in self.renames]
        return data


class DeletionRecord(BaseModel):
    filename: str
    deletedAt: str = Field(default_factory=lambda: utc_now_iso())
    needsCleanup: bool = True
    type: DeletionType = DeletionType.SOFT
    cleanedUpAt: str | None = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def format_timestamp(moment: datetime) -> str:
    """Canonical ISO-8601 rendering: UTC, millisecond precision, ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 string into an aware datetime, or None if it is not one."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
