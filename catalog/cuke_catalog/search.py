"""Search, filter, sort and trend helpers over index report entries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from .models import parse_timestamp

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SORT_FIELDS = ("date", "name", "duration", "scenarios", "passRate")


class ReportFilters(BaseModel):
    status: list[str] = []  # "passed" | "failed" | "mixed"
    dateFrom: str | None = None
    dateTo: str | None = None
    tags: list[str] = []
    environment: list[str] = []
    minDuration: float | None = None
    maxDuration: float | None = None


def search_reports(reports: list[dict], query: str | None) -> list[dict]:
    """Case-insensitive substring match over name, id, tags, environment and tool."""
    if not query:
        return reports
    term = query.lower()

    def matches(report: dict) -> bool:
        fields = [report.get("name"), report.get("id"), report.get("environment"), report.get("tool")]
        fields.extend(report.get("tags") or [])
        return any(isinstance(f, str) and term in f.lower() for f in fields)

    return [r for r in reports if matches(r)]


def _has_status(report: dict, status: str) -> bool:
    passed = report.get("passed") or 0
    failed = report.get("failed") or 0
    if status == "passed":
        return failed == 0 and passed > 0
    if status == "failed":
        return failed > 0
    if status == "mixed":
        return passed > 0 and failed > 0
    return False


def filter_reports(reports: list[dict], filters: ReportFilters) -> list[dict]:
    date_from = parse_timestamp(filters.dateFrom)
    date_to = parse_timestamp(filters.dateTo)
    result = []
    for report in reports:
        if filters.status and not any(_has_status(report, s) for s in filters.status):
            continue
        if date_from or date_to:
            when = parse_timestamp(report.get("date"))
            if when is None:
                continue
            if date_from and when < date_from:
                continue
            if date_to and when > date_to:
                continue
        if filters.tags and not any(tag in (report.get("tags") or []) for tag in filters.tags):
            continue
        if filters.environment and report.get("environment") not in filters.environment:
            continue
        duration = report.get("duration") or 0
        if filters.minDuration is not None and duration < filters.minDuration:
            continue
        if filters.maxDuration is not None and duration > filters.maxDuration:
            continue
        result.append(report)
    return result


def _sort_value(report: dict, sort_by: str):
    if sort_by == "date":
        return parse_timestamp(report.get("date")) or _EPOCH
    if sort_by == "name":
        return (report.get("name") or "").lower()
    if sort_by == "passRate":
        steps = report.get("steps") or 0
        return (report.get("passed") or 0) / steps if steps else 0
    return report.get(sort_by) or 0


def sort_reports(reports: list[dict], sort_by: str, order: str = "desc") -> list[dict]:
    """Stable sort on one of ``SORT_FIELDS``; unknown fields keep the input order."""
    if sort_by not in SORT_FIELDS:
        return list(reports)
    return sorted(reports, key=lambda r: _sort_value(r, sort_by), reverse=(order != "asc"))


def report_trends(reports: list[dict], days: int = 30, now: datetime | None = None) -> list[dict]:
    """Per-day totals for reports dated within the last ``days`` days, oldest day first."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)
    buckets: dict[str, dict] = {}
    for report in reports:
        when = parse_timestamp(report.get("date"))
        if when is None or when < cutoff:
            continue
        key = when.astimezone(timezone.utc).date().isoformat()
        day = buckets.setdefault(
            key,
            {"date": key, "reports": 0, "totalScenarios": 0, "totalPassed": 0, "totalFailed": 0, "totalDuration": 0},
        )
        day["reports"] += 1
        day["totalScenarios"] += report.get("scenarios") or 0
        day["totalPassed"] += report.get("passed") or 0
        day["totalFailed"] += report.get("failed") or 0
        day["totalDuration"] += report.get("duration") or 0
    return [buckets[k] for k in sorted(buckets)]
