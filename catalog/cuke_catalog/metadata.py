"""Per-report metadata extraction."""

from __future__ import annotations

import hashlib
import json
import re
from datetime import datetime, timezone

from .models import ReportMetadata, format_timestamp, parse_timestamp

DEFAULT_REPORT_NAME = "Automation Test Results"

# Step-duration sums above this are taken to be nanoseconds and converted to
# seconds; anything at or below is reported unchanged.
NANOSECOND_THRESHOLD = 1_000_000

MAX_FILENAME_PART = 80


def sanitize_filename(text: str) -> str:
    """Reduce text to ``[A-Za-z0-9_-]`` for use as a path segment."""
    value = re.sub(r"\s+", "-", text)
    value = re.sub(r"[^a-zA-Z0-9\-_]", "", value)
    value = re.sub(r"-+", "-", value)
    value = value.strip("-")
    return value[:MAX_FILENAME_PART].strip("-")


def filename_timestamp(date: str) -> str:
    """Render a report date as a filename-safe token (``:``, ``.`` and ``+`` become ``-``)."""
    return sanitize_filename(re.sub(r"[:.+]", "-", date))


def suggested_filename(name: str, date: str) -> str:
    stem = sanitize_filename(name) or sanitize_filename(DEFAULT_REPORT_NAME)
    return f"{stem}-{filename_timestamp(date)}.json"


def serialize_compact(features: list) -> bytes:
    return json.dumps(features, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def content_hash(payload: bytes) -> str:
    """Change-detection checksum; not an integrity guarantee."""
    return hashlib.md5(payload).hexdigest()


def clean_tag(tag: object) -> str | None:
    """Bare tag text from either ``"@smoke"`` or ``{"name": "@smoke"}``."""
    if isinstance(tag, dict):
        tag = tag.get("name")
    if not isinstance(tag, str):
        return None
    cleaned = re.sub(r"[@{}]", "", tag)
    return cleaned or None


def _add_tags(target: set[str], tags: object) -> None:
    if not isinstance(tags, list):
        return
    for tag in tags:
        cleaned = clean_tag(tag)
        if cleaned:
            target.add(cleaned)


def _text(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _step_status(step: dict) -> str | None:
    result = step.get("result")
    if isinstance(result, dict) and result.get("status"):
        return result["status"]
    return step.get("status") or None


def _step_duration(step: dict) -> float:
    result = step.get("result")
    if not isinstance(result, dict):
        return 0
    duration = result.get("duration")
    if isinstance(duration, (int, float)) and not isinstance(duration, bool):
        return duration
    return 0


def extract_metadata(
    features: list[dict],
    filename: str,
    mtime: float | None = None,
) -> ReportMetadata:
    """Build the metadata record for one normalized report.

    Args:
        features: Normalized (and usually corrected) feature list.
        filename: Current blob filename; its stem becomes the id.
        mtime: Blob modification time, used when the report carries no timestamp.
    """
    payload = serialize_compact(features)
    meta = ReportMetadata(
        id=re.sub(r"\.json$", "", filename),
        size=len(payload),
        hash=content_hash(payload),
        features=len(features),
    )

    tags: set[str] = set()
    earliest: datetime | None = None
    duration: float = 0
    feature_timestamp: str | None = None

    for feature in features:
        if not isinstance(feature, dict):
            continue
        if _text(feature.get("name")) and meta.name == DEFAULT_REPORT_NAME:
            meta.name = feature["name"]
        _add_tags(tags, feature.get("tags"))

        for scenario in feature.get("elements") or feature.get("scenarios") or []:
            if not isinstance(scenario, dict) or scenario.get("type") == "background":
                continue
            meta.scenarios += 1
            _add_tags(tags, scenario.get("tags"))

            started = parse_timestamp(scenario.get("start_timestamp"))
            if started is not None and (earliest is None or started < earliest):
                earliest = started
                meta.date = scenario["start_timestamp"]

            for step in scenario.get("steps") or []:
                if not isinstance(step, dict):
                    continue
                meta.steps += 1
                status = _step_status(step)
                if status == "passed":
                    meta.passed += 1
                elif status == "failed":
                    meta.failed += 1
                elif status == "skipped":
                    meta.skipped += 1
                duration += _step_duration(step)

        info = feature.get("metadata")
        if isinstance(info, dict):
            meta.environment = meta.environment or _text(info.get("environment"))
            meta.tool = meta.tool or _text(info.get("tool"))
            meta.version = meta.version or _text(info.get("version"))
            if feature_timestamp is None and _text(info.get("timestamp")):
                feature_timestamp = info["timestamp"]

    if duration > NANOSECOND_THRESHOLD:
        duration = duration / 1e9
    meta.duration = duration
    meta.tags = sorted(tags)

    if meta.date is None:
        meta.date = feature_timestamp
    if meta.date is None:
        moment = datetime.fromtimestamp(mtime, tz=timezone.utc) if mtime is not None else datetime.now(timezone.utc)
        meta.date = format_timestamp(moment)

    meta.suggestedFilename = suggested_filename(meta.name, meta.date)
    return meta
