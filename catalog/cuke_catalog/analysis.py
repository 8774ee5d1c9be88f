"""Maintenance tools for stored reports: step diagnostics and in-place repairs."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .corrector import fix_skipped_steps_with_duration
from .errors import InvalidFormat
from .normalizer import needs_format_fix, normalize_report
from .storage import ReportStore, write_json_atomic

logger = logging.getLogger(__name__)

STATUS_BUCKETS = ("passed", "failed", "skipped", "pending", "undefined")


def analyze_step_results(features: list[dict]) -> dict:
    """Step status distribution and likely causes of misleading results.

    Unlike the index statistics, every element is counted here (backgrounds
    included) and a step without ``result.status`` lands in ``undefined``.
    """
    counts = {bucket: 0 for bucket in STATUS_BUCKETS}
    counts["other"] = 0
    scenarios = 0
    steps = 0
    missing_status: list[str] = []
    first_step_skipped: list[str] = []

    for feature in features:
        if not isinstance(feature, dict):
            continue
        for element in feature.get("elements") or []:
            if not isinstance(element, dict):
                continue
            scenarios += 1
            for position, step in enumerate(element.get("steps") or []):
                if not isinstance(step, dict):
                    continue
                steps += 1
                result = step.get("result") or {}
                status = result.get("status") or "undefined"
                counts[status if status in counts else "other"] += 1
                label = f"{step.get('keyword', '')}{step.get('name', '')}".strip()
                if not result.get("status"):
                    missing_status.append(label)
                if status == "skipped" and position == 0:
                    first_step_skipped.append(element.get("name") or "Unnamed")

    issues: list[str] = []
    if counts["skipped"] > 0 and counts["passed"] == 0:
        issues.append("All steps are skipped - this suggests a configuration or setup issue")
    if counts["undefined"] > 0:
        issues.append("Some steps have undefined status - missing result.status field")
    if counts["skipped"] > counts["passed"] > 0:
        issues.append("More skipped than passed steps - check for conditional logic or failed preconditions")
    if steps == 0:
        issues.append("No steps found - empty test scenarios")

    distribution = {
        status: {"count": count, "percentage": round(count / steps * 100, 1) if steps else 0.0}
        for status, count in counts.items()
        if count > 0
    }
    return {
        "features": len(features),
        "scenarios": scenarios,
        "steps": steps,
        "statusCounts": counts,
        "distribution": distribution,
        "issues": issues,
        "stepsMissingStatus": missing_status,
        "scenariosWithSkippedFirstStep": first_step_skipped,
    }


def load_features(path: Path) -> list[dict]:
    """Read a report file from anywhere on disk and normalize it."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidFormat(f"Invalid JSON in {path}: {exc}") from exc
    return normalize_report(raw)


def fix_skipped_file(path: Path, output: Path | None = None) -> int:
    """Correct a report file, writing to ``output`` (default ``<name>_fixed.json``).

    Nothing is written when no step needed fixing.
    """
    path = Path(path)
    features = load_features(path)
    fixed = fix_skipped_steps_with_duration(features)
    if fixed:
        target = Path(output) if output else path.with_name(f"{path.stem}_fixed.json")
        write_json_atomic(target, features)
        logger.info("Fixed %d steps; saved to %s", fixed, target)
    else:
        logger.info("No steps needed fixing in %s", path.name)
    return fixed


def fix_report_formats(store: ReportStore) -> list[dict]:
    """Rewrite wrapper-shaped or single-feature blobs as bare feature lists."""
    processed: list[dict] = []
    for filename in store.list_report_files():
        try:
            raw = store.read_json(filename)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            processed.append({"file": filename, "action": "error", "error": str(exc)})
            logger.error("Error processing %s: %s", filename, exc)
            continue

        if needs_format_fix(raw):
            store.write_json(filename, normalize_report(raw))
            processed.append({"file": filename, "action": "fixed"})
            logger.info("Fixed format: %s", filename)
        elif isinstance(raw, list):
            processed.append({"file": filename, "action": "skipped", "reason": "already correct format"})
        else:
            processed.append({"file": filename, "action": "skipped", "reason": "unknown format"})
            logger.warning("Unknown format: %s", filename)
    return processed
