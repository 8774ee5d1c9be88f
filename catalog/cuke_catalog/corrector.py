"""Repair steps reported as skipped although they ran."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def _ran(duration: object) -> bool:
    return isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration > 0


def fix_skipped_steps_with_duration(features: list[dict]) -> int:
    """Rewrite ``skipped`` steps with a positive duration to ``passed``, in place.

    Background elements are traversed like any other element.

    Returns the number of corrected steps.
    """
    fixed = 0
    for feature in features:
        if not isinstance(feature, dict):
            continue
        for element in feature.get("elements") or []:
            if not isinstance(element, dict):
                continue
            for step in element.get("steps") or []:
                result = step.get("result") if isinstance(step, dict) else None
                if not isinstance(result, dict):
                    continue
                if result.get("status") == "skipped" and _ran(result.get("duration")):
                    result["status"] = "passed"
                    fixed += 1
                    logger.debug(
                        "Fixed step %s%s (duration %s)",
                        step.get("keyword", ""),
                        step.get("name", ""),
                        result.get("duration"),
                    )
    if fixed:
        logger.info("Auto-fixed %d skipped steps with duration", fixed)
    return fixed
