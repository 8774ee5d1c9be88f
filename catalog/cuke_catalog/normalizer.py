"""Resolve the accepted raw report shapes into a feature list."""

from __future__ import annotations

from typing import Any

from .errors import InvalidFormat


def normalize_report(raw: Any) -> list[dict]:
    """Return the ordered list of features carried by a raw Cucumber report.

    Accepted shapes:
      - a list of features (returned as-is)
      - ``{"features": [...]}`` (the inner list is returned)
      - a single feature object with ``name`` and ``elements`` (wrapped)

    Raises:
        InvalidFormat: for anything else.
    """
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        features = raw.get("features")
        if isinstance(features, list):
            return features
        if "name" in raw and "elements" in raw:
            return [raw]
    raise InvalidFormat(
        "Invalid Cucumber JSON format: expected an array of features, "
        "an object with a features array, or a single feature"
    )


def needs_format_fix(raw: Any) -> bool:
    """True when a stored blob is valid but not yet a bare feature list."""
    if isinstance(raw, list):
        return False
    try:
        normalize_report(raw)
    except InvalidFormat:
        return False
    return True
