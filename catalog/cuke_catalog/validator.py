"""Structural completeness checks for normalized reports."""

from __future__ import annotations


def validate_report(features: object) -> list[str]:
    """Return human-readable defects; never raises.

    Every element is checked, backgrounds included.
    """
    if not isinstance(features, list):
        return ["Root element must be an array"]

    errors: list[str] = []
    for fi, feature in enumerate(features):
        if not isinstance(feature, dict):
            errors.append(f"Feature {fi}: Not an object")
            continue
        if not feature.get("name"):
            errors.append(f"Feature {fi}: Missing name")

        elements = feature.get("elements") or feature.get("scenarios") or []
        for si, scenario in enumerate(elements):
            if not isinstance(scenario, dict):
                errors.append(f"Feature {fi}, Scenario {si}: Not an object")
                continue
            if not scenario.get("name"):
                errors.append(f"Feature {fi}, Scenario {si}: Missing name")

            steps = scenario.get("steps")
            if not isinstance(steps, list):
                continue
            for ti, step in enumerate(steps):
                if not isinstance(step, dict):
                    errors.append(f"Feature {fi}, Scenario {si}, Step {ti}: Not an object")
                    continue
                if not step.get("name"):
                    errors.append(f"Feature {fi}, Scenario {si}, Step {ti}: Missing name")
                if not step.get("result") and not step.get("status"):
                    errors.append(f"Feature {fi}, Scenario {si}, Step {ti}: Missing result/status")
    return errors
