"""Builders for Cucumber report fixtures."""

from __future__ import annotations

import json


def make_step(name="a step", status="passed", duration=1000, keyword="Given "):
    result = {"status": status}
    if duration is not None:
        result["duration"] = duration
    return {"keyword": keyword, "name": name, "result": result}


def make_scenario(name="Scenario", steps=None, start=None, tags=None, type_="scenario"):
    scenario = {"name": name, "type": type_, "steps": steps if steps is not None else [make_step()]}
    if start:
        scenario["start_timestamp"] = start
    if tags is not None:
        scenario["tags"] = tags
    return scenario


def make_feature(name="Feature", elements=None, tags=None, metadata=None):
    feature = {"name": name, "elements": elements if elements is not None else [make_scenario()]}
    if tags is not None:
        feature["tags"] = tags
    if metadata is not None:
        feature["metadata"] = metadata
    return feature


def write_report(directory, filename, data):
    path = directory / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


