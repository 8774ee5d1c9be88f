"""Tests for raw report shape normalization."""

import pytest

from cuke_catalog.errors import InvalidFormat
from cuke_catalog.normalizer import needs_format_fix, normalize_report

from report_builders import make_feature


def test_feature_list_is_returned_unchanged():
    features = [make_feature("A"), make_feature("B")]
    assert normalize_report(features) is features


def test_features_wrapper_is_unwrapped():
    features = [make_feature("A")]
    assert normalize_report({"features": features, "meta": {}}) is features


def test_single_feature_is_wrapped():
    feature = make_feature("Only")
    assert normalize_report(feature) == [feature]


def test_empty_list_is_valid():
    assert normalize_report([]) == []


@pytest.mark.parametrize("raw", [{"foo": 1}, {"name": "no elements"}, "text", 42, None])
def test_unrecognized_shapes_raise(raw):
    with pytest.raises(InvalidFormat):
        normalize_report(raw)


def test_needs_format_fix():
    assert needs_format_fix({"features": []}) is True
    assert needs_format_fix(make_feature()) is True
    assert needs_format_fix([make_feature()]) is False
    assert needs_format_fix({"unknown": True}) is False
