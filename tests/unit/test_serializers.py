"""Unit tests for chart spec serialization."""

import json

import pytest

from pdp_functions import Plotter
from pdp_functions.utils.exceptions import ValidationError
from pdp_functions.viz import (
    CHARTSPEC_VERSION,
    LineChartSpec,
    SurfaceChartSpec,
    chartspec_from_dict,
    chartspec_to_dict,
    validate_chartspec,
)


def test_plot_output_is_json_serializable(mixed_interpreter):
    plotter = Plotter(mixed_interpreter, features_2d=[("color", "x")], center_at={"x": 2.0})
    for chart in plotter.plot("pdp+ice"):
        payload = chartspec_to_dict(chart)
        json.dumps(payload)
        restored = chartspec_from_dict(json.loads(json.dumps(payload)))
        assert type(restored) is type(chart)
        assert restored == chart


def test_surface_tuples_are_listed_and_restored():
    spec = SurfaceChartSpec(
        features=("a", "b"),
        feature_kinds=("continuous", "categorical"),
        x=[0.0, 1.0],
        y=["u"],
        z=[[1.0], [2.0]],
        xlabel="a",
        ylabel="b",
        center_at=(0.0, "u"),
    )
    payload = chartspec_to_dict(spec)
    assert payload["features"] == ["a", "b"]
    assert payload["center_at"] == [0.0, "u"]
    assert payload["kind"] == "pdp_2d"
    assert chartspec_from_dict(payload) == spec


def _line_payload(**overrides):
    payload = chartspec_to_dict(
        LineChartSpec(feature="x", feature_kind="continuous", x=[0.0, 1.0], y=[1.0, 2.0], xlabel="x")
    )
    payload.update(overrides)
    return payload


def test_validate_accepts_well_formed():
    validate_chartspec(_line_payload())
    assert _line_payload()["chartspec_version"] == CHARTSPEC_VERSION


@pytest.mark.parametrize(
    "payload",
    [
        _line_payload(chartspec_version="0.1"),
        _line_payload(kind="pie"),
        _line_payload(y=[1.0]),
        _line_payload(ice=[[1.0, 2.0], [1.0]]),
        {k: v for k, v in _line_payload().items() if k != "xlabel"},
    ],
)
def test_validate_rejects_malformed(payload):
    with pytest.raises(ValidationError):
        validate_chartspec(payload)


def test_validate_rejects_bad_surface_shape():
    payload = chartspec_to_dict(
        SurfaceChartSpec(
            features=("a", "b"),
            feature_kinds=("continuous", "continuous"),
            x=[0.0, 1.0],
            y=[0.0, 1.0],
            z=[[1.0, 2.0]],
            xlabel="a",
            ylabel="b",
        )
    )
    with pytest.raises(ValidationError):
        validate_chartspec(payload)


def test_validate_rejects_non_dict():
    with pytest.raises(ValidationError):
        validate_chartspec(["not", "a", "dict"])
