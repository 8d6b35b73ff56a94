"""Chart spec serialization and validation helpers.

Provides a small stable envelope for chart spec -> dict and back. The
envelope carries ``chartspec_version`` to allow future evolution.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from ..utils.exceptions import ValidationError
from .chartspec import CHARTSPEC_VERSION, ChartSpec, LineChartSpec, SurfaceChartSpec

_REQUIRED = {
    "pdp_1d": ("feature", "feature_kind", "x", "xlabel"),
    "pdp_2d": ("features", "feature_kinds", "x", "y", "z", "xlabel", "ylabel"),
}


def chartspec_to_dict(spec: ChartSpec) -> Dict[str, Any]:
    """Serialize a chart spec to a plain JSON-serializable dict.

    Category levels are passed through as-is.
    """
    payload = asdict(spec)
    if isinstance(spec, SurfaceChartSpec):
        payload["features"] = list(spec.features)
        payload["feature_kinds"] = list(spec.feature_kinds)
        if spec.center_at is not None:
            payload["center_at"] = list(spec.center_at)
    return payload


def chartspec_from_dict(obj: Dict[str, Any]) -> ChartSpec:
    """Deserialize a dict envelope produced by :func:`chartspec_to_dict`."""
    validate_chartspec(obj)
    fields = {k: v for k, v in obj.items() if k not in {"kind", "chartspec_version"}}
    if obj["kind"] == "pdp_1d":
        return LineChartSpec(**fields)
    fields["features"] = tuple(fields["features"])
    fields["feature_kinds"] = tuple(fields["feature_kinds"])
    if fields.get("center_at") is not None:
        fields["center_at"] = tuple(fields["center_at"])
    return SurfaceChartSpec(**fields)


def validate_chartspec(obj: Dict[str, Any]) -> None:
    """Raise :class:`ValidationError` for a malformed chart spec envelope."""
    if not isinstance(obj, dict):
        raise ValidationError(
            "Chart spec payload must be a dict",
            details={"expected_type": "dict", "actual_type": type(obj).__name__},
        )
    version = obj.get("chartspec_version")
    if version != CHARTSPEC_VERSION:
        raise ValidationError(
            f"unsupported or missing chartspec_version: {version}",
            details={"expected_version": CHARTSPEC_VERSION, "actual_version": version},
        )
    kind = obj.get("kind")
    if kind not in _REQUIRED:
        raise ValidationError(
            f"unknown chart kind: {kind!r}", details={"kind": kind, "known": sorted(_REQUIRED)}
        )
    missing = [name for name in _REQUIRED[kind] if name not in obj]
    if missing:
        raise ValidationError(
            f"{kind} chart spec is missing fields {missing}",
            details={"kind": kind, "missing_fields": missing},
        )
    if kind == "pdp_1d":
        _check_lengths(obj, "y", len(obj["x"]))
        for r, curve in enumerate(obj.get("ice") or []):
            if len(curve) != len(obj["x"]):
                raise ValidationError(
                    f"ICE curve {r} has {len(curve)} values for {len(obj['x'])} grid points",
                    details={"curve": r},
                )
    else:
        z: List[List[float]] = obj["z"]
        if len(z) != len(obj["x"]) or any(len(row) != len(obj["y"]) for row in z):
            raise ValidationError(
                "z must have shape (len(x), len(y))",
                details={"field": "z", "x": len(obj["x"]), "y": len(obj["y"])},
            )


def _check_lengths(obj: Dict[str, Any], name: str, expected: int) -> None:
    values = obj.get(name)
    if values is not None and len(values) != expected:
        raise ValidationError(
            f"{name} has {len(values)} values, expected {expected}",
            details={"field": name, "expected": expected, "actual": len(values)},
        )


__all__ = ["chartspec_to_dict", "chartspec_from_dict", "validate_chartspec", "CHARTSPEC_VERSION"]
