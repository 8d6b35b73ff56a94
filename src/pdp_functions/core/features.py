"""Feature descriptors derived from a training snapshot.

A descriptor records whether a column is treated as continuous or
categorical and the observed domain of the column. For categorical columns
the canonical level order is fixed here and reused by every grid, PDP
function and chart built afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from ..utils.exceptions import EmptyTrainingDataError, InvalidFeatureError

QUANTILE_PROBS = (0.0, 0.05, 0.25, 0.5, 0.75, 0.95, 1.0)


class FeatureKind(str, Enum):
    """How a feature is swept and queried."""

    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class FeatureDescriptor:
    """Observed domain of one feature column.

    Attributes
    ----------
    name : str
        Column name in the training data.
    kind : FeatureKind
        Continuous or categorical.
    minimum, maximum : float or None
        Observed extremes (continuous features only).
    quantiles : tuple of float
        Observed values at :data:`QUANTILE_PROBS` (continuous features only).
    levels : tuple
        Observed levels in canonical order (categorical features only).
    """

    name: str
    kind: FeatureKind
    minimum: float | None = None
    maximum: float | None = None
    quantiles: Tuple[float, ...] = ()
    levels: Tuple[Any, ...] = ()

    @property
    def is_categorical(self) -> bool:
        return self.kind is FeatureKind.CATEGORICAL

    def level_index(self, value: Any) -> int:
        """Return the canonical position of ``value`` or raise ``KeyError``."""
        for i, level in enumerate(self.levels):
            if _same_level(level, value):
                return i
        raise KeyError(value)


def _same_level(level: Any, value: Any) -> bool:
    try:
        return bool(level == value)
    except (TypeError, ValueError):
        return False


def _canonical_levels(column: pd.Series) -> Tuple[Any, ...]:
    observed = column.dropna()
    if isinstance(column.dtype, pd.CategoricalDtype):
        present = set(observed.unique())
        return tuple(level for level in column.dtype.categories if level in present)
    uniques = list(pd.unique(observed))
    try:
        return tuple(sorted(uniques))
    except TypeError:
        # mixed types: order by string form, then by type name
        return tuple(sorted(uniques, key=lambda v: (str(v), type(v).__name__)))


def infer_kind(column: pd.Series) -> FeatureKind:
    """Numeric (non-boolean) columns are continuous, everything else categorical."""
    if is_bool_dtype(column.dtype) or isinstance(column.dtype, pd.CategoricalDtype):
        return FeatureKind.CATEGORICAL
    if is_numeric_dtype(column.dtype):
        return FeatureKind.CONTINUOUS
    return FeatureKind.CATEGORICAL


def describe_feature(column: pd.Series, kind: FeatureKind | str | None = None) -> FeatureDescriptor:
    """Build the descriptor for a single column."""
    name = str(column.name)
    if kind is None:
        kind = infer_kind(column)
    try:
        kind = FeatureKind(kind)
    except ValueError as exc:
        raise InvalidFeatureError(
            f"Unknown feature kind {kind!r} for feature '{name}'.",
            details={"feature": name, "kind": kind},
        ) from exc

    if kind is FeatureKind.CATEGORICAL:
        levels = _canonical_levels(column)
        if not levels:
            raise EmptyTrainingDataError(
                f"Feature '{name}' has no observed levels.", details={"feature": name}
            )
        return FeatureDescriptor(name=name, kind=kind, levels=levels)

    if not is_numeric_dtype(column.dtype) or is_bool_dtype(column.dtype):
        raise InvalidFeatureError(
            f"Feature '{name}' cannot be treated as continuous (dtype {column.dtype}).",
            details={"feature": name, "dtype": str(column.dtype)},
        )
    values = column.dropna().to_numpy(dtype=float)
    if values.size == 0:
        raise EmptyTrainingDataError(
            f"Feature '{name}' has no observed values.", details={"feature": name}
        )
    quantiles = tuple(float(q) for q in np.quantile(values, QUANTILE_PROBS))
    return FeatureDescriptor(
        name=name,
        kind=kind,
        minimum=float(values.min()),
        maximum=float(values.max()),
        quantiles=quantiles,
    )


def describe_features(
    frame: pd.DataFrame, kinds: Mapping[str, FeatureKind | str] | None = None
) -> Dict[str, FeatureDescriptor]:
    """Describe every column of ``frame`` in column order.

    Parameters
    ----------
    frame : pandas.DataFrame
        Feature-only training data.
    kinds : mapping, optional
        Per-column overrides of the inferred :class:`FeatureKind`.
    """
    kinds = dict(kinds or {})
    unknown = set(kinds) - set(frame.columns)
    if unknown:
        raise InvalidFeatureError(
            f"Feature kind overrides reference unknown features: {sorted(map(str, unknown))}.",
            details={"unknown": sorted(map(str, unknown))},
        )
    return {
        str(name): describe_feature(frame[name], kinds.get(name))
        for name in frame.columns
    }


__all__ = [
    "FeatureDescriptor",
    "FeatureKind",
    "QUANTILE_PROBS",
    "describe_feature",
    "describe_features",
    "infer_kind",
]
