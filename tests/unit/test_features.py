"""Unit tests for feature descriptors and canonical level order."""

import numpy as np
import pandas as pd
import pytest

from pdp_functions.core.features import (
    QUANTILE_PROBS,
    FeatureKind,
    describe_feature,
    describe_features,
    infer_kind,
)
from pdp_functions.utils.exceptions import EmptyTrainingDataError, InvalidFeatureError


@pytest.mark.parametrize(
    "series, expected",
    [
        (pd.Series([1.0, 2.0]), FeatureKind.CONTINUOUS),
        (pd.Series([1, 2, 3]), FeatureKind.CONTINUOUS),
        (pd.Series([True, False]), FeatureKind.CATEGORICAL),
        (pd.Series(["a", "b"]), FeatureKind.CATEGORICAL),
        (pd.Series(["a", "b"], dtype="category"), FeatureKind.CATEGORICAL),
    ],
)
def test_infer_kind(series, expected):
    assert infer_kind(series) is expected


def test_continuous_descriptor_domain():
    column = pd.Series([3.0, 1.0, np.nan, 5.0], name="x")
    descriptor = describe_feature(column)
    assert descriptor.kind is FeatureKind.CONTINUOUS
    assert descriptor.minimum == 1.0
    assert descriptor.maximum == 5.0
    assert len(descriptor.quantiles) == len(QUANTILE_PROBS)
    assert descriptor.quantiles[0] == 1.0
    assert descriptor.quantiles[-1] == 5.0
    assert descriptor.levels == ()


def test_categorical_levels_sorted_without_dtype_order():
    descriptor = describe_feature(pd.Series(["red", "blue", None, "green", "blue"], name="color"))
    assert descriptor.levels == ("blue", "green", "red")
    assert descriptor.level_index("green") == 1
    with pytest.raises(KeyError):
        descriptor.level_index("purple")


def test_categorical_dtype_order_is_kept_and_filtered():
    dtype = pd.CategoricalDtype(["low", "mid", "high", "unused"], ordered=True)
    column = pd.Series(["high", "low", "mid", "low"], dtype=dtype, name="level")
    assert describe_feature(column).levels == ("low", "mid", "high")


def test_mixed_type_levels_have_a_stable_order():
    column = pd.Series([2, "b", 1, "a"], dtype=object, name="mixed")
    assert describe_feature(column).levels == (1, 2, "a", "b")


def test_numeric_column_forced_categorical():
    descriptor = describe_feature(pd.Series([3, 1, 2, 1], name="rooms"), "categorical")
    assert descriptor.is_categorical
    assert descriptor.levels == (1, 2, 3)


def test_string_column_cannot_be_continuous():
    with pytest.raises(InvalidFeatureError):
        describe_feature(pd.Series(["a", "b"], name="s"), FeatureKind.CONTINUOUS)


def test_unknown_kind_rejected():
    with pytest.raises(InvalidFeatureError):
        describe_feature(pd.Series([1.0], name="x"), "ordinal")


def test_all_missing_column_is_empty():
    with pytest.raises(EmptyTrainingDataError):
        describe_feature(pd.Series([np.nan, np.nan], name="x"))
    with pytest.raises(EmptyTrainingDataError):
        describe_feature(pd.Series([None, None], dtype=object, name="c"))


def test_describe_features_preserves_column_order_and_validates_overrides():
    frame = pd.DataFrame({"b": [1.0, 2.0], "a": ["x", "y"]})
    descriptors = describe_features(frame)
    assert list(descriptors) == ["b", "a"]
    with pytest.raises(InvalidFeatureError):
        describe_features(frame, {"missing": "categorical"})
