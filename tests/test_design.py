import numpy as np
import pandas as pd
import pytest

from logodds import build_design


def test_complete_cases_only():
    frame = pd.DataFrame(
        {
            "age": [30, 41, np.nan, 55, 62],
            "dose": [1.0, 0.5, 0.2, np.nan, 1.5],
            "unused": ["a", None, "c", "d", "e"],
            "outcome": [0, 1, 1, 0, 1],
        }
    )
    X, y, meta = build_design(frame, "outcome", ["age", "dose"])

    assert list(X.columns) == ["age", "dose"]
    assert list(X.index) == [0, 1, 4]
    assert y.tolist() == [0, 1, 1]
    assert meta["dropped_missing"] == 2
    assert meta["num_rows"] == 3
    assert meta["feature_count"] == 2
    assert meta["positive_rate"] == pytest.approx(2 / 3)


def test_defaults_to_every_other_column():
    frame = pd.DataFrame({"a": [1.0, 2.0], "b": [3, 4], "flag": [True, False]})
    X, y, _ = build_design(frame, "flag")
    assert list(X.columns) == ["a", "b"]
    assert y.tolist() == [1, 0]


@pytest.mark.parametrize(
    "frame, outcome, predictors",
    [
        (pd.DataFrame({"x": [1, 2], "y": [0, 1]}), "z", None),
        (pd.DataFrame({"x": [1, 2], "y": [0, 1]}), "y", ["w"]),
        (pd.DataFrame({"x": [1, 2], "y": [0, 2]}), "y", None),
        (pd.DataFrame({"x": ["a", "b"], "y": [0, 1]}), "y", None),
        (pd.DataFrame({"x": [1, 2], "y": [0, 1]}), "y", ["x", "y"]),
        (pd.DataFrame({"y": [0, 1]}), "y", None),
    ],
)
def test_invalid_design(frame, outcome, predictors):
    with pytest.raises(ValueError):
        build_design(frame, outcome, predictors)


def test_returns_frame_series_and_meta():
    frame = pd.DataFrame({"x": [0.5, 1.5, 2.5], "y": [0, 1, 1]})
    X, y, meta = build_design(frame, "y")
    assert isinstance(X, pd.DataFrame)
    assert isinstance(y, pd.Series)
    assert isinstance(meta, dict)
    assert X["x"].dtype == float and y.dtype.kind == "i"
