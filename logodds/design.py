from __future__ import annotations

"""
Turn a tabular frame into the (features, outcome) pair the estimator expects.
"""

from typing import Sequence

import pandas as pd
from pandas.api import types as ptypes


def build_design(
    frame: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str] | None = None,
) -> tuple[pd.DataFrame, pd.Series, dict]:
    """
    Select the outcome and predictor columns and keep complete cases only.

    When ``predictors`` is None every column except the outcome is used.
    Returns ``(X, y, meta)``.
    """
    if outcome not in frame.columns:
        raise ValueError(f"Outcome column not found: {outcome}")
    if predictors is None:
        predictors = [c for c in frame.columns if c != outcome]
    predictors = list(predictors)
    if not predictors:
        raise ValueError("At least one predictor column is required.")
    missing_cols = [c for c in predictors if c not in frame.columns]
    if missing_cols:
        raise ValueError(f"Predictor columns not found: {missing_cols}")
    if outcome in predictors:
        raise ValueError(f"Outcome column {outcome} cannot also be a predictor.")

    subset = frame[predictors + [outcome]]
    complete = subset.dropna()
    dropped = len(subset) - len(complete)

    non_numeric = [
        c
        for c in predictors
        if not (ptypes.is_numeric_dtype(complete[c]) or ptypes.is_bool_dtype(complete[c]))
    ]
    if non_numeric:
        raise ValueError(
            f"Predictors must be numeric; encode these columns first: {non_numeric}"
        )

    y = complete[outcome]
    if ptypes.is_bool_dtype(y):
        y = y.astype(int)
    if not y.isin([0, 1]).all():
        raise ValueError(f"Outcome column {outcome} must contain only 0 and 1.")

    X = complete[predictors].astype(float)
    y = y.astype(int)

    meta = {
        "num_rows": len(complete),
        "dropped_missing": dropped,
        "positive_rate": float(y.mean()) if len(y) else float("nan"),
        "feature_count": X.shape[1],
    }
    return X, y, meta
