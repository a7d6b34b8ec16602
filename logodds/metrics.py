from __future__ import annotations

"""
Classifier evaluation helpers: confusion-matrix rates at a threshold, threshold
sweeps, the ROC curve with its AUC, and odds-ratio summaries of a fit.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from sklearn import metrics

from .constants import DEFAULT_THRESHOLD, GRID_HIGH, GRID_LOW, GRID_POINTS, INTERCEPT_NAME
from .exceptions import DegenerateLabelsError
from .logreg import FittedModel


@dataclass(frozen=True)
class ConfusionCounts:
    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def n(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    def as_matrix(self) -> np.ndarray:
        """Counts laid out as [[TN, FP], [FN, TP]] (rows: truth, columns: prediction)."""
        return np.array([[self.tn, self.fp], [self.fn, self.tp]])


@dataclass(frozen=True)
class ConfusionMetrics:
    """
    Rates derived from a 2x2 table at one threshold.

    A rate is None when its denominator is zero.
    """

    threshold: float
    counts: ConfusionCounts
    sensitivity: Optional[float]
    specificity: Optional[float]
    ppv: Optional[float]
    npv: Optional[float]
    accuracy: Optional[float]

    @property
    def false_positive_rate(self) -> Optional[float]:
        return None if self.specificity is None else 1.0 - self.specificity

    def as_dict(self) -> dict:
        return {
            "threshold": self.threshold,
            "tp": self.counts.tp,
            "fp": self.counts.fp,
            "tn": self.counts.tn,
            "fn": self.counts.fn,
            "sensitivity": self.sensitivity,
            "specificity": self.specificity,
            "ppv": self.ppv,
            "npv": self.npv,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True, eq=False)
class RocCurve:
    """ROC points ordered from the highest threshold to the lowest."""

    thresholds: np.ndarray
    fpr: np.ndarray
    tpr: np.ndarray
    auc: float
    records: tuple[ConfusionMetrics, ...] = ()

    @property
    def points(self) -> list[tuple[float, float]]:
        return list(zip(self.fpr.tolist(), self.tpr.tolist()))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"threshold": self.thresholds, "fpr": self.fpr, "tpr": self.tpr})


def _rate(num: int, den: int) -> Optional[float]:
    return None if den == 0 else num / den


def _check_inputs(probs, labels) -> tuple[np.ndarray, np.ndarray]:
    p = np.asarray(probs, dtype=float).ravel()
    y = np.asarray(labels, dtype=float).ravel()
    if len(p) != len(y):
        raise ValueError(f"Got {len(p)} probabilities for {len(y)} labels.")
    if len(p) == 0:
        raise ValueError("Cannot evaluate an empty set of predictions.")
    if not np.all(np.isfinite(p)):
        raise ValueError("Predicted probabilities contain missing or non-finite values.")
    if not np.all((y == 0) | (y == 1)):
        raise ValueError("Labels must contain only 0 and 1.")
    return p, y.astype(int)


def _metrics_from_counts(threshold: float, tp: int, fp: int, tn: int, fn: int) -> ConfusionMetrics:
    counts = ConfusionCounts(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))
    return ConfusionMetrics(
        threshold=float(threshold),
        counts=counts,
        sensitivity=_rate(counts.tp, counts.tp + counts.fn),
        specificity=_rate(counts.tn, counts.tn + counts.fp),
        ppv=_rate(counts.tp, counts.tp + counts.fp),
        npv=_rate(counts.tn, counts.tn + counts.fn),
        accuracy=_rate(counts.tp + counts.tn, counts.n),
    )


def _sweep(p: np.ndarray, y: np.ndarray, thresholds: np.ndarray) -> list[ConfusionMetrics]:
    pos_scores = np.sort(p[y == 1])
    neg_scores = np.sort(p[y == 0])
    n_pos, n_neg = len(pos_scores), len(neg_scores)

    # side="right" counts scores <= t, i.e. the records classified negative.
    fn = np.searchsorted(pos_scores, thresholds, side="right")
    tn = np.searchsorted(neg_scores, thresholds, side="right")
    tp = n_pos - fn
    fp = n_neg - tn
    return [
        _metrics_from_counts(t, tp_i, fp_i, tn_i, fn_i)
        for t, tp_i, fp_i, tn_i, fn_i in zip(thresholds, tp, fp, tn, fn)
    ]


def confusion(probs, labels, threshold: float = DEFAULT_THRESHOLD) -> ConfusionMetrics:
    """
    Classify each record as positive when its probability is strictly above
    ``threshold`` and derive the confusion-matrix rates.
    """
    p, y = _check_inputs(probs, labels)
    return _sweep(p, y, np.array([float(threshold)]))[0]


def sweep_thresholds(probs, labels, thresholds: Sequence[float]) -> list[ConfusionMetrics]:
    """One ConfusionMetrics per threshold, in the order the thresholds are given."""
    p, y = _check_inputs(probs, labels)
    return _sweep(p, y, np.asarray(thresholds, dtype=float).ravel())


def roc_thresholds(probs, method: str = "distinct") -> np.ndarray:
    """
    Decreasing thresholds for an ROC sweep.

    ``distinct`` uses every distinct predicted value followed by -inf, so the
    curve starts at (0, 0) and ends at (1, 1). ``grid`` uses an evenly spaced
    grid on [GRID_LOW, GRID_HIGH] bracketed by +inf and -inf, so it reaches the
    same corners whatever the range of the scores.
    """
    if method == "distinct":
        distinct = np.unique(np.asarray(probs, dtype=float))[::-1]
        return np.append(distinct, -np.inf)
    if method == "grid":
        return np.concatenate([[np.inf], np.linspace(GRID_HIGH, GRID_LOW, GRID_POINTS), [-np.inf]])
    raise ValueError(f"Unknown ROC threshold method: {method}")


def roc_curve(probs, labels, method: str = "distinct") -> RocCurve:
    """ROC curve and trapezoidal AUC from predicted probabilities and 0/1 labels."""
    p, y = _check_inputs(probs, labels)
    if len(np.unique(y)) < 2:
        raise DegenerateLabelsError(
            "ROC curve is undefined when labels contain a single class."
        )

    thresholds = roc_thresholds(p, method=method)
    records = _sweep(p, y, thresholds)
    fpr = np.array([r.false_positive_rate for r in records])
    tpr = np.array([r.sensitivity for r in records])
    return RocCurve(
        thresholds=thresholds,
        fpr=fpr,
        tpr=tpr,
        auc=float(metrics.auc(fpr, tpr)),
        records=tuple(records),
    )


def metrics_frame(records: Sequence[ConfusionMetrics]) -> pd.DataFrame:
    """Tabulate a sequence of ConfusionMetrics, one row per record."""
    return pd.DataFrame([r.as_dict() for r in records])


def summarize_coefficients(model: FittedModel, top_k: int = 8) -> dict[str, pd.Series]:
    """Strongest positive and negative effects as odds ratios, intercept excluded."""
    or_series = pd.Series(model.odds_ratios, index=list(model.feature_names))
    or_series = or_series.drop(index=INTERCEPT_NAME, errors="ignore")
    or_sorted = or_series.sort_values()
    return {
        "positive": or_sorted[or_sorted > 1].tail(top_k)[::-1],
        "negative": or_sorted[or_sorted < 1].head(top_k),
    }
