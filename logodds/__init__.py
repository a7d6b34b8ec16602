"""
Binary logistic regression by maximum likelihood and the usual ways of
reading and evaluating it.

This package contains an IRLS estimator with Wald inference, confusion-matrix
and ROC evaluation helpers, and a small design-matrix builder used by main.py.
"""

from .design import build_design
from .exceptions import (
    DegenerateLabelsError,
    LogoddsError,
    RankDeficiencyError,
    SingularInformationError,
)
from .logreg import FittedModel, fit, invlogit, logit
from .metrics import (
    ConfusionCounts,
    ConfusionMetrics,
    RocCurve,
    confusion,
    metrics_frame,
    roc_curve,
    summarize_coefficients,
    sweep_thresholds,
)

__all__ = [
    "build_design",
    "DegenerateLabelsError",
    "LogoddsError",
    "RankDeficiencyError",
    "SingularInformationError",
    "FittedModel",
    "fit",
    "invlogit",
    "logit",
    "ConfusionCounts",
    "ConfusionMetrics",
    "RocCurve",
    "confusion",
    "metrics_frame",
    "roc_curve",
    "summarize_coefficients",
    "sweep_thresholds",
]
