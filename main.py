from __future__ import annotations

"""
CLI entrypoint: fit a logistic regression to a CSV file and report the
coefficient table, confusion-matrix rates at a threshold, and the ROC AUC.
"""

import argparse
import logging
from pathlib import Path

import pandas as pd

from logodds import (
    LogoddsError,
    build_design,
    confusion,
    fit,
    roc_curve,
    summarize_coefficients,
)
from logodds.constants import DEFAULT_MAX_ITER, DEFAULT_THRESHOLD, DEFAULT_TOL

logger = logging.getLogger("logodds.main")


def _fmt_rate(value) -> str:
    return "undefined" if value is None else f"{value:.3f}"


def describe_design(meta: dict, outcome: str):
    """Print a short summary of dataset size and balance."""
    print(f"Complete rows: {meta['num_rows']}, features: {meta['feature_count']}")
    print(f"Positive rate for {outcome}: {meta['positive_rate']:.3f}")
    if meta["dropped_missing"]:
        print(f"Dropped rows with missing values: {meta['dropped_missing']}")


def print_fit(model, odds_ratios: bool = False):
    """Coefficient table plus the glm-style deviance footer."""
    table = model.summary(exponentiate=odds_ratios)
    with pd.option_context("display.width", 120, "display.float_format", "{:.4g}".format):
        print(table.to_string(index=False))
    print(
        f"Null deviance: {model.null_deviance:.3f} on {model.df_null} df | "
        f"Residual deviance: {model.deviance:.3f} on {model.df_residual} df | "
        f"AIC: {model.aic:.3f}"
    )
    print(f"IRLS iterations: {model.iterations}, converged: {model.converged}")


def print_metrics(label: str, m):
    """Format a ConfusionMetrics record."""
    print(
        f"[{label}] Sens {_fmt_rate(m.sensitivity)} | Spec {_fmt_rate(m.specificity)} | "
        f"PPV {_fmt_rate(m.ppv)} | NPV {_fmt_rate(m.npv)} | Acc {_fmt_rate(m.accuracy)}"
    )
    print(f"    Confusion matrix [[TN, FP], [FN, TP]]: {m.counts.as_matrix().tolist()}")


def build_arg_parser():
    """CLI parser with knobs for the data columns, the fit and the evaluation."""
    parser = argparse.ArgumentParser(
        description="Fit a logistic regression by IRLS and evaluate it as a classifier."
    )
    parser.add_argument("--csv-path", type=Path, required=True)
    parser.add_argument("--outcome", required=True, help="0/1 outcome column.")
    parser.add_argument(
        "--predictors",
        type=str,
        default=None,
        help="Comma-separated predictor columns (default: every other column).",
    )
    parser.add_argument("--max-iter", type=int, default=DEFAULT_MAX_ITER, help="Max IRLS iterations.")
    parser.add_argument("--tol", type=float, default=DEFAULT_TOL, help="Relative deviance tolerance.")
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_THRESHOLD,
        help="Classify as positive when the probability is above this value.",
    )
    parser.add_argument(
        "--roc-method",
        choices=["distinct", "grid"],
        default="distinct",
        help="distinct: exact sweep over predicted values; grid: 1000-point grid.",
    )
    parser.add_argument("--odds-ratios", action="store_true", help="Report exponentiated estimates.")
    parser.add_argument("--top-k", type=int, default=5, help="Strongest effects to list.")
    parser.add_argument("--verbose", action="store_true", help="Log every IRLS iteration.")
    return parser


def run(args: argparse.Namespace):
    """Load, fit, evaluate and print."""
    frame = pd.read_csv(args.csv_path)
    predictors = (
        [c.strip() for c in args.predictors.split(",") if c.strip()]
        if args.predictors
        else None
    )
    X, y, meta = build_design(frame, args.outcome, predictors)
    describe_design(meta, args.outcome)

    model = fit(X, y, max_iter=args.max_iter, tol=args.tol)
    if not model.converged:
        print("WARNING: IRLS did not converge; estimates are not reliable.")
    print_fit(model, odds_ratios=args.odds_ratios)

    top = summarize_coefficients(model, top_k=args.top_k)
    print("\nStrongest positive effects (odds ratios):")
    print(top["positive"].to_string() if len(top["positive"]) else "  none")
    print("\nStrongest negative effects (odds ratios):")
    print(top["negative"].to_string() if len(top["negative"]) else "  none")

    probs = model.predict_proba(X)
    print()
    print_metrics(f"threshold={args.threshold}", confusion(probs, y, args.threshold))
    curve = roc_curve(probs, y, method=args.roc_method)
    print(f"ROC AUC ({args.roc_method}, {len(curve.thresholds)} thresholds): {curve.auc:.3f}")
    return model, curve


def main(args: argparse.Namespace | None = None):
    """Parse arguments, configure logging and run; library errors exit with status 1."""
    args = args or build_arg_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s - %(levelname)s - %(message)s",
    )
    try:
        return run(args)
    except LogoddsError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
