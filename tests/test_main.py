import logging

import numpy as np
import pandas as pd
import pytest

import main


@pytest.fixture
def csv_path(tmp_path, simulated_frame):
    path = tmp_path / "trial.csv"
    frame = simulated_frame.copy()
    frame.loc[3, "dose"] = np.nan
    frame.to_csv(path, index=False)
    return path


def test_cli_reports_fit_and_evaluation(csv_path, capsys):
    args = main.build_arg_parser().parse_args(
        ["--csv-path", str(csv_path), "--outcome", "outcome", "--odds-ratios"]
    )
    model, curve = main.main(args)
    out = capsys.readouterr().out

    assert model.converged
    assert model.feature_names == ("(Intercept)", "age", "dose")
    assert model.n_obs == 399
    assert "Dropped rows with missing values: 1" in out
    assert "Residual deviance" in out
    assert "Confusion matrix [[TN, FP], [FN, TP]]" in out
    assert f"ROC AUC (distinct, {len(curve.thresholds)} thresholds): {curve.auc:.3f}" in out


def test_cli_grid_and_predictor_subset(csv_path, capsys):
    args = main.build_arg_parser().parse_args(
        [
            "--csv-path", str(csv_path),
            "--outcome", "outcome",
            "--predictors", "dose",
            "--roc-method", "grid",
            "--threshold", "0.4",
        ]
    )
    model, curve = main.main(args)
    out = capsys.readouterr().out
    assert model.feature_names == ("(Intercept)", "dose")
    assert len(curve.thresholds) == 1002
    assert "[threshold=0.4]" in out


def test_cli_exits_on_rank_deficient_design(tmp_path, caplog):
    path = tmp_path / "dup.csv"
    pd.DataFrame(
        {"a": [1.0, 2.0, 3.0, 4.0], "b": [2.0, 4.0, 6.0, 8.0], "y": [0, 1, 0, 1]}
    ).to_csv(path, index=False)
    args = main.build_arg_parser().parse_args(["--csv-path", str(path), "--outcome", "y"])

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
        main.main(args)
    assert exc_info.value.code == 1
    assert "RankDeficiencyError" in caplog.text
