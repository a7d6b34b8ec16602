from __future__ import annotations

"""
Binomial logistic regression fitted by iteratively reweighted least squares.

``fit`` is a pure function: it returns a frozen ``FittedModel`` carrying the
coefficients together with the convergence status, the iteration count and
the standard errors, so callers never read fit diagnostics off shared state.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import xlogy

from .constants import (
    DEFAULT_MAX_ITER,
    DEFAULT_THRESHOLD,
    DEFAULT_TOL,
    INTERCEPT_NAME,
    PROB_EPS,
    WEIGHT_FLOOR,
)
from .exceptions import RankDeficiencyError, SingularInformationError

logger = logging.getLogger(__name__)


def invlogit(eta):
    """Inverse logit (sigmoid), clipped so exp() never overflows."""
    eta = np.clip(eta, -500, 500)
    return 1.0 / (1.0 + np.exp(-eta))


def logit(p):
    """Log-odds log(p / (1 - p))."""
    p = np.asarray(p, dtype=float)
    return np.log(p) - np.log1p(-p)


def log_likelihood(y: np.ndarray, eta: np.ndarray) -> float:
    """Bernoulli log-likelihood from the linear predictor, sum(y*eta - log(1 + e^eta))."""
    return float(np.sum(y * eta - np.logaddexp(0.0, eta)))


def _check_labels(y) -> np.ndarray:
    y_arr = np.asarray(y, dtype=float).ravel()
    if not np.all((y_arr == 0) | (y_arr == 1)):
        raise ValueError("Labels must contain only 0 and 1.")
    return y_arr


def _add_bias(X: np.ndarray) -> np.ndarray:
    return np.hstack([np.ones((X.shape[0], 1)), X])


def _as_matrix(X) -> np.ndarray:
    X_arr = np.asarray(X, dtype=float)
    if X_arr.ndim == 1:
        X_arr = X_arr.reshape(-1, 1)
    if X_arr.ndim != 2:
        raise ValueError(f"Expected a 2-D design matrix, got {X_arr.ndim} dimensions.")
    if not np.all(np.isfinite(X_arr)):
        raise ValueError("Design matrix contains missing or non-finite values.")
    return X_arr


def _feature_names(X, n_features: int, feature_names, fit_intercept: bool) -> tuple[str, ...]:
    if feature_names is None:
        if isinstance(X, pd.DataFrame):
            feature_names = [str(c) for c in X.columns]
        elif isinstance(X, pd.Series) and X.name is not None:
            feature_names = [str(X.name)]
        else:
            feature_names = [f"x{j}" for j in range(1, n_features + 1)]
    feature_names = list(feature_names)
    if len(feature_names) != n_features:
        raise ValueError(
            f"Got {len(feature_names)} feature names for {n_features} columns."
        )
    if fit_intercept:
        feature_names = [INTERCEPT_NAME] + feature_names
    return tuple(feature_names)


def _information(X: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Weighted information matrix X'WX."""
    return (X.T * weights) @ X


def _equilibrate(info: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Scale X'WX to unit diagonal so its conditioning reflects collinearity,
    not the units of the columns. Returns the scaled matrix and the scales.
    """
    scale = np.sqrt(np.diag(info))
    if not np.all(np.isfinite(info)) or np.any(scale == 0):
        raise SingularInformationError(
            "Information matrix X'WX has a zero or non-finite diagonal; "
            "fitted probabilities are likely numerically 0 or 1."
        )
    return info / np.outer(scale, scale), scale


def _solve_normal_equations(info: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    scaled, scale = _equilibrate(info)
    return np.linalg.solve(scaled, rhs / scale) / scale


def _standard_errors(X: np.ndarray, eta: np.ndarray) -> np.ndarray:
    p = invlogit(eta)
    scaled, scale = _equilibrate(_information(X, p * (1.0 - p)))
    if np.linalg.cond(scaled) > 1.0 / np.finfo(float).eps:
        raise SingularInformationError(
            "Information matrix X'WX is singular; standard errors are undefined "
            "(fitted probabilities are likely numerically 0 or 1)."
        )
    try:
        cov = np.linalg.inv(scaled) / np.outer(scale, scale)
    except np.linalg.LinAlgError as exc:
        raise SingularInformationError(f"Information matrix X'WX is singular: {exc}") from exc
    return np.sqrt(np.diag(cov))


def _completely_separated(y: np.ndarray, eta: np.ndarray) -> bool:
    """True when the fitted linear predictor ranks every positive above every negative."""
    pos, neg = eta[y == 1], eta[y == 0]
    if len(pos) == 0 or len(neg) == 0:
        return True
    return bool(pos.min() > neg.max())


def _null_log_likelihood(y: np.ndarray, fit_intercept: bool) -> float:
    # Intercept-only model; without an intercept the null model is p = 0.5.
    p_bar = float(np.mean(y)) if fit_intercept else 0.5
    return float(np.sum(xlogy(y, p_bar) + xlogy(1.0 - y, 1.0 - p_bar)))


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Immutable result of a logistic regression fit."""

    coefficients: np.ndarray
    standard_errors: np.ndarray
    converged: bool
    iterations: int
    feature_names: tuple[str, ...]
    fit_intercept: bool = True
    log_likelihood: float = float("nan")
    null_log_likelihood: float = float("nan")
    n_obs: int = 0
    _coef_index: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "coefficients", _readonly(self.coefficients))
        object.__setattr__(self, "standard_errors", _readonly(self.standard_errors))
        object.__setattr__(self, "feature_names", tuple(self.feature_names))
        object.__setattr__(
            self, "_coef_index", {name: i for i, name in enumerate(self.feature_names)}
        )

    def __getitem__(self, name: str) -> float:
        """Coefficient by term name, e.g. ``model["(Intercept)"]``."""
        return float(self.coefficients[self._coef_index[name]])

    @property
    def intercept(self) -> float:
        return float(self.coefficients[0]) if self.fit_intercept else 0.0

    @property
    def n_params(self) -> int:
        return len(self.coefficients)

    @property
    def deviance(self) -> float:
        return -2.0 * self.log_likelihood

    @property
    def null_deviance(self) -> float:
        return -2.0 * self.null_log_likelihood

    @property
    def df_residual(self) -> int:
        return self.n_obs - self.n_params

    @property
    def df_null(self) -> int:
        return self.n_obs - 1 if self.fit_intercept else self.n_obs

    @property
    def aic(self) -> float:
        return self.deviance + 2.0 * self.n_params

    @property
    def z_values(self) -> np.ndarray:
        """Wald statistics estimate / standard error."""
        return self.coefficients / self.standard_errors

    @property
    def p_values(self) -> np.ndarray:
        """Two-sided p-values of the Wald statistics against N(0, 1)."""
        return 2.0 * stats.norm.sf(np.abs(self.z_values))

    @property
    def odds_ratios(self) -> np.ndarray:
        return np.exp(self.coefficients)

    def confint(self, level: float = 0.95) -> np.ndarray:
        """Wald confidence intervals on the log-odds scale, shape (k, 2)."""
        if not 0.0 < level < 1.0:
            raise ValueError(f"Confidence level must be in (0, 1), got {level}.")
        crit = stats.norm.ppf(0.5 + level / 2.0)
        half = crit * self.standard_errors
        return np.column_stack([self.coefficients - half, self.coefficients + half])

    def _design(self, X) -> np.ndarray:
        X_arr = _as_matrix(X)
        if self.fit_intercept:
            X_arr = _add_bias(X_arr)
        if X_arr.shape[1] != self.n_params:
            raise ValueError(
                f"Expected {self.n_params - int(self.fit_intercept)} feature columns, "
                f"got {X_arr.shape[1] - int(self.fit_intercept)}."
            )
        return X_arr

    def predict_link(self, X) -> np.ndarray:
        """Linear predictor x'beta (log-odds) for each row of X."""
        return self._design(X) @ self.coefficients

    def predict_proba(self, X) -> np.ndarray:
        """Return P(y=1) for each row in X."""
        return invlogit(self.predict_link(X))

    def predict(self, X, threshold: float = DEFAULT_THRESHOLD) -> np.ndarray:
        """Class labels; a row is positive only when its probability exceeds threshold."""
        return (self.predict_proba(X) > threshold).astype(int)

    def summary(self, conf_level: float = 0.95, exponentiate: bool = False) -> pd.DataFrame:
        """
        Coefficient table, one row per term.

        With ``exponentiate=True`` the estimate and interval columns are odds
        ratios; std_error and statistic stay on the log-odds scale.
        """
        ci = self.confint(conf_level)
        estimate = self.coefficients
        if exponentiate:
            estimate = np.exp(estimate)
            ci = np.exp(ci)
        return pd.DataFrame(
            {
                "term": list(self.feature_names),
                "estimate": estimate,
                "std_error": self.standard_errors,
                "statistic": self.z_values,
                "p_value": self.p_values,
                "conf_low": ci[:, 0],
                "conf_high": ci[:, 1],
            }
        )


def fit(
    X,
    y,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
    fit_intercept: bool = True,
    feature_names=None,
) -> FittedModel:
    """
    Fit a logistic regression by IRLS.

    Parameters
    ----------
    X :
        Feature matrix (n, p). A leading column of ones is added when
        ``fit_intercept`` is true, so the model has k = p + 1 coefficients.
    y :
        Binary labels in {0, 1}.
    max_iter :
        Maximum number of IRLS iterations.
    tol :
        Stop once the relative deviance change is below ``tol`` and the
        relative coefficient change is below ``sqrt(tol)``.

    Returns
    -------
    FittedModel
        ``converged`` is False when ``max_iter`` was reached first; the last
        coefficients are still returned and callers must check the flag.

    Raises
    ------
    RankDeficiencyError
        X has fewer rows than columns or is not of full column rank.
    SingularInformationError
        X'WX could not be inverted.
    """
    if max_iter < 1:
        raise ValueError(f"max_iter must be at least 1, got {max_iter}.")
    if tol <= 0:
        raise ValueError(f"tol must be positive, got {tol}.")

    X_arr = _as_matrix(X)
    y_arr = _check_labels(y)
    if X_arr.shape[0] != len(y_arr):
        raise ValueError(
            f"X has {X_arr.shape[0]} rows but y has {len(y_arr)} labels."
        )
    names = _feature_names(X, X_arr.shape[1], feature_names, fit_intercept)
    X_design = _add_bias(X_arr) if fit_intercept else X_arr

    n, k = X_design.shape
    if n < k:
        raise RankDeficiencyError(f"Need at least {k} observations, got {n}.")
    rank = np.linalg.matrix_rank(X_design)
    if rank < k:
        raise RankDeficiencyError(
            f"Design matrix has rank {rank} < {k} columns; coefficients are not identifiable."
        )

    beta = np.zeros(k)
    eta = X_design @ beta
    dev = -2.0 * log_likelihood(y_arr, eta)
    converged = False
    iterations = 0

    for step in range(1, max_iter + 1):
        p = invlogit(eta)
        weights = np.maximum(p * (1.0 - p), WEIGHT_FLOOR)
        z = eta + (y_arr - p) / weights

        xtw = X_design.T * weights
        try:
            new_beta = _solve_normal_equations(xtw @ X_design, xtw @ z)
        except (np.linalg.LinAlgError, SingularInformationError) as exc:
            raise SingularInformationError(
                f"Weighted normal equations became singular at iteration {step}: {exc}"
            ) from exc

        new_eta = X_design @ new_beta
        new_dev = -2.0 * log_likelihood(y_arr, new_eta)
        dev_change = abs(new_dev - dev) / (abs(new_dev) + 0.1)
        beta_change = np.max(np.abs(new_beta - beta)) / (np.max(np.abs(new_beta)) + 0.1)

        beta, eta, dev = new_beta, new_eta, new_dev
        iterations = step
        logger.debug("IRLS step=%d deviance=%.8f beta_change=%.3g", step, dev, beta_change)

        if dev_change < tol and beta_change < np.sqrt(tol):
            converged = True
            break

    if converged and _completely_separated(y_arr, eta):
        logger.warning("Data are completely separated; the maximum likelihood estimate does not exist.")
        converged = False
    elif not converged:
        logger.warning(
            "IRLS did not converge in %d iterations (deviance %.6g); "
            "check for separation before trusting the coefficients.",
            max_iter,
            dev,
        )

    fitted = invlogit(eta)
    if np.any((fitted < PROB_EPS) | (fitted > 1.0 - PROB_EPS)):
        logger.warning("Fitted probabilities numerically 0 or 1 occurred.")

    return FittedModel(
        coefficients=beta,
        standard_errors=_standard_errors(X_design, eta),
        converged=converged,
        iterations=iterations,
        feature_names=names,
        fit_intercept=fit_intercept,
        log_likelihood=-dev / 2.0,
        null_log_likelihood=_null_log_likelihood(y_arr, fit_intercept),
        n_obs=n,
    )
