import numpy as np
import pandas as pd
import pytest


def simulate_logistic(n, alpha, beta, seed):
    """Draw (x, y) from y ~ Bernoulli(invlogit(alpha + beta * x)), x ~ N(0, 1)."""
    rng = np.random.default_rng(seed)
    x = rng.normal(size=n)
    p = 1.0 / (1.0 + np.exp(-(alpha + beta * x)))
    y = (rng.uniform(size=n) < p).astype(int)
    return x, y


@pytest.fixture
def two_by_two():
    """Binary predictor with 10/20 positives/negatives at x=0 and 25/15 at x=1."""
    x = np.array([0] * 30 + [1] * 40, dtype=float)
    y = np.array([1] * 10 + [0] * 20 + [1] * 25 + [0] * 15)
    return x, y


@pytest.fixture
def simulated_frame():
    rng = np.random.default_rng(7)
    n = 400
    age = rng.normal(50, 10, size=n)
    dose = rng.uniform(0, 2, size=n)
    eta = -4.0 + 0.06 * age + 0.8 * dose
    y = (rng.uniform(size=n) < 1.0 / (1.0 + np.exp(-eta))).astype(int)
    return pd.DataFrame({"age": age, "dose": dose, "outcome": y})
