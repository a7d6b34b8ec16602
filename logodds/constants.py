from __future__ import annotations

"""
Default knobs shared by the estimator, the evaluator and the CLI.
"""

import numpy as np

DEFAULT_MAX_ITER = 25
DEFAULT_TOL = 1e-8

# Working weights p(1-p) are clamped here before dividing by them. Only weights
# that underflowed (fitted p exactly 0 or 1) ever reach the floor.
WEIGHT_FLOOR = 1e-30
# Fitted probabilities within this distance of 0 or 1 count as numerically 0/1.
PROB_EPS = 10 * np.finfo(float).eps

DEFAULT_THRESHOLD = 0.5

GRID_POINTS = 1000
GRID_LOW = 0.001
GRID_HIGH = 0.999

INTERCEPT_NAME = "(Intercept)"
