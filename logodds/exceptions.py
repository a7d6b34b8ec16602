from __future__ import annotations

"""
Errors raised when a fit or an evaluation has no meaningful answer.
"""


class LogoddsError(ValueError):
    """Base class for the package's errors."""


class RankDeficiencyError(LogoddsError):
    """The design matrix does not have full column rank."""


class SingularInformationError(LogoddsError):
    """X'WX cannot be inverted, so the weighted solve or the standard errors are undefined."""


class DegenerateLabelsError(LogoddsError):
    """Labels contain a single class; ROC rates are undefined."""
