"""Statsmodels utilities for SARIMA fitting.

Provides utilities for managing statsmodels-specific concerns such as warning
suppression during model fitting, so that repeated fits in the order search
do not flood the logs.
"""

from __future__ import annotations

import warnings

__all__ = ["suppress_statsmodels_warnings"]


def suppress_statsmodels_warnings() -> None:
    """Suppress common, uninformative statsmodels warnings.

    Meant to be called inside a ``warnings.catch_warnings()`` block so the
    global filter is restored afterwards. Covers:
        - UserWarning from the statsmodels module
        - Index / frequency information warnings
        - Non-invertible or non-stationary starting parameters
        - Optimiser convergence chatter (convergence is checked explicitly
          on the results object)

    Examples:
        >>> with warnings.catch_warnings():
        ...     suppress_statsmodels_warnings()
        ...     results = SARIMAX(y, order=(1, 0, 0)).fit(disp=False)
    """
    warnings.filterwarnings("ignore", category=UserWarning, module="statsmodels")
    warnings.filterwarnings("ignore", message=".*No supported index is available.*")
    warnings.filterwarnings("ignore", message=".*date index has been provided.*")
    warnings.filterwarnings("ignore", message=".*frequency information.*")
    warnings.filterwarnings("ignore", message=".*Non-invertible starting.*")
    warnings.filterwarnings("ignore", message=".*Non-stationary starting.*")
    warnings.filterwarnings("ignore", message=".*Maximum Likelihood optimization failed.*")
    warnings.filterwarnings("ignore", category=RuntimeWarning, module="statsmodels")
