"""
Diagnostics for fitted penalized GLM models.

Provides:
- Analytic vs. finite-difference gradient comparison
- Hessian-based standard errors
- Goodness-of-fit statistics (deviance, D², AIC)
"""

import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd
from scipy.optimize import approx_fprime
from scipy.special import gammaln, xlogy
from sklearn.metrics import mean_poisson_deviance
from sklearn.utils.validation import check_array, check_is_fitted

_logger = logging.getLogger(__name__)


def check_gradient(model, w, X, y, epsilon=1e-6):
    """
    Compare the analytic loss gradient with a finite-difference estimate.

    Parameters
    ----------
    model : LinearRegressor
        Model whose ``loss_stateless``/``loss_grad_stateless`` are checked.
        Evaluations run on a weightless copy, so ``model`` is not touched.

    w : array-like
        Weight vector at which to compare.

    X : array-like of shape (n_samples, n_features)
        Design matrix, bias column first.

    y : array-like of shape (n_samples,)
        Target values.

    epsilon : float, default=1e-6
        Step size for numerical differentiation.

    Returns
    -------
    report : pandas.DataFrame
        One row per weight with columns 'analytic', 'numeric' and
        'abs_error'.

    Examples
    --------
    >>> report = check_gradient(PoissonRegression(0.5), w, X, y)  # doctest: +SKIP
    >>> report['abs_error'].max() < 1e-4  # doctest: +SKIP
    True
    """
    w = np.asarray(w, dtype=float)
    X = check_array(X, accept_sparse=['csr', 'csc'])
    y = np.asarray(y, dtype=float)
    worker = model.copy_without_weights()

    analytic = worker.evaluate(w, X, y).gradient

    def objective(p):
        return worker.loss_stateless(p, X, y)

    numeric = approx_fprime(w, objective, epsilon)

    report = pd.DataFrame({
        'analytic': analytic,
        'numeric': numeric,
        'abs_error': np.abs(analytic - numeric),
    })
    _logger.debug("max gradient error: %.3g", report['abs_error'].max())
    return report


def hessian_standard_errors(model, X, y, epsilon=1e-6):
    """
    Compute standard errors from the Hessian of the fitted objective.

    The Hessian is obtained by differentiating the analytic gradient
    numerically, and scaled by n because the loss is a per-sample average.

    Parameters
    ----------
    model : LinearRegressor
        Fitted model.

    X : array-like of shape (n_samples, n_features)
        Training data, bias column first.

    y : array-like of shape (n_samples,)
        Target values.

    epsilon : float, default=1e-6
        Step size for numerical differentiation.

    Returns
    -------
    se : ndarray
        Standard errors, one per weight (bias first). NaN when the
        Hessian is singular.

    Notes
    -----
    With ``lambda_ > 0`` the penalty curvature is included, which gives
    the usual ridge-shrunk (too small) standard errors.
    """
    check_is_fitted(model)
    X = check_array(X, accept_sparse=['csr', 'csc'])
    y = np.asarray(y, dtype=float)
    n = len(y)

    params = np.array(model.weights, dtype=float)
    n_params = len(params)
    worker = model.copy_without_weights()

    hessian = np.zeros((n_params, n_params))
    for i in range(n_params):
        def grad_i(p):
            return worker.evaluate(p, X, y).gradient[i]

        hessian[i, :] = approx_fprime(params, grad_i, epsilon)

    # Make symmetric
    hessian = (hessian + hessian.T) / 2

    try:
        cov = np.linalg.inv(n * hessian)
        se = np.sqrt(np.diag(np.abs(cov)))
    except np.linalg.LinAlgError:
        se = np.full(n_params, np.nan)

    return se


@dataclass
class FitStatistics:
    """Goodness-of-fit statistics for a fitted Poisson model."""
    n_samples: int
    n_params: int
    loss: float
    mean_deviance: float
    d2: float
    log_likelihood: float
    aic: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            'N': self.n_samples,
            'Parameters': self.n_params,
            'Loss': self.loss,
            'Mean Deviance': self.mean_deviance,
            'D2': self.d2,
            'Log-Likelihood': self.log_likelihood,
            'AIC': self.aic,
        }


def fit_statistics(model, X, y):
    """
    Compute goodness-of-fit statistics for a fitted Poisson model.

    Parameters
    ----------
    model : PoissonRegression
        Fitted model.

    X : array-like of shape (n_samples, n_features)
        Data, bias column first.

    y : array-like of shape (n_samples,)
        Observed counts.

    Returns
    -------
    FitStatistics
    """
    check_is_fitted(model)
    y = np.asarray(y, dtype=float)

    mean = model.predict_mean(X)
    X = model._validate_X(X)
    loss = model.copy_without_weights().loss_stateless(model.weights, X, y)

    log_likelihood = float(np.sum(xlogy(y, mean) - mean - gammaln(y + 1)))
    n_params = len(model.weights)

    return FitStatistics(
        n_samples=len(y),
        n_params=n_params,
        loss=float(loss),
        mean_deviance=float(mean_poisson_deviance(y, mean)),
        d2=float(model.score(X, y)),
        log_likelihood=log_likelihood,
        aic=-2 * log_likelihood + 2 * n_params,
    )
