"""
Poisson likelihood functions for penalized GLM regression.

The optimizer-facing loss is the sample-averaged negative log-likelihood;
the deviance is provided for goodness-of-fit reporting.
"""

import numpy as np
from scipy.special import xlogy


def poisson_negative_log_likelihood(y, eta, mean):
    """Mean Poisson negative log-likelihood, up to the constant log(y!) term.

    NLL = -(1/n) Σ(y·log(μ) - μ)

    Parameters
    ----------
    y : ndarray
        Observed counts.
    eta : ndarray
        Linear predictor, i.e. log(μ).
    mean : ndarray
        Predicted Poisson mean μ = exp(eta).

    Returns
    -------
    float
        Negative mean log-likelihood.

    Notes
    -----
    ``eta`` is passed alongside ``mean`` so that log(μ) is never computed
    as log(exp(eta)), which loses precision for very small means.
    """
    return -float(np.mean(y * eta - mean))


def poisson_deviance(y, mean):
    """Total Poisson deviance.

    D = 2 Σ(y·log(y/μ) - (y - μ))

    Parameters
    ----------
    y : ndarray
        Observed counts.
    mean : ndarray
        Predicted Poisson mean. Must be strictly positive.

    Returns
    -------
    float
        Deviance. Zero terms (y = 0) contribute 2μ.
    """
    y = np.asarray(y, dtype=float)
    mean = np.asarray(mean, dtype=float)
    return float(2 * np.sum(xlogy(y, y / mean) - (y - mean)))
