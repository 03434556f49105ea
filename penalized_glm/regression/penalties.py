"""
Ridge penalty computation for penalized GLM regression.

This module handles the L2 penalty and its gradient, with support for
excluding specific weights (by convention the bias at index 0) from
penalization.
"""

import numpy as np


def bias_penalty_mask(n_params):
    """Build the penalty mask for a weight vector whose first entry is the bias.

    Parameters
    ----------
    n_params : int
        Length of the weight vector, bias included.

    Returns
    -------
    mask : ndarray of bool
        Boolean mask where True means the weight IS penalized.
        The bias (index 0) is always False.

    Raises
    ------
    ValueError
        If n_params is smaller than 1.

    Examples
    --------
    >>> bias_penalty_mask(3)
    array([False,  True,  True])
    """
    if n_params < 1:
        raise ValueError(
            f"n_params must be at least 1 (the bias), got {n_params}"
        )

    mask = np.ones(n_params, dtype=bool)
    mask[0] = False
    return mask


def ridge_penalty(w, lambda_, penalty_mask=None):
    """Compute the L2 (ridge) penalty.

    The penalty is computed as:
        penalty = 0.5 * λ * ||w[mask]||₂²

    Parameters
    ----------
    w : ndarray
        Weight vector.
    lambda_ : float
        Penalty strength. If 0, returns 0.0 immediately.
    penalty_mask : ndarray of bool, optional
        If provided, only weights where mask is True are penalized.

    Returns
    -------
    float
        Penalty value.

    Examples
    --------
    >>> w = np.array([1.0, 2.0, 3.0])
    >>> ridge_penalty(w, lambda_=0.1)
    0.7

    # Exclude the bias from the penalty
    >>> ridge_penalty(w, lambda_=0.1, penalty_mask=bias_penalty_mask(3))
    0.65
    """
    # Fast path: no penalty
    if lambda_ == 0:
        return 0.0

    if penalty_mask is not None:
        w = w[penalty_mask]

    return 0.5 * lambda_ * float(w @ w)


def ridge_penalty_gradient(w, lambda_, penalty_mask=None):
    """Gradient of :func:`ridge_penalty` with respect to ``w``.

    Excluded weights get a zero gradient entry.

    Parameters
    ----------
    w : ndarray
        Weight vector.
    lambda_ : float
        Penalty strength.
    penalty_mask : ndarray of bool, optional
        Same mask as passed to :func:`ridge_penalty`.

    Returns
    -------
    ndarray
        Array of the same shape as ``w``.
    """
    grad = lambda_ * np.asarray(w, dtype=float)
    if penalty_mask is not None:
        grad = np.where(penalty_mask, grad, 0.0)
    return grad
