"""
Utility functions for penalized GLM regression.

Provides:
- Bias column handling for design matrices
- Synthetic count data generation with known weights
"""

import numpy as np
import scipy.sparse as sp


def add_intercept(X):
    """
    Prepend the all-ones bias column expected by LinearRegressor models.

    Parameters
    ----------
    X : array-like or sparse matrix of shape (n_samples, n_features)
        Feature matrix without a bias column.

    Returns
    -------
    X_with_bias : ndarray or sparse CSR matrix of shape (n_samples, n_features + 1)
        Same kind as the input (dense stays dense, sparse stays sparse).

    Examples
    --------
    >>> add_intercept(np.array([[2.0], [3.0]]))
    array([[1., 2.],
           [1., 3.]])
    """
    if sp.issparse(X):
        ones = sp.csr_matrix(np.ones((X.shape[0], 1)))
        return sp.hstack([ones, X], format='csr')

    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    return np.column_stack([np.ones(X.shape[0]), X])


def generate_poisson_data(n_samples=100, coef=(0.5, 0.3, -0.2), random_state=None):
    """
    Generate count data from a Poisson model with known weights.

    Features are standard normal; the bias column is prepended so the
    returned X can be passed straight to ``fit``.

    Parameters
    ----------
    n_samples : int, default=100
        Number of rows.

    coef : sequence of float, default=(0.5, 0.3, -0.2)
        True weights, bias first. len(coef) - 1 features are generated.

    random_state : int or None, default=None
        Random seed.

    Returns
    -------
    data : dict
        Dictionary containing:
        - 'X': design matrix with bias column, shape (n_samples, len(coef))
        - 'y': Poisson counts, shape (n_samples,)
        - 'mean': true Poisson means exp(X @ coef)
        - 'params': true weights as ndarray

    Examples
    --------
    >>> data = generate_poisson_data(n_samples=50, random_state=42)
    >>> data['X'].shape
    (50, 3)
    """
    rng = np.random.default_rng(random_state)
    coef = np.asarray(coef, dtype=float)

    if coef.ndim != 1 or len(coef) < 1:
        raise ValueError("coef must be a non-empty 1-D sequence, bias first")

    X = add_intercept(rng.standard_normal((n_samples, len(coef) - 1)))
    mean = np.exp(X @ coef)
    y = rng.poisson(mean).astype(float)

    return {
        'X': X,
        'y': y,
        'mean': mean,
        'params': coef,
    }
