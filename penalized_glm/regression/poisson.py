"""
PoissonRegression: ridge-penalized Poisson regression with a log link.

Minimizes: -(1/n) Σ(y·log(μ) - μ) + 0.5·λ·||w[1:]||₂²
where:     μ = exp(X·w)

The bias ``w[0]`` is never penalized.
"""

import numbers

import numpy as np
from sklearn.metrics import d2_tweedie_score
from sklearn.utils.validation import check_is_fitted

from ..exceptions import InvalidConfigurationError
from .contract import LinearRegressor
from .loss import poisson_negative_log_likelihood
from .penalties import bias_penalty_mask, ridge_penalty, ridge_penalty_gradient

# exp(700) is close to the largest finite float64
MAX_LINEAR_PREDICTOR = 700.0
_MAX_MEAN = np.exp(MAX_LINEAR_PREDICTOR)
_MIN_MEAN = np.exp(-MAX_LINEAR_PREDICTOR)


def _validate_lambda(lambda_):
    if (not isinstance(lambda_, numbers.Real) or not np.isfinite(lambda_)
            or lambda_ < 0):
        raise InvalidConfigurationError(
            f"L2 regularization strength must be a finite number >= 0, "
            f"got {lambda_!r}"
        )


class PoissonRegression(LinearRegressor):
    """
    Immutable multiple Poisson regression with ridge regularization.

    Parameters
    ----------
    lambda_ : float, default=0.0
        L2 regularization strength, must be >= 0. 0 means no
        regularization. The bias weight is excluded from the penalty.

    Notes
    -----
    ``loss_stateless`` caches the predicted mean exp(X·w) on the instance
    and ``loss_grad_stateless`` reuses it, so the gradient is only correct
    when it directly follows a loss evaluation at the same ``w``.
    :meth:`~LinearRegressor.evaluate` and ``fit`` respect this ordering.
    The cache makes instances unsafe to evaluate from several threads.

    The linear predictor is clipped to [-700, 700] so the mean stays finite.
    Where the clip is active the loss is flat in that sample's linear
    predictor, and the gradient drops that sample's contribution to match.

    Examples
    --------
    >>> import numpy as np
    >>> from penalized_glm import PoissonRegression, add_intercept
    >>>
    >>> X = add_intercept(np.arange(5.0).reshape(-1, 1))
    >>> y = np.array([0, 1, 2, 1, 3])
    >>> model = PoissonRegression().fit(X, y)
    >>> model.predict(X)  # doctest: +SKIP
    array([0., 0., 1., 1., 2.])

    >>> PoissonRegression(lambda_=1.5).is_fitted
    False
    """

    def __init__(self, lambda_=0.0):
        _validate_lambda(lambda_)
        self.lambda_ = lambda_
        self._w = None
        self._mean_cache = None

    def set_params(self, **params):
        """Set parameters on an unfitted model.

        Raises
        ------
        InvalidConfigurationError
            If the model is fitted (its weights belong to the current
            ``lambda_``) or if the new ``lambda_`` is invalid.
        """
        if self.is_fitted:
            raise InvalidConfigurationError(
                "Cannot change parameters of a fitted PoissonRegression; "
                "call set_params on clone(model) or copy_without_weights()"
            )
        if 'lambda_' in params:
            _validate_lambda(params['lambda_'])
        return super().set_params(**params)

    @property
    def weights(self):
        return self._w

    def copy_without_weights(self):
        return PoissonRegression(self.lambda_)

    def copy_with_weights(self, w):
        model = PoissonRegression(self.lambda_)
        w = np.array(w, dtype=float)
        w.setflags(write=False)
        model._w = w
        return model

    def target_variable_appropriate(self, y):
        """Counts only: every entry finite, integral and non-negative."""
        y = np.asarray(y, dtype=float)
        return bool(
            np.all(np.isfinite(y))
            and np.array_equal(y, np.floor(y))
            and np.all(y >= 0)
        )

    def _linear_predictor(self, w, X):
        eta = np.asarray(X @ w, dtype=float).ravel()
        return np.clip(eta, -MAX_LINEAR_PREDICTOR, MAX_LINEAR_PREDICTOR)

    def _predict_mean(self, w, X):
        return np.exp(self._linear_predictor(w, X))

    def predict_mean(self, X):
        """
        Mean of the Poisson distribution, exp(X·w), at the stored weights.

        Parameters
        ----------
        X : array-like or sparse matrix of shape (n_samples, n_features)

        Returns
        -------
        mean : ndarray of shape (n_samples,)

        Raises
        ------
        NotFittedError
            If the model is not fitted yet.
        """
        check_is_fitted(
            self, msg="Called predict_mean on a %(name)s that is not fitted yet."
        )
        X = self._validate_X(X)
        return self._predict_mean(self.weights, X)

    def predict_stateless(self, w, X):
        # Truncated, not rounded
        return np.floor(self._predict_mean(w, X))

    def loss_stateless(self, w, X, y):
        w = np.asarray(w, dtype=float)
        eta = self._linear_predictor(w, X)
        self._mean_cache = np.exp(eta)

        nll = poisson_negative_log_likelihood(y, eta, self._mean_cache)
        return nll + ridge_penalty(w, self.lambda_, bias_penalty_mask(len(w)))

    def loss_grad_stateless(self, w, X, y, mean=None):
        """
        Gradient of :meth:`loss_stateless` at ``w``.

        Parameters
        ----------
        w, X, y
            Same arguments as the preceding ``loss_stateless`` call.

        mean : ndarray or None, default=None
            Predicted mean at ``w``. When None, the mean cached by the most
            recent ``loss_stateless`` call is used; a cache from a different
            ``w`` silently yields a wrong gradient.

        Returns
        -------
        grad : ndarray, same shape as ``w``

        Raises
        ------
        RuntimeError
            If no mean is given and ``loss_stateless`` was never called.
        """
        if mean is None:
            mean = self._mean_cache
        if mean is None:
            raise RuntimeError(
                "loss_grad_stateless needs the mean from a preceding "
                "loss_stateless call at the same weights; call loss_stateless "
                "first or pass mean explicitly"
            )

        w = np.asarray(w, dtype=float)
        mean = np.asarray(mean, dtype=float)
        # Clipped samples contribute nothing to the loss slope
        residual = np.where(
            (mean >= _MAX_MEAN) | (mean <= _MIN_MEAN), 0.0, mean - y
        )
        grad = np.asarray(X.T @ residual, dtype=float).ravel() / X.shape[0]
        return grad + ridge_penalty_gradient(
            w, self.lambda_, bias_penalty_mask(len(w))
        )

    def score(self, X, y, sample_weight=None):
        """
        Fraction of Poisson deviance explained (D²).

        Computed on the predicted mean, not the truncated counts. 1.0 is a
        perfect fit; a model predicting the mean of y everywhere scores 0.0.
        """
        return d2_tweedie_score(
            y, self.predict_mean(X), sample_weight=sample_weight, power=1
        )
