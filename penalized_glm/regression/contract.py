"""
LinearRegressor: the contract shared by every linear regression family.

A concrete family implements seven members (weight access, the two copy
constructors, target validation and the three stateless evaluations) and
inherits a generic fit/predict lifecycle written only against them.

The stateless evaluations take an arbitrary candidate weight vector
rather than the model's stored weights, which is what lets one optimizer
drive any family without family-specific branching.
"""

import logging
import time
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_X_y, check_array, check_is_fitted, column_or_1d

from ..exceptions import IncompatibleTargetError
from ..optimize import LBFGSOptimizer

_logger = logging.getLogger(__name__)

ACCEPT_SPARSE = ['csr', 'csc']


@dataclass(frozen=True)
class LossEvaluation:
    """Loss and gradient computed together at one weight vector."""
    loss: float
    gradient: np.ndarray


class LinearRegressor(RegressorMixin, BaseEstimator, metaclass=ABCMeta):
    """
    Base class for immutable linear regression models.

    Weights are laid out bias first: ``w[0]`` pairs with a column of ones
    that must be the first column of ``X``, ``w[1:]`` are the per-feature
    coefficients.

    ``fit`` never mutates the receiver. It returns a new model carrying the
    fitted weights; calling it on a fitted model returns yet another
    independent model.

    scikit-learn meta-estimators (``Pipeline``, ``cross_val_score``,
    ``GridSearchCV``) are not supported: they call ``est.fit(X, y)``, discard
    the return value and keep using ``est``, which is still unfitted.
    ``get_params``, ``set_params`` on unfitted models and ``clone`` work.

    Subclasses must implement
    -------------------------
    weights : property
        Stored weight vector, or None when unfitted.
    copy_without_weights()
        Equivalent model with no weights.
    copy_with_weights(w)
        Equivalent model carrying ``w``.
    target_variable_appropriate(y)
        Whether ``y`` is valid for the family's likelihood.
    predict_stateless(w, X)
        Point predictions at ``w``.
    loss_stateless(w, X, y)
        Regularized loss at ``w``.
    loss_grad_stateless(w, X, y)
        Gradient of ``loss_stateless`` at ``w``.

    Attributes set on a fitted model
    --------------------------------
    n_features_in_ : int
        Number of columns of X seen during fit, bias column included.

    feature_names_in_ : ndarray of shape (n_features_in_,)
        From DataFrame.columns, otherwise 'intercept', 'X1', 'X2', ...

    named_coef_ : dict
        Weights keyed by feature_names_in_.

    converged_ : bool
        Whether the optimizer reported convergence.

    n_iter_ : int
        Number of optimizer iterations.

    loss_history_ : list of float
        Loss at the starting point and after every iteration.

    optimization_result_ : OptimizationResult
        Full result returned by the optimizer.
    """

    @property
    @abstractmethod
    def weights(self):
        """Stored weight vector, or None before fitting."""

    @abstractmethod
    def copy_without_weights(self):
        """Return an equivalent model with the weights cleared."""

    @abstractmethod
    def copy_with_weights(self, w):
        """Return an equivalent model carrying weight vector ``w``."""

    @abstractmethod
    def target_variable_appropriate(self, y):
        """Return True when ``y`` is compatible with the likelihood family."""

    @abstractmethod
    def predict_stateless(self, w, X):
        """Point predictions for ``X`` at weights ``w``, ignoring stored weights."""

    @abstractmethod
    def loss_stateless(self, w, X, y):
        """Regularized loss at weights ``w``."""

    @abstractmethod
    def loss_grad_stateless(self, w, X, y):
        """Gradient of :meth:`loss_stateless` with respect to ``w``."""

    @property
    def is_fitted(self):
        return self.weights is not None

    def __sklearn_is_fitted__(self):
        return self.is_fitted

    @property
    def intercept_(self):
        check_is_fitted(self)
        return float(self.weights[0])

    @property
    def coef_(self):
        check_is_fitted(self)
        return self.weights[1:]

    def evaluate(self, w, X, y):
        """
        Loss and gradient at ``w`` in one call.

        The loss is always evaluated immediately before the gradient at the
        same weights, so families may share intermediate results between
        the two. Optimizers should call this rather than the two stateless
        evaluations separately.

        Returns
        -------
        LossEvaluation
        """
        loss = self.loss_stateless(w, X, y)
        gradient = self.loss_grad_stateless(w, X, y)
        return LossEvaluation(
            loss=float(loss),
            gradient=np.asarray(gradient, dtype=float)
        )

    def _check_weight_width(self, X, n_weights):
        if X.shape[1] != n_weights:
            raise ValueError(
                f"X has {X.shape[1]} features, but the weight vector has "
                f"{n_weights} entries (bias column included)"
            )

    def fit(self, X, y, optimizer=None):
        """
        Fit the model and return a new fitted model.

        Parameters
        ----------
        X : array-like or sparse matrix of shape (n_samples, n_features)
            Training data. The first column must be the bias column of ones.

        y : array-like of shape (n_samples,)
            Target values.

        optimizer : object or None, default=None
            Anything with ``minimize(objective, x0) -> OptimizationResult``.
            Defaults to :class:`~penalized_glm.optimize.LBFGSOptimizer`.

        Returns
        -------
        model : LinearRegressor
            A new model of the same type carrying the fitted weights.
            ``self`` is left untouched.

        Raises
        ------
        IncompatibleTargetError
            If ``target_variable_appropriate(y)`` is False.
        """
        fit_datetime = datetime.now()
        fit_start_time = time.perf_counter()

        # Extract X column names BEFORE validation converts to numpy
        if hasattr(X, 'columns'):
            feature_names = np.array([str(c) for c in X.columns])
        else:
            feature_names = None

        y = np.asarray(column_or_1d(y, warn=True), dtype=float)
        if not self.target_variable_appropriate(y):
            raise IncompatibleTargetError(
                f"{type(self).__name__} cannot be fitted to this target: "
                f"the values are not valid for its likelihood family"
            )

        X, y = check_X_y(X, y, accept_sparse=ACCEPT_SPARSE, y_numeric=True)
        n_samples, n_features = X.shape

        if feature_names is None:
            feature_names = np.array(
                ['intercept'] + [f'X{i}' for i in range(1, n_features)]
            )

        if optimizer is None:
            optimizer = LBFGSOptimizer()

        _logger.debug(
            "fitting %r on %d samples, %d features", self, n_samples, n_features
        )

        # The objective runs on a weightless copy so that its scratch state
        # is never shared with the receiver.
        worker = self.copy_without_weights()

        def objective(w):
            return worker.evaluate(w, X, y)

        result = optimizer.minimize(objective, np.zeros(n_features))

        fitted = self.copy_with_weights(result.x)
        fitted.n_features_in_ = n_features
        fitted.feature_names_in_ = feature_names
        fitted.named_coef_ = dict(zip(feature_names, fitted.weights))
        fitted.converged_ = result.converged
        fitted.n_iter_ = result.n_iter
        fitted.loss_history_ = list(result.loss_history)
        fitted.optimization_result_ = result
        fitted.fit_datetime_ = fit_datetime
        fitted.fit_duration_seconds_ = time.perf_counter() - fit_start_time
        return fitted

    def _validate_X(self, X):
        X = check_array(X, accept_sparse=ACCEPT_SPARSE)
        self._check_weight_width(X, len(self.weights))
        return X

    def predict(self, X):
        """
        Predict using the stored weights.

        Parameters
        ----------
        X : array-like or sparse matrix of shape (n_samples, n_features)
            Samples to predict, bias column first.

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)

        Raises
        ------
        NotFittedError
            If the model has no weights.
        """
        check_is_fitted(self)
        X = self._validate_X(X)
        return self.predict_stateless(self.weights, X)

    def summary(self):
        """Print a summary of the fitted model."""
        check_is_fitted(self)

        print("=" * 60)
        print(f"{type(self).__name__} Summary")
        print("=" * 60)
        for name, value in self.get_params().items():
            print(f"{name}: {value}")

        if hasattr(self, 'converged_'):
            print(f"Converged: {self.converged_}")
            print(f"Iterations: {self.n_iter_}")
            print(f"Final loss: {self.loss_history_[-1]:.6f}")

        print("\nWeights:")
        names = getattr(
            self, 'feature_names_in_',
            ['intercept'] + [f'X{i}' for i in range(1, len(self.weights))]
        )
        for i, (name, value) in enumerate(zip(names, self.weights)):
            suffix = " (bias, not penalized)" if i == 0 else ""
            print(f"  {name}: {value:.6f}{suffix}")

        print("=" * 60)
