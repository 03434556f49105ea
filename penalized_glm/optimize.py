"""
Optimizers that drive the fit of a LinearRegressor.

An optimizer receives an objective ``w -> LossEvaluation`` and a starting
weight vector and returns an :class:`OptimizationResult`. It knows nothing
about the model family: the objective is built by
``LinearRegressor.evaluate``, which always computes the loss and its
gradient together at the same weights.

Two optimizers are provided:

- :class:`LBFGSOptimizer` wraps ``scipy.optimize.minimize`` (default).
- :class:`GradientDescentOptimizer` is steepest descent with Armijo
  backtracking, whose loss history never increases.
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Callable, List

import numpy as np
from scipy.optimize import minimize
from sklearn.exceptions import ConvergenceWarning

_logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """Outcome of an optimizer run."""
    x: np.ndarray
    fun: float
    converged: bool
    n_iter: int
    message: str = ""
    # Loss at the starting point followed by the loss after each iteration
    loss_history: List[float] = field(default_factory=list)


def _warn_not_converged(result, verbose):
    if not result.converged and verbose >= 1:
        warnings.warn(
            f"Optimizer did not converge: {result.message}. "
            f"Try increasing max_iter or rescaling the features.",
            ConvergenceWarning
        )


@dataclass
class LBFGSOptimizer:
    """
    Quasi-Newton optimizer backed by ``scipy.optimize.minimize``.

    Loss and gradient are requested through a single call per point
    (``jac=True``), so each evaluation pairs them at the same weights.

    Parameters
    ----------
    method : str, default='L-BFGS-B'
        Any gradient-based method accepted by ``scipy.optimize.minimize``
        ('L-BFGS-B', 'BFGS', 'CG', 'Newton-CG', ...).

    max_iter : int, default=1000
        Maximum number of optimizer iterations.

    tol : float, default=1e-9
        Tolerance for convergence (``ftol``/``gtol`` in scipy terms).

    verbose : int, default=0
        Verbosity level. 0=silent, 1=warnings, 2=per-iteration log records.
    """
    method: str = 'L-BFGS-B'
    max_iter: int = 1000
    tol: float = 1e-9
    verbose: int = 0

    def _options(self):
        options = {'maxiter': self.max_iter}
        if self.method == 'L-BFGS-B':
            options['ftol'] = self.tol
            options['gtol'] = self.tol
        elif self.method in ('BFGS', 'CG'):
            options['gtol'] = self.tol
        elif self.method == 'Newton-CG':
            options['xtol'] = self.tol
        return options

    def minimize(self, objective: Callable, x0) -> OptimizationResult:
        """Minimize ``objective`` starting from ``x0``."""
        history = []

        def fun(w):
            evaluation = objective(w)
            return evaluation.loss, evaluation.gradient

        def callback(intermediate_result):
            history.append(float(intermediate_result.fun))
            if self.verbose >= 2:
                _logger.info(
                    "iteration %d: loss=%.10g", len(history) - 1,
                    intermediate_result.fun
                )

        x0 = np.asarray(x0, dtype=float)
        history.append(objective(x0).loss)

        scipy_result = minimize(
            fun=fun,
            x0=x0,
            method=self.method,
            jac=True,
            callback=callback,
            options=self._options()
        )

        result = OptimizationResult(
            x=np.asarray(scipy_result.x, dtype=float),
            fun=float(scipy_result.fun),
            converged=bool(scipy_result.success),
            n_iter=int(scipy_result.get('nit', len(history) - 1)),
            message=str(scipy_result.message),
            loss_history=history,
        )
        _logger.debug(
            "%s finished after %d iterations: loss=%.10g, converged=%s",
            self.method, result.n_iter, result.fun, result.converged
        )
        _warn_not_converged(result, self.verbose)
        return result


@dataclass
class GradientDescentOptimizer:
    """
    Steepest descent with Armijo backtracking line search.

    Each iteration starts from ``learning_rate`` and shrinks the step by
    ``shrink`` until the sufficient-decrease condition holds, so the loss
    never increases from one iteration to the next.

    Parameters
    ----------
    learning_rate : float, default=1.0
        Initial step size tried at every iteration.

    max_iter : int, default=5000
        Maximum number of iterations.

    tol : float, default=1e-6
        Converged when the largest absolute gradient entry is below tol.

    shrink : float, default=0.5
        Backtracking factor in (0, 1).

    armijo : float, default=1e-4
        Sufficient-decrease constant in (0, 1).

    verbose : int, default=0
        Verbosity level. 0=silent, 1=warnings, 2=per-iteration log records.
    """
    learning_rate: float = 1.0
    max_iter: int = 5000
    tol: float = 1e-6
    shrink: float = 0.5
    armijo: float = 1e-4
    verbose: int = 0

    min_step = 1e-16

    def __post_init__(self):
        if self.learning_rate <= 0:
            raise ValueError(
                f"learning_rate must be positive, got {self.learning_rate}"
            )
        if not 0 < self.shrink < 1:
            raise ValueError(f"shrink must be in (0, 1), got {self.shrink}")
        if not 0 < self.armijo < 1:
            raise ValueError(f"armijo must be in (0, 1), got {self.armijo}")

    def _small(self, grad):
        return np.max(np.abs(grad), initial=0.0) < self.tol

    def minimize(self, objective: Callable, x0) -> OptimizationResult:
        """Minimize ``objective`` starting from ``x0``."""
        w = np.array(x0, dtype=float)
        current = objective(w)
        history = [current.loss]
        message = f"Maximum number of iterations ({self.max_iter}) reached"
        n_iter = 0

        while not self._small(current.gradient) and n_iter < self.max_iter:
            grad = current.gradient

            step = self.learning_rate
            decrease = self.armijo * float(grad @ grad)
            while True:
                candidate = w - step * grad
                trial = objective(candidate)
                if trial.loss <= current.loss - step * decrease:
                    break
                step *= self.shrink
                if step < self.min_step:
                    trial = None
                    break

            if trial is None:
                message = "Line search could not find a decreasing step"
                break

            n_iter += 1
            w, current = candidate, trial
            history.append(current.loss)
            if self.verbose >= 2:
                _logger.info(
                    "iteration %d: loss=%.10g, step=%.3g",
                    n_iter, current.loss, step
                )

        converged = self._small(current.gradient)
        if converged:
            message = "Gradient norm below tolerance"

        result = OptimizationResult(
            x=w,
            fun=current.loss,
            converged=converged,
            n_iter=n_iter,
            message=message,
            loss_history=history,
        )
        _logger.debug(
            "gradient descent finished after %d iterations: loss=%.10g, "
            "converged=%s", result.n_iter, result.fun, result.converged
        )
        _warn_not_converged(result, self.verbose)
        return result
