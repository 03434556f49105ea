"""
Penalized GLM
=============

Immutable, ridge-penalized generalized linear regression models built on
a shared fitting contract. Models follow scikit-learn naming (get_params,
clone, predict, score) but ``fit`` returns a new model, so scikit-learn
meta-estimators such as Pipeline are not supported.

Main Classes
------------
LinearRegressor : Contract every model family implements
PoissonRegression : Poisson regression with log link and L2 penalty
LBFGSOptimizer : Default optimizer (scipy L-BFGS-B)
GradientDescentOptimizer : Steepest descent with backtracking

Quick Start
-----------
>>> import numpy as np
>>> from penalized_glm import PoissonRegression, add_intercept
>>>
>>> X = add_intercept(np.arange(5.0).reshape(-1, 1))
>>> y = np.array([0, 1, 2, 1, 3])
>>> model = PoissonRegression(lambda_=0.1)
>>> fitted = model.fit(X, y)      # model itself stays unfitted
>>> fitted.predict(X)             # doctest: +SKIP
"""

from .exceptions import InvalidConfigurationError, IncompatibleTargetError
from .regression import (
    LinearRegressor,
    LossEvaluation,
    PoissonRegression,
    poisson_negative_log_likelihood,
    poisson_deviance,
    bias_penalty_mask,
    ridge_penalty,
    ridge_penalty_gradient,
)
from .optimize import OptimizationResult, LBFGSOptimizer, GradientDescentOptimizer
from .diagnostics import (
    check_gradient,
    hessian_standard_errors,
    fit_statistics,
    FitStatistics,
)
from .utils import add_intercept, generate_poisson_data

__version__ = "0.1.0"

__all__ = [
    # Core classes
    'LinearRegressor',
    'LossEvaluation',
    'PoissonRegression',

    # Errors
    'InvalidConfigurationError',
    'IncompatibleTargetError',

    # Optimizers
    'OptimizationResult',
    'LBFGSOptimizer',
    'GradientDescentOptimizer',

    # Loss and penalties
    'poisson_negative_log_likelihood',
    'poisson_deviance',
    'bias_penalty_mask',
    'ridge_penalty',
    'ridge_penalty_gradient',

    # Diagnostics
    'check_gradient',
    'hessian_standard_errors',
    'fit_statistics',
    'FitStatistics',

    # Utilities
    'add_intercept',
    'generate_poisson_data',
]
