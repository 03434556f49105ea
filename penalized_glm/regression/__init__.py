"""
Penalized GLM regression models.

This module provides the LinearRegressor contract and the Poisson family
implementing it, along with supporting functions for loss and penalty
computation.
"""

from .contract import LinearRegressor, LossEvaluation
from .poisson import PoissonRegression

# Re-export helper functions for advanced usage
from .loss import poisson_negative_log_likelihood, poisson_deviance
from .penalties import bias_penalty_mask, ridge_penalty, ridge_penalty_gradient

__all__ = [
    # Contract
    'LinearRegressor',
    'LossEvaluation',
    # Families
    'PoissonRegression',
    # Loss functions
    'poisson_negative_log_likelihood',
    'poisson_deviance',
    # Penalty utilities
    'bias_penalty_mask',
    'ridge_penalty',
    'ridge_penalty_gradient',
]
