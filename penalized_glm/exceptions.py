"""
Exception types raised by penalized_glm.

Use of an unfitted model raises scikit-learn's ``NotFittedError`` through
``check_is_fitted``; the classes below cover the remaining failure modes.
"""


class InvalidConfigurationError(ValueError):
    """Raised when a model is constructed with invalid hyperparameters."""


class IncompatibleTargetError(ValueError):
    """Raised when a target vector is not valid for the model's likelihood family.

    Fitting fails with this error before any optimizer work is performed.
    """
