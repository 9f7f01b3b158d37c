"""
Fatal numerical failures of the unscented filter.

Both conditions end the current cycle without touching the persisted state
mean and covariance. Recovering (re-initializing, inflating the covariance)
is left to the caller.
"""


class FilterDivergenceError(ArithmeticError):
    """Base class for precondition violations of the filter recursion."""


class CovarianceNotPositiveDefiniteError(FilterDivergenceError):
    """Augmented covariance could not be Cholesky-factorized."""


class SingularInnovationCovarianceError(FilterDivergenceError):
    """Innovation covariance S could not be inverted for the Kalman gain."""
