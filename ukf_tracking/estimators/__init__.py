"""
State estimation for lidar/radar object tracking.

Available estimators:
    - CTRV Unscented Kalman Filter with process-noise augmentation

The sigma-point helpers are exposed as pure functions so they can be
reused and tested independently of the filter state.
"""

from ukf_tracking.estimators.errors import (
    CovarianceNotPositiveDefiniteError,
    FilterDivergenceError,
    SingularInnovationCovarianceError,
)
from ukf_tracking.estimators.sigma_points import (
    augment_state,
    compute_sigma_weights,
    cross_covariance,
    generate_sigma_points,
    unscented_mean_covariance,
)
from ukf_tracking.estimators.unscented_kalman_filter import (
    CTRVUnscentedKalmanFilter,
    Prediction,
    UpdateResult,
    run_filter,
)

__all__ = [
    # Filter
    "CTRVUnscentedKalmanFilter",
    "Prediction",
    "UpdateResult",
    "run_filter",
    # Sigma points
    "compute_sigma_weights",
    "augment_state",
    "generate_sigma_points",
    "unscented_mean_covariance",
    "cross_covariance",
    # Errors
    "FilterDivergenceError",
    "CovarianceNotPositiveDefiniteError",
    "SingularInnovationCovarianceError",
]
