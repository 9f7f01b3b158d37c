"""
Sigma-point machinery of the augmented unscented Kalman filter.

Everything here is a pure function: sigma points, weights and the
recombined moments are returned to the caller and never cached, so a
prediction cycle cannot see leftovers of the previous one.

Conventions:
    Sigma points are stored column-wise, shape (dim, 2·n_aug + 1).
    Column 0 is the center point.

Implements:
    - Weights w₀ = λ/(λ+n_aug), wᵢ = 1/(2(λ+n_aug))
    - Augmentation x_aug = [x, 0, 0], P_aug = blkdiag(P, σ_a², σ_ψ̈²)
    - Sigma generation χ₀ = x_aug, χᵢ = x_aug ± √(λ+n_aug)·Lᵢ
    - Weighted moment recombination; angle rows are averaged as wrapped
      offsets from the center point and their residuals normalized
"""

from typing import Optional, Tuple

import numpy as np
from scipy import linalg

from ukf_tracking.estimators.errors import CovarianceNotPositiveDefiniteError
from ukf_tracking.utils.angles import normalize_angle, normalize_angle_row


def compute_sigma_weights(n_aug: int, lambda_: float) -> np.ndarray:
    """
    Compute the sigma-point weights.

    The same weights are used for the mean and the covariance.

    Args:
        n_aug: Augmented state dimension.
        lambda_: Spread parameter λ.

    Returns:
        Weights (2·n_aug + 1,), summing to one.

    Raises:
        ValueError: If λ + n_aug is not positive.
    """
    if n_aug < 1:
        raise ValueError(f"n_aug must be positive, got {n_aug}")
    denom = lambda_ + n_aug
    if denom <= 0:
        raise ValueError(f"lambda_ + n_aug must be positive, got {denom}")

    weights = np.full(2 * n_aug + 1, 0.5 / denom)
    weights[0] = lambda_ / denom
    return weights


def augment_state(
    x: np.ndarray, P: np.ndarray, std_a: float, std_yawdd: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Append the two process-noise variables to the state.

    Args:
        x: State mean (n_x,).
        P: State covariance (n_x × n_x).
        std_a: Longitudinal acceleration noise std.
        std_yawdd: Yaw acceleration noise std.

    Returns:
        Tuple (x_aug, P_aug) of shapes (n_x + 2,) and (n_x + 2, n_x + 2).
        The noise means are zero and the noise is uncorrelated with the state.
    """
    n_x = len(x)
    x_aug = np.zeros(n_x + 2)
    x_aug[:n_x] = x

    P_aug = np.zeros((n_x + 2, n_x + 2))
    P_aug[:n_x, :n_x] = P
    P_aug[n_x, n_x] = std_a**2
    P_aug[n_x + 1, n_x + 1] = std_yawdd**2
    return x_aug, P_aug


def generate_sigma_points(
    x_aug: np.ndarray, P_aug: np.ndarray, lambda_: float
) -> np.ndarray:
    """
    Generate the 2·n + 1 augmented sigma points.

        χ₀ = x_aug
        χᵢ = x_aug + √(λ+n)·Lᵢ      for i = 1, ..., n
        χ_{i+n} = x_aug - √(λ+n)·Lᵢ  for i = 1, ..., n

    where L is the lower Cholesky factor of P_aug.

    Args:
        x_aug: Augmented mean (n,).
        P_aug: Augmented covariance (n × n).
        lambda_: Spread parameter λ.

    Returns:
        Sigma points (n, 2n + 1), one per column.

    Raises:
        CovarianceNotPositiveDefiniteError: If P_aug is not positive definite.
    """
    n = len(x_aug)
    try:
        L = linalg.cholesky(P_aug, lower=True)
    except (linalg.LinAlgError, ValueError) as exc:
        raise CovarianceNotPositiveDefiniteError(
            f"Augmented covariance is not positive definite: {exc}"
        ) from exc

    spread = np.sqrt(lambda_ + n)
    sigma = np.empty((n, 2 * n + 1))
    sigma[:, 0] = x_aug
    sigma[:, 1:n + 1] = x_aug[:, np.newaxis] + spread * L
    sigma[:, n + 1:] = x_aug[:, np.newaxis] - spread * L
    return sigma


def unscented_mean_covariance(
    sigma: np.ndarray, weights: np.ndarray, angle_row: Optional[int] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Recombine propagated sigma points into a mean and covariance.

    Args:
        sigma: Sigma points (dim, N).
        weights: Weights (N,).
        angle_row: Row holding an angle. Its mean is taken over offsets
            from the center column, wrapped to (-π, π], so points on both
            sides of ±π average to a nearby angle. Its residuals are
            normalized before the outer products.

    Returns:
        Tuple (mean (dim,), covariance (dim × dim)).
    """
    mean = sigma @ weights
    if angle_row is not None:
        ref = sigma[angle_row, 0]
        offsets = normalize_angle(sigma[angle_row] - ref)
        mean[angle_row] = normalize_angle(ref + offsets @ weights)
    diff = normalize_angle_row(sigma - mean[:, np.newaxis], angle_row)
    covariance = (weights * diff) @ diff.T
    return mean, covariance


def cross_covariance(
    x_sigma: np.ndarray,
    x_mean: np.ndarray,
    z_sigma: np.ndarray,
    z_mean: np.ndarray,
    weights: np.ndarray,
    x_angle_row: Optional[int] = None,
    z_angle_row: Optional[int] = None,
) -> np.ndarray:
    """
    Cross-correlation Tc = Σ wᵢ (χᵢ - x̄)(Zᵢ - z̄)ᵀ between state and measurement.

    Args:
        x_sigma: State sigma points (n_x, N).
        x_mean: State mean (n_x,).
        z_sigma: Measurement sigma points (n_z, N).
        z_mean: Predicted measurement mean (n_z,).
        weights: Weights (N,).
        x_angle_row: Angular row of the state residuals.
        z_angle_row: Angular row of the measurement residuals.

    Returns:
        Tc (n_x × n_z).
    """
    x_diff = normalize_angle_row(x_sigma - x_mean[:, np.newaxis], x_angle_row)
    z_diff = normalize_angle_row(z_sigma - z_mean[:, np.newaxis], z_angle_row)
    return (weights * x_diff) @ z_diff.T
