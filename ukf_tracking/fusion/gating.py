"""Innovation consistency statistics.

The filter records one normalized innovation squared (NIS) value per sensor
after every update. Under a correctly tuned filter the NIS follows a
chi-square distribution with as many degrees of freedom as the measurement
has components (2 for lidar, 3 for radar). The helpers here turn that into
thresholds and exceedance rates for tuning the process noise.
"""

from typing import Sequence, Tuple

import numpy as np
from scipy import linalg, stats


def _validate_chi_square_args(dof: int, confidence: float) -> None:
    if dof < 1:
        raise ValueError(f"dof must be at least 1, got {dof}")
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must lie strictly between 0 and 1, got {confidence}")


def mahalanobis_distance_squared(residual: np.ndarray, S: np.ndarray) -> float:
    """NIS of one innovation: rᵀ S⁻¹ r.

    Args:
        residual: Innovation r (m,), angles already normalized.
        S: Innovation covariance (m × m).

    Returns:
        The squared Mahalanobis distance.

    Raises:
        ValueError: If the shapes disagree or S is singular.

    Example:
        >>> mahalanobis_distance_squared(np.array([3.0, 4.0]), np.eye(2))
        25.0
    """
    residual = np.asarray(residual, dtype=float)
    S = np.asarray(S, dtype=float)

    m = residual.shape[0] if residual.ndim == 1 else -1
    if m < 0 or S.shape != (m, m):
        raise ValueError(
            f"Expected residual (m,) and S (m, m), got {residual.shape} and {S.shape}"
        )

    try:
        weighted = linalg.solve(S, residual, assume_a="sym")
    except linalg.LinAlgError as exc:
        raise ValueError(f"Innovation covariance is singular: {exc}") from exc
    return float(residual @ weighted)


def chi_square_threshold(dof: int, confidence: float = 0.95) -> float:
    """Upper chi-square quantile used as the NIS alarm line.

    Example:
        >>> round(chi_square_threshold(dof=2), 3)
        5.991
        >>> round(chi_square_threshold(dof=3), 3)
        7.815
    """
    _validate_chi_square_args(dof, confidence)
    return float(stats.chi2.ppf(confidence, dof))


def chi_square_bounds(dof: int, confidence: float = 0.95) -> Tuple[float, float]:
    """Two-sided chi-square interval covering `confidence` of the mass.

    Returns:
        Tuple (lower, upper) with lower = ppf((1-c)/2), upper = ppf((1+c)/2).
    """
    _validate_chi_square_args(dof, confidence)
    tail = 0.5 * (1.0 - confidence)
    lower, upper = stats.chi2.ppf([tail, 1.0 - tail], dof)
    return float(lower), float(upper)


def nis_exceedance_rate(
    nis_values: Sequence[float], dof: int, confidence: float = 0.95
) -> float:
    """Fraction of NIS samples above the chi-square threshold.

    A consistent filter gives roughly 1 - confidence. Much higher means the
    filter is overconfident (process noise too small); close to zero means
    it is too conservative.

    Args:
        nis_values: NIS samples; NaN entries are ignored.
        dof: Measurement dimension.
        confidence: Confidence level of the threshold.

    Returns:
        Exceedance rate in [0, 1].

    Raises:
        ValueError: If no finite samples are given.
    """
    values = np.asarray(nis_values, dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        raise ValueError("No finite NIS samples")
    threshold = chi_square_threshold(dof, confidence)
    return float(np.mean(values > threshold))
