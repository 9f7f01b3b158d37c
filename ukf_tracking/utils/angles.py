"""
Angle normalization utilities.

Provides the single normalization used everywhere a heading or bearing is
subtracted or compared. All results lie in the half-open interval (-π, π].

Critical for:
- Heading residuals when recombining predicted sigma points
- Bearing residuals of the radar measurement update
- Comparing estimated and true heading in tests
"""

from typing import Optional, Union

import numpy as np

TWO_PI = 2.0 * np.pi


def normalize_angle(angle: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Normalize angle(s) to the interval (-π, π].

    Uses a closed-form modulo instead of repeated ±2π loops, so the cost is
    constant even for very large inputs. Values already inside (-π, π] are
    returned unchanged, which makes the function idempotent bit for bit.

    Args:
        angle: Angle in radians, scalar or array.

    Returns:
        Normalized angle(s), float for scalar input, ndarray otherwise.

    Example:
        >>> normalize_angle(3.5 * np.pi)
        -1.5707963267948966
        >>> normalize_angle(-np.pi)
        3.141592653589793
    """
    a = np.asarray(angle, dtype=float)
    wrapped = np.pi - np.mod(np.pi - a, TWO_PI)
    # mod can round up to exactly 2π for tiny negative arguments
    wrapped = np.where(wrapped <= -np.pi, wrapped + TWO_PI, wrapped)
    in_range = (a > -np.pi) & (a <= np.pi)
    result = np.where(in_range, a, wrapped)

    if np.ndim(angle) == 0:
        return float(result)
    return result


def angle_diff(
    angle1: Union[float, np.ndarray], angle2: Union[float, np.ndarray]
) -> Union[float, np.ndarray]:
    """
    Shortest signed difference angle1 - angle2, normalized to (-π, π].

    Example:
        >>> round(angle_diff(np.pi - 0.1, -np.pi + 0.1), 6)
        -0.2
    """
    return normalize_angle(np.asarray(angle1, dtype=float) - np.asarray(angle2, dtype=float))


def normalize_angle_row(diff: np.ndarray, row: Optional[int]) -> np.ndarray:
    """
    Return a copy of a stacked difference matrix with one row normalized.

    Sigma-point residuals are stored column-wise (dim × N); the angular
    component of every column lives in the same row.

    Args:
        diff: Residual matrix (dim × N) or a single residual vector (dim,).
        row: Index of the angular component, or None for no angular component.

    Returns:
        Residuals with the angular row normalized to (-π, π].
    """
    out = np.array(diff, dtype=float, copy=True)
    if row is None:
        return out
    out[row] = normalize_angle(out[row])
    return out
