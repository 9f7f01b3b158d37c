"""
Accuracy metrics for tracking runs.

Compares filter estimates against the ground truth carried by measurement
events. Everything is expressed in the Cartesian [px, py, vx, vy] space the
logs use for ground truth.
"""

from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np


def state_to_cartesian(states: np.ndarray) -> np.ndarray:
    """
    Convert CTRV states to Cartesian position/velocity.

    Args:
        states: States [px, py, v, yaw, yawd], shape (5,) or (N, 5).

    Returns:
        [px, py, v·cos(yaw), v·sin(yaw)], shape (4,) or (N, 4).
    """
    states = np.asarray(states, dtype=float)
    single = states.ndim == 1
    states = np.atleast_2d(states)
    if states.shape[1] != 5:
        raise ValueError(f"States must have 5 columns, got shape {states.shape}")

    v, yaw = states[:, 2], states[:, 3]
    out = np.column_stack([states[:, 0], states[:, 1], v * np.cos(yaw), v * np.sin(yaw)])
    return out[0] if single else out


def compute_rmse(
    estimates: np.ndarray, truth: np.ndarray, axis: Optional[int] = 0
) -> Union[float, np.ndarray]:
    """
    Compute Root Mean Square Error between estimates and truth.

    Args:
        estimates: Estimated vectors, shape (N, d).
        truth: True vectors, shape (N, d).
        axis: 0 for per-component RMSE (default), None for a scalar.

    Returns:
        rmse: RMSE value(s).

    Raises:
        ValueError: If shapes differ or inputs are empty.
    """
    estimates = np.asarray(estimates, dtype=float)
    truth = np.asarray(truth, dtype=float)
    if estimates.shape != truth.shape:
        raise ValueError(
            f"Shape mismatch: estimates {estimates.shape} vs truth {truth.shape}"
        )
    if estimates.size == 0:
        raise ValueError("Cannot compute RMSE of empty arrays")

    errors = estimates - truth
    if axis is None:
        return float(np.sqrt(np.mean(errors**2)))
    return np.sqrt(np.mean(errors**2, axis=axis))


def compute_error_stats(errors: np.ndarray) -> Dict[str, float]:
    """
    Compute error statistics.

    Args:
        errors: Error vectors, shape (N, d) or (N,)

    Returns:
        stats: Dictionary with keys 'mean', 'median', 'std', 'rmse', 'p95', 'max'
    """
    errors = np.asarray(errors)

    if errors.ndim > 1:
        error_magnitudes = np.linalg.norm(errors, axis=1)
    else:
        error_magnitudes = np.abs(errors)

    return {
        "mean": float(np.mean(error_magnitudes)),
        "median": float(np.median(error_magnitudes)),
        "std": float(np.std(error_magnitudes)),
        "rmse": float(np.sqrt(np.mean(error_magnitudes**2))),
        "p95": float(np.percentile(error_magnitudes, 95)),
        "max": float(np.max(error_magnitudes)),
    }


def estimates_and_truth(outputs: Sequence, events: Sequence) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pair filter outputs with the ground truth of their events.

    Outputs of events without ground truth are dropped.

    Args:
        outputs: FilterOutput per event.
        events: The MeasurementEvents that produced the outputs.

    Returns:
        Tuple (estimates (N, 4), truth (N, 4)) in Cartesian form.
    """
    if len(outputs) != len(events):
        raise ValueError(f"{len(outputs)} outputs for {len(events)} events")

    est, gt = [], []
    for out, event in zip(outputs, events):
        if event.ground_truth is None:
            continue
        est.append(state_to_cartesian(out.x))
        gt.append(event.ground_truth)

    if not est:
        return np.zeros((0, 4)), np.zeros((0, 4))
    return np.array(est), np.array(gt)
