"""
Evaluation and Visualization Module.

Modules:
    metrics: Accuracy metrics (RMSE, error statistics)
    plots: Trajectory and NIS figures

plots is not imported here; import ukf_tracking.eval.plots explicitly.
"""

from .metrics import (
    compute_error_stats,
    compute_rmse,
    estimates_and_truth,
    state_to_cartesian,
)

__all__ = [
    "state_to_cartesian",
    "compute_rmse",
    "compute_error_stats",
    "estimates_and_truth",
]
