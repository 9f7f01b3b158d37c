"""
Visualization utilities for tracking runs.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from ukf_tracking.fusion.gating import chi_square_threshold


def plot_trajectory_2d(
    truth_xy: np.ndarray,
    est_xy: np.ndarray,
    lidar_xy: Optional[np.ndarray] = None,
    radar_xy: Optional[np.ndarray] = None,
    title: str = "Tracked Trajectory",
) -> plt.Figure:
    """
    Plot the true path, the estimate and the raw measurements in 2D.

    Args:
        truth_xy: True positions, shape (N, 2)
        est_xy: Estimated positions, shape (N, 2)
        lidar_xy: Lidar position measurements, shape (M, 2) (optional)
        radar_xy: Radar measurements converted to Cartesian, shape (K, 2) (optional)
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    ax.plot(truth_xy[:, 0], truth_xy[:, 1], "k-", linewidth=2,
            label="Ground Truth", zorder=10)
    ax.plot(truth_xy[0, 0], truth_xy[0, 1], "go", markersize=10,
            label="Start", zorder=11)
    ax.plot(est_xy[:, 0], est_xy[:, 1], "--", color="blue", linewidth=1.5,
            label="UKF estimate", alpha=0.8, zorder=9)

    if lidar_xy is not None and len(lidar_xy):
        ax.plot(lidar_xy[:, 0], lidar_xy[:, 1], "x", color="green",
                markersize=5, label="Lidar", alpha=0.6)
    if radar_xy is not None and len(radar_xy):
        ax.plot(radar_xy[:, 0], radar_xy[:, 1], ".", color="red",
                markersize=5, label="Radar", alpha=0.6)

    ax.set_xlabel("X (m)", fontsize=12)
    ax.set_ylabel("Y (m)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis("equal")

    plt.tight_layout()
    return fig


def plot_nis(
    nis_dict: Dict[str, Tuple[np.ndarray, int]],
    confidence: float = 0.95,
    title: str = "Normalized Innovation Squared",
) -> plt.Figure:
    """
    Plot NIS sequences with their chi-square thresholds.

    Args:
        nis_dict: {sensor name: (nis values, measurement dimension)}
        confidence: Confidence level of the threshold line
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    n = len(nis_dict)
    fig, axes_arr = plt.subplots(n, 1, figsize=(12, 3.5 * n), squeeze=False)
    colors = ["blue", "red", "green", "orange"]

    for i, (name, (nis, dof)) in enumerate(nis_dict.items()):
        ax = axes_arr[i, 0]
        threshold = chi_square_threshold(dof, confidence)
        ax.plot(np.arange(len(nis)), nis, color=colors[i % len(colors)],
                linewidth=1.0, label=f"NIS {name}")
        ax.axhline(y=threshold, color="k", linestyle="--", linewidth=1.0,
                   label=f"χ²({dof}) {confidence:.0%}: {threshold:.2f}")
        ax.set_xlabel("Update index", fontsize=11)
        ax.set_ylabel("NIS", fontsize=11)
        ax.legend(fontsize=9)
        ax.grid(True, alpha=0.3)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("svg", "png"),
    dpi: int = 150,
) -> List[Path]:
    """
    Write a figure once per format into out_dir (created if missing).

    Returns:
        Written paths, in the order of `formats`.
    """
    target = Path(out_dir)
    target.mkdir(parents=True, exist_ok=True)

    written = [target / f"{name}.{ext}" for ext in formats]
    for path in written:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
    return written
