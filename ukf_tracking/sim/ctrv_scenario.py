"""
Synthetic lidar/radar scenarios along CTRV trajectories.

Produces the ground truth of an object moving with constant speed and turn
rate and the noisy measurement events a lidar and a radar at the origin
would report. Noise levels are taken from a FilterConfig so that the
simulated sensors match the filter's noise model.
"""

from typing import Optional, Tuple

import numpy as np

from ukf_tracking.fusion.types import FilterConfig, MeasurementEvent, SensorType
from ukf_tracking.models.motion_models import ctrv_step

PATTERNS = ("alternate", "lidar", "radar")


def generate_ctrv_truth(
    x0: np.ndarray,
    dt: float = 0.05,
    n_steps: int = 100,
    t0_us: int = 0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate a noise-free CTRV trajectory.

    Args:
        x0: Initial state [px, py, v, yaw, yawd].
        dt: Sample interval in seconds.
        n_steps: Number of samples, including the initial state.
        t0_us: Timestamp of the first sample in microseconds.

    Returns:
        Tuple (timestamps_us (N,), states (N, 5)).
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    if n_steps < 1:
        raise ValueError(f"n_steps must be positive, got {n_steps}")

    states = np.zeros((n_steps, 5))
    states[0] = np.asarray(x0, dtype=float)
    for k in range(1, n_steps):
        states[k] = ctrv_step(states[k - 1], dt)

    timestamps_us = t0_us + np.round(np.arange(n_steps) * dt * 1e6).astype(np.int64)
    return timestamps_us, states


def state_to_ground_truth(state: np.ndarray) -> np.ndarray:
    """[px, py, v, yaw, yawd] -> [px, py, vx, vy]."""
    px, py, v, yaw = state[0], state[1], state[2], state[3]
    return np.array([px, py, v * np.cos(yaw), v * np.sin(yaw)])


def radar_measurement(state: np.ndarray) -> np.ndarray:
    """Noise-free radar measurement [rho, phi, rho_dot] of a state."""
    px, py, v, yaw = state[0], state[1], state[2], state[3]
    rho = np.hypot(px, py)
    rho_dot = (px * v * np.cos(yaw) + py * v * np.sin(yaw)) / rho if rho > 0 else 0.0
    return np.array([rho, np.arctan2(py, px), rho_dot])


def simulate_measurements(
    timestamps_us: np.ndarray,
    states: np.ndarray,
    pattern: str = "alternate",
    config: Optional[FilterConfig] = None,
    rng: Optional[np.random.Generator] = None,
    add_noise: bool = True,
) -> list:
    """
    Sample one measurement event per ground-truth state.

    Args:
        timestamps_us: Sample timestamps (N,).
        states: Ground-truth states (N, 5).
        pattern: 'alternate' (lidar first, then radar, ...), 'lidar' or 'radar'.
        config: Source of the sensor noise stds (defaults if None).
        rng: Random generator (seeded default_rng(0) if None).
        add_noise: If False, measurements are exact.

    Returns:
        List of MeasurementEvent with ground truth attached.
    """
    if pattern not in PATTERNS:
        raise ValueError(f"pattern must be one of {PATTERNS}, got {pattern!r}")
    if len(timestamps_us) != len(states):
        raise ValueError(
            f"timestamps ({len(timestamps_us)}) and states ({len(states)}) differ in length"
        )

    config = config if config is not None else FilterConfig()
    rng = rng if rng is not None else np.random.default_rng(0)

    lidar_std = np.array([config.std_laspx, config.std_laspy])
    radar_std = np.array([config.std_radr, config.std_radphi, config.std_radrd])

    events = []
    for k, (t_us, state) in enumerate(zip(timestamps_us, states)):
        if pattern == "lidar" or (pattern == "alternate" and k % 2 == 0):
            sensor = SensorType.LIDAR
            z = state[:2].copy()
            std = lidar_std
        else:
            sensor = SensorType.RADAR
            z = radar_measurement(state)
            std = radar_std

        if add_noise:
            z = z + rng.normal(0.0, std)

        events.append(MeasurementEvent(
            sensor=sensor,
            timestamp_us=int(t_us),
            z=z,
            ground_truth=state_to_ground_truth(state),
        ))
    return events
