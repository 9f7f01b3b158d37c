"""
Measurement models for the lidar (Cartesian) and radar (polar) sensors.

Each model knows three things about its sensor:
    - project(): map predicted state sigma points into measurement space
    - initial_state(): invert a first measurement into a state mean
    - angle_row: which measurement component is an angle (or None)

State convention: x = [px, py, v, yaw, yawd]
"""

import logging
from typing import Optional

import numpy as np

from ukf_tracking.fusion.types import FilterConfig, SensorType

logger = logging.getLogger(__name__)

MIN_INIT_POSITION = 1e-3


class LidarModel:
    """
    Cartesian position sensor: z = [px, py].

    The projection is linear, so the measurement sigma points are simply the
    first two rows of the predicted state sigma points.
    """

    sensor = SensorType.LIDAR
    dim = 2
    angle_row: Optional[int] = None

    def project(self, X_pred: np.ndarray) -> np.ndarray:
        """
        Args:
            X_pred: Predicted state sigma points (5, N).

        Returns:
            Measurement sigma points (2, N).
        """
        return np.array(X_pred[:2], dtype=float, copy=True)

    def initial_state(self, z: np.ndarray) -> np.ndarray:
        """
        Seed the state from a first lidar measurement.

        Coordinates with magnitude below 1e-3 are replaced by +1e-3 so that
        the first radar projection never sees a zero range. Speed, heading
        and yaw rate start at zero.
        """
        px, py = (float(c) for c in z)
        if abs(px) < MIN_INIT_POSITION:
            px = MIN_INIT_POSITION
        if abs(py) < MIN_INIT_POSITION:
            py = MIN_INIT_POSITION
        return np.array([px, py, 0.0, 0.0, 0.0])


class RadarModel:
    """
    Polar sensor: z = [rho, phi, rho_dot].

        rho     = √(px² + py²)
        phi     = atan2(py, px)
        rho_dot = (px·v·cos(yaw) + py·v·sin(yaw)) / rho

    The range is floored at min_range before it is published or used as a
    divisor, so an object at the sensor origin yields finite values instead
    of NaN.

    Args:
        min_range: Range floor in meters.
    """

    sensor = SensorType.RADAR
    dim = 3
    angle_row: Optional[int] = 1

    def __init__(self, min_range: float = 1e-4):
        if min_range <= 0:
            raise ValueError(f"min_range must be positive, got {min_range}")
        self.min_range = min_range

    def project(self, X_pred: np.ndarray) -> np.ndarray:
        """
        Args:
            X_pred: Predicted state sigma points (5, N).

        Returns:
            Measurement sigma points (3, N).
        """
        px, py, v, yaw = X_pred[0], X_pred[1], X_pred[2], X_pred[3]

        rho = np.sqrt(px**2 + py**2)
        floored = rho < self.min_range
        if np.any(floored):
            logger.warning(
                "Radar range below %.1e m for %d sigma point(s); flooring",
                self.min_range, int(np.count_nonzero(floored)),
            )
            rho = np.maximum(rho, self.min_range)

        Z = np.empty((3, X_pred.shape[1]))
        Z[0] = rho
        Z[1] = np.arctan2(py, px)
        Z[2] = (px * v * np.cos(yaw) + py * v * np.sin(yaw)) / rho
        return Z

    def initial_state(self, z: np.ndarray) -> np.ndarray:
        """
        Seed the state from a first radar measurement.

        Position comes from the polar-to-Cartesian conversion. The speed is
        the magnitude of the range rate projected onto x and y, which equals
        |rho_dot|; heading and yaw rate are unobservable and start at zero.
        """
        rho, phi, rho_dot = (float(c) for c in z)
        vx = rho_dot * np.cos(phi)
        vy = rho_dot * np.sin(phi)
        return np.array([
            rho * np.cos(phi),
            rho * np.sin(phi),
            np.sqrt(vx * vx + vy * vy),
            0.0,
            0.0,
        ])


def measurement_model_for(sensor: SensorType, config: FilterConfig):
    """Return the measurement model matching a sensor tag."""
    if sensor is SensorType.LIDAR:
        return LidarModel()
    if sensor is SensorType.RADAR:
        return RadarModel(min_range=config.min_range)
    raise ValueError(f"Unsupported sensor {sensor!r}")
