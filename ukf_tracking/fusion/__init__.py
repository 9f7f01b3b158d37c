"""Lidar/radar fusion data types, log I/O and consistency statistics.

This package provides the interface between the estimator and its
collaborators:
- Sensor tags, measurement events, filter configuration and filter output
- Measurement log reading and writing
- NIS chi-square thresholds and exceedance rates
"""

from ukf_tracking.fusion.dataset import (
    load_measurement_log,
    parse_measurement_line,
    save_measurement_log,
)
from ukf_tracking.fusion.gating import (
    chi_square_bounds,
    chi_square_threshold,
    mahalanobis_distance_squared,
    nis_exceedance_rate,
)
from ukf_tracking.fusion.types import (
    FilterConfig,
    FilterOutput,
    MeasurementEvent,
    SensorType,
)

__all__ = [
    # Types
    "SensorType",
    "MeasurementEvent",
    "FilterConfig",
    "FilterOutput",
    # Log I/O
    "parse_measurement_line",
    "load_measurement_log",
    "save_measurement_log",
    # Consistency
    "mahalanobis_distance_squared",
    "chi_square_threshold",
    "chi_square_bounds",
    "nis_exceedance_rate",
]
