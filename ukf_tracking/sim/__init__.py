"""Synthetic scenario generation for lidar/radar tracking."""

from .ctrv_scenario import (
    generate_ctrv_truth,
    radar_measurement,
    simulate_measurements,
    state_to_ground_truth,
)

__all__ = [
    "generate_ctrv_truth",
    "simulate_measurements",
    "radar_measurement",
    "state_to_ground_truth",
]
