"""Lidar/radar object tracking with a CTRV unscented Kalman filter.

This package contains:
- estimators: the augmented unscented Kalman filter and its sigma-point helpers
- models: CTRV motion model and lidar/radar measurement models
- fusion: measurement events, filter configuration, log I/O, NIS statistics
- sim: synthetic CTRV scenarios
- eval: accuracy metrics and plots
- utils: angle normalization
"""

__version__ = "0.1.0"
