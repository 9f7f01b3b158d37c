"""
Motion and measurement models for the CTRV unscented Kalman filter.
"""

from .measurement_models import LidarModel, RadarModel, measurement_model_for
from .motion_models import YAW_RATE_EPS, CTRVModel, ctrv_step

__all__ = [
    'CTRVModel',
    'ctrv_step',
    'YAW_RATE_EPS',
    'LidarModel',
    'RadarModel',
    'measurement_model_for',
]
