"""
Utility functions shared by the estimator and its collaborators.
"""

from .angles import angle_diff, normalize_angle, normalize_angle_row

__all__ = [
    'normalize_angle',
    'angle_diff',
    'normalize_angle_row',
]
