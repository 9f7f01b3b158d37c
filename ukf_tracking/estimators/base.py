"""
Common interface of event-driven tracking filters.

A tracking filter is seeded by its first measurement event and afterwards
alternates prediction over the elapsed time with a sensor-specific
correction. Concrete filters own the mean/covariance pair; callers only
read copies of it.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np


class TrackingFilter(ABC):
    """Abstract base for single-object tracking filters."""

    def __init__(self, state_dim: int):
        self.state_dim = state_dim
        self.state: Optional[np.ndarray] = None
        self.covariance: Optional[np.ndarray] = None

    @property
    def is_initialized(self) -> bool:
        return self.state is not None

    @abstractmethod
    def initialize(self, event):
        """Seed mean and covariance from the first measurement event."""

    @abstractmethod
    def predict(self, dt: float):
        """Time update over dt seconds."""

    @abstractmethod
    def update(self, z: np.ndarray, *args, **kwargs):
        """Measurement update with the raw measurement z."""

    @abstractmethod
    def process_measurement(self, event):
        """Consume one measurement event (initialize or predict + update)."""

    def get_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Copies of the current mean and covariance.

        Raises:
            RuntimeError: If no measurement has been processed yet.
        """
        if not self.is_initialized or self.covariance is None:
            raise RuntimeError("Estimator not initialized. Process a measurement first.")
        return self.state.copy(), self.covariance.copy()
