"""Data types for lidar/radar fusion.

This module defines the data structures exchanged between the estimator and
its collaborators: the sensor tag, time-stamped measurement events, the
immutable filter configuration and the per-event filter output.

Time Base Convention:
    Timestamps are integer microseconds on a monotonic, fixed-resolution
    clock. Elapsed time handed to the motion model is in seconds.
"""

import json
import warnings
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

STATE_DIM = 5
AUGMENTED_DIM = 7

NEGATIVE_DT_POLICIES = ("reject", "clamp")


class SensorType(Enum):
    """Sensor modality tag carried by every measurement event."""

    LIDAR = "L"
    RADAR = "R"

    @property
    def measurement_dim(self) -> int:
        """Length of the raw measurement vector for this modality."""
        return 2 if self is SensorType.LIDAR else 3

    @classmethod
    def from_tag(cls, tag: str) -> "SensorType":
        """Parse a log tag ('L'/'R', case-insensitive) or an enum name."""
        text = str(tag).strip().upper()
        for member in cls:
            if text in (member.value, member.name):
                return member
        raise ValueError(f"Unknown sensor tag {tag!r}, expected 'L' or 'R'")


@dataclass(frozen=True)
class MeasurementEvent:
    """One time-stamped measurement from a single sensor.

    Attributes:
        sensor: Modality that produced the measurement.
        timestamp_us: Timestamp in integer microseconds.
        z: Raw measurement, [px, py] for lidar, [rho, phi, rho_dot] for radar.
        ground_truth: Optional [px, py, vx, vy] attached by log files or the
            simulator. Only external scoring reads it.

    Example:
        >>> event = MeasurementEvent(
        ...     sensor=SensorType.RADAR,
        ...     timestamp_us=1477010443050000,
        ...     z=np.array([0.898, 0.617, 1.798]),
        ... )
    """

    sensor: SensorType
    timestamp_us: int
    z: np.ndarray
    ground_truth: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        """Validate the measurement structure."""
        if not isinstance(self.sensor, SensorType):
            raise TypeError(f"sensor must be a SensorType, got {type(self.sensor)}")

        if isinstance(self.timestamp_us, bool) or not isinstance(
            self.timestamp_us, (int, np.integer)
        ):
            raise TypeError(
                f"timestamp_us must be an integer, got {type(self.timestamp_us)}"
            )
        if self.timestamp_us < 0:
            raise ValueError(f"timestamp_us must be non-negative, got {self.timestamp_us}")

        z = np.asarray(self.z, dtype=float)
        if z.ndim != 1:
            raise ValueError(f"Measurement z must be 1D array, got shape {z.shape}")
        if len(z) != self.sensor.measurement_dim:
            raise ValueError(
                f"{self.sensor.name} measurement must have length "
                f"{self.sensor.measurement_dim}, got {len(z)}"
            )
        if not np.all(np.isfinite(z)):
            raise ValueError(f"Measurement z must be finite, got {z}")
        object.__setattr__(self, "z", z)

        if self.ground_truth is not None:
            gt = np.asarray(self.ground_truth, dtype=float)
            if gt.shape != (4,):
                raise ValueError(
                    f"ground_truth must have shape (4,) [px, py, vx, vy], got {gt.shape}"
                )
            object.__setattr__(self, "ground_truth", gt)

    @property
    def t(self) -> float:
        """Timestamp in seconds."""
        return self.timestamp_us / 1e6


@dataclass(frozen=True)
class FilterConfig:
    """Construction-time configuration of the estimator.

    Fixed for the lifetime of a filter instance. Defaults are tuned for a
    road vehicle seen by an automotive lidar and radar.

    Attributes:
        use_lidar: If False, lidar events are only used to initialize.
        use_radar: If False, radar events are only used to initialize.
        std_a: Longitudinal acceleration noise std (m/s²).
        std_yawdd: Yaw acceleration noise std (rad/s²).
        std_laspx, std_laspy: Lidar position noise stds (m).
        std_radr: Radar range noise std (m).
        std_radphi: Radar bearing noise std (rad).
        std_radrd: Radar range-rate noise std (m/s).
        lambda_: Sigma-point spread parameter. None selects 3 - n_x.
        initial_covariance_diag: Diagonal of the initial state covariance.
        min_range: Floor applied to the predicted radar range before it is
            used as a divisor (m).
        negative_dt: 'reject' raises on out-of-order events, 'clamp'
            processes them with zero elapsed time.
        symmetrize: Re-symmetrize the covariance after every update.
    """

    use_lidar: bool = True
    use_radar: bool = True
    std_a: float = 6.0
    std_yawdd: float = np.pi / 6
    std_laspx: float = 0.15
    std_laspy: float = 0.15
    std_radr: float = 0.3
    std_radphi: float = 0.03
    std_radrd: float = 0.3
    lambda_: Optional[float] = None
    initial_covariance_diag: Tuple[float, ...] = (0.3, 0.2, 0.3, 1.0, 1.0)
    min_range: float = 1e-4
    negative_dt: str = "reject"
    symmetrize: bool = True

    def __post_init__(self) -> None:
        """Validate the configuration."""
        for name in ("std_a", "std_yawdd", "std_laspx", "std_laspy",
                     "std_radr", "std_radphi", "std_radrd", "min_range"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive and finite, got {value}")

        diag = tuple(float(v) for v in self.initial_covariance_diag)
        if len(diag) != STATE_DIM:
            raise ValueError(
                f"initial_covariance_diag must have {STATE_DIM} entries, got {len(diag)}"
            )
        if any(v <= 0 for v in diag):
            raise ValueError(f"initial_covariance_diag must be positive, got {diag}")
        object.__setattr__(self, "initial_covariance_diag", diag)

        if self.spread + AUGMENTED_DIM <= 0:
            raise ValueError(
                f"lambda_ + n_aug must be positive, got {self.spread + AUGMENTED_DIM}"
            )

        if self.negative_dt not in NEGATIVE_DT_POLICIES:
            raise ValueError(
                f"negative_dt must be one of {NEGATIVE_DT_POLICIES}, got {self.negative_dt!r}"
            )

        if not (self.use_lidar or self.use_radar):
            warnings.warn(
                "Both sensors are disabled; the filter will initialize but never update.",
                UserWarning,
            )

        if self.std_a > 30.0 or self.std_yawdd > 2 * np.pi:
            warnings.warn(
                f"Process noise std_a={self.std_a}, std_yawdd={self.std_yawdd} is "
                "unusually large for a road object.",
                UserWarning,
            )

    @property
    def spread(self) -> float:
        """Sigma-point spread parameter λ."""
        return float(3 - STATE_DIM) if self.lambda_ is None else float(self.lambda_)

    def R_lidar(self) -> np.ndarray:
        """Lidar measurement noise covariance (2×2)."""
        return np.diag([self.std_laspx**2, self.std_laspy**2])

    def R_radar(self) -> np.ndarray:
        """Radar measurement noise covariance (3×3)."""
        return np.diag([self.std_radr**2, self.std_radphi**2, self.std_radrd**2])

    def measurement_noise(self, sensor: SensorType) -> np.ndarray:
        return self.R_lidar() if sensor is SensorType.LIDAR else self.R_radar()

    def uses(self, sensor: SensorType) -> bool:
        """Whether events of this sensor run the predict/update cycle."""
        return self.use_lidar if sensor is SensorType.LIDAR else self.use_radar

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["initial_covariance_diag"] = list(self.initial_covariance_diag)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterConfig":
        """Build a config from a dictionary, rejecting unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown FilterConfig keys: {sorted(unknown)}")
        kwargs = dict(data)
        if "initial_covariance_diag" in kwargs:
            kwargs["initial_covariance_diag"] = tuple(kwargs["initial_covariance_diag"])
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "FilterConfig":
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_json(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path


@dataclass(frozen=True)
class FilterOutput:
    """Estimate published after processing one measurement event.

    Attributes:
        timestamp_us: Timestamp of the event that produced this output.
        sensor: Modality of that event.
        x: State mean [px, py, v, yaw, yaw_rate].
        P: State covariance (5×5).
        nis_lidar: Most recent lidar NIS (nan before the first lidar update).
        nis_radar: Most recent radar NIS (nan before the first radar update).
        initialized: True if this event initialized the filter.
        updated: True if a predict/update cycle ran for this event.
    """

    timestamp_us: int
    sensor: SensorType
    x: np.ndarray
    P: np.ndarray
    nis_lidar: float
    nis_radar: float
    initialized: bool = False
    updated: bool = False
