"""
Augmented Unscented Kalman Filter with a CTRV motion model.

The filter fuses lidar position fixes and radar range/bearing/range-rate
measurements of a single object, one measurement event at a time.

Cycle per event:
    - First event: seed mean/covariance from the sensor, record timestamp
    - Prediction: augment, generate sigma points, propagate through CTRV,
      recombine with heading-normalized residuals
    - Update: project sigma points into the sensor space, innovation
      covariance S (+R), cross-correlation Tc, gain K = Tc·S⁻¹, correct
      mean and covariance, record NIS for the sensor

Every intermediate (augmented state, sigma points, measurement sigma points)
is local to a cycle. The persisted mean and covariance are replaced only
after a cycle completes, so a numerical failure leaves them untouched.
"""

import logging
from typing import NamedTuple, Optional, Tuple

import numpy as np
from scipy import linalg

from ukf_tracking.estimators.base import TrackingFilter
from ukf_tracking.estimators.errors import SingularInnovationCovarianceError
from ukf_tracking.estimators.sigma_points import (
    augment_state,
    compute_sigma_weights,
    cross_covariance,
    generate_sigma_points,
    unscented_mean_covariance,
)
from ukf_tracking.fusion.types import (
    AUGMENTED_DIM,
    STATE_DIM,
    FilterConfig,
    FilterOutput,
    MeasurementEvent,
    SensorType,
)
from ukf_tracking.models.measurement_models import measurement_model_for
from ukf_tracking.models.motion_models import CTRVModel
from ukf_tracking.utils.angles import normalize_angle, normalize_angle_row

logger = logging.getLogger(__name__)

YAW_INDEX = 3


class Prediction(NamedTuple):
    """Predicted moments and the sigma points they were recombined from."""

    x: np.ndarray
    P: np.ndarray
    sigma_points: np.ndarray


class UpdateResult(NamedTuple):
    """Corrected moments plus the quantities of the innovation step."""

    x: np.ndarray
    P: np.ndarray
    z_pred: np.ndarray
    S: np.ndarray
    K: np.ndarray
    residual: np.ndarray
    nis: float


class CTRVUnscentedKalmanFilter(TrackingFilter):
    """
    Unscented Kalman Filter for lidar/radar tracking with a CTRV model.

    State x = [px, py, v, yaw, yawd]; the two process-noise variables
    (longitudinal and yaw acceleration) are appended during prediction so
    the sigma points sample their effect through the nonlinear model.

    Attributes:
        config: Immutable filter configuration.
        n_x: State dimension (5).
        n_aug: Augmented state dimension (7).
        lambda_: Sigma-point spread parameter.
        weights: Sigma-point weights (2·n_aug + 1,), fixed for the lifetime.
        state: Current state mean x̂ (5,), None before initialization.
        covariance: Current state covariance P (5×5).
        previous_timestamp_us: Timestamp of the last processed event.
        nis_lidar: Latest lidar NIS (nan until the first lidar update).
        nis_radar: Latest radar NIS (nan until the first radar update).

    Example:
        >>> ukf = CTRVUnscentedKalmanFilter()
        >>> out = ukf.process_measurement(MeasurementEvent(
        ...     SensorType.LIDAR, 0, np.array([0.3, 0.6])))
        >>> out.initialized
        True
    """

    def __init__(self, config: Optional[FilterConfig] = None):
        super().__init__(STATE_DIM)
        self.config = config if config is not None else FilterConfig()

        self.n_x = STATE_DIM
        self.n_aug = AUGMENTED_DIM
        self.lambda_ = self.config.spread
        self.weights = compute_sigma_weights(self.n_aug, self.lambda_)

        self.previous_timestamp_us: Optional[int] = None
        self.nis_lidar = float("nan")
        self.nis_radar = float("nan")

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self, event: MeasurementEvent) -> None:
        """
        Seed mean and covariance from the first measurement.

        Args:
            event: First measurement event of the track.

        Raises:
            RuntimeError: If the filter is already initialized.
        """
        if self.is_initialized:
            raise RuntimeError("Filter already initialized; create a new instance per track")

        model = measurement_model_for(event.sensor, self.config)
        self.state = model.initial_state(event.z)
        self.covariance = np.diag(self.config.initial_covariance_diag)
        self.previous_timestamp_us = int(event.timestamp_us)

        logger.debug(
            "Initialized from %s at t=%d us: x=%s",
            event.sensor.name, event.timestamp_us, self.state,
        )

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def _predict(self, x: np.ndarray, P: np.ndarray, dt: float) -> Prediction:
        if dt < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {dt}")

        x_aug, P_aug = augment_state(x, P, self.config.std_a, self.config.std_yawdd)
        X_aug = generate_sigma_points(x_aug, P_aug, self.lambda_)
        X_pred = CTRVModel.propagate_sigma_points(X_aug, dt)

        x_pred, P_pred = unscented_mean_covariance(X_pred, self.weights, angle_row=YAW_INDEX)
        return Prediction(x_pred, P_pred, X_pred)

    def predict(self, dt: float) -> Prediction:
        """
        Propagate mean and covariance over dt seconds and commit the result.

        Args:
            dt: Elapsed time in seconds, non-negative.

        Returns:
            The prediction, including the predicted sigma points needed by
            a subsequent update().

        Raises:
            RuntimeError: If the filter is not initialized.
            ValueError: If dt is negative.
            CovarianceNotPositiveDefiniteError: If the augmented covariance
                cannot be factorized. State is left unchanged.
        """
        x, P = self.get_state()
        prediction = self._predict(x, P, dt)
        self.state, self.covariance = prediction.x, prediction.P
        return prediction

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def _update(self, prediction: Prediction, z: np.ndarray, sensor: SensorType) -> UpdateResult:
        model = measurement_model_for(sensor, self.config)
        z = np.asarray(z, dtype=float)
        if z.shape != (model.dim,):
            raise ValueError(
                f"{sensor.name} measurement must have shape ({model.dim},), got {z.shape}"
            )

        x_pred, P_pred, X_pred = prediction
        Z_sigma = model.project(X_pred)

        z_pred, S = unscented_mean_covariance(Z_sigma, self.weights, angle_row=model.angle_row)
        S = S + self.config.measurement_noise(sensor)

        Tc = cross_covariance(
            X_pred, x_pred, Z_sigma, z_pred, self.weights,
            x_angle_row=YAW_INDEX, z_angle_row=model.angle_row,
        )

        try:
            S_inv = linalg.inv(S)
        except (linalg.LinAlgError, ValueError) as exc:
            raise SingularInnovationCovarianceError(
                f"Innovation covariance for {sensor.name} is singular: {exc}"
            ) from exc

        K = Tc @ S_inv
        residual = normalize_angle_row(z - z_pred, model.angle_row)

        x_new = x_pred + K @ residual
        P_new = P_pred - K @ S @ K.T
        if self.config.symmetrize:
            P_new = 0.5 * (P_new + P_new.T)

        nis = float(residual @ S_inv @ residual)
        return UpdateResult(x_new, P_new, z_pred, S, K, residual, nis)

    def update(
        self,
        z: np.ndarray,
        sensor: SensorType = SensorType.LIDAR,
        prediction: Optional[Prediction] = None,
    ) -> UpdateResult:
        """
        Correct the state with a measurement and commit the result.

        Args:
            z: Measurement vector matching the sensor dimension.
            sensor: Sensor that produced z.
            prediction: Result of the preceding predict(). If omitted the
                sigma points are regenerated from the current state with zero
                elapsed time.

        Returns:
            UpdateResult with the corrected moments, S, K, residual and NIS.

        Raises:
            RuntimeError: If the filter is not initialized.
            SingularInnovationCovarianceError: If S cannot be inverted.
                State is left unchanged.
        """
        if prediction is None:
            x, P = self.get_state()
            prediction = self._predict(x, P, 0.0)
        elif not self.is_initialized:
            raise RuntimeError("Estimator not initialized. Process a measurement first.")

        result = self._update(prediction, z, sensor)
        self.state, self.covariance = result.x, result.P
        self._record_nis(sensor, result.nis)
        return result

    def _record_nis(self, sensor: SensorType, nis: float) -> None:
        if sensor is SensorType.LIDAR:
            self.nis_lidar = nis
        else:
            self.nis_radar = nis

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    def _elapsed_seconds(self, event: MeasurementEvent) -> float:
        dt = (int(event.timestamp_us) - self.previous_timestamp_us) / 1e6
        if dt >= 0:
            return dt
        if self.config.negative_dt == "clamp":
            logger.warning(
                "Out-of-order %s event at t=%d us (%.6f s before last); clamping dt to 0",
                event.sensor.name, event.timestamp_us, -dt,
            )
            return 0.0
        raise ValueError(
            f"Out-of-order measurement: t={event.timestamp_us} us precedes "
            f"t={self.previous_timestamp_us} us"
        )

    def process_measurement(self, event: MeasurementEvent) -> FilterOutput:
        """
        Consume one measurement event.

        The first event initializes the filter. Later events run
        predict + update unless their sensor is disabled, in which case they
        are skipped without advancing the filter clock.

        Args:
            event: Measurement event with sensor tag, timestamp and z.

        Returns:
            FilterOutput with the current mean, covariance and NIS values.

        Raises:
            ValueError: If the event is out of order and the configured
                policy is 'reject'.
            CovarianceNotPositiveDefiniteError, SingularInnovationCovarianceError:
                Numerical failure; mean, covariance and clock are unchanged.
        """
        if not self.is_initialized:
            self.initialize(event)
            return self._output(event, initialized=True, updated=False)

        if not self.config.uses(event.sensor):
            logger.debug("Skipping %s event at t=%d us (sensor disabled)",
                         event.sensor.name, event.timestamp_us)
            return self._output(event, initialized=False, updated=False)

        dt = self._elapsed_seconds(event)
        prediction = self._predict(self.state, self.covariance, dt)
        result = self._update(prediction, event.z, event.sensor)

        self.state, self.covariance = result.x, result.P
        self.previous_timestamp_us = max(self.previous_timestamp_us, int(event.timestamp_us))
        self._record_nis(event.sensor, result.nis)

        logger.debug(
            "%s update at t=%d us, dt=%.4f s: NIS=%.3f, x=%s",
            event.sensor.name, event.timestamp_us, dt, result.nis, self.state,
        )
        return self._output(event, initialized=False, updated=True)

    def _output(self, event: MeasurementEvent, initialized: bool, updated: bool) -> FilterOutput:
        x, P = self.get_state()
        return FilterOutput(
            timestamp_us=int(event.timestamp_us),
            sensor=event.sensor,
            x=x,
            P=P,
            nis_lidar=self.nis_lidar,
            nis_radar=self.nis_radar,
            initialized=initialized,
            updated=updated,
        )

    def heading(self) -> float:
        """Current heading normalized to (-π, π]."""
        x, _ = self.get_state()
        return normalize_angle(x[YAW_INDEX])


def run_filter(
    events, config: Optional[FilterConfig] = None
) -> Tuple[CTRVUnscentedKalmanFilter, list]:
    """
    Run a fresh filter over an iterable of measurement events.

    Args:
        events: Iterable of MeasurementEvent in timestamp order.
        config: Filter configuration (defaults if None).

    Returns:
        Tuple (filter, outputs) with one FilterOutput per event.
    """
    ukf = CTRVUnscentedKalmanFilter(config)
    outputs = [ukf.process_measurement(event) for event in events]
    return ukf, outputs
