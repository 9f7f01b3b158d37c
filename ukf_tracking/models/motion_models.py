"""
Constant turn rate and velocity (CTRV) motion model.

State: x = [px, py, v, yaw, yawd]
Augmented: x_aug = [px, py, v, yaw, yawd, nu_a, nu_yawdd]

Speed and yaw rate stay constant over an interval except for the
acceleration noise nu_a and the yaw acceleration noise nu_yawdd, which the
augmented sigma points sample explicitly.
"""

import numpy as np

YAW_RATE_EPS = 1e-3


class CTRVModel:
    """
    Deterministic CTRV propagation of augmented sigma points.

    Position follows a circular arc when |yawd| > YAW_RATE_EPS and a
    straight line otherwise, so a near-zero yaw rate is never a divisor.
    The noise terms add

        px += ½·nu_a·dt²·cos(yaw)      v   += nu_a·dt
        py += ½·nu_a·dt²·sin(yaw)      yaw += ½·nu_yawdd·dt²
                                        yawd += nu_yawdd·dt

    Example:
        >>> x_aug = np.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0])
        >>> CTRVModel.f(x_aug, dt=0.5)[:2]
        array([0.5, 0. ])
    """

    state_dim = 5
    augmented_dim = 7

    @staticmethod
    def f(x_aug: np.ndarray, dt: float) -> np.ndarray:
        """
        Propagate one augmented sigma point over dt seconds.

        Args:
            x_aug: Augmented point [px, py, v, yaw, yawd, nu_a, nu_yawdd].
            dt: Elapsed time in seconds.

        Returns:
            Predicted state [px, py, v, yaw, yawd].
        """
        x_aug = np.asarray(x_aug, dtype=float)
        if x_aug.shape != (7,):
            raise ValueError(f"Augmented point must have shape (7,), got {x_aug.shape}")
        return CTRVModel.propagate_sigma_points(x_aug[:, np.newaxis], dt)[:, 0]

    @staticmethod
    def propagate_sigma_points(X_aug: np.ndarray, dt: float) -> np.ndarray:
        """
        Propagate a block of augmented sigma points column by column.

        Args:
            X_aug: Augmented sigma points (7, N).
            dt: Elapsed time in seconds.

        Returns:
            Predicted sigma points (5, N); the noise rows are consumed.
        """
        X_aug = np.asarray(X_aug, dtype=float)
        if X_aug.ndim != 2 or X_aug.shape[0] != 7:
            raise ValueError(f"Augmented sigma points must have shape (7, N), got {X_aug.shape}")

        px, py, v, yaw, yawd, nu_a, nu_yawdd = X_aug

        turning = np.abs(yawd) > YAW_RATE_EPS
        # placeholder divisor on the straight branch, discarded by np.where
        safe_yawd = np.where(turning, yawd, 1.0)
        yaw_end = yaw + yawd * dt

        px_arc = px + v / safe_yawd * (np.sin(yaw_end) - np.sin(yaw))
        py_arc = py + v / safe_yawd * (np.cos(yaw) - np.cos(yaw_end))
        px_line = px + v * dt * np.cos(yaw)
        py_line = py + v * dt * np.sin(yaw)

        half_dt2 = 0.5 * dt * dt
        X_pred = np.empty((5, X_aug.shape[1]))
        X_pred[0] = np.where(turning, px_arc, px_line) + half_dt2 * nu_a * np.cos(yaw)
        X_pred[1] = np.where(turning, py_arc, py_line) + half_dt2 * nu_a * np.sin(yaw)
        X_pred[2] = v + nu_a * dt
        X_pred[3] = yaw_end + half_dt2 * nu_yawdd
        X_pred[4] = yawd + nu_yawdd * dt
        return X_pred


def ctrv_step(state: np.ndarray, dt: float) -> np.ndarray:
    """Noise-free CTRV propagation of a 5-D state, used to generate ground truth."""
    state = np.asarray(state, dtype=float)
    if state.shape != (5,):
        raise ValueError(f"State must have shape (5,), got {state.shape}")
    return CTRVModel.f(np.concatenate([state, [0.0, 0.0]]), dt)
