"""
Unit tests for the CTRV motion model.

Tests cover:
    - Straight-line and arc propagation against closed-form values
    - Continuity across the yaw-rate threshold
    - Process-noise contributions of the augmented dimensions
    - Vectorized propagation equals point-wise propagation
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose

from ukf_tracking.models import YAW_RATE_EPS, CTRVModel, ctrv_step


class TestCTRVPropagation(unittest.TestCase):
    """Test suite for CTRVModel.f."""

    def test_straight_line(self):
        x_aug = np.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0])
        assert_allclose(CTRVModel.f(x_aug, dt=0.5), [0.5, 0.0, 1.0, 0.0, 0.0])

    def test_straight_line_with_heading(self):
        x_aug = np.array([1.0, 2.0, 2.0, np.pi / 4, 0.0, 0.0, 0.0])
        out = CTRVModel.f(x_aug, dt=1.0)
        assert_allclose(out[:2], [1.0 + np.sqrt(2.0), 2.0 + np.sqrt(2.0)])

    def test_quarter_circle(self):
        """v = 1, yawd = pi/2 for 1 s traces a quarter circle of radius 2/pi."""
        x_aug = np.array([0.0, 0.0, 1.0, 0.0, np.pi / 2, 0.0, 0.0])
        out = CTRVModel.f(x_aug, dt=1.0)
        r = 2.0 / np.pi
        assert_allclose(out, [r, r, 1.0, np.pi / 2, np.pi / 2], atol=1e-12)

    def test_zero_dt_is_identity(self):
        x_aug = np.array([3.0, -1.0, 2.5, 0.3, 0.4, 1.5, -0.7])
        assert_allclose(CTRVModel.f(x_aug, dt=0.0), x_aug[:5])

    def test_noise_terms(self):
        """Noise adds quadratic position/yaw and linear speed/yaw-rate terms."""
        dt = 0.5
        x_aug = np.array([0.0, 0.0, 1.0, 0.0, 0.0, 2.0, 1.0])

        out = CTRVModel.f(x_aug, dt)

        # px: v*dt + 0.5*nu_a*dt^2*cos(0)
        assert_allclose(out, [0.5 + 0.25, 0.0, 2.0, 0.125, 0.5])

    def test_noise_terms_use_initial_heading(self):
        dt = 1.0
        x_aug = np.array([0.0, 0.0, 0.0, np.pi / 2, 0.0, 2.0, 0.0])
        out = CTRVModel.f(x_aug, dt)
        assert_allclose(out[:3], [0.0, 1.0, 2.0], atol=1e-12)

    def test_continuity_at_yaw_rate_threshold(self):
        """Straight and arc branches agree as the yaw rate approaches zero."""
        dt = 0.1
        base = np.array([1.0, 2.0, 3.0, 0.7, 0.0, 0.0, 0.0])

        straight = CTRVModel.f(base, dt)
        for sign in (1.0, -1.0):
            for yawd in (YAW_RATE_EPS * (1 + 1e-6), YAW_RATE_EPS * (1 - 1e-6)):
                with self.subTest(yawd=sign * yawd):
                    x_aug = base.copy()
                    x_aug[4] = sign * yawd
                    out = CTRVModel.f(x_aug, dt)
                    assert_allclose(out[:3], straight[:3], atol=2e-5)

        just_above = base.copy()
        just_above[4] = YAW_RATE_EPS * (1 + 1e-9)
        just_below = base.copy()
        just_below[4] = YAW_RATE_EPS * (1 - 1e-9)
        assert_allclose(
            CTRVModel.f(just_above, dt)[:2], CTRVModel.f(just_below, dt)[:2], atol=2e-5
        )

    def test_arc_converges_to_straight_line(self):
        """The arc formula approaches the straight-line result as yawd -> 0."""
        dt = 1.0
        base = np.array([0.0, 0.0, 2.0, 0.3, 0.0, 0.0, 0.0])
        straight = CTRVModel.f(base, dt)

        previous_gap = np.inf
        for yawd in (1e-1, 1e-2, 2e-3):
            x_aug = base.copy()
            x_aug[4] = yawd
            gap = np.linalg.norm(CTRVModel.f(x_aug, dt)[:2] - straight[:2])
            self.assertLess(gap, previous_gap)
            previous_gap = gap
        self.assertLess(previous_gap, 5e-3)

    def test_wrong_shape_raises(self):
        with self.assertRaises(ValueError):
            CTRVModel.f(np.zeros(5), 0.1)
        with self.assertRaises(ValueError):
            CTRVModel.propagate_sigma_points(np.zeros((5, 15)), 0.1)


class TestPropagateSigmaPoints(unittest.TestCase):
    """Test suite for the vectorized propagation."""

    def test_matches_pointwise(self):
        rng = np.random.default_rng(3)
        X_aug = rng.normal(size=(7, 15))
        X_aug[4, :5] = rng.uniform(-5e-4, 5e-4, 5)  # straight-line branch

        X_pred = CTRVModel.propagate_sigma_points(X_aug, 0.1)

        self.assertEqual(X_pred.shape, (5, 15))
        for i in range(15):
            assert_allclose(X_pred[:, i], CTRVModel.f(X_aug[:, i], 0.1), atol=1e-14)

    def test_known_sigma_point(self):
        """Hand-checked propagation of one augmented point over 0.1 s."""
        X_aug = np.array([[5.7441], [1.38], [2.2049], [0.5015], [0.3528], [0.0], [0.0]])
        X_pred = CTRVModel.propagate_sigma_points(X_aug, 0.1)
        assert_allclose(X_pred[:, 0], [5.93553, 1.48939, 2.2049, 0.53678, 0.3528], atol=1e-4)


class TestCTRVStep(unittest.TestCase):

    def test_full_circle_returns_to_start(self):
        state = np.array([0.0, 0.0, 1.0, 0.0, 0.5])
        dt = 2 * np.pi / 0.5 / 100
        for _ in range(100):
            state = ctrv_step(state, dt)
        assert_allclose(state[:2], [0.0, 0.0], atol=1e-9)
        assert_allclose(state[2], 1.0)


if __name__ == "__main__":
    unittest.main()
