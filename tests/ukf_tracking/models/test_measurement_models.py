"""
Unit tests for the lidar and radar measurement models.
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose

from ukf_tracking.fusion import FilterConfig, SensorType
from ukf_tracking.models import LidarModel, RadarModel, measurement_model_for


class TestLidarModel(unittest.TestCase):

    def test_projection_takes_position_rows(self):
        X_pred = np.arange(15, dtype=float).reshape(5, 3)
        Z = LidarModel().project(X_pred)
        assert_allclose(Z, X_pred[:2])
        self.assertIsNot(Z.base, X_pred)

    def test_initial_state(self):
        x = LidarModel().initial_state(np.array([1.5, -2.0]))
        assert_allclose(x, [1.5, -2.0, 0.0, 0.0, 0.0])

    def test_initial_state_near_origin(self):
        """Coordinates with magnitude below 1e-3 are replaced by +1e-3."""
        x = LidarModel().initial_state(np.array([0.0, -5e-4]))
        assert_allclose(x[:2], [1e-3, 1e-3])

        x = LidarModel().initial_state(np.array([-2e-3, 0.0]))
        assert_allclose(x[:2], [-2e-3, 1e-3])


class TestRadarModel(unittest.TestCase):

    def test_projection_known_value(self):
        """Object at (3, 4) moving along +x at 2 m/s."""
        X_pred = np.array([[3.0], [4.0], [2.0], [0.0], [0.1]])
        Z = RadarModel().project(X_pred)
        assert_allclose(Z[:, 0], [5.0, np.arctan2(4.0, 3.0), 1.2])

    def test_projection_at_origin_is_finite(self):
        X_pred = np.array([[0.0, 1.0], [0.0, 0.0], [1.0, 1.0], [0.0, 0.0], [0.0, 0.0]])

        with self.assertLogs("ukf_tracking.models.measurement_models", level="WARNING"):
            Z = RadarModel(min_range=1e-4).project(X_pred)

        self.assertTrue(np.all(np.isfinite(Z)))
        self.assertEqual(Z[0, 0], 1e-4)
        assert_allclose(Z[:, 1], [1.0, 0.0, 1.0])

    def test_initial_state(self):
        z = np.array([2.0, np.pi / 2, -0.7])
        x = RadarModel().initial_state(z)
        assert_allclose(x, [0.0, 2.0, 0.7, 0.0, 0.0], atol=1e-12)

    def test_invalid_min_range(self):
        with self.assertRaises(ValueError):
            RadarModel(min_range=0.0)

    def test_angle_rows(self):
        self.assertIsNone(LidarModel.angle_row)
        self.assertEqual(RadarModel.angle_row, 1)


class TestModelLookup(unittest.TestCase):

    def test_model_for_sensor(self):
        config = FilterConfig(min_range=1e-3)
        self.assertIsInstance(measurement_model_for(SensorType.LIDAR, config), LidarModel)
        radar = measurement_model_for(SensorType.RADAR, config)
        self.assertIsInstance(radar, RadarModel)
        self.assertEqual(radar.min_range, 1e-3)
        self.assertEqual(radar.dim, SensorType.RADAR.measurement_dim)


if __name__ == "__main__":
    unittest.main()
