"""
Unit tests for the synthetic CTRV scenarios.
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from ukf_tracking.fusion import FilterConfig, SensorType
from ukf_tracking.sim import (
    generate_ctrv_truth,
    radar_measurement,
    simulate_measurements,
    state_to_ground_truth,
)


class TestGenerateTruth(unittest.TestCase):

    def test_straight_line(self):
        timestamps_us, states = generate_ctrv_truth(
            np.array([0.0, 0.0, 2.0, 0.0, 0.0]), dt=0.1, n_steps=11, t0_us=1000
        )
        self.assertEqual(states.shape, (11, 5))
        self.assertEqual(timestamps_us.dtype, np.int64)
        assert_array_equal(timestamps_us, 1000 + np.arange(11) * 100000)
        assert_allclose(states[-1], [2.0, 0.0, 2.0, 0.0, 0.0], atol=1e-12)

    def test_constant_turn_keeps_radius(self):
        """Constant speed and yaw rate trace a circle of radius v / yawd."""
        x0 = np.array([0.0, -2.0, 1.0, 0.0, 0.5])
        _, states = generate_ctrv_truth(x0, dt=0.05, n_steps=200)
        radius = np.hypot(states[:, 0], states[:, 1])
        assert_allclose(radius, 2.0, atol=1e-9)
        assert_allclose(states[:, 2], 1.0)
        assert_allclose(states[:, 4], 0.5)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            generate_ctrv_truth(np.zeros(5), dt=0.0)
        with self.assertRaises(ValueError):
            generate_ctrv_truth(np.zeros(5), n_steps=0)


class TestMeasurements(unittest.TestCase):

    def setUp(self):
        self.timestamps_us, self.states = generate_ctrv_truth(
            np.array([2.0, 3.0, 3.0, 0.5, 0.1]), dt=0.05, n_steps=20
        )

    def test_ground_truth_conversion(self):
        gt = state_to_ground_truth(np.array([1.0, 2.0, 2.0, np.pi / 2, 0.3]))
        assert_allclose(gt, [1.0, 2.0, 0.0, 2.0], atol=1e-12)

    def test_radar_measurement(self):
        z = radar_measurement(np.array([3.0, 4.0, 2.0, 0.0, 0.0]))
        assert_allclose(z, [5.0, np.arctan2(4.0, 3.0), 1.2])
        assert_allclose(radar_measurement(np.zeros(5)), [0.0, 0.0, 0.0])

    def test_alternating_pattern(self):
        events = simulate_measurements(self.timestamps_us, self.states, add_noise=False)
        self.assertEqual(len(events), 20)
        self.assertIs(events[0].sensor, SensorType.LIDAR)
        self.assertIs(events[1].sensor, SensorType.RADAR)
        assert_allclose(events[0].z, self.states[0, :2])
        assert_allclose(events[1].z, radar_measurement(self.states[1]))
        assert_allclose(events[4].ground_truth, state_to_ground_truth(self.states[4]))

    def test_single_sensor_patterns(self):
        for pattern, sensor in (("lidar", SensorType.LIDAR), ("radar", SensorType.RADAR)):
            with self.subTest(pattern=pattern):
                events = simulate_measurements(self.timestamps_us, self.states, pattern=pattern)
                self.assertTrue(all(e.sensor is sensor for e in events))

    def test_noise_is_seeded_and_scaled(self):
        config = FilterConfig(std_laspx=0.5, std_laspy=0.5)
        first = simulate_measurements(self.timestamps_us, self.states, "lidar", config,
                                      rng=np.random.default_rng(5))
        second = simulate_measurements(self.timestamps_us, self.states, "lidar", config,
                                       rng=np.random.default_rng(5))
        for a, b in zip(first, second):
            assert_array_equal(a.z, b.z)

        errors = np.array([e.z - s[:2] for e, s in zip(first, self.states)])
        self.assertGreater(np.std(errors), 0.1)

    def test_invalid_inputs(self):
        with self.assertRaises(ValueError):
            simulate_measurements(self.timestamps_us, self.states, pattern="sonar")
        with self.assertRaises(ValueError):
            simulate_measurements(self.timestamps_us[:5], self.states)


if __name__ == "__main__":
    unittest.main()
