"""Unit tests for ukf_tracking.eval.metrics and plots."""

import tempfile
import unittest

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from numpy.testing import assert_allclose  # noqa: E402

from ukf_tracking.eval import (  # noqa: E402
    compute_error_stats,
    compute_rmse,
    estimates_and_truth,
    state_to_cartesian,
)
from ukf_tracking.eval.plots import plot_nis, plot_trajectory_2d, save_figure  # noqa: E402
from ukf_tracking.fusion import FilterOutput, MeasurementEvent, SensorType  # noqa: E402


class TestStateToCartesian(unittest.TestCase):

    def test_single_and_batch(self):
        state = np.array([1.0, 2.0, 2.0, np.pi / 2, 0.1])
        assert_allclose(state_to_cartesian(state), [1.0, 2.0, 0.0, 2.0], atol=1e-12)

        batch = state_to_cartesian(np.vstack([state, [0.0, 0.0, 1.0, 0.0, 0.0]]))
        self.assertEqual(batch.shape, (2, 4))
        assert_allclose(batch[1], [0.0, 0.0, 1.0, 0.0])

    def test_wrong_width(self):
        with self.assertRaises(ValueError):
            state_to_cartesian(np.zeros((3, 4)))


class TestRMSE(unittest.TestCase):

    def test_per_component(self):
        est = np.array([[1.0, 0.0], [1.0, 0.0]])
        gt = np.zeros((2, 2))
        assert_allclose(compute_rmse(est, gt), [1.0, 0.0])
        self.assertAlmostEqual(compute_rmse(est, gt, axis=None), np.sqrt(0.5))

    def test_invalid(self):
        with self.assertRaises(ValueError):
            compute_rmse(np.zeros((2, 2)), np.zeros((3, 2)))
        with self.assertRaises(ValueError):
            compute_rmse(np.zeros((0, 4)), np.zeros((0, 4)))

    def test_error_stats(self):
        stats = compute_error_stats(np.array([[3.0, 4.0], [0.0, 0.0]]))
        self.assertAlmostEqual(stats["mean"], 2.5)
        self.assertAlmostEqual(stats["max"], 5.0)
        self.assertAlmostEqual(stats["rmse"], np.sqrt(12.5))


class TestEstimatesAndTruth(unittest.TestCase):

    def _output(self, x):
        return FilterOutput(0, SensorType.LIDAR, np.asarray(x, dtype=float), np.eye(5),
                            float("nan"), float("nan"))

    def test_pairs_only_events_with_truth(self):
        events = [
            MeasurementEvent(SensorType.LIDAR, 0, [1.0, 1.0], ground_truth=[1.0, 1.0, 1.0, 0.0]),
            MeasurementEvent(SensorType.LIDAR, 1, [1.0, 1.0]),
        ]
        outputs = [self._output([1.0, 1.0, 2.0, 0.0, 0.0])] * 2

        est, gt = estimates_and_truth(outputs, events)

        self.assertEqual(est.shape, (1, 4))
        assert_allclose(est[0], [1.0, 1.0, 2.0, 0.0])
        assert_allclose(gt[0], [1.0, 1.0, 1.0, 0.0])

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            estimates_and_truth([], [MeasurementEvent(SensorType.LIDAR, 0, [1.0, 1.0])])


class TestPlots(unittest.TestCase):

    def tearDown(self):
        plt.close("all")

    def test_figures_render_and_save(self):
        t = np.linspace(0, 1, 20)
        truth = np.column_stack([t, t**2])
        fig = plot_trajectory_2d(truth, truth + 0.01, lidar_xy=truth, radar_xy=None)
        nis_fig = plot_nis({"lidar": (np.abs(np.sin(t)) * 3, 2)})

        with tempfile.TemporaryDirectory() as tmp:
            paths = save_figure(fig, tmp, "trajectory", formats=("png",))
            self.assertEqual(len(paths), 1)
            self.assertTrue(paths[0].exists())
        self.assertIsNotNone(nis_fig)


if __name__ == "__main__":
    unittest.main()
