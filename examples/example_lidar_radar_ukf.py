"""
Example: CTRV Unscented Kalman Filter fusing lidar and radar

This script tracks a single object from interleaved lidar and radar
measurements and reports accuracy and filter consistency.

Can run with:
    - Inline simulation (default): python examples/example_lidar_radar_ukf.py
    - Measurement log: python examples/example_lidar_radar_ukf.py --data data/sim/ctrv_lidar_radar
    - Single sensor: python examples/example_lidar_radar_ukf.py --disable-radar

Demonstrates:
    - Initialization from the first lidar or radar measurement
    - Augmented sigma-point prediction through the CTRV model
    - NIS consistency checks against chi-square thresholds
"""

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from ukf_tracking.estimators import CTRVUnscentedKalmanFilter
from ukf_tracking.eval import compute_error_stats, compute_rmse, estimates_and_truth
from ukf_tracking.fusion import (
    FilterConfig,
    MeasurementEvent,
    SensorType,
    chi_square_threshold,
    load_measurement_log,
    nis_exceedance_rate,
)
from ukf_tracking.sim import generate_ctrv_truth, simulate_measurements


def simulate_events(seed: int = 42) -> List[MeasurementEvent]:
    """Inline scenario: 0.1 rad/s turn, alternating lidar/radar at 20 Hz."""
    x0 = np.array([2.0, 3.0, 3.0, 0.5, 0.1])
    timestamps_us, states = generate_ctrv_truth(x0, dt=0.05, n_steps=400)
    return simulate_measurements(
        timestamps_us, states, pattern="alternate",
        rng=np.random.default_rng(seed),
    )


def load_events(data_dir: str) -> List[MeasurementEvent]:
    """Load measurements.txt from a dataset directory, or a log file directly."""
    path = Path(data_dir)
    if path.is_dir():
        path = path / "measurements.txt"
    return load_measurement_log(path)


def run_ukf(events: List[MeasurementEvent], config: FilterConfig) -> Dict:
    """Run the filter over all events and collect outputs and NIS values."""
    ukf = CTRVUnscentedKalmanFilter(config)
    outputs = []
    nis = {SensorType.LIDAR: [], SensorType.RADAR: []}

    for event in events:
        out = ukf.process_measurement(event)
        outputs.append(out)
        if out.updated:
            value = out.nis_lidar if event.sensor is SensorType.LIDAR else out.nis_radar
            nis[event.sensor].append(value)

    return {'ukf': ukf, 'outputs': outputs, 'nis': nis}


def print_summary(events: List[MeasurementEvent], results: Dict) -> None:
    outputs = results['outputs']
    x_final, P_final = results['ukf'].get_state()

    span = events[-1].t - events[0].t if events else 0.0
    print(f"\nProcessed {len(events)} events over {span:.2f} s "
          f"({sum(o.updated for o in outputs)} updates)")
    print(f"  Final state: px={x_final[0]:.3f} py={x_final[1]:.3f} "
          f"v={x_final[2]:.3f} yaw={x_final[3]:.3f} yawd={x_final[4]:.3f}")
    print(f"  Covariance trace: {np.trace(P_final):.4f}")

    est, gt = estimates_and_truth(outputs, events)
    if len(gt):
        rmse = compute_rmse(est, gt)
        print("\nRMSE [px, py, vx, vy]:")
        print(f"  {rmse[0]:.4f}  {rmse[1]:.4f}  {rmse[2]:.4f}  {rmse[3]:.4f}")

        stats = compute_error_stats(est[:, :2] - gt[:, :2])
        print("\nPosition error [m]:")
        print(f"  mean={stats['mean']:.4f}  median={stats['median']:.4f}  "
              f"p95={stats['p95']:.4f}  max={stats['max']:.4f}")

    print("\nNIS consistency (95% threshold):")
    for sensor, values in results['nis'].items():
        if not values:
            print(f"  {sensor.name:5s}: no updates")
            continue
        dof = sensor.measurement_dim
        rate = nis_exceedance_rate(values, dof)
        print(f"  {sensor.name:5s}: mean={np.mean(values):.2f} (expected {dof}), "
              f"above {chi_square_threshold(dof):.2f}: {100 * rate:.1f}%")


def plot_results(events: List[MeasurementEvent], results: Dict,
                 save_dir: Optional[str] = None) -> None:
    import matplotlib.pyplot as plt

    from ukf_tracking.eval.plots import plot_nis, plot_trajectory_2d, save_figure

    est, gt = estimates_and_truth(results['outputs'], events)
    lidar_xy = np.array([e.z for e in events if e.sensor is SensorType.LIDAR]).reshape(-1, 2)
    radar_xy = np.array([
        [e.z[0] * np.cos(e.z[1]), e.z[0] * np.sin(e.z[1])]
        for e in events if e.sensor is SensorType.RADAR
    ]).reshape(-1, 2)

    figures = {}
    if len(gt):
        figures['trajectory'] = plot_trajectory_2d(gt[:, :2], est[:, :2], lidar_xy, radar_xy)
    nis_series = {
        sensor.name.lower(): (np.array(values), sensor.measurement_dim)
        for sensor, values in results['nis'].items() if values
    }
    if nis_series:
        figures['nis'] = plot_nis(nis_series)

    if save_dir:
        for name, fig in figures.items():
            paths = save_figure(fig, save_dir, f"ukf_{name}")
            print(f"Saved figure: {paths[0]}")
    else:
        plt.show()


def main():
    parser = argparse.ArgumentParser(
        description="CTRV UKF lidar/radar fusion example",
    )
    parser.add_argument(
        "--data", type=str, default=None,
        help="Dataset directory or measurement log (default: inline simulation)",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="FilterConfig JSON file (default: built-in tuning)",
    )
    parser.add_argument("--disable-lidar", action="store_true", help="Ignore lidar after init")
    parser.add_argument("--disable-radar", action="store_true", help="Ignore radar after init")
    parser.add_argument("--plot", action="store_true", help="Show figures")
    parser.add_argument("--save", type=str, default=None, help="Save figures to directory")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for inline simulation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("\n" + "=" * 70)
    print("CTRV UNSCENTED KALMAN FILTER: LIDAR + RADAR")
    print("=" * 70)

    if args.config:
        base = FilterConfig.from_json(args.config).to_dict()
    else:
        base = FilterConfig().to_dict()
    base['use_lidar'] = base['use_lidar'] and not args.disable_lidar
    base['use_radar'] = base['use_radar'] and not args.disable_radar
    config = FilterConfig.from_dict(base)

    if args.data:
        print(f"\nLoading measurements from: {args.data}")
        events = load_events(args.data)
    else:
        print("\nUsing inline simulation (0.1 rad/s turn, 20 Hz)")
        events = simulate_events(args.seed)

    results = run_ukf(events, config)
    print_summary(events, results)

    if args.plot or args.save:
        plot_results(events, results, args.save)


if __name__ == "__main__":
    main()
