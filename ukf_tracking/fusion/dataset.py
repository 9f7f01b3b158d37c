"""Measurement log reading and writing.

Log format, one event per whitespace-separated line:

    L  px   py            timestamp_us  [gt_px gt_py gt_vx gt_vy [gt_yaw gt_yawd]]
    R  rho  phi  rho_dot  timestamp_us  [gt_px gt_py gt_vx gt_vy [gt_yaw gt_yawd]]

Blank lines and lines starting with '#' are ignored. Ground-truth heading
and yaw rate columns are accepted but not kept.
"""

from pathlib import Path
from typing import Iterable, List, Union

import numpy as np

from ukf_tracking.fusion.types import MeasurementEvent, SensorType

_GROUND_TRUTH_WIDTHS = (0, 4, 6)


def parse_measurement_line(line: str, line_no: int = 0) -> MeasurementEvent:
    """
    Parse one log line into a MeasurementEvent.

    Args:
        line: Text line of the log.
        line_no: Line number used in error messages.

    Returns:
        Parsed event.

    Raises:
        ValueError: If the line is malformed.
    """
    fields = line.split()
    if not fields:
        raise ValueError(f"line {line_no}: empty line")

    try:
        sensor = SensorType.from_tag(fields[0])
    except ValueError as exc:
        raise ValueError(f"line {line_no}: {exc}") from exc

    m = sensor.measurement_dim
    n_gt = len(fields) - 2 - m
    if n_gt not in _GROUND_TRUTH_WIDTHS:
        raise ValueError(
            f"line {line_no}: {sensor.name} line has {len(fields)} fields, expected "
            f"{', '.join(str(2 + m + w) for w in _GROUND_TRUTH_WIDTHS)}"
        )

    try:
        z = np.array([float(v) for v in fields[1:1 + m]])
        timestamp_us = int(fields[1 + m])
        gt = [float(v) for v in fields[2 + m:2 + m + 4]]
    except ValueError as exc:
        raise ValueError(f"line {line_no}: {exc}") from exc

    return MeasurementEvent(
        sensor=sensor,
        timestamp_us=timestamp_us,
        z=z,
        ground_truth=np.array(gt) if gt else None,
    )


def load_measurement_log(path: Union[str, Path]) -> List[MeasurementEvent]:
    """
    Load every event of a measurement log, in file order.

    Args:
        path: Path to the log file.

    Returns:
        List of measurement events.
    """
    events = []
    with open(path) as f:
        for line_no, line in enumerate(f, start=1):
            text = line.strip()
            if not text or text.startswith("#"):
                continue
            events.append(parse_measurement_line(text, line_no))
    return events


def format_measurement_line(event: MeasurementEvent) -> str:
    fields = [event.sensor.value]
    fields += [repr(float(v)) for v in event.z]
    fields.append(str(int(event.timestamp_us)))
    if event.ground_truth is not None:
        fields += [repr(float(v)) for v in event.ground_truth]
    return "\t".join(fields)


def save_measurement_log(
    events: Iterable[MeasurementEvent], path: Union[str, Path]
) -> Path:
    """
    Write events to a measurement log.

    Args:
        events: Events to write.
        path: Output file; parent directories are created.

    Returns:
        The output path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for event in events:
            f.write(format_measurement_line(event) + "\n")
    return path
