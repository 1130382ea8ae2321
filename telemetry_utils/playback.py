"""Per-window summaries consumed by display layers.

Each window is reduced to one ``WindowFrame`` built from its most recent
sample: elapsed mission time, geodetic position and progress through the
mission. Running display state (current window, chart history) belongs to
the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import numpy as np

from constants.parameters import ConversionMethod, TelemetryParameters
from geodesy_utils.coordinate_conversion import convert
from utilities.telemetry_data_structures import (
    ConversionStatus,
    GeodeticPosition,
    TelemetryWindow,
)


@dataclass(frozen=True)
class WindowFrame:
    window_index: int
    num_samples: int
    timestamp_ns: int  # Timestamp of the window's last sample
    elapsed: int  # Whole time units since the first sample of the mission
    geodetic: GeodeticPosition
    status: ConversionStatus
    altitude_m: Optional[int]  # Whole meters for display; None when not valid
    mean_speed_mps: float  # Mean velocity magnitude over the window
    progress_pct: int  # Share of windows processed, including this one


def mean_speed_mps(window: TelemetryWindow) -> float:
    vel = np.array([sample.velocity_mps for sample in window], dtype=float)
    return float(np.linalg.norm(vel, axis=1).mean())


def build_window_frames(
    windows: Sequence[TelemetryWindow],
    *,
    method: ConversionMethod = ConversionMethod.ITERATIVE,
    time_unit_ns: int = TelemetryParameters.DISPLAY_TIME_UNIT_NS,
) -> Iterator[WindowFrame]:
    """Yield one display frame per window, in order.

    Args:
        windows: Output of the segmenter.
        method: Conversion algorithm for the last sample's position.
        time_unit_ns: Unit of ``WindowFrame.elapsed`` (one second by default).
    """
    if time_unit_ns <= 0:
        raise ValueError(f"time_unit_ns must be positive, got {time_unit_ns}")

    total = len(windows)
    if total == 0:
        return

    initial_ns = windows[0].start_ns
    for index, window in enumerate(windows):
        last = window.last
        result = convert(last.position, method)
        alt_m = result.geodetic.alt_m
        altitude = round(alt_m) if result.is_valid and np.isfinite(alt_m) else None

        yield WindowFrame(
            window_index=index,
            num_samples=len(window),
            timestamp_ns=last.timestamp_ns,
            elapsed=max(last.timestamp_ns - initial_ns, 0) // time_unit_ns,
            geodetic=result.geodetic,
            status=result.status,
            altitude_m=altitude,
            mean_speed_mps=mean_speed_mps(window),
            progress_pct=round((index + 1) / total * 100.0),
        )


def log_window_frame(logger: logging.Logger, frame: WindowFrame) -> None:
    """Emit one structured line describing ``frame``."""

    if logger is None or not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(
        "Window %d (%d samples) | T+%d | lat=%.6f lon=%.6f alt=%.3f m "
        "[%s] | speed=%.3f m/s | %d%%",
        frame.window_index,
        frame.num_samples,
        frame.elapsed,
        frame.geodetic.lat_deg,
        frame.geodetic.lon_deg,
        frame.geodetic.alt_m,
        frame.status.name,
        frame.mean_speed_mps,
        frame.progress_pct,
    )
