"""Split a time-ordered telemetry stream into display windows.

A window is a maximal run of consecutive samples in which no gap between
neighbouring timestamps exceeds the threshold. A gap exactly equal to the
threshold keeps the sample in the running window. Timestamp regressions are
treated as a zero gap.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from constants.parameters import TelemetryParameters
from utilities.telemetry_data_structures import TelemetrySample, TelemetryWindow

logger = logging.getLogger(__name__)


def _saturating_gap_ns(current_ns: int, previous_ns: int) -> int:
    return max(current_ns - previous_ns, 0)


def iter_windows(
    samples: Iterable[TelemetrySample],
    threshold_ns: int = TelemetryParameters.CHUNK_DURATION_NS,
) -> Iterator[TelemetryWindow]:
    """Yield telemetry windows in input order.

    Args:
        samples: Samples ordered by timestamp.
        threshold_ns: Largest gap (nanoseconds) allowed inside one window.

    Raises:
        ValueError: If ``threshold_ns`` is negative.
    """
    if threshold_ns < 0:
        raise ValueError(f"threshold_ns must be non-negative, got {threshold_ns}")

    current: List[TelemetrySample] = []
    previous_ns: Optional[int] = None

    for sample in samples:
        if previous_ns is not None:
            gap_ns = _saturating_gap_ns(sample.timestamp_ns, previous_ns)
            if gap_ns > threshold_ns:
                logger.debug(
                    "Gap of %d ns at t=%d ns closes window of %d samples",
                    gap_ns,
                    sample.timestamp_ns,
                    len(current),
                )
                yield TelemetryWindow(current)
                current = []
        current.append(sample)
        previous_ns = sample.timestamp_ns

    if current:
        yield TelemetryWindow(current)


def segment_samples(
    samples: Iterable[TelemetrySample],
    threshold_ns: int = TelemetryParameters.CHUNK_DURATION_NS,
) -> List[TelemetryWindow]:
    """Group ``samples`` into windows; see ``iter_windows``."""
    windows = list(iter_windows(samples, threshold_ns))
    logger.info(
        "Segmented telemetry into %d windows (threshold=%d ns)",
        len(windows),
        threshold_ns,
    )
    return windows
