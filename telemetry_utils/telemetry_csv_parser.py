"""Delimited-text telemetry loader.

Each data row carries seven numeric columns in fixed order::

    timestamp_ns, pos_x_m, pos_y_m, pos_z_m, vel_x_mps, vel_y_mps, vel_z_mps

The first row is a header; its labels are not interpreted. Timestamps may be
written as floats (including scientific notation) and are rounded to the
nearest integer nanosecond. Extra trailing columns are ignored.

Any malformed or missing numeric field aborts the whole load with a
``TelemetryParseError``; no partial result is returned.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

from constants.parameters import TelemetryParameters
from telemetry_utils.segmentation import segment_samples
from utilities.telemetry_data_structures import (
    CartesianPosition,
    TelemetrySample,
    TelemetryWindow,
)

logger = logging.getLogger(__name__)

NUM_TELEMETRY_COLUMNS = 7

# Header occupies line 1 of the file
_FIRST_DATA_LINE = 2


class TelemetryParseError(ValueError):
    """Raised when a telemetry file cannot be parsed."""


def _round_half_away_from_zero(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def _to_numeric_columns(frame: pd.DataFrame, file_path: str) -> pd.DataFrame:
    """Convert every telemetry column to numbers, failing on the first bad cell."""

    numeric = pd.DataFrame(index=frame.index)
    for col_idx, col in enumerate(frame.columns[:NUM_TELEMETRY_COLUMNS]):
        converted = pd.to_numeric(frame[col], errors="coerce")
        # "nan" and "inf" parse as floats but are not usable telemetry
        bad = ~np.isfinite(converted.to_numpy(dtype=float, na_value=np.nan))
        if bad.any():
            row = int(np.flatnonzero(bad)[0])
            raise TelemetryParseError(
                f"{file_path}: line {row + _FIRST_DATA_LINE}, column {col_idx + 1} "
                f"({col!r}): invalid numeric value {frame[col].iloc[row]!r}"
            )
        numeric[col_idx] = converted
    return numeric


def _timestamps_ns(column: pd.Series) -> np.ndarray:
    if pd.api.types.is_integer_dtype(column):
        return column.to_numpy(dtype=np.int64)
    return _round_half_away_from_zero(column.to_numpy(dtype=float)).astype(np.int64)


def parse_telemetry_csv(file_path: str | Path) -> List[TelemetrySample]:
    """Parse a telemetry CSV file into samples, preserving row order.

    Parameters
    ----------
    file_path : str or Path
        Path to the CSV file.

    Returns
    -------
    List[TelemetrySample]
        One sample per data row.

    Raises
    ------
    TelemetryParseError
        If the file is unreadable, has fewer than seven columns, or any of
        the seven fields of a row is missing or not numeric.
    """

    file_path = str(file_path)
    try:
        frame = pd.read_csv(
            file_path,
            header=0,
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise TelemetryParseError(
            f"Unable to read telemetry file {file_path}: {exc}"
        ) from exc

    if frame.shape[1] < NUM_TELEMETRY_COLUMNS:
        raise TelemetryParseError(
            f"{file_path}: expected {NUM_TELEMETRY_COLUMNS} columns, "
            f"found {frame.shape[1]}"
        )

    if frame.empty:
        logger.info("Telemetry file %s has no data rows", file_path)
        return []

    numeric = _to_numeric_columns(frame, file_path)
    timestamps = _timestamps_ns(numeric[0])
    pos = numeric[[1, 2, 3]].to_numpy(dtype=float)
    vel = numeric[[4, 5, 6]].to_numpy(dtype=float)

    samples = [
        TelemetrySample(
            timestamp_ns=int(ts),
            position=CartesianPosition(float(p[0]), float(p[1]), float(p[2])),
            velocity_mps=(float(v[0]), float(v[1]), float(v[2])),
        )
        for ts, p, v in zip(timestamps, pos, vel)
    ]

    logger.info("Parsed %d telemetry samples from %s", len(samples), file_path)
    return samples


def load_telemetry_windows(
    file_path: str | Path,
    threshold_ns: int = TelemetryParameters.CHUNK_DURATION_NS,
) -> List[TelemetryWindow]:
    """Parse ``file_path`` and split the samples into telemetry windows."""
    return segment_samples(parse_telemetry_csv(file_path), threshold_ns)
