from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence, Tuple

from constants.wgs84_constants import ConversionConstants


@dataclass(frozen=True)
class CartesianPosition:
    """Position (meters) in the Earth-Centered-Earth-Fixed frame."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))


@dataclass(frozen=True)
class GeodeticPosition:
    """WGS84 geodetic position."""

    lat_deg: float  # Latitude in degrees, [-90, 90]
    lon_deg: float  # Longitude in degrees, (-180, 180]
    alt_m: float  # Height above the ellipsoid in meters

    def __repr__(self) -> str:
        return (
            f"GeodeticPosition(lat={self.lat_deg:.6f} deg, "
            f"lon={self.lon_deg:.6f} deg, alt={self.alt_m:.3f} m)"
        )


DEGENERATE_GEODETIC = GeodeticPosition(
    ConversionConstants.DEGENERATE_LAT_DEG,
    ConversionConstants.DEGENERATE_LON_DEG,
    ConversionConstants.DEGENERATE_ALT_M,
)


class ConversionStatus(Enum):
    VALID = 1
    DEGENERATE = 2  # Input outside the algorithm's domain, sentinel returned
    NOT_CONVERGED = 3  # Iteration cap hit, best estimate returned


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of an ECEF to geodetic conversion.

    ``geodetic`` is always populated. For ``DEGENERATE`` results it holds the
    sentinel ``DEGENERATE_GEODETIC``; for ``NOT_CONVERGED`` it holds the last
    latitude estimate.
    """

    geodetic: GeodeticPosition
    status: ConversionStatus = ConversionStatus.VALID
    iterations: int = 0  # Refinement steps taken (always 0 for closed form)

    @property
    def is_valid(self) -> bool:
        return self.status == ConversionStatus.VALID


@dataclass(frozen=True)
class TelemetrySample:
    """A single telemetry row."""

    timestamp_ns: int  # Nanoseconds, non-decreasing across a stream
    position: CartesianPosition
    velocity_mps: Tuple[float, float, float]  # ECEF velocity in m/s

    def __repr__(self) -> str:
        return f"TelemetrySample(t={self.timestamp_ns} ns, pos={tuple(self.position)})"


class TelemetryWindow:
    """
    Contiguous, non-empty run of samples whose consecutive gaps are all within
    the segmentation threshold.
    """

    __slots__ = ("_samples",)

    def __init__(self, samples: Sequence[TelemetrySample]):
        if not samples:
            raise ValueError("A telemetry window must contain at least one sample")
        self._samples: Tuple[TelemetrySample, ...] = tuple(samples)

    @property
    def samples(self) -> Tuple[TelemetrySample, ...]:
        return self._samples

    @property
    def first(self) -> TelemetrySample:
        return self._samples[0]

    @property
    def last(self) -> TelemetrySample:
        return self._samples[-1]

    @property
    def start_ns(self) -> int:
        return self.first.timestamp_ns

    @property
    def end_ns(self) -> int:
        return self.last.timestamp_ns

    @property
    def duration_ns(self) -> int:
        return max(self.end_ns - self.start_ns, 0)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[TelemetrySample]:
        return iter(self._samples)

    def __getitem__(self, index):
        return self._samples[index]

    def __eq__(self, other):
        return isinstance(other, TelemetryWindow) and self._samples == other._samples

    def __hash__(self):
        return hash(self._samples)

    def __repr__(self) -> str:
        return (
            f"TelemetryWindow(n={len(self)}, start={self.start_ns} ns, "
            f"end={self.end_ns} ns)"
        )


def make_sample(
    timestamp_ns: int,
    pos: Sequence[float],
    vel: Optional[Sequence[float]] = None,
) -> TelemetrySample:
    """Build a sample from plain sequences."""
    vx, vy, vz = (0.0, 0.0, 0.0) if vel is None else (float(v) for v in vel)
    return TelemetrySample(
        timestamp_ns=int(timestamp_ns),
        position=CartesianPosition(float(pos[0]), float(pos[1]), float(pos[2])),
        velocity_mps=(vx, vy, vz),
    )
