"""ECEF to WGS84 geodetic conversion.

Two interchangeable algorithms solve the same inverse problem:

``ecef_to_geodetic_iterative``
    Bowring initial estimate followed by fixed-point refinement of the
    latitude. Capped at ``max_iterations``; hitting the cap yields a
    ``NOT_CONVERGED`` result carrying the last estimate.

``ecef_to_geodetic_closed_form``
    Olson's non-iterative method (IEEE Trans. AES 32(1), 1996): a series
    estimate of the latitude followed by a single Newton correction. Points
    within ``MIN_RADIUS_M`` of the Earth's center are reported as
    ``DEGENERATE`` with the sentinel geodetic value.

``convert`` dispatches on ``ConversionMethod``.
"""

from __future__ import annotations

import logging
import math

import constants.wgs84_constants as wgsConst
from constants.parameters import ConversionMethod, TelemetryParameters
from utilities.telemetry_data_structures import (
    DEGENERATE_GEODETIC,
    CartesianPosition,
    ConversionResult,
    ConversionStatus,
    GeodeticPosition,
)

logger = logging.getLogger(__name__)

_A = wgsConst.Wgs84Constants.A_M
_B = wgsConst.Wgs84Constants.B_M
_E_SQ = wgsConst.Wgs84Constants.E_SQ
_OLSON = wgsConst.OlsonCoefficients


def _normalize_lon_deg(lon_deg: float) -> float:
    """Map a longitude from atan2 into (-180, 180]."""
    return 180.0 if lon_deg <= -180.0 else lon_deg


def _prime_vertical_radius(sin_lat: float) -> float:
    return _A / math.sqrt(1.0 - _E_SQ * sin_lat * sin_lat)


def _is_finite(position: CartesianPosition) -> bool:
    return all(math.isfinite(v) for v in position)


def _non_finite_result(position: CartesianPosition) -> ConversionResult:
    logger.warning("Position %s has non-finite coordinates", position)
    return ConversionResult(DEGENERATE_GEODETIC, ConversionStatus.DEGENERATE)


def _ellipsoid_height(p: float, z: float, lat: float) -> float:
    """Height above the ellipsoid, using the form that is stable at ``lat``."""
    sin_lat = math.sin(lat)
    n = _prime_vertical_radius(sin_lat)
    # p / cos(lat) loses all precision close to the poles
    if abs(lat) > math.pi / 4.0:
        return z / sin_lat - n * (1.0 - _E_SQ)
    return p / math.cos(lat) - n


def _to_geodetic(lat_rad: float, lon_rad: float, alt_m: float) -> GeodeticPosition:
    return GeodeticPosition(
        lat_deg=math.degrees(lat_rad),
        lon_deg=_normalize_lon_deg(math.degrees(lon_rad)),
        alt_m=alt_m,
    )


def ecef_to_geodetic_iterative(
    position: CartesianPosition,
    max_iterations: int = TelemetryParameters.MAX_ITERATIONS,
) -> ConversionResult:
    """Convert an ECEF position to geodetic coordinates by fixed-point iteration.

    Args:
        position: ECEF position in meters.
        max_iterations: Maximum number of latitude refinement steps.

    Returns:
        ConversionResult. Points on the polar axis are resolved directly to
        +/-90 deg; the Earth's center and non-finite input are
        ``DEGENERATE``.
    """
    if not _is_finite(position):
        return _non_finite_result(position)

    x, y, z = position.x, position.y, position.z

    lon = math.atan2(y, x)
    p = math.hypot(x, y)

    if p == 0.0:
        if z == 0.0:
            logger.warning("Iterative conversion of the Earth's center is undefined")
            return ConversionResult(DEGENERATE_GEODETIC, ConversionStatus.DEGENERATE)
        lat = math.copysign(math.pi / 2.0, z)
        return ConversionResult(_to_geodetic(lat, 0.0, abs(z) - _B))

    # Bowring initial estimate through the parametric latitude
    theta = math.atan2(z, p * (1.0 - _E_SQ))
    sin_theta = math.sin(theta)
    cos_theta = math.cos(theta)
    lat = math.atan2(
        z + _E_SQ * _A * sin_theta**3,
        p - _E_SQ * _A * cos_theta**3,
    )

    status = ConversionStatus.NOT_CONVERGED
    iterations = 0
    while iterations < max_iterations:
        iterations += 1
        sin_lat = math.sin(lat)
        n = _prime_vertical_radius(sin_lat)
        new_lat = math.atan2(z + _E_SQ * n * sin_lat, p)
        delta = abs(new_lat - lat)
        lat = new_lat
        if delta < wgsConst.ConversionConstants.CONVERGENCE_TOL_RAD:
            status = ConversionStatus.VALID
            break

    if status == ConversionStatus.NOT_CONVERGED:
        logger.warning(
            "Latitude did not converge within %d iterations for %s",
            max_iterations,
            position,
        )

    alt = _ellipsoid_height(p, z, lat)

    return ConversionResult(_to_geodetic(lat, lon, alt), status, iterations)


def ecef_to_geodetic_closed_form(position: CartesianPosition) -> ConversionResult:
    """Convert an ECEF position to geodetic coordinates without iteration."""
    if not _is_finite(position):
        return _non_finite_result(position)

    x, y, z = position.x, position.y, position.z

    zp = abs(z)
    w2 = x * x + y * y
    w = math.sqrt(w2)
    r2 = w2 + z * z
    r = math.sqrt(r2)

    if r < wgsConst.ConversionConstants.MIN_RADIUS_M:
        logger.warning(
            "Position %s is %.1f m from the Earth's center, outside the "
            "closed-form domain",
            position,
            r,
        )
        return ConversionResult(DEGENERATE_GEODETIC, ConversionStatus.DEGENERATE)

    lon = math.atan2(y, x)

    s2 = z * z / r2
    c2 = w2 / r2
    u = _OLSON.A2 / r
    v = _OLSON.A3 - _OLSON.A4 / r

    if c2 > wgsConst.ConversionConstants.COS_SQ_THRESHOLD:
        s = (zp / r) * (1.0 + c2 * (_OLSON.A1 + u + s2 * v) / r)
        lat = math.asin(s)
        ss = s * s
        c = math.sqrt(1.0 - ss)
    else:
        c = (w / r) * (1.0 - s2 * (_OLSON.A5 - u - c2 * v) / r)
        lat = math.acos(c)
        ss = 1.0 - c * c
        s = math.sqrt(ss)

    # Newton correction on the foot point of the ellipse
    g = 1.0 - _E_SQ * ss
    rg = _A / math.sqrt(g)
    rf = _OLSON.A6 * rg
    u = w - rg * c
    v = zp - rf * s
    f = c * u + s * v
    m = c * v - s * u
    p = m / (rf / g + f)

    lat = lat + p
    alt = f + m * p / 2.0
    if z < 0.0:
        lat = -lat

    return ConversionResult(_to_geodetic(lat, lon, alt))


def convert(
    position: CartesianPosition,
    method: ConversionMethod = ConversionMethod.ITERATIVE,
) -> ConversionResult:
    """Convert with the selected algorithm; both share the same contract."""
    if method == ConversionMethod.ITERATIVE:
        return ecef_to_geodetic_iterative(position)
    if method == ConversionMethod.CLOSED_FORM:
        return ecef_to_geodetic_closed_form(position)
    raise ValueError(f"Unsupported conversion method {method}")
