import numpy as np

# Nanoseconds per second
NS_PER_SEC = 1_000_000_000


class Wgs84Constants:
    # Semi-major axis of Earth in meters
    A_M = 6378137.0

    # Flatness of ellipsoid
    F = 1.0 / 298.257223563

    # Semi-minor axis of Earth in meters
    B_M = A_M * (1.0 - F)

    # Squared first eccentricity of ellipsoid, derived once from the flattening
    E_SQ = F * (2.0 - F)

    # First eccentricity of ellipsoid
    E_FIRST = np.sqrt(E_SQ)


class ConversionConstants:
    # Latitude change (radians) below which the iterative method has converged
    CONVERGENCE_TOL_RAD = 1e-12

    # Points closer than this to the Earth's center are outside the domain of
    # the closed-form method
    MIN_RADIUS_M = 100000.0

    # Squared cosine threshold choosing which trig form the closed-form method
    # solves first
    COS_SQ_THRESHOLD = 0.4

    # Sentinel geodetic values returned for out-of-domain input
    DEGENERATE_LAT_DEG = 0.0
    DEGENERATE_LON_DEG = 0.0
    DEGENERATE_ALT_M = -1.0e7


class OlsonCoefficients:
    """Precomputed series coefficients of the closed-form method (Olson, 1996)."""

    A1 = Wgs84Constants.A_M * Wgs84Constants.E_SQ
    A2 = A1 * A1
    A3 = A1 * Wgs84Constants.E_SQ / 2.0
    A4 = 2.5 * A2
    A5 = A1 + A3
    A6 = 1.0 - Wgs84Constants.E_SQ
