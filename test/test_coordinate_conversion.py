import os
import sys
import unittest

import numpy as np
import pymap3d as pm

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from constants.parameters import ConversionMethod
from constants.wgs84_constants import Wgs84Constants
from geodesy_utils.coordinate_conversion import (
    convert,
    ecef_to_geodetic_closed_form,
    ecef_to_geodetic_iterative,
)
from utilities.telemetry_data_structures import (
    DEGENERATE_GEODETIC,
    CartesianPosition,
    ConversionStatus,
    GeodeticPosition,
)

# (ECEF position, expected geodetic position)
FIXTURES = [
    (
        CartesianPosition(652954.1006, 4774619.7919, -4167647.7937),
        GeodeticPosition(-41.04453, 82.21280, 2274.39966),
    ),
    (
        CartesianPosition(652954.1006, 4774619.7919, -2217647.7937),
        GeodeticPosition(-24.88722, 82.212809, -1069542.17232),
    ),
    (
        CartesianPosition(-2694044.4111565403, -4266368.805493665, 3888310.602276871),
        GeodeticPosition(37.80437, -122.27080, 0.00000),
    ),
]

FIXTURE_TOL = 3e-5

BOTH_METHODS = (ConversionMethod.ITERATIVE, ConversionMethod.CLOSED_FORM)


def _random_ecef(rng: np.random.RandomState, r_min: float, r_max: float, count: int):
    """Points uniformly distributed in direction with radius in [r_min, r_max]."""
    directions = rng.normal(size=(count, 3))
    directions /= np.linalg.norm(directions, axis=1)[:, None]
    radii = rng.uniform(r_min, r_max, size=count)
    return [CartesianPosition(*(d * r)) for d, r in zip(directions, radii)]


class TestFixtures(unittest.TestCase):
    def test_fixtures_reproduced_by_both_methods(self):
        for method in BOTH_METHODS:
            for ecef, expected in FIXTURES:
                with self.subTest(method=method.name, ecef=ecef):
                    result = convert(ecef, method)
                    self.assertEqual(result.status, ConversionStatus.VALID)
                    actual = result.geodetic
                    self.assertAlmostEqual(actual.lat_deg, expected.lat_deg, delta=FIXTURE_TOL)
                    self.assertAlmostEqual(actual.lon_deg, expected.lon_deg, delta=FIXTURE_TOL)
                    self.assertAlmostEqual(actual.alt_m, expected.alt_m, delta=FIXTURE_TOL)

    def test_repeated_conversion_is_identical(self):
        for method in BOTH_METHODS:
            for ecef, _ in FIXTURES:
                first = convert(ecef, method)
                for _ in range(3):
                    self.assertEqual(convert(ecef, method), first)

    def test_default_method_is_iterative(self):
        ecef = FIXTURES[0][0]
        self.assertEqual(convert(ecef), ecef_to_geodetic_iterative(ecef))


class TestAgainstReference(unittest.TestCase):
    def test_geodetic_round_trip(self):
        rng = np.random.RandomState(1234)
        lats = rng.uniform(-89.9, 89.9, size=200)
        lons = rng.uniform(-179.9, 179.9, size=200)
        alts = rng.uniform(-5.0e5, 4.0e7, size=200)

        for lat, lon, alt in zip(lats, lons, alts):
            x, y, z = pm.geodetic2ecef(lat, lon, alt)
            ecef = CartesianPosition(float(x), float(y), float(z))
            for method in BOTH_METHODS:
                with self.subTest(method=method.name, lat=lat, lon=lon, alt=alt):
                    geo = convert(ecef, method).geodetic
                    self.assertAlmostEqual(geo.lat_deg, lat, delta=1e-8)
                    self.assertAlmostEqual(geo.lon_deg, lon, delta=1e-8)
                    self.assertAlmostEqual(geo.alt_m, alt, delta=1e-4)

    def test_matches_pymap3d_near_surface(self):
        for ecef, _ in (FIXTURES[0], FIXTURES[2]):
            lat, lon, alt = pm.ecef2geodetic(ecef.x, ecef.y, ecef.z)
            geo = ecef_to_geodetic_iterative(ecef).geodetic
            self.assertAlmostEqual(geo.lat_deg, float(lat), delta=1e-7)
            self.assertAlmostEqual(geo.lon_deg, float(lon), delta=1e-7)
            self.assertAlmostEqual(geo.alt_m, float(alt), delta=1e-3)

    def test_methods_agree_for_arbitrary_positions(self):
        rng = np.random.RandomState(42)
        for ecef in _random_ecef(rng, 1.0e6, 5.0e7, 500):
            iterative = ecef_to_geodetic_iterative(ecef)
            closed_form = ecef_to_geodetic_closed_form(ecef)
            self.assertTrue(iterative.is_valid)
            self.assertTrue(closed_form.is_valid)
            self.assertAlmostEqual(
                iterative.geodetic.lat_deg, closed_form.geodetic.lat_deg, delta=1e-6
            )
            self.assertAlmostEqual(
                iterative.geodetic.lon_deg, closed_form.geodetic.lon_deg, delta=1e-9
            )
            self.assertAlmostEqual(
                iterative.geodetic.alt_m, closed_form.geodetic.alt_m, delta=1e-3
            )


class TestClosedFormDomain(unittest.TestCase):
    def test_sentinel_inside_minimum_radius(self):
        rng = np.random.RandomState(7)
        points = _random_ecef(rng, 0.0, 99999.0, 100)
        points.append(CartesianPosition(0.0, 0.0, 0.0))
        points.append(CartesianPosition(99999.999, 0.0, 0.0))
        for ecef in points:
            result = ecef_to_geodetic_closed_form(ecef)
            self.assertEqual(result.status, ConversionStatus.DEGENERATE)
            self.assertFalse(result.is_valid)
            self.assertEqual(result.geodetic.lat_deg, 0.0)
            self.assertEqual(result.geodetic.lon_deg, 0.0)
            self.assertEqual(result.geodetic.alt_m, -1e7)
            self.assertEqual(result.geodetic, DEGENERATE_GEODETIC)

    def test_no_sentinel_from_minimum_radius_outwards(self):
        rng = np.random.RandomState(11)
        points = _random_ecef(rng, 100000.0, 5.0e7, 300)
        points.append(CartesianPosition(100000.0, 0.0, 0.0))
        points.append(CartesianPosition(60000.0, 0.0, 80000.0))
        for ecef in points:
            result = ecef_to_geodetic_closed_form(ecef)
            self.assertEqual(result.status, ConversionStatus.VALID)
            self.assertNotEqual(result.geodetic, DEGENERATE_GEODETIC)

    def test_southern_hemisphere_latitude_is_negated(self):
        north = ecef_to_geodetic_closed_form(CartesianPosition(4.0e6, 1.0e6, 4.5e6))
        south = ecef_to_geodetic_closed_form(CartesianPosition(4.0e6, 1.0e6, -4.5e6))
        self.assertAlmostEqual(north.geodetic.lat_deg, -south.geodetic.lat_deg, places=12)
        self.assertAlmostEqual(north.geodetic.alt_m, south.geodetic.alt_m, places=6)


class TestIterativeEdgeCases(unittest.TestCase):
    def test_iteration_cap_reports_not_converged(self):
        ecef = FIXTURES[0][0]
        capped = ecef_to_geodetic_iterative(ecef, max_iterations=1)
        self.assertEqual(capped.status, ConversionStatus.NOT_CONVERGED)
        self.assertEqual(capped.iterations, 1)
        self.assertFalse(capped.is_valid)
        # The best estimate is still returned
        self.assertAlmostEqual(capped.geodetic.lat_deg, FIXTURES[0][1].lat_deg, delta=1e-3)

        no_steps = ecef_to_geodetic_iterative(ecef, max_iterations=0)
        self.assertEqual(no_steps.status, ConversionStatus.NOT_CONVERGED)
        self.assertEqual(no_steps.iterations, 0)

    def test_converges_within_default_cap(self):
        result = ecef_to_geodetic_iterative(FIXTURES[1][0])
        self.assertEqual(result.status, ConversionStatus.VALID)
        self.assertGreater(result.iterations, 0)
        self.assertLess(result.iterations, 10)

    def test_polar_axis(self):
        north = ecef_to_geodetic_iterative(CartesianPosition(0.0, 0.0, Wgs84Constants.B_M + 500.0))
        self.assertEqual(north.status, ConversionStatus.VALID)
        self.assertEqual(north.geodetic.lat_deg, 90.0)
        self.assertEqual(north.geodetic.lon_deg, 0.0)
        self.assertAlmostEqual(north.geodetic.alt_m, 500.0, delta=1e-6)

        south = ecef_to_geodetic_iterative(CartesianPosition(0.0, 0.0, -Wgs84Constants.B_M))
        self.assertEqual(south.geodetic.lat_deg, -90.0)
        self.assertAlmostEqual(south.geodetic.alt_m, 0.0, delta=1e-6)

    def test_near_polar_axis_altitude(self):
        for z in (6.4e6, -6.4e6):
            for px in (1e-9, 1e-3, 1.0):
                with self.subTest(px=px, z=z):
                    lat, lon, alt = pm.ecef2geodetic(px, 0.0, z)
                    result = ecef_to_geodetic_iterative(CartesianPosition(px, 0.0, z))
                    self.assertEqual(result.status, ConversionStatus.VALID)
                    self.assertAlmostEqual(result.geodetic.lat_deg, float(lat), delta=1e-7)
                    self.assertAlmostEqual(result.geodetic.alt_m, float(alt), delta=3e-5)

    def test_altitude_continuous_off_polar_axis(self):
        on_axis = ecef_to_geodetic_iterative(CartesianPosition(0.0, 0.0, 6.4e6))
        off_axis = ecef_to_geodetic_iterative(CartesianPosition(1e-9, 0.0, 6.4e6))
        self.assertAlmostEqual(on_axis.geodetic.alt_m, off_axis.geodetic.alt_m, delta=1e-6)

    def test_earth_center_is_degenerate(self):
        result = ecef_to_geodetic_iterative(CartesianPosition(0.0, 0.0, 0.0))
        self.assertEqual(result.status, ConversionStatus.DEGENERATE)
        self.assertEqual(result.geodetic, DEGENERATE_GEODETIC)

    def test_longitude_range(self):
        ecef = CartesianPosition(-7.0e6, -0.0, 0.0)
        for method in BOTH_METHODS:
            geo = convert(ecef, method).geodetic
            self.assertEqual(geo.lon_deg, 180.0)
            self.assertAlmostEqual(geo.lat_deg, 0.0, places=12)


class TestNonFiniteInput(unittest.TestCase):
    def test_non_finite_positions_are_degenerate(self):
        nan = float("nan")
        inf = float("inf")
        positions = [
            CartesianPosition(nan, 0.0, 0.0),
            CartesianPosition(7.0e6, nan, 0.0),
            CartesianPosition(inf, 0.0, 0.0),
            CartesianPosition(7.0e6, 0.0, -inf),
        ]
        for method in BOTH_METHODS:
            for ecef in positions:
                with self.subTest(method=method.name, ecef=ecef):
                    result = convert(ecef, method)
                    self.assertEqual(result.status, ConversionStatus.DEGENERATE)
                    self.assertFalse(result.is_valid)
                    self.assertEqual(result.geodetic, DEGENERATE_GEODETIC)


if __name__ == "__main__":
    unittest.main()
