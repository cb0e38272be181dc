"""Unit tests for the geodetic ⇄ UTM projection.

Test cases include:
- Known reference points (central meridian, equator, southern hemisphere)
- Zone numbering, including Norway/Svalbard exceptions
- Latitude band letters and the validity band
- Round-trip projection accuracy over the whole valid domain
"""

import unittest

import numpy as np

from geonav.coords.utm import (
    GeoPoint,
    UtmPoint,
    central_meridian,
    ll_to_utm,
    normalize_longitude,
    parse_utm_zone,
    utm_band_letter,
    utm_to_ll,
    utm_zone_number,
)
from geonav.errors import InvalidLatitudeError, NonFiniteInputError

# k0 * meridian arc length from the equator to 45°N on WGS84
NORTHING_45N = 4982950.400


class TestLLtoUTM(unittest.TestCase):
    """Test cases for forward projection."""

    def test_on_central_meridian_45n(self) -> None:
        """Test 45°N on the central meridian of zone 15."""
        utm = ll_to_utm(45.0, -93.0)

        self.assertEqual(utm.zone, "15T")
        self.assertAlmostEqual(utm.easting, 500000.0, delta=1e-6)
        self.assertAlmostEqual(utm.northing, NORTHING_45N, delta=0.01)

    def test_equator_central_meridian(self) -> None:
        """Test equator on the central meridian: false easting, zero northing."""
        utm = ll_to_utm(0.0, 3.0)

        self.assertEqual(utm.zone, "31N")
        self.assertAlmostEqual(utm.easting, 500000.0, delta=1e-6)
        self.assertAlmostEqual(utm.northing, 0.0, delta=1e-6)

    def test_southern_hemisphere_false_northing(self) -> None:
        """Test that southern latitudes add the 10,000 km false northing."""
        utm = ll_to_utm(-45.0, -93.0)

        self.assertEqual(utm.zone, "15G")
        self.assertAlmostEqual(utm.northing, 10000000.0 - NORTHING_45N, delta=0.01)

    def test_east_west_symmetry(self) -> None:
        """Test that points mirrored about the central meridian mirror in easting."""
        cm = central_meridian(33)
        east = ll_to_utm(30.0, cm + 2.0)
        west = ll_to_utm(30.0, cm - 2.0)

        self.assertAlmostEqual(east.easting + west.easting, 1000000.0, delta=1e-6)
        self.assertAlmostEqual(east.northing, west.northing, delta=1e-6)
        self.assertGreater(east.easting, 500000.0)

    def test_north_south_symmetry(self) -> None:
        """Test that mirrored latitudes give complementary northings."""
        north = ll_to_utm(37.5, 10.0)
        south = ll_to_utm(-37.5, 10.0)

        self.assertAlmostEqual(north.easting, south.easting, delta=1e-6)
        self.assertAlmostEqual(north.northing + south.northing, 10000000.0, delta=1e-6)

    def test_longitude_normalized_before_projection(self) -> None:
        """Test that longitudes outside [-180, 180) project like their wrapped value."""
        a = ll_to_utm(10.0, 190.0)
        b = ll_to_utm(10.0, -170.0)

        self.assertEqual(a.zone, b.zone)
        self.assertAlmostEqual(a.easting, b.easting, delta=1e-9)
        self.assertAlmostEqual(a.northing, b.northing, delta=1e-9)

    def test_latitude_out_of_band_rejected(self) -> None:
        """Test that latitudes outside [-80, 84] raise InvalidLatitudeError."""
        for lat in (84.0001, -80.0001, 90.0, -90.0):
            with self.assertRaises(InvalidLatitudeError):
                ll_to_utm(lat, 0.0)

    def test_invalid_latitude_is_value_error(self) -> None:
        """Test that InvalidLatitudeError is also a ValueError."""
        with self.assertRaises(ValueError):
            ll_to_utm(85.0, 0.0)

    def test_band_edges_accepted(self) -> None:
        """Test that the band limits themselves are valid."""
        self.assertEqual(ll_to_utm(84.0, 0.5).zone, "31X")
        self.assertEqual(ll_to_utm(-80.0, 0.5).zone, "31C")

    def test_non_finite_rejected(self) -> None:
        """Test that NaN/inf inputs raise NonFiniteInputError."""
        with self.assertRaises(NonFiniteInputError):
            ll_to_utm(np.nan, 0.0)
        with self.assertRaises(NonFiniteInputError):
            ll_to_utm(10.0, np.inf)


class TestZones(unittest.TestCase):
    """Test cases for zone numbers and band letters."""

    def test_normalize_longitude(self) -> None:
        """Test wrapping into [-180, 180)."""
        self.assertEqual(normalize_longitude(180.0), -180.0)
        self.assertEqual(normalize_longitude(-180.0), -180.0)
        self.assertEqual(normalize_longitude(190.0), -170.0)
        self.assertEqual(normalize_longitude(-190.0), 170.0)
        self.assertEqual(normalize_longitude(540.0), -180.0)
        self.assertEqual(normalize_longitude(12.5), 12.5)

    def test_zone_number_regular(self) -> None:
        """Test the 6-degree partition."""
        self.assertEqual(utm_zone_number(0.0, -180.0), 1)
        self.assertEqual(utm_zone_number(0.0, -174.0), 2)
        self.assertEqual(utm_zone_number(0.0, 179.9), 60)
        self.assertEqual(utm_zone_number(0.0, 180.0), 1)
        self.assertEqual(utm_zone_number(45.0, -93.0), 15)

    def test_zone_number_norway(self) -> None:
        """Test the south-western Norway exception (zone 32V widened)."""
        self.assertEqual(utm_zone_number(60.0, 5.0), 32)
        self.assertEqual(utm_zone_number(60.0, 2.0), 31)
        self.assertEqual(utm_zone_number(55.0, 5.0), 31)

    def test_zone_number_svalbard(self) -> None:
        """Test the Svalbard exceptions (zones 32X, 34X, 36X unused)."""
        self.assertEqual(utm_zone_number(78.0, 8.0), 31)
        self.assertEqual(utm_zone_number(78.0, 10.0), 33)
        self.assertEqual(utm_zone_number(78.0, 25.0), 35)
        self.assertEqual(utm_zone_number(78.0, 40.0), 37)
        self.assertEqual(utm_zone_number(78.0, 45.0), 38)

    def test_band_letters(self) -> None:
        """Test latitude band letters, including the stretched X band."""
        self.assertEqual(utm_band_letter(-80.0), "C")
        self.assertEqual(utm_band_letter(-0.1), "M")
        self.assertEqual(utm_band_letter(0.0), "N")
        self.assertEqual(utm_band_letter(45.0), "T")
        self.assertEqual(utm_band_letter(72.0), "X")
        self.assertEqual(utm_band_letter(84.0), "X")

    def test_central_meridian(self) -> None:
        """Test central meridians at both ends and middle of the zone range."""
        self.assertEqual(central_meridian(1), -177.0)
        self.assertEqual(central_meridian(15), -93.0)
        self.assertEqual(central_meridian(31), 3.0)
        self.assertEqual(central_meridian(60), 177.0)
        for zone in (1, 15, 31, 60):
            self.assertEqual(utm_zone_number(0.0, central_meridian(zone)), zone)

    def test_parse_zone(self) -> None:
        """Test zone designator parsing."""
        self.assertEqual(parse_utm_zone("15T"), (15, "T"))
        self.assertEqual(parse_utm_zone("5n"), (5, "N"))
        self.assertEqual(parse_utm_zone(" 60X "), (60, "X"))

    def test_parse_zone_rejects_malformed(self) -> None:
        """Test that malformed designators raise ValueError."""
        for zone in ("", "T15", "61N", "0N", "15I", "15O", "15Z", "15"):
            with self.assertRaises(ValueError):
                parse_utm_zone(zone)

    def test_utm_point_properties(self) -> None:
        """Test UtmPoint zone accessors."""
        north = UtmPoint(500000.0, 100.0, "15T")
        south = UtmPoint(500000.0, 100.0, "56H")

        self.assertEqual(north.zone_number, 15)
        self.assertEqual(north.band, "T")
        self.assertTrue(north.is_northern)
        self.assertFalse(south.is_northern)


class TestUTMtoLL(unittest.TestCase):
    """Test cases for inverse projection and round trips."""

    def test_reference_point(self) -> None:
        """Test inverse of the 45°N central meridian point."""
        geo = utm_to_ll(500000.0, NORTHING_45N, "15T")

        self.assertIsInstance(geo, GeoPoint)
        self.assertAlmostEqual(geo.latitude, 45.0, delta=1e-7)
        self.assertAlmostEqual(geo.longitude, -93.0, delta=1e-9)

    def test_southern_zone_letter_selects_hemisphere(self) -> None:
        """Test that a southern band letter removes the false northing."""
        geo = utm_to_ll(500000.0, 10000000.0 - NORTHING_45N, "15G")

        self.assertAlmostEqual(geo.latitude, -45.0, delta=1e-7)

    def test_non_finite_rejected(self) -> None:
        """Test that NaN UTM inputs raise NonFiniteInputError."""
        with self.assertRaises(NonFiniteInputError):
            utm_to_ll(np.nan, 0.0, "31N")

    def test_round_trip_random(self) -> None:
        """Test LL -> UTM -> LL over the full validity band (1e-7 deg)."""
        rng = np.random.default_rng(7)
        lats = rng.uniform(-80.0, 84.0, 500)
        lons = rng.uniform(-180.0, 180.0, 500)

        for lat, lon in zip(lats, lons):
            utm = ll_to_utm(lat, lon)
            geo = utm_to_ll(utm.easting, utm.northing, utm.zone)

            self.assertLess(abs(geo.latitude - lat), 1e-7, msg=f"lat={lat}, lon={lon}")
            dlon = normalize_longitude(geo.longitude - lon)
            self.assertLess(abs(dlon), 1e-7, msg=f"lat={lat}, lon={lon}")

    def test_round_trip_just_south_of_equator(self) -> None:
        """Test that latitudes rounding into band N keep their hemisphere."""
        for lat in (-1e-15, -1e-12, -0.0, 1e-15):
            utm = ll_to_utm(lat, 3.0)
            geo = utm_to_ll(utm.easting, utm.northing, utm.zone)

            self.assertEqual(utm.zone, "31N", msg=f"lat={lat}")
            self.assertAlmostEqual(utm.northing, 0.0, delta=1e-3, msg=f"lat={lat}")
            self.assertLess(abs(geo.latitude - lat), 1e-9, msg=f"lat={lat}")

    def test_southern_band_keeps_false_northing(self) -> None:
        """Test that the first southern band still carries the false northing."""
        utm = ll_to_utm(-1e-6, 3.0)

        self.assertEqual(utm.zone, "31M")
        self.assertAlmostEqual(utm.northing, 10000000.0, delta=1.0)
        geo = utm_to_ll(utm.easting, utm.northing, utm.zone)
        self.assertLess(abs(geo.latitude + 1e-6), 1e-9)

    def test_round_trip_zone_edges_and_exceptions(self) -> None:
        """Test round trips at zone boundaries, band limits and exception zones."""
        points = [
            (84.0, 0.0),
            (-80.0, -180.0),
            (0.0, 179.999999),
            (-0.000001, -177.0),
            (60.0, 3.0),
            (63.9, 11.99),
            (72.0, 0.0),
            (83.9, 41.99),
            (78.0, 9.0),
        ]
        for lat, lon in points:
            utm = ll_to_utm(lat, lon)
            geo = utm_to_ll(utm.easting, utm.northing, utm.zone)

            self.assertLess(abs(geo.latitude - lat), 1e-7, msg=f"lat={lat}, lon={lon}")
            dlon = normalize_longitude(geo.longitude - lon)
            self.assertLess(abs(dlon), 1e-7, msg=f"lat={lat}, lon={lon}")


if __name__ == "__main__":
    unittest.main()
