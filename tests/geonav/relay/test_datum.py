"""Unit tests for Datum and DatumRegistry."""

import dataclasses
import threading

import numpy as np
import pytest

from geonav.coords.frames import FrameId, FrameType
from geonav.coords.rigid import compose, rotation_angle_between
from geonav.coords.rotations import euler_to_quat
from geonav.coords.utm import ll_to_utm
from geonav.errors import DatumNotSetError, InvalidLatitudeError, NonFiniteInputError
from geonav.relay.datum import Datum, DatumRegistry


class TestDatum:
    def test_from_geodetic(self):
        datum = Datum.from_geodetic(45.0, -93.0, 12.0)
        utm = ll_to_utm(45.0, -93.0)

        assert datum.utm_zone == "15T"
        np.testing.assert_allclose(
            datum.world_to_utm.translation, [utm.easting, utm.northing, 12.0]
        )
        np.testing.assert_allclose(datum.orientation, [1.0, 0.0, 0.0, 0.0])
        assert datum.geo_point.altitude == 12.0

    def test_transforms_are_inverse(self):
        datum = Datum.from_geodetic(-33.8688, 151.2093, 5.0, euler_to_quat(0.0, 0.0, 0.7))
        I = compose(datum.world_to_utm, datum.utm_to_world)
        np.testing.assert_allclose(I.translation, np.zeros(3), atol=1e-6)
        assert rotation_angle_between(I) < 1e-12

    def test_origin_maps_to_datum(self):
        datum = Datum.from_geodetic(60.3913, 5.3221)
        assert datum.utm_zone == "32V"
        np.testing.assert_allclose(
            datum.world_to_utm.apply(np.zeros(3)), datum.world_to_utm.translation
        )

    def test_deterministic(self):
        a = Datum.from_geodetic(45.0, -93.0)
        b = Datum.from_geodetic(45.0, -93.0)
        np.testing.assert_array_equal(a.world_to_utm.translation, b.world_to_utm.translation)
        np.testing.assert_array_equal(a.utm_to_world.translation, b.utm_to_world.translation)

    def test_immutable(self):
        datum = Datum.from_geodetic(45.0, -93.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            datum.utm_point = None

    def test_invalid_latitude(self):
        with pytest.raises(InvalidLatitudeError):
            Datum.from_geodetic(85.0, 0.0)
        with pytest.raises(NonFiniteInputError):
            Datum.from_geodetic(np.nan, 0.0)

    def test_static_transform(self):
        datum = Datum.from_geodetic(45.0, -93.0, 7.0)
        static = datum.static_transform()

        assert static.parent_frame == FrameId("utm", FrameType.UTM)
        assert static.child_frame == FrameId("odom", FrameType.WORLD)
        np.testing.assert_array_equal(
            static.transform.translation, datum.world_to_utm.translation
        )

    def test_static_transform_zero_altitude(self):
        datum = Datum.from_geodetic(45.0, -93.0, 7.0)
        static = datum.static_transform(zero_altitude=True)

        assert static.transform.translation[2] == 0.0
        assert datum.world_to_utm.translation[2] == 7.0

    def test_describe(self):
        text = Datum.from_geodetic(45.0, -93.0).describe()
        assert "15T" in text
        assert "45.00000000" in text


class TestDatumRegistry:
    def test_unset(self):
        registry = DatumRegistry()
        assert not registry.is_set
        with pytest.raises(DatumNotSetError):
            registry.datum

    def test_datum_not_set_is_runtime_error(self):
        with pytest.raises(RuntimeError):
            DatumRegistry().datum

    def test_set(self):
        registry = DatumRegistry()
        datum = registry.set_datum(45.0, -93.0)
        assert registry.is_set
        assert registry.datum is datum

    def test_reset_replaces_datum(self):
        registry = DatumRegistry()
        registry.set_datum(45.0, -93.0)
        second = registry.set_datum(-33.8688, 151.2093)

        assert registry.datum is second
        assert registry.datum.utm_zone == "56H"

    def test_failed_set_keeps_previous(self):
        registry = DatumRegistry()
        with pytest.raises(InvalidLatitudeError):
            registry.set_datum(89.0, 0.0)
        assert not registry.is_set

        first = registry.set_datum(45.0, -93.0)
        with pytest.raises(InvalidLatitudeError):
            registry.set_datum(-85.0, 0.0)
        assert registry.datum is first

    @pytest.mark.parametrize(
        "altitude, orientation",
        [
            (np.nan, None),
            (np.inf, None),
            (0.0, [np.nan, 0.0, 0.0, 0.0]),
            (0.0, [1.0, 0.0, np.inf, 0.0]),
        ],
    )
    def test_non_finite_set_keeps_previous(self, altitude, orientation):
        registry = DatumRegistry()
        first = registry.set_datum(45.0, -93.0)

        with pytest.raises(NonFiniteInputError):
            registry.set_datum(45.0, -93.0, altitude, orientation)

        assert registry.datum is first
        assert np.all(np.isfinite(registry.datum.utm_to_world.translation))

    def test_initial_datum(self):
        datum = Datum.from_geodetic(45.0, -93.0)
        registry = DatumRegistry(datum)
        assert registry.is_set
        assert registry.datum is datum

    def test_publish_rejects_other_types(self):
        with pytest.raises(TypeError):
            DatumRegistry().publish((45.0, -93.0))

    def test_wait_timeout(self):
        with pytest.raises(DatumNotSetError):
            DatumRegistry().wait(timeout=0.01)

    def test_wait_returns_when_set(self):
        registry = DatumRegistry()
        result = {}

        def reader():
            result["datum"] = registry.wait(timeout=5.0)

        thread = threading.Thread(target=reader)
        thread.start()
        datum = registry.set_datum(45.0, -93.0)
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert result["datum"] is datum

    def test_concurrent_readers_see_complete_datum(self):
        registry = DatumRegistry()
        registry.set_datum(45.0, -93.0)
        zones = set()

        def writer():
            for i in range(50):
                registry.set_datum(45.0 if i % 2 else -33.8688, -93.0 if i % 2 else 151.2093)

        def reader():
            for _ in range(200):
                datum = registry.datum
                zones.add((datum.utm_zone, datum.utm_point.zone))

        threads = [threading.Thread(target=writer)] + [
            threading.Thread(target=reader) for _ in range(3)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(a == b for a, b in zones)
        assert {z for z, _ in zones} <= {"15T", "56H"}
