"""Unit tests for relay sample types."""

import numpy as np
import pytest

from geonav.coords.frames import FrameId, FrameType
from geonav.coords.rigid import RigidTransform
from geonav.coords.utm import GeoPoint
from geonav.relay.types import PoseSample, RelayOutput, Twist


class TestTwist:
    def test_defaults(self):
        twist = Twist()
        np.testing.assert_array_equal(twist.linear, np.zeros(3))
        assert twist.covariance.shape == (6, 6)

    def test_bad_shapes(self):
        with pytest.raises(ValueError):
            Twist(linear=np.zeros(2))
        with pytest.raises(ValueError):
            Twist(covariance=np.eye(3))

    def test_read_only(self):
        twist = Twist(linear=np.array([1.0, 0.0, 0.0]))
        with pytest.raises(ValueError):
            twist.linear[0] = 2.0


class TestPoseSample:
    def test_geodetic_constructor(self):
        sample = PoseSample.geodetic(
            stamp=12.5, latitude=45.0, longitude=-93.0, altitude=10.0, frame_name="gps"
        )
        assert sample.frame_id == FrameId("gps", FrameType.GEODETIC)
        assert sample.stamp == 12.5
        assert sample.geo_point == GeoPoint(45.0, -93.0, 10.0)
        np.testing.assert_array_equal(sample.orientation, [1.0, 0.0, 0.0, 0.0])
        np.testing.assert_array_equal(sample.covariance, np.zeros((6, 6)))

    def test_covariance_validated(self):
        asym = np.eye(6)
        asym[0, 5] = 1.0
        with pytest.raises(ValueError):
            PoseSample.geodetic(stamp=0.0, latitude=45.0, longitude=-93.0, covariance=asym)
        with pytest.raises(ValueError):
            PoseSample.geodetic(stamp=0.0, latitude=45.0, longitude=-93.0, covariance=np.eye(3))

    def test_covariance_copied_and_read_only(self):
        cov = np.eye(6)
        sample = PoseSample.geodetic(stamp=0.0, latitude=45.0, longitude=-93.0, covariance=cov)
        cov[0, 0] = 100.0
        assert sample.covariance[0, 0] == 1.0
        with pytest.raises(ValueError):
            sample.covariance[0, 0] = 2.0

    def test_type_checks(self):
        with pytest.raises(TypeError):
            PoseSample(frame_id="gps", stamp=0.0, transform=RigidTransform())
        with pytest.raises(TypeError):
            PoseSample(frame_id=FrameId("gps", FrameType.GEODETIC), stamp="now", transform=RigidTransform())
        with pytest.raises(TypeError):
            PoseSample(frame_id=FrameId("gps", FrameType.GEODETIC), stamp=0.0, transform=np.zeros(3))

    def test_geo_point_requires_geodetic_frame(self):
        sample = PoseSample(FrameId("odom", FrameType.WORLD), 0.0, RigidTransform([1.0, 2.0, 3.0]))
        with pytest.raises(ValueError):
            sample.geo_point

    def test_with_pose_keeps_metadata(self):
        twist = Twist(linear=np.array([1.0, 0.0, 0.0]))
        sample = PoseSample.geodetic(
            stamp=3.0, latitude=45.0, longitude=-93.0, twist=twist, child_frame_id="base_link"
        )
        moved = sample.with_pose(FrameId("odom", FrameType.WORLD), RigidTransform([1.0, 2.0, 3.0]))

        assert moved.stamp == 3.0
        assert moved.twist is twist
        assert moved.child_frame_id == "base_link"
        np.testing.assert_array_equal(moved.covariance, sample.covariance)
        np.testing.assert_array_equal(moved.position, [1.0, 2.0, 3.0])
        assert sample.frame_id.frame_type == FrameType.GEODETIC

    def test_relay_output_order(self):
        a = PoseSample(FrameId("utm", FrameType.UTM), 0.0, RigidTransform())
        b = PoseSample(FrameId("odom", FrameType.WORLD), 0.0, RigidTransform())
        assert RelayOutput(a, b).as_list() == [a, b]
