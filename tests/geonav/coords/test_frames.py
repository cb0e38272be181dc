"""Unit tests for frame identifiers."""

import unittest

from geonav.coords.frames import (
    BASE_LINK_FRAME,
    UTM_FRAME,
    WORLD_FRAME,
    FrameId,
    FrameType,
    append_prefix,
)


class TestAppendPrefix(unittest.TestCase):
    def test_prefix(self):
        self.assertEqual(append_prefix("robot1", "odom"), "robot1/odom")

    def test_leading_slashes_stripped(self):
        self.assertEqual(append_prefix("/robot1", "/odom"), "robot1/odom")
        self.assertEqual(append_prefix("", "/odom"), "odom")

    def test_empty_prefix(self):
        self.assertEqual(append_prefix("", "base_link"), "base_link")


class TestFrameId(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(UTM_FRAME, FrameId("utm", FrameType.UTM))
        self.assertEqual(WORLD_FRAME.name, "odom")
        self.assertEqual(WORLD_FRAME.frame_type, FrameType.WORLD)
        self.assertEqual(BASE_LINK_FRAME.frame_type, FrameType.BODY)

    def test_with_prefix_keeps_type(self):
        frame = WORLD_FRAME.with_prefix("robot1")
        self.assertEqual(frame.name, "robot1/odom")
        self.assertEqual(frame.frame_type, FrameType.WORLD)

    def test_type_distinguishes_frames(self):
        self.assertNotEqual(FrameId("gps", FrameType.SENSOR), FrameId("gps", FrameType.GEODETIC))

    def test_repr(self):
        self.assertEqual(repr(UTM_FRAME), "FrameId(utm: 'utm')")


if __name__ == "__main__":
    unittest.main()
