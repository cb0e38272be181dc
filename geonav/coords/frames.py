"""Coordinate frame identifiers for the geodetic frame relay.

Frames handled by the relay:
- GEODETIC: Latitude-Longitude-Altitude on the WGS84 ellipsoid
- UTM: Universal Transverse Mercator easting/northing/altitude
- WORLD: Local tangent frame anchored at the datum (a.k.a. "odom")
- SENSOR: Frame of the navigation sensor producing the measurement
- BODY: Vehicle frame (a.k.a. "base_link")

Frame names follow tf2 conventions: no leading slash, optional prefix
separated by a single slash.
"""

from enum import Enum
from typing import NamedTuple


class FrameType(Enum):
    """Enumeration of frame kinds understood by the relay.

    Attributes:
        GEODETIC: Latitude/longitude/altitude measurements.
        UTM: Projected UTM plane.
        WORLD: Datum-anchored local frame.
        SENSOR: Navigation sensor frame.
        BODY: Vehicle body frame.
    """

    GEODETIC = "geodetic"
    UTM = "utm"
    WORLD = "world"
    SENSOR = "sensor"
    BODY = "body"


def append_prefix(prefix: str, name: str) -> str:
    """Prepend a tf prefix to a frame name.

    Leading slashes are stripped from both parts. An empty prefix leaves
    the name unchanged.

    Args:
        prefix: tf prefix (e.g. "robot1" or "/robot1").
        name: Frame name (e.g. "odom").

    Returns:
        Prefixed frame name, e.g. "robot1/odom".

    Example:
        >>> append_prefix("/robot1", "/odom")
        'robot1/odom'
        >>> append_prefix("", "odom")
        'odom'
    """
    name = name.lstrip("/")
    prefix = prefix.lstrip("/")
    if prefix:
        return f"{prefix}/{name}"
    return name


class FrameId(NamedTuple):
    """Explicit frame identifier attached to every pose sample.

    Attributes:
        name: tf-style frame name. May be empty for sensors that do not
              report their mounting frame.
        frame_type: Kind of frame the name refers to.
    """

    name: str
    frame_type: FrameType

    def with_prefix(self, prefix: str) -> "FrameId":
        """Return the same frame with a tf prefix applied."""
        return FrameId(append_prefix(prefix, self.name), self.frame_type)

    def __repr__(self) -> str:
        """Return string representation of frame."""
        return f"FrameId({self.frame_type.value}: {self.name!r})"


# Common frame definitions
UTM_FRAME = FrameId("utm", FrameType.UTM)

WORLD_FRAME = FrameId("odom", FrameType.WORLD)

BASE_LINK_FRAME = FrameId("base_link", FrameType.BODY)
