"""Data types carried through the frame-relay pipeline.

Key types:
    - Twist: Linear/angular velocity with covariance (passed through)
    - PoseSample: Stamped pose + 6x6 covariance in an explicit frame
    - RelayOutput: The UTM-frame and world-frame samples from one input
    - StaticFrameTransform: Fixed parent/child frame relationship

For GEODETIC-frame samples the transform translation holds
[latitude (deg), longitude (deg), altitude (m)]; in every other frame it
is a Cartesian position in meters.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

import numpy as np

from geonav.coords.covariance import POSE_SIZE, validate_covariance
from geonav.coords.frames import FrameId, FrameType
from geonav.coords.rigid import RigidTransform
from geonav.coords.rotations import IDENTITY_QUAT
from geonav.coords.utm import GeoPoint


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Twist:
    """Velocity of the measured body, relayed without transformation.

    Attributes:
        linear: Linear velocity, shape (3,). Units: m/s.
        angular: Angular velocity, shape (3,). Units: rad/s.
        covariance: 6x6 twist covariance.
    """

    linear: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular: np.ndarray = field(default_factory=lambda: np.zeros(3))
    covariance: np.ndarray = field(default_factory=lambda: np.zeros((POSE_SIZE, POSE_SIZE)))

    def __post_init__(self) -> None:
        """Validate shapes."""
        for name in ("linear", "angular"):
            value = np.asarray(getattr(self, name))
            if value.shape != (3,):
                raise ValueError(f"Twist.{name} must have shape (3,), got {value.shape}")
            object.__setattr__(self, name, _readonly(value))

        covariance = np.asarray(self.covariance)
        if covariance.shape != (POSE_SIZE, POSE_SIZE):
            raise ValueError(
                f"Twist.covariance must have shape (6, 6), got {covariance.shape}"
            )
        object.__setattr__(self, "covariance", _readonly(covariance))


@dataclass(frozen=True, eq=False)
class PoseSample:
    """A single stamped pose measurement with uncertainty.

    Samples are disposable values: every pipeline stage creates new ones
    instead of mutating its input.

    Attributes:
        frame_id: Frame the pose is expressed in.
        stamp: Measurement time in seconds.
        transform: Pose of the measured body in ``frame_id``.
        covariance: 6x6 pose covariance (x, y, z, roll, pitch, yaw).
        twist: Velocity and its covariance.
        child_frame_id: Frame of the measured body (may be empty).

    Example:
        >>> sample = PoseSample.geodetic(
        ...     stamp=12.5, latitude=45.0, longitude=-93.0, altitude=10.0
        ... )
        >>> sample.geo_point
        GeoPoint(latitude=45.0, longitude=-93.0, altitude=10.0)
    """

    frame_id: FrameId
    stamp: float
    transform: RigidTransform
    covariance: np.ndarray = field(default_factory=lambda: np.zeros((POSE_SIZE, POSE_SIZE)))
    twist: Twist = field(default_factory=Twist)
    child_frame_id: str = ""

    def __post_init__(self) -> None:
        """Validate frame, stamp and covariance."""
        if not isinstance(self.frame_id, FrameId):
            raise TypeError(f"frame_id must be a FrameId, got {type(self.frame_id)}")
        if not isinstance(self.stamp, (float, int)):
            raise TypeError(f"Stamp must be numeric, got {type(self.stamp)}")
        if not isinstance(self.transform, RigidTransform):
            raise TypeError(f"transform must be a RigidTransform, got {type(self.transform)}")

        object.__setattr__(self, "covariance", _readonly(validate_covariance(self.covariance)))

    @classmethod
    def geodetic(
        cls,
        stamp: float,
        latitude: float,
        longitude: float,
        altitude: float = 0.0,
        orientation: Optional[Sequence[float]] = None,
        covariance: Optional[np.ndarray] = None,
        twist: Optional[Twist] = None,
        frame_name: str = "",
        child_frame_id: str = "",
    ) -> "PoseSample":
        """Build a GEODETIC-frame sample from latitude/longitude/altitude.

        Args:
            stamp: Measurement time in seconds.
            latitude: Latitude in degrees.
            longitude: Longitude in degrees.
            altitude: Altitude in meters.
            orientation: Unit quaternion [qw, qx, qy, qz]; identity if omitted.
            covariance: 6x6 pose covariance; zeros if omitted.
            twist: Velocity; zeros if omitted.
            frame_name: Frame name reported by the navigation sensor.
            child_frame_id: Frame of the measured body.
        """
        if orientation is None:
            orientation = IDENTITY_QUAT
        return cls(
            frame_id=FrameId(frame_name, FrameType.GEODETIC),
            stamp=stamp,
            transform=RigidTransform(
                np.array([latitude, longitude, altitude], dtype=np.float64),
                np.asarray(orientation, dtype=np.float64),
            ),
            covariance=np.zeros((POSE_SIZE, POSE_SIZE)) if covariance is None else covariance,
            twist=Twist() if twist is None else twist,
            child_frame_id=child_frame_id,
        )

    @property
    def position(self) -> np.ndarray:
        """Translation of the pose, shape (3,)."""
        return self.transform.translation

    @property
    def orientation(self) -> np.ndarray:
        """Orientation quaternion [qw, qx, qy, qz]."""
        return self.transform.rotation

    @property
    def geo_point(self) -> GeoPoint:
        """Position as a GeoPoint (GEODETIC/SENSOR frames only).

        Raises:
            ValueError: If the sample is in a Cartesian frame.
        """
        if self.frame_id.frame_type not in (FrameType.GEODETIC, FrameType.SENSOR):
            raise ValueError(f"Sample in {self.frame_id!r} has no geodetic position")
        lat, lon, alt = self.position
        return GeoPoint(float(lat), float(lon), float(alt))

    def with_pose(
        self,
        frame_id: FrameId,
        transform: RigidTransform,
        covariance: Optional[np.ndarray] = None,
    ) -> "PoseSample":
        """Copy with a new frame and pose; stamp, twist and child frame kept."""
        if covariance is None:
            covariance = self.covariance
        return replace(self, frame_id=frame_id, transform=transform, covariance=covariance)


@dataclass(frozen=True)
class RelayOutput:
    """Samples derived from one input measurement.

    Attributes:
        utm: Pose in the UTM frame.
        world: Pose in the datum-anchored world frame.
    """

    utm: PoseSample
    world: PoseSample

    def as_list(self) -> list:
        """[utm, world] in publication order."""
        return [self.utm, self.world]


@dataclass(frozen=True)
class StaticFrameTransform:
    """A fixed relationship between two named frames.

    ``transform`` maps coordinates in ``child_frame`` into
    ``parent_frame`` (tf convention).

    Attributes:
        parent_frame: Frame the transform maps into.
        child_frame: Frame the transform maps from.
        transform: Rigid transform T_parent_child.
    """

    parent_frame: FrameId
    child_frame: FrameId
    transform: RigidTransform
