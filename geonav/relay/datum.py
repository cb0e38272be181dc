"""Datum: the fixed anchor between the UTM and world frames.

The world frame is a local Cartesian frame whose origin sits at the UTM
projection of a configured geodetic point. The relationship is held in
an immutable ``Datum`` value:

    world_to_utm: T_utm_world, maps world coordinates into UTM
    utm_to_world: its inverse

``DatumRegistry`` is the single mutation point. It starts Unset; once a
datum is set, every reader sees a complete ``Datum`` (never a partially
written one). Re-setting replaces the value wholesale.
"""

import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from geonav.coords.frames import UTM_FRAME, WORLD_FRAME, FrameId
from geonav.coords.rigid import RigidTransform, invert
from geonav.coords.rotations import IDENTITY_QUAT
from geonav.coords.utm import GeoPoint, UtmPoint, ll_to_utm
from geonav.errors import DatumNotSetError, NonFiniteInputError
from geonav.relay.types import StaticFrameTransform


@dataclass(frozen=True, eq=False)
class Datum:
    """Immutable UTM ↔ world anchor.

    Attributes:
        geo_point: Configured geodetic datum.
        utm_point: UTM projection of the datum.
        orientation: Orientation of the world frame in UTM [qw, qx, qy, qz].
        world_to_utm: Transform mapping world coordinates into UTM.
        utm_to_world: Inverse of ``world_to_utm``.

    Example:
        >>> datum = Datum.from_geodetic(45.0, -93.0)
        >>> datum.utm_point.zone
        '15T'
        >>> datum.utm_to_world.apply(datum.world_to_utm.translation)
        array([0., 0., 0.])
    """

    geo_point: GeoPoint
    utm_point: UtmPoint
    orientation: np.ndarray
    world_to_utm: RigidTransform
    utm_to_world: RigidTransform

    @classmethod
    def from_geodetic(
        cls,
        latitude: float,
        longitude: float,
        altitude: float = 0.0,
        orientation: Optional[Sequence[float]] = None,
    ) -> "Datum":
        """Project a geodetic datum and derive both frame transforms.

        Args:
            latitude: Datum latitude in degrees.
            longitude: Datum longitude in degrees.
            altitude: Datum altitude in meters.
            orientation: World-frame orientation in UTM; identity if omitted.

        Raises:
            InvalidLatitudeError: If latitude is outside the UTM band.
            NonFiniteInputError: If any coordinate or the orientation is
                                 not finite.
        """
        if orientation is None:
            orientation = IDENTITY_QUAT
        orientation = np.asarray(orientation, dtype=np.float64)
        if not (np.isfinite(altitude) and np.all(np.isfinite(orientation))):
            raise NonFiniteInputError(
                f"Non-finite datum: altitude={altitude}, orientation={orientation}"
            )

        utm_point = ll_to_utm(latitude, longitude)
        world_to_utm = RigidTransform(
            np.array([utm_point.easting, utm_point.northing, altitude], dtype=np.float64),
            orientation,
        )
        return cls(
            geo_point=GeoPoint(float(latitude), float(longitude), float(altitude)),
            utm_point=utm_point,
            orientation=world_to_utm.rotation,
            world_to_utm=world_to_utm,
            utm_to_world=invert(world_to_utm),
        )

    @property
    def utm_zone(self) -> str:
        """Zone designator of the datum."""
        return self.utm_point.zone

    def static_transform(
        self,
        world_frame: FrameId = WORLD_FRAME,
        utm_frame: FrameId = UTM_FRAME,
        zero_altitude: bool = False,
    ) -> StaticFrameTransform:
        """The fixed UTM ← world relationship, ready for publication.

        Args:
            world_frame: Name of the world frame.
            utm_frame: Name of the UTM frame.
            zero_altitude: Drop the datum altitude from the translation.
        """
        transform = self.world_to_utm
        if zero_altitude:
            translation = transform.translation.copy()
            translation[2] = 0.0
            transform = transform.with_translation(translation)
        return StaticFrameTransform(
            parent_frame=utm_frame,
            child_frame=world_frame,
            transform=transform,
        )

    def describe(self) -> str:
        """Multi-line human-readable summary."""
        roll, pitch, yaw = np.rad2deg(self.world_to_utm.euler)
        return (
            f"Datum (lat, lon, alt): ({self.geo_point.latitude:.8f}, "
            f"{self.geo_point.longitude:.8f}, {self.geo_point.altitude:.3f})\n"
            f"Datum UTM ({self.utm_zone}): ({self.utm_point.easting:.3f}, "
            f"{self.utm_point.northing:.3f})\n"
            f"Datum orientation (roll, pitch, yaw) deg: "
            f"({roll:.3f}, {pitch:.3f}, {yaw:.3f})"
        )


class DatumRegistry:
    """Set-once (re-settable) holder of the current Datum.

    States: Unset → Set. There is no transition back to Unset.

    Writers are serialized by a lock; readers take a reference to the
    current immutable ``Datum`` and never lock. ``wait`` blocks readers
    until the first datum is published.

    Example:
        >>> registry = DatumRegistry()
        >>> registry.is_set
        False
        >>> _ = registry.set_datum(45.0, -93.0)
        >>> registry.datum.utm_zone
        '15T'
    """

    def __init__(self, datum: Optional[Datum] = None):
        """Initialize registry, optionally already Set with ``datum``."""
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._datum: Optional[Datum] = None
        if datum is not None:
            self.publish(datum)

    @property
    def is_set(self) -> bool:
        """True once a datum has been published."""
        return self._ready.is_set()

    @property
    def datum(self) -> Datum:
        """Current datum.

        Raises:
            DatumNotSetError: If no datum has been set yet.
        """
        datum = self._datum
        if datum is None:
            raise DatumNotSetError("Datum has not been set; call set_datum() first")
        return datum

    def set_datum(
        self,
        latitude: float,
        longitude: float,
        altitude: float = 0.0,
        orientation: Optional[Sequence[float]] = None,
    ) -> Datum:
        """Compute and publish a new datum.

        On failure (e.g. invalid latitude) the previous state is kept.

        Returns:
            The published Datum.
        """
        datum = Datum.from_geodetic(latitude, longitude, altitude, orientation)
        return self.publish(datum)

    def publish(self, datum: Datum) -> Datum:
        """Publish an already-built datum."""
        if not isinstance(datum, Datum):
            raise TypeError(f"Expected Datum, got {type(datum)}")
        with self._lock:
            self._datum = datum
            self._ready.set()
        return datum

    def wait(self, timeout: Optional[float] = None) -> Datum:
        """Block until a datum is set.

        Raises:
            DatumNotSetError: If the timeout expires first.
        """
        if not self._ready.wait(timeout):
            raise DatumNotSetError(f"Datum was not set within {timeout} s")
        return self.datum
