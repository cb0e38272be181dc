"""Frame-relay pipeline: geodetic measurements → UTM and world frames.

For each incoming geodetic pose sample the relay

1. rejects non-finite positions,
2. projects latitude/longitude to UTM and builds the sensor pose in UTM
   (orientation passed through from the measurement),
3. rotates the pose covariance by the inverse of the datum world→UTM
   rotation (the same fixed rotation for every sample),
4. emits the UTM-frame sample,
5. composes the datum utm→world transform with the sensor pose and emits
   the world-frame sample with the same covariance.

Both outputs carry the input timestamp so consumers can correlate them.
Twist is relayed verbatim.

Example:
    >>> relay = FrameRelay(Datum.from_geodetic(45.0, -93.0))
    >>> sample = PoseSample.geodetic(stamp=1.0, latitude=45.0,
    ...                              longitude=-93.0, altitude=10.0)
    >>> out = relay.relay(sample)
    >>> np.round(out.world.position, 6)
    array([ 0.,  0., 10.])
"""

import warnings
from typing import Iterable, Iterator, List, Optional, Union

import numpy as np

from geonav.coords.covariance import rotate_covariance
from geonav.coords.frames import UTM_FRAME, WORLD_FRAME, FrameId, FrameType
from geonav.coords.rigid import RigidTransform, compose, invert
from geonav.coords.utm import ll_to_utm
from geonav.errors import InvalidLatitudeError, NonFiniteInputError
from geonav.relay.datum import Datum, DatumRegistry
from geonav.relay.types import PoseSample, RelayOutput

_INPUT_FRAME_TYPES = (FrameType.GEODETIC, FrameType.SENSOR)


class FrameRelay:
    """Relay geodetic pose samples into the UTM and world frames.

    The relay reads the datum from a ``DatumRegistry`` on every call and
    holds no other mutable state besides diagnostic counters.

    Attributes:
        world_frame: Frame id stamped on world-frame outputs.
        utm_frame: Frame id stamped on UTM-frame outputs.
        zero_altitude: Force z = 0 on both outputs.
        n_relayed: Number of samples relayed by ``process``.
        n_dropped: Number of samples dropped by ``process``.
        last_error: Error that caused the most recent drop, if any.
    """

    def __init__(
        self,
        datum_source: Union[Datum, DatumRegistry],
        world_frame: FrameId = WORLD_FRAME,
        utm_frame: FrameId = UTM_FRAME,
        zero_altitude: bool = False,
    ):
        """Initialize relay.

        Args:
            datum_source: A fixed Datum, or a registry that may still be
                          Unset (conversions then raise DatumNotSetError).
            world_frame: Frame id for world-frame outputs.
            utm_frame: Frame id for UTM-frame outputs.
            zero_altitude: Force z = 0 on both outputs.
        """
        if isinstance(datum_source, Datum):
            datum_source = DatumRegistry(datum_source)
        if not isinstance(datum_source, DatumRegistry):
            raise TypeError(f"Expected Datum or DatumRegistry, got {type(datum_source)}")
        if world_frame.frame_type != FrameType.WORLD:
            raise ValueError(f"world_frame must be a WORLD frame, got {world_frame!r}")
        if utm_frame.frame_type != FrameType.UTM:
            raise ValueError(f"utm_frame must be a UTM frame, got {utm_frame!r}")

        self.registry = datum_source
        self.world_frame = world_frame
        self.utm_frame = utm_frame
        self.zero_altitude = zero_altitude

        self.n_relayed = 0
        self.n_dropped = 0
        self.last_error: Optional[Exception] = None
        self._warned_empty_frame = False

    @property
    def datum(self) -> Datum:
        """Current datum (raises DatumNotSetError while Unset)."""
        return self.registry.datum

    def relay(self, sample: PoseSample) -> RelayOutput:
        """Convert one geodetic sample into UTM and world frames.

        Args:
            sample: GEODETIC or SENSOR frame sample whose position is
                    [latitude, longitude, altitude].

        Returns:
            RelayOutput with the UTM-frame and world-frame samples.

        Raises:
            DatumNotSetError: If no datum has been set.
            ValueError: If the sample is not in a geodetic/sensor frame.
            NonFiniteInputError: If the position contains NaN or infinity.
            InvalidLatitudeError: If latitude is outside the UTM band.
        """
        datum = self.datum
        self._check_input_frame(sample)

        position = sample.position
        if not np.all(np.isfinite(position)):
            raise NonFiniteInputError(
                f"Sample at t={sample.stamp} has non-finite position {position}"
            )
        lat, lon, alt = position

        utm_point = ll_to_utm(lat, lon)
        sensor_in_utm = RigidTransform(
            np.array([utm_point.easting, utm_point.northing, alt], dtype=np.float64),
            sample.orientation,
        )

        covariance = rotate_covariance(
            sample.covariance, invert(datum.world_to_utm).rotation
        )

        utm_sample = sample.with_pose(
            self.utm_frame, self._flatten(sensor_in_utm), covariance
        )

        sensor_in_world = compose(datum.utm_to_world, sensor_in_utm)
        world_pose = RigidTransform(sensor_in_world.translation, sample.orientation)
        world_sample = sample.with_pose(
            self.world_frame, self._flatten(world_pose), covariance
        )

        return RelayOutput(utm=utm_sample, world=world_sample)

    def process(self, sample: PoseSample) -> List[PoseSample]:
        """Relay a sample, dropping it if its position is unusable.

        Non-finite positions and out-of-band latitudes drop the sample
        with a RuntimeWarning; the pipeline keeps running.

        Returns:
            [utm_sample, world_sample], or [] if the sample was dropped.

        Raises:
            DatumNotSetError: If no datum has been set.
        """
        try:
            output = self.relay(sample)
        except (NonFiniteInputError, InvalidLatitudeError) as err:
            self.n_dropped += 1
            self.last_error = err
            warnings.warn(f"Dropping sample, won't transform: {err}", RuntimeWarning)
            return []

        self.n_relayed += 1
        return output.as_list()

    def process_many(self, samples: Iterable[PoseSample]) -> Iterator[PoseSample]:
        """Relay a stream of samples, yielding outputs in input order."""
        for sample in samples:
            yield from self.process(sample)

    def _flatten(self, transform: RigidTransform) -> RigidTransform:
        if not self.zero_altitude:
            return transform
        translation = transform.translation.copy()
        translation[2] = 0.0
        return transform.with_translation(translation)

    def _check_input_frame(self, sample: PoseSample) -> None:
        if sample.frame_id.frame_type not in _INPUT_FRAME_TYPES:
            raise ValueError(
                f"Expected a geodetic or sensor frame sample, got {sample.frame_id!r}"
            )
        if not sample.frame_id.name and not self._warned_empty_frame:
            self._warned_empty_frame = True
            warnings.warn(
                "Sample has empty frame_id. Will assume navsat device is "
                "mounted at robot's origin.",
                UserWarning,
            )
