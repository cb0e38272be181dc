"""Configuration surface for the frame relay.

Configuration is a flat JSON object:

    {
        "datum": [45.0, -93.0, 0.0],       # latitude, longitude, yaw
        "zero_altitude": false,
        "broadcast_utm_transform": true,
        "frequency": 10.0,
        "world_frame_id": "odom",
        "base_link_frame_id": "base_link",
        "tf_prefix": ""
    }

The datum is required. A missing or malformed datum is a hard error
unless ``allow_zero_datum`` is set, in which case the relay falls back to
a (0, 0, 0) datum with a warning. Datum yaw is accepted but ignored: the
world frame is always aligned with the UTM grid.
"""

import json
import warnings
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Sequence, Union

import numpy as np

from geonav.coords.frames import FrameId, FrameType, append_prefix
from geonav.coords.rotations import IDENTITY_QUAT
from geonav.coords.utm import UTM_MAX_LATITUDE, UTM_MIN_LATITUDE
from geonav.errors import MalformedDatumConfigError
from geonav.relay.datum import DatumRegistry
from geonav.relay.pipeline import FrameRelay
from geonav.relay.types import StaticFrameTransform

# Datum yaw above this magnitude (radians) triggers the "ignored" warning
YAW_WARNING_THRESHOLD = 0.01


@dataclass(frozen=True)
class DatumConfig:
    """Datum specification.

    Attributes:
        latitude: Datum latitude in degrees.
        longitude: Datum longitude in degrees.
        yaw: Datum yaw in radians (accepted, ignored).
    """

    latitude: float
    longitude: float
    yaw: float = 0.0

    def to_list(self) -> list:
        """[latitude, longitude, yaw]."""
        return [self.latitude, self.longitude, self.yaw]


def _datum_failure(message: str, allow_zero_datum: bool) -> DatumConfig:
    if not allow_zero_datum:
        raise MalformedDatumConfigError(message)
    warnings.warn(f"{message}. Setting datum to 0,0,0 which is non-ideal!", UserWarning)
    return DatumConfig(0.0, 0.0, 0.0)


def parse_datum(
    value: Optional[Union[str, Sequence[Any]]],
    allow_zero_datum: bool = False,
) -> DatumConfig:
    """Parse a datum specification.

    Accepts a sequence ``[lat, lon, yaw]`` or a whitespace/comma separated
    string. Extra trailing values (an older format also carried frame
    names) are ignored with a deprecation warning.

    Args:
        value: Raw datum value from configuration.
        allow_zero_datum: Fall back to (0, 0, 0) instead of raising.

    Returns:
        Parsed DatumConfig.

    Raises:
        MalformedDatumConfigError: If the datum is missing, malformed or
                                   outside the UTM latitude band and
                                   ``allow_zero_datum`` is False.

    Example:
        >>> parse_datum([45.0, -93.0, 0.0])
        DatumConfig(latitude=45.0, longitude=-93.0, yaw=0.0)
        >>> parse_datum("45.0, -93.0, 0.0").longitude
        -93.0
    """
    if value is None:
        return _datum_failure("<datum> parameter is not supplied", allow_zero_datum)

    if isinstance(value, str):
        value = value.replace(",", " ").split()
    elif isinstance(value, np.ndarray):
        value = value.tolist()

    if not isinstance(value, (list, tuple)):
        return _datum_failure(
            f"Datum must be a list of [latitude, longitude, yaw], got {type(value).__name__}",
            allow_zero_datum,
        )
    if len(value) < 3:
        return _datum_failure(
            f"Datum needs at least 3 values (latitude, longitude, yaw), got {len(value)}",
            allow_zero_datum,
        )
    if len(value) > 3:
        warnings.warn(
            "Deprecated datum parameter configuration detected. Only the first "
            "three parameters (latitude, longitude, yaw) will be used.",
            UserWarning,
        )

    try:
        lat, lon, yaw = (float(v) for v in value[:3])
    except (TypeError, ValueError) as err:
        return _datum_failure(f"Datum values must be numeric: {err}", allow_zero_datum)

    if not np.all(np.isfinite([lat, lon, yaw])):
        return _datum_failure(
            f"Datum values must be finite, got {[lat, lon, yaw]}", allow_zero_datum
        )
    if not UTM_MIN_LATITUDE <= lat <= UTM_MAX_LATITUDE:
        return _datum_failure(
            f"Datum latitude {lat} is outside the UTM band "
            f"[{UTM_MIN_LATITUDE}, {UTM_MAX_LATITUDE}]",
            allow_zero_datum,
        )

    return DatumConfig(lat, lon, yaw)


@dataclass
class GeonavConfig:
    """Relay configuration.

    Attributes:
        datum: Datum specification.
        frequency: Rate (Hz) of the external scheduling loop.
        broadcast_utm_transform: Expose the static UTM ← world transform.
        zero_altitude: Force z = 0 on all outputs.
        world_frame_id: Name of the world frame (before prefixing).
        base_link_frame_id: Name of the vehicle frame (before prefixing).
        utm_frame_id: Name of the UTM frame.
        tf_prefix: Prefix applied to world and base_link frame names.
    """

    datum: DatumConfig
    frequency: float = 10.0
    broadcast_utm_transform: bool = False
    zero_altitude: bool = False
    world_frame_id: str = "odom"
    base_link_frame_id: str = "base_link"
    utm_frame_id: str = "utm"
    tf_prefix: str = ""

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.datum, DatumConfig):
            raise TypeError(f"datum must be a DatumConfig, got {type(self.datum)}")
        for name in ("broadcast_utm_transform", "zero_altitude"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise TypeError(f"{name} must be a bool, got {type(value).__name__} {value!r}")
        if not self.frequency > 0:
            raise ValueError(f"frequency must be positive, got {self.frequency}")
        for name in ("world_frame_id", "base_link_frame_id", "utm_frame_id"):
            if not getattr(self, name):
                raise ValueError(f"{name} must be a non-empty string")

    @property
    def world_frame(self) -> FrameId:
        """World frame with the tf prefix applied."""
        return FrameId(append_prefix(self.tf_prefix, self.world_frame_id), FrameType.WORLD)

    @property
    def base_link_frame(self) -> FrameId:
        """Vehicle frame with the tf prefix applied."""
        return FrameId(append_prefix(self.tf_prefix, self.base_link_frame_id), FrameType.BODY)

    @property
    def utm_frame(self) -> FrameId:
        """UTM frame (never prefixed; it is shared by all vehicles)."""
        return FrameId(self.utm_frame_id.lstrip("/"), FrameType.UTM)

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        allow_zero_datum: Optional[bool] = None,
    ) -> "GeonavConfig":
        """Build from a plain dict (e.g. parsed JSON).

        Args:
            data: Configuration mapping.
            allow_zero_datum: Override ``data["allow_zero_datum"]``.

        Raises:
            ValueError: On unknown keys.
            MalformedDatumConfigError: On a bad datum (see ``parse_datum``).
        """
        data = dict(data)
        flag = data.pop("allow_zero_datum", False)
        if allow_zero_datum is None:
            allow_zero_datum = bool(flag)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")

        datum = parse_datum(data.pop("datum", None), allow_zero_datum=allow_zero_datum)
        return cls(datum=datum, **data)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict suitable for ``json.dump``."""
        data = asdict(self)
        data["datum"] = self.datum.to_list()
        return data


def load_config(
    path: Union[str, Path],
    allow_zero_datum: Optional[bool] = None,
) -> GeonavConfig:
    """Load a GeonavConfig from a JSON file."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a JSON object")
    return GeonavConfig.from_dict(data, allow_zero_datum=allow_zero_datum)


def save_config(config: GeonavConfig, path: Union[str, Path]) -> None:
    """Write a GeonavConfig to a JSON file."""
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)


class RelaySetup(NamedTuple):
    """Objects wired together from a configuration.

    Attributes:
        registry: Datum registry, already Set.
        relay: Frame relay reading from ``registry``.
        static_transform: UTM ← world transform to publish, or None when
                          ``broadcast_utm_transform`` is off.
    """

    registry: DatumRegistry
    relay: FrameRelay
    static_transform: Optional[StaticFrameTransform]


def build_relay(config: GeonavConfig) -> RelaySetup:
    """Set the datum and build a FrameRelay from configuration.

    The datum is set at zero altitude with the world frame aligned to the
    UTM grid; a non-zero yaw only produces a warning.
    """
    if abs(config.datum.yaw) > YAW_WARNING_THRESHOLD:
        warnings.warn("Yaw of the datum is ignored!", UserWarning)

    registry = DatumRegistry()
    datum = registry.set_datum(
        config.datum.latitude, config.datum.longitude, 0.0, IDENTITY_QUAT
    )

    relay = FrameRelay(
        registry,
        world_frame=config.world_frame,
        utm_frame=config.utm_frame,
        zero_altitude=config.zero_altitude,
    )

    static_transform = None
    if config.broadcast_utm_transform:
        static_transform = datum.static_transform(
            world_frame=config.world_frame,
            utm_frame=config.utm_frame,
            zero_altitude=config.zero_altitude,
        )

    return RelaySetup(registry, relay, static_transform)
