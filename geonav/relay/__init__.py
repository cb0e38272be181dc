"""Frame relay: datum registry, pipeline and configuration.

Typical wiring:

    >>> from geonav.relay import GeonavConfig, parse_datum, build_relay
    >>> config = GeonavConfig(datum=parse_datum([45.0, -93.0, 0.0]))
    >>> setup = build_relay(config)
    >>> outputs = setup.relay.process(sample)  # doctest: +SKIP
"""

from geonav.relay.config import (
    DatumConfig,
    GeonavConfig,
    RelaySetup,
    build_relay,
    load_config,
    parse_datum,
    save_config,
)
from geonav.relay.conversions import geodetic_to_world, world_to_geodetic
from geonav.relay.datum import Datum, DatumRegistry
from geonav.relay.pipeline import FrameRelay
from geonav.relay.types import PoseSample, RelayOutput, StaticFrameTransform, Twist

__all__ = [
    # Types
    "PoseSample",
    "Twist",
    "RelayOutput",
    "StaticFrameTransform",
    # Datum
    "Datum",
    "DatumRegistry",
    # Pipeline
    "FrameRelay",
    # Conversions
    "geodetic_to_world",
    "world_to_geodetic",
    # Configuration
    "DatumConfig",
    "GeonavConfig",
    "RelaySetup",
    "build_relay",
    "load_config",
    "parse_datum",
    "save_config",
]
