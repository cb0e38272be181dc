"""Datum-relative conversions between geodetic and world coordinates.

Convenience helpers for tools that place waypoints or inspect
trajectories in the world frame without building pose samples.
Both directions go through the datum's UTM zone, so they are only valid
for points inside that zone.
"""

from typing import Union

import numpy as np

from geonav.coords.utm import GeoPoint, ll_to_utm, utm_to_ll
from geonav.relay.datum import Datum, DatumRegistry


def _resolve(datum: Union[Datum, DatumRegistry]) -> Datum:
    if isinstance(datum, DatumRegistry):
        return datum.datum
    return datum


def geodetic_to_world(
    datum: Union[Datum, DatumRegistry],
    latitude: float,
    longitude: float,
    altitude: float = 0.0,
) -> np.ndarray:
    """Convert latitude/longitude/altitude to world-frame [x, y, z].

    Args:
        datum: Datum (or registry holding one).
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        altitude: Altitude in meters.

    Returns:
        World-frame position in meters.

    Raises:
        ValueError: If the point projects into a different UTM zone than
                    the datum.
        DatumNotSetError: If a registry is passed while Unset.

    Example:
        >>> datum = Datum.from_geodetic(45.0, -93.0)
        >>> np.round(geodetic_to_world(datum, 45.0, -93.0, 2.0), 6)
        array([0., 0., 2.])
    """
    datum = _resolve(datum)
    utm_point = ll_to_utm(latitude, longitude)

    if utm_point.zone_number != datum.utm_point.zone_number:
        raise ValueError(
            f"Point lies in UTM zone {utm_point.zone}, datum is in {datum.utm_zone}"
        )

    p_utm = np.array([utm_point.easting, utm_point.northing, altitude], dtype=np.float64)
    return datum.utm_to_world.apply(p_utm)


def world_to_geodetic(
    datum: Union[Datum, DatumRegistry],
    x: float,
    y: float,
    z: float = 0.0,
) -> GeoPoint:
    """Convert a world-frame position back to latitude/longitude/altitude.

    Args:
        datum: Datum (or registry holding one).
        x: World x in meters.
        y: World y in meters.
        z: World z in meters.

    Returns:
        GeoPoint in degrees/meters.
    """
    datum = _resolve(datum)
    easting, northing, altitude = datum.world_to_utm.apply(
        np.array([x, y, z], dtype=np.float64)
    )

    geo = utm_to_ll(easting, northing, datum.utm_zone)
    return GeoPoint(geo.latitude, geo.longitude, float(altitude))
