"""Geodetic ⇄ UTM projection on the WGS84 ellipsoid.

This module implements the forward (latitude/longitude → easting/northing)
and inverse Universal Transverse Mercator projections using Krüger's
series to sixth order in the third flattening n. Within a zone the series
is accurate to well below a millimetre, so a forward/inverse round trip
reproduces the input to ~1e-9 degrees.

WGS84 ellipsoid parameters:
- Semi-major axis (a): 6378137.0 m
- Flattening (f): 1/298.257223563

UTM parameters:
- Central scale factor (k0): 0.9996
- False easting: 500000 m
- False northing: 0 m (north), 10000000 m (south)
- Validity band: latitude in [-80, 84] degrees

Zones are written as the zone number followed by the latitude band
letter, e.g. "15T". The band letter decides the hemisphere on inverse
conversion (letters N and above are northern).

References:
    Karney, C. F. F. (2011). Transverse Mercator with an accuracy of a few
    nanometers. Journal of Geodesy, 85(8), 475-485.
"""

import re
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from geonav.errors import InvalidLatitudeError, NonFiniteInputError

# WGS84 ellipsoid parameters
WGS84_A = 6378137.0  # Semi-major axis (m)
WGS84_F = 1.0 / 298.257223563  # Flattening
WGS84_E2 = WGS84_F * (2.0 - WGS84_F)  # First eccentricity squared
WGS84_E = np.sqrt(WGS84_E2)

# UTM projection parameters
UTM_K0 = 0.9996
UTM_FALSE_EASTING = 500000.0
UTM_FALSE_NORTHING_SOUTH = 10000000.0
UTM_MIN_LATITUDE = -80.0
UTM_MAX_LATITUDE = 84.0

# Latitude bands C..X, 8 degrees each (X is stretched to 12 degrees)
UTM_BAND_LETTERS = "CDEFGHJKLMNPQRSTUVWX"

_ZONE_PATTERN = re.compile(r"^\s*(\d{1,2})\s*([A-Za-z])\s*$")

# Krüger series coefficients
_N = WGS84_F / (2.0 - WGS84_F)  # Third flattening
_RECTIFYING_RADIUS = WGS84_A / (1.0 + _N) * (1.0 + _N**2 / 4.0 + _N**4 / 64.0 + _N**6 / 256.0)

_ALPHA = np.array(
    [
        _N / 2.0 - 2.0 * _N**2 / 3.0 + 5.0 * _N**3 / 16.0 + 41.0 * _N**4 / 180.0
        - 127.0 * _N**5 / 288.0 + 7891.0 * _N**6 / 37800.0,
        13.0 * _N**2 / 48.0 - 3.0 * _N**3 / 5.0 + 557.0 * _N**4 / 1440.0
        + 281.0 * _N**5 / 630.0 - 1983433.0 * _N**6 / 1935360.0,
        61.0 * _N**3 / 240.0 - 103.0 * _N**4 / 140.0 + 15061.0 * _N**5 / 26880.0
        + 167603.0 * _N**6 / 181440.0,
        49561.0 * _N**4 / 161280.0 - 179.0 * _N**5 / 168.0 + 6601661.0 * _N**6 / 7257600.0,
        34729.0 * _N**5 / 80640.0 - 3418889.0 * _N**6 / 1995840.0,
        212378941.0 * _N**6 / 319334400.0,
    ],
    dtype=np.float64,
)

_BETA = np.array(
    [
        _N / 2.0 - 2.0 * _N**2 / 3.0 + 37.0 * _N**3 / 96.0 - _N**4 / 360.0
        - 81.0 * _N**5 / 512.0 + 96199.0 * _N**6 / 604800.0,
        _N**2 / 48.0 + _N**3 / 15.0 - 437.0 * _N**4 / 1440.0 + 46.0 * _N**5 / 105.0
        - 1118711.0 * _N**6 / 3870720.0,
        17.0 * _N**3 / 480.0 - 37.0 * _N**4 / 840.0 - 209.0 * _N**5 / 4480.0
        + 5569.0 * _N**6 / 90720.0,
        4397.0 * _N**4 / 161280.0 - 11.0 * _N**5 / 504.0 - 830251.0 * _N**6 / 7257600.0,
        4583.0 * _N**5 / 161280.0 - 108847.0 * _N**6 / 3991680.0,
        20648693.0 * _N**6 / 638668800.0,
    ],
    dtype=np.float64,
)

_HARMONICS = 2.0 * np.arange(1, 7, dtype=np.float64)


@dataclass(frozen=True)
class GeoPoint:
    """Geodetic position on the WGS84 ellipsoid.

    Attributes:
        latitude: Latitude in degrees (positive north).
        longitude: Longitude in degrees (positive east).
        altitude: Height above the ellipsoid in meters.
    """

    latitude: float
    longitude: float
    altitude: float = 0.0

    def to_array(self) -> np.ndarray:
        """Return [latitude, longitude, altitude]."""
        return np.array([self.latitude, self.longitude, self.altitude], dtype=np.float64)


@dataclass(frozen=True)
class UtmPoint:
    """Projected UTM position.

    Attributes:
        easting: Easting in meters (includes the 500 km false easting).
        northing: Northing in meters (includes the false northing in the
                  southern hemisphere).
        zone: Zone designator, e.g. "15T".
    """

    easting: float
    northing: float
    zone: str

    @property
    def zone_number(self) -> int:
        """Longitude zone number (1-60)."""
        return parse_utm_zone(self.zone)[0]

    @property
    def band(self) -> str:
        """Latitude band letter."""
        return parse_utm_zone(self.zone)[1]

    @property
    def is_northern(self) -> bool:
        """True if the band lies in the northern hemisphere."""
        return self.band >= "N"


def normalize_longitude(lon: float) -> float:
    """Wrap a longitude in degrees to [-180, 180).

    The interval is half-open, so +180 maps to -180 and every meridian
    has exactly one representation.

    Args:
        lon: Longitude in degrees, any range.

    Returns:
        Equivalent longitude in [-180, 180).

    Example:
        >>> normalize_longitude(180.0)
        -180.0
        >>> normalize_longitude(190.0)
        -170.0
    """
    return float((lon + 180.0) % 360.0 - 180.0)


def utm_band_letter(lat: float) -> str:
    """Latitude band letter for a latitude in degrees.

    Bands are 8° tall starting at -80° with "C", skipping "I" and "O".
    The last band "X" is stretched to 12° so that 84° still falls inside
    it. Letters from "N" onwards are northern.

    Args:
        lat: Latitude in degrees.

    Returns:
        Single band letter from "CDEFGHJKLMNPQRSTUVWX".

    Raises:
        InvalidLatitudeError: If lat is outside [-80, 84].

    Example:
        >>> utm_band_letter(45.0)
        'T'
        >>> utm_band_letter(-0.1)
        'M'
    """
    _check_latitude(lat)
    index = min(int((lat - UTM_MIN_LATITUDE) // 8.0), len(UTM_BAND_LETTERS) - 1)
    return UTM_BAND_LETTERS[index]


def utm_zone_number(lat: float, lon: float) -> int:
    """Longitude zone number for a position, including the Norway and
    Svalbard exceptions.

    Args:
        lat: Latitude in degrees.
        lon: Longitude in degrees (any range; normalized internally).

    Returns:
        Zone number in 1..60.

    Example:
        >>> utm_zone_number(45.0, -93.0)
        15
        >>> utm_zone_number(60.0, 5.0)  # Norway, zone 32V widened west
        32
    """
    lon = normalize_longitude(lon)
    zone = int((lon + 180.0) // 6.0) + 1

    # South-western Norway
    if 56.0 <= lat < 64.0 and 3.0 <= lon < 12.0:
        zone = 32

    # Svalbard
    if 72.0 <= lat <= 84.0:
        if 0.0 <= lon < 9.0:
            zone = 31
        elif 9.0 <= lon < 21.0:
            zone = 33
        elif 21.0 <= lon < 33.0:
            zone = 35
        elif 33.0 <= lon < 42.0:
            zone = 37

    return zone


def central_meridian(zone_number: int) -> float:
    """Central meridian of a UTM zone.

    Zone 1 spans [-180, -174) and each following zone is shifted 6° east,
    so the central meridian sits 3° inside the western zone edge.

    Args:
        zone_number: Zone number in 1..60.

    Returns:
        Longitude of the central meridian in degrees.

    Example:
        >>> central_meridian(15)
        -93.0
        >>> central_meridian(31)
        3.0
    """
    return (zone_number - 1) * 6.0 - 180.0 + 3.0


def parse_utm_zone(zone: str) -> Tuple[int, str]:
    """Split a zone designator into (number, band letter).

    Surrounding whitespace is stripped and the letter is upper-cased.

    Args:
        zone: Designator such as "15T".

    Returns:
        Tuple of zone number and band letter.

    Raises:
        ValueError: If the designator is malformed or out of range.

    Example:
        >>> parse_utm_zone("15T")
        (15, 'T')
    """
    match = _ZONE_PATTERN.match(zone)
    if match is None:
        raise ValueError(f"Malformed UTM zone designator: {zone!r}")

    number = int(match.group(1))
    letter = match.group(2).upper()
    if not 1 <= number <= 60:
        raise ValueError(f"UTM zone number must be in 1..60, got {number}")
    if letter not in UTM_BAND_LETTERS:
        raise ValueError(f"Invalid UTM latitude band letter: {letter!r}")

    return number, letter


def ll_to_utm(lat: float, lon: float) -> UtmPoint:
    """Project geodetic latitude/longitude to UTM.

    Args:
        lat: Latitude in degrees, must lie in [-80, 84].
        lon: Longitude in degrees; normalized to [-180, 180).

    Returns:
        UtmPoint with easting, northing (meters) and zone designator.

    Raises:
        NonFiniteInputError: If lat or lon is NaN or infinite.
        InvalidLatitudeError: If lat is outside the UTM validity band.

    Example:
        >>> p = ll_to_utm(45.0, -93.0)
        >>> p.zone
        '15T'
        >>> round(p.easting, 3)
        500000.0
    """
    if not (np.isfinite(lat) and np.isfinite(lon)):
        raise NonFiniteInputError(f"Non-finite geodetic input: lat={lat}, lon={lon}")

    lon = normalize_longitude(lon)
    zone = utm_zone_number(lat, lon)
    letter = utm_band_letter(lat)

    phi = np.deg2rad(lat)
    lam = np.deg2rad(lon - central_meridian(zone))

    # Conformal latitude
    tau = np.tan(phi)
    sigma = np.sinh(WGS84_E * np.arctanh(WGS84_E * tau / np.sqrt(1.0 + tau**2)))
    tau_c = tau * np.sqrt(1.0 + sigma**2) - sigma * np.sqrt(1.0 + tau**2)

    # Spherical transverse Mercator
    cos_lam = np.cos(lam)
    xi_c = np.arctan2(tau_c, cos_lam)
    eta_c = np.arcsinh(np.sin(lam) / np.sqrt(tau_c**2 + cos_lam**2))

    # Krüger series to the ellipsoid
    xi = xi_c + np.sum(_ALPHA * np.sin(_HARMONICS * xi_c) * np.cosh(_HARMONICS * eta_c))
    eta = eta_c + np.sum(_ALPHA * np.cos(_HARMONICS * xi_c) * np.sinh(_HARMONICS * eta_c))

    easting = UTM_K0 * _RECTIFYING_RADIUS * eta + UTM_FALSE_EASTING
    northing = UTM_K0 * _RECTIFYING_RADIUS * xi
    # Band letter decides the hemisphere, same as utm_to_ll
    if letter < "N":
        northing += UTM_FALSE_NORTHING_SOUTH

    return UtmPoint(float(easting), float(northing), f"{zone}{letter}")


def utm_to_ll(
    easting: float,
    northing: float,
    zone: str,
    tol: float = 1e-12,
    max_iter: int = 10,
) -> GeoPoint:
    """Inverse UTM projection back to geodetic latitude/longitude.

    Args:
        easting: Easting in meters.
        northing: Northing in meters.
        zone: Zone designator produced by ``ll_to_utm``.
        tol: Convergence tolerance on tan(latitude).
        max_iter: Maximum Newton iterations for the conformal latitude.

    Returns:
        GeoPoint with latitude/longitude in degrees and zero altitude.

    Raises:
        NonFiniteInputError: If easting or northing is NaN or infinite.
        ValueError: If the zone designator is malformed.
    """
    if not (np.isfinite(easting) and np.isfinite(northing)):
        raise NonFiniteInputError(
            f"Non-finite UTM input: easting={easting}, northing={northing}"
        )

    number, letter = parse_utm_zone(zone)

    x = easting - UTM_FALSE_EASTING
    y = northing
    if letter < "N":
        y -= UTM_FALSE_NORTHING_SOUTH

    xi = y / (UTM_K0 * _RECTIFYING_RADIUS)
    eta = x / (UTM_K0 * _RECTIFYING_RADIUS)

    # Undo the Krüger series
    xi_c = xi - np.sum(_BETA * np.sin(_HARMONICS * xi) * np.cosh(_HARMONICS * eta))
    eta_c = eta - np.sum(_BETA * np.cos(_HARMONICS * xi) * np.sinh(_HARMONICS * eta))

    sinh_eta = np.sinh(eta_c)
    cos_xi = np.cos(xi_c)
    tau_c = np.sin(xi_c) / np.sqrt(sinh_eta**2 + cos_xi**2)

    # Newton iteration from conformal to geodetic latitude
    tau = tau_c
    for _ in range(max_iter):
        sigma = np.sinh(WGS84_E * np.arctanh(WGS84_E * tau / np.sqrt(1.0 + tau**2)))
        tau_i = tau * np.sqrt(1.0 + sigma**2) - sigma * np.sqrt(1.0 + tau**2)
        delta = (
            (tau_c - tau_i)
            / np.sqrt(1.0 + tau_i**2)
            * (1.0 + (1.0 - WGS84_E2) * tau**2)
            / ((1.0 - WGS84_E2) * np.sqrt(1.0 + tau**2))
        )
        tau += delta
        if abs(delta) < tol:
            break

    lat = np.rad2deg(np.arctan(tau))
    lon = np.rad2deg(np.arctan2(sinh_eta, cos_xi)) + central_meridian(number)

    return GeoPoint(float(lat), normalize_longitude(lon), 0.0)


def _check_latitude(lat: float) -> None:
    if not UTM_MIN_LATITUDE <= lat <= UTM_MAX_LATITUDE:
        raise InvalidLatitudeError(
            f"Latitude {lat} is outside the UTM band "
            f"[{UTM_MIN_LATITUDE}, {UTM_MAX_LATITUDE}]"
        )
