"""Error taxonomy for geodetic frame conversions.

Each error also derives from the builtin exception a caller would expect
(``ValueError`` for bad inputs, ``RuntimeError`` for ordering problems),
so generic handlers keep working.
"""


class GeonavError(Exception):
    """Base class for all frame-relay errors."""


class InvalidLatitudeError(GeonavError, ValueError):
    """Latitude lies outside the UTM validity band [-80, 84] degrees."""


class NonFiniteInputError(GeonavError, ValueError):
    """A measurement position contains NaN or infinity."""


class DatumNotSetError(GeonavError, RuntimeError):
    """A frame conversion was requested before the datum was set."""


class MalformedDatumConfigError(GeonavError, ValueError):
    """The datum configuration could not be parsed."""
