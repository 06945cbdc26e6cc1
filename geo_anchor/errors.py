class GeoAnchorError(Exception):
    """Base class for errors raised by the anchor engine."""


class CalibrationError(GeoAnchorError, ValueError):
    """The calibration table could not be loaded or is malformed."""


class MalformedObservation(GeoAnchorError, ValueError):
    """A raw per-frame marker observation is incomplete or invalid."""


class DegenerateProjection(GeoAnchorError, ArithmeticError):
    """The homogeneous denominator of a projection is (close to) zero."""
