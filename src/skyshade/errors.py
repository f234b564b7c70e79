"""Exceptions raised by skyshade."""


class SkyshadeError(Exception):
    """Base class for skyshade errors."""


class InvalidFootprintError(SkyshadeError, ValueError):
    """A footprint cannot be turned into walls (too few vertices, self-intersecting, empty)."""


class ShadowCalculationError(SkyshadeError):
    """The shadow service could not complete a request."""
