"""
Engine configuration.

World coordinates are UTM meters in a single SRID. Azimuths are degrees in
[-180, 180) with 0 at North, increasing clockwise (90 is East). Elevations are
degrees in [0, 90] with 0 at the horizon.
"""

from __future__ import annotations

from dataclasses import dataclass

# Meters per cadastral floor
FLOOR_HEIGHT = 3.0
# Top of an overhang wall; high enough to reach the zenith from any realistic distance
OVERHANG_HEIGHT = 1e10
DEFAULT_FLOOR_COUNT = 1
DEFAULT_BUFFER_METERS = 100.0
# ETRS89 / UTM zone 30N
DEFAULT_SRID = 25830


@dataclass(frozen=True)
class ShadowConfig:
    """
    Configuration for the shadow engine.

    Attributes
    ----------
    floor_height : float
        Height in meters of one floor when turning floor counts into heights.
    overhang_height : float
        Height used for the top of overhang walls.
    default_floor_count : int
        Floor count used when a construction string carries no readable numeral.
    overhead_tolerance : float
        Horizontal distance in meters under which a wall corner is considered
        straight above or below the observer.
    min_edge_length : float
        Footprint edges at or below this length in meters produce no wall.
    containment_tolerance : float
        Slack in degrees for the shadow containment test.
    max_span : float
        Widest azimuth span in degrees a single shadow may cover.
    default_buffer : float
        Search radius in meters used by the service when a request has none.
    default_srid : int
        SRID of the world coordinates.
    excluded_sectors : tuple of (float, float)
        Clockwise azimuth sectors; shadows lying entirely inside one are
        discarded. Empty by default.
    """

    floor_height: float = FLOOR_HEIGHT
    overhang_height: float = OVERHANG_HEIGHT
    default_floor_count: int = DEFAULT_FLOOR_COUNT
    overhead_tolerance: float = 1e-9
    min_edge_length: float = 1e-9
    containment_tolerance: float = 1e-6
    max_span: float = 180.0
    default_buffer: float = DEFAULT_BUFFER_METERS
    default_srid: int = DEFAULT_SRID
    excluded_sectors: tuple[tuple[float, float], ...] = ()

    def __post_init__(self) -> None:
        """Validate parameter ranges after initialization."""
        if self.floor_height <= 0:
            msg = "floor_height must be positive"
            raise ValueError(msg)

        if self.overhang_height <= 0:
            msg = "overhang_height must be positive"
            raise ValueError(msg)

        if self.default_floor_count < 1:
            msg = "default_floor_count must be at least 1"
            raise ValueError(msg)

        if self.overhead_tolerance < 0 or self.min_edge_length < 0 or self.containment_tolerance < 0:
            msg = "tolerances cannot be negative"
            raise ValueError(msg)

        if not 0 < self.max_span <= 180:
            msg = "max_span should be between 0 and 180"
            raise ValueError(msg)

        if self.default_buffer <= 0:
            msg = "default_buffer must be positive"
            raise ValueError(msg)

        for sector in self.excluded_sectors:
            if len(sector) != 2:
                msg = f"excluded sector {sector!r} must be a (start, end) pair"
                raise ValueError(msg)


DEFAULT_CONFIG = ShadowConfig()
