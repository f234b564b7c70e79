from functools import lru_cache

import numpy as np
from pyproj import Transformer

WGS84_CRS = "EPSG:4326"

# ETRS89 / UTM zones used by the Spanish cadastre
UTM_ZONES: dict[int, dict[str, object]] = {
    28: {"srid": 25828, "name": "Canarias", "longitude_range": (-18.0, -12.0)},
    29: {"srid": 25829, "name": "Galicia/Oeste", "longitude_range": (-12.0, -6.0)},
    30: {"srid": 25830, "name": "Madrid/Centro", "longitude_range": (-6.0, 0.0)},
    31: {"srid": 25831, "name": "Catalunya/Este", "longitude_range": (0.0, 6.0)},
}


def horizontal_distance(
    point_1: tuple[float, ...],
    point_2: tuple[float, ...]
) -> float:
    """Euclidean distance between two projected points, ignoring height."""
    return float(np.hypot(point_2[0] - point_1[0], point_2[1] - point_1[1]))


def utm_zone_for_longitude(longitude: float) -> int:
    """
    Obtain the UTM zone number covering a longitude.

    Parameters
    ----------
    longitude
        Longitude in degrees.

    Returns
    -------
    zone
        The standard 6-degree UTM zone number (1-60).
    """
    if not -180 <= longitude <= 180:
        msg = f"longitude {longitude} is out of range"
        raise ValueError(msg)
    return min(int((longitude + 180) // 6) + 1, 60)


def srid_for_longitude(longitude: float) -> int:
    """
    ETRS89 / UTM SRID for a longitude in the cadastre's coverage.

    Raises
    ------
    ValueError
        If the longitude falls outside zones 28-31.
    """
    zone = utm_zone_for_longitude(longitude)
    if zone not in UTM_ZONES:
        msg = f"UTM zone {zone} is not covered (supported zones: {sorted(UTM_ZONES)})"
        raise ValueError(msg)
    return int(UTM_ZONES[zone]["srid"])


@lru_cache(maxsize=16)
def _get_transformer(source: str, target: str) -> Transformer:
    return Transformer.from_crs(source, target, always_xy=True)


def lonlat_to_utm(longitude: float, latitude: float, srid: int | None = None) -> tuple[float, float, int]:
    """
    Project a WGS84 coordinate to UTM meters.

    Parameters
    ----------
    longitude
        Longitude in degrees.
    latitude
        Latitude in degrees.
    srid
        Target SRID. Inferred from the longitude when not provided.

    Returns
    -------
    x, y, srid
        Easting and northing in meters and the SRID they are expressed in.
    """
    if srid is None:
        srid = srid_for_longitude(longitude)
    transformer = _get_transformer(WGS84_CRS, f"EPSG:{srid}")
    x, y = transformer.transform(longitude, latitude)
    return float(x), float(y), srid


def utm_to_lonlat(x: float, y: float, srid: int) -> tuple[float, float]:
    """Unproject UTM meters in the given SRID back to (longitude, latitude)."""
    transformer = _get_transformer(f"EPSG:{srid}", WGS84_CRS)
    longitude, latitude = transformer.transform(x, y)
    return float(longitude), float(latitude)
