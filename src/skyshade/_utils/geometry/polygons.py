import numpy as np
from shapely import LinearRing, MultiPolygon, Polygon
from shapely.errors import GEOSException

from skyshade._utils.geometry.point_geometry import horizontal_distance
from skyshade.errors import InvalidFootprintError

Vertex = tuple[float, ...]

MIN_RING_VERTICES = 3


def get_signed_area(ring: list[Vertex]) -> float:
    """
    Compute the signed area of a ring using the shoelace formula.
    The signed area is positive if the ring is oriented counter-clockwise,
    and negative if it is oriented clockwise.

    Parameters
    ----------
    ring
        Ring vertices (x, y[, z]) without the closing vertex.

    Returns
    -------
    A
        The signed area of the ring.
    """
    area = 0.0
    n = len(ring)
    for i in range(n):
        x1, y1 = ring[i][0], ring[i][1]
        x2, y2 = ring[(i + 1) % n][0], ring[(i + 1) % n][1]
        area += x1*y2 - x2*y1

    return area/2.0


def get_exterior_rings(footprint: Polygon | MultiPolygon) -> list[list[Vertex]]:
    """
    Obtain the exterior rings of a footprint as open vertex lists.

    Parameters
    ----------
    footprint
        A shapely Polygon or MultiPolygon. Z values, when present, are kept.

    Returns
    -------
    rings
        One list of vertices per polygon, in the stored order and without the
        repeated closing vertex.
    """
    if footprint is None or footprint.is_empty:
        msg = "footprint is empty"
        raise InvalidFootprintError(msg)

    if isinstance(footprint, Polygon):
        polygons = [footprint]
    elif isinstance(footprint, MultiPolygon):
        polygons = list(footprint.geoms)
    else:
        msg = f"Expected Polygon or MultiPolygon, got {footprint.geom_type}"
        raise InvalidFootprintError(msg)

    rings = []
    for polygon in polygons:
        coords = [tuple(float(c) for c in coord) for coord in polygon.exterior.coords]
        if len(coords) > 1 and coords[0] == coords[-1]:
            coords = coords[:-1]
        rings.append(coords)
    return rings


def validate_ring(ring: list[Vertex], eps: float = 1e-9) -> None:
    """
    Check that a ring can bound a building.

    Parameters
    ----------
    ring
        Ring vertices without the closing vertex.
    eps
        Area below which the ring is considered collapsed.

    Raises
    ------
    InvalidFootprintError
        If the ring has a non-finite coordinate, fewer than three distinct
        vertices, no area, or crosses itself.
    """
    if not np.isfinite(np.asarray([(v[0], v[1]) for v in ring], dtype=float)).all():
        msg = "ring has non-finite coordinates"
        raise InvalidFootprintError(msg)

    distinct = {(v[0], v[1]) for v in ring}
    if len(distinct) < MIN_RING_VERTICES:
        msg = f"ring has {len(distinct)} distinct vertices, at least {MIN_RING_VERTICES} are needed"
        raise InvalidFootprintError(msg)

    if abs(get_signed_area(ring)) <= eps:
        msg = "ring encloses no area"
        raise InvalidFootprintError(msg)

    try:
        simple = LinearRing([(v[0], v[1]) for v in ring]).is_simple
    except GEOSException as error:
        raise InvalidFootprintError(f"ring cannot be checked: {error}") from error
    if not simple:
        msg = "ring is self-intersecting"
        raise InvalidFootprintError(msg)


def get_ring_edges(ring: list[Vertex], min_length: float = 1e-9) -> list[tuple[Vertex, Vertex]]:
    """
    Compute the edges of a ring, wrapping the last vertex back to the first.

    Parameters
    ----------
    ring
        Ring vertices without the closing vertex.
    min_length
        Edges with a horizontal length at or below this value are dropped.

    Returns
    -------
    edges
        A list of (start, end) vertex pairs.
    """
    edges = []
    n = len(ring)
    for i in range(n):
        start = ring[i]
        end = ring[(i + 1) % n]
        if horizontal_distance(start, end) <= min_length:
            continue
        edges.append((start, end))
    return edges
