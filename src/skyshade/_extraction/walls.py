"""
Extrusion of footprints into vertical walls.

Every edge of a footprint's exterior ring becomes one rectangular wall. Building
walls rise ``floors * floor_height`` above their base; overhang walls rise to
``overhang_height``, which from the observer looks like an obstruction reaching
the zenith.
"""

import logging
import uuid
from collections.abc import Iterable

from shapely import MultiPolygon, Polygon

from skyshade._extraction.floors import get_floor_count
from skyshade._extraction.types import CatastroBuilding, Overhang, Point3D, WallExternalBuilding
from skyshade._utils.geometry.polygons import Vertex, get_exterior_rings, get_ring_edges, validate_ring
from skyshade.config import DEFAULT_CONFIG, ShadowConfig
from skyshade.errors import InvalidFootprintError

OVERHANG_ID = "overhang"


def get_building_height(building: CatastroBuilding, config: ShadowConfig = DEFAULT_CONFIG) -> float:
    """
    Height of a building in meters from its construction string.

    Parameters
    ----------
    building
        The cadastral building.
    config
        Supplies the floor height and the fallback floor count.

    Returns
    -------
    height
        ``floors * floor_height``.
    """
    floors = get_floor_count(building.constru, default=config.default_floor_count)
    return floors * config.floor_height


def extrude_ring(
    ring: list[Vertex],
    top: float,
    gid: str,
    cadastral_number: str,
    base_height: float = 0.0,
    min_edge_length: float = 1e-9,
    relative_top: bool = False,
) -> list[WallExternalBuilding]:
    """
    Turn a footprint ring into walls, one per edge.

    Parameters
    ----------
    ring
        Ring vertices without the closing vertex. A third coordinate, when
        present, is used as the base height of that vertex.
    top
        Height of the top of every wall.
    gid
        Identifier copied onto each wall.
    cadastral_number
        Cadastral reference copied onto each wall.
    base_height
        Base height for vertices without a third coordinate.
    min_edge_length
        Edges at or below this length are skipped.
    relative_top
        Measure ``top`` from each vertex base instead of from zero.

    Returns
    -------
    walls
        Walls in ring order, the last one joining the last vertex to the first.
    """
    walls = []
    for start, end in get_ring_edges(ring, min_length=min_edge_length):
        start_base = start[2] if len(start) > 2 else base_height
        end_base = end[2] if len(end) > 2 else base_height
        start_top = start_base + top if relative_top else top
        end_top = end_base + top if relative_top else top
        walls.append(
            WallExternalBuilding(
                id=str(uuid.uuid4()),
                gid=gid,
                cadastral_number=cadastral_number,
                down_left=Point3D(start[0], start[1], start_base),
                up_left=Point3D(start[0], start[1], start_top),
                up_right=Point3D(end[0], end[1], end_top),
                down_right=Point3D(end[0], end[1], end_base),
            )
        )
    return walls


def footprint_to_walls(
    footprint: Polygon | MultiPolygon,
    top: float,
    gid: str,
    cadastral_number: str,
    base_height: float = 0.0,
    min_edge_length: float = 1e-9,
    relative_top: bool = False,
) -> list[WallExternalBuilding]:
    """
    Extrude every exterior ring of a footprint.

    Raises
    ------
    InvalidFootprintError
        If any ring is degenerate or self-intersecting. Nothing is returned
        for a partly broken footprint.
    """
    rings = get_exterior_rings(footprint)
    for ring in rings:
        validate_ring(ring)

    walls = []
    for ring in rings:
        walls.extend(
            extrude_ring(
                ring,
                top=top,
                gid=gid,
                cadastral_number=cadastral_number,
                base_height=base_height,
                min_edge_length=min_edge_length,
                relative_top=relative_top,
            )
        )
    return walls


def building_to_walls(
    building: CatastroBuilding,
    config: ShadowConfig = DEFAULT_CONFIG,
) -> list[WallExternalBuilding]:
    """
    Extrude a cadastral building to its height, carrying its gid and refcat.

    Footprints with z values are extruded from each vertex z upward.
    """
    return footprint_to_walls(
        building.footprint,
        top=get_building_height(building, config),
        gid=str(building.gid),
        cadastral_number=building.refcat,
        min_edge_length=config.min_edge_length,
        relative_top=True,
    )


def overhang_to_walls(
    overhang: Overhang,
    config: ShadowConfig = DEFAULT_CONFIG,
) -> list[WallExternalBuilding]:
    """Extrude an overhang to the overhang height."""
    return footprint_to_walls(
        overhang.footprint,
        top=config.overhang_height,
        gid=overhang.id or OVERHANG_ID,
        cadastral_number=OVERHANG_ID,
        base_height=overhang.base_height,
        min_edge_length=config.min_edge_length,
    )


def buildings_to_walls(
    buildings: Iterable[CatastroBuilding],
    config: ShadowConfig = DEFAULT_CONFIG,
) -> list[WallExternalBuilding]:
    """
    Extrude a batch of buildings.

    Buildings with a malformed footprint are logged and skipped; the rest of
    the batch is processed normally.
    """
    walls = []
    for building in buildings:
        try:
            walls.extend(building_to_walls(building, config))
        except InvalidFootprintError as error:
            logging.warning("Skipping building %s (%s): %s", building.gid, building.refcat, error)
    return walls


def overhangs_to_walls(
    overhangs: Iterable[Overhang],
    config: ShadowConfig = DEFAULT_CONFIG,
) -> list[WallExternalBuilding]:
    """Extrude a batch of overhangs, skipping malformed ones."""
    walls = []
    for overhang in overhangs:
        try:
            walls.extend(overhang_to_walls(overhang, config))
        except InvalidFootprintError as error:
            logging.warning("Skipping overhang %s: %s", overhang.id or OVERHANG_ID, error)
    return walls
