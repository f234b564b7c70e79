"""
Shadow computation for a single observation point.

Provides the pipeline entry point:
    compute_shadows(buildings, overhangs, reference_point)

Buildings and overhangs are extruded into walls, every wall is projected onto
the observer's sky and shadows covered by a larger one are removed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from shapely.errors import GEOSException
from shapely.geometry import Point

from skyshade._extraction.cleaning import clean_shadows, remove_sector_shadows
from skyshade._extraction.projection import project_walls
from skyshade._extraction.types import CatastroBuilding, Overhang, Point3D, Shadow
from skyshade._extraction.walls import buildings_to_walls, overhangs_to_walls
from skyshade.config import DEFAULT_CONFIG, ShadowConfig


def find_reference_buildings(
    buildings: Iterable[CatastroBuilding],
    reference_point: Point3D,
) -> list[CatastroBuilding]:
    """
    Find the buildings the observation point stands in.

    Parameters
    ----------
    buildings
        Candidate buildings.
    reference_point
        Observation point; only x and y are used.

    Returns
    -------
    matches
        Buildings whose footprint interior contains the point. When the point
        lies only on footprint boundaries, such as a party wall or a shared
        corner, every building whose footprint covers it. Input order is kept.
    """
    location = Point(reference_point.x, reference_point.y)
    inside = []
    touching = []
    for building in buildings:
        footprint = building.footprint
        if footprint is None or footprint.is_empty:
            continue
        try:
            if footprint.contains(location):
                inside.append(building)
            elif footprint.covers(location):
                touching.append(building)
        except GEOSException as error:
            logging.warning("Skipping footprint of building %s (%s): %s", building.gid, building.refcat, error)
    return inside or touching


def find_reference_building(
    buildings: Iterable[CatastroBuilding],
    reference_point: Point3D,
) -> CatastroBuilding | None:
    """First of ``find_reference_buildings``, or None."""
    matches = find_reference_buildings(buildings, reference_point)
    return matches[0] if matches else None


def compute_shadows(
    buildings: Sequence[CatastroBuilding],
    overhangs: Sequence[Overhang],
    reference_point: Point3D,
    *,
    reference_refcat: str | None = None,
    config: ShadowConfig | None = None,
) -> list[Shadow]:
    """
    Compute the shadows cast on the sky of an observation point.

    Parameters
    ----------
    buildings
        Nearby cadastral buildings.
    overhangs
        Nearby obstacles, extruded to an effectively infinite height.
    reference_point
        Observation point in UTM meters.
    reference_refcat
        Cadastral reference of the observer's own building. Walls with this
        reference are ignored. When not given, the buildings the observer
        stands in are ignored (see ``find_reference_buildings``).
    config
        Engine configuration. Defaults to ``DEFAULT_CONFIG``.

    Returns
    -------
    shadows
        Non-redundant shadows: building shadows first, then overhang shadows,
        each in extrusion order.

    Raises
    ------
    ValueError
        If the reference point is missing or not finite.

    Examples
    --------
    >>> from shapely.geometry import Polygon
    >>> building = CatastroBuilding(
    ...     gid="1", refcat="9872023VH5797S", constru="III",
    ...     footprint=Polygon([(-5, 15), (5, 15), (5, 25), (-5, 25)]),
    ... )
    >>> shadows = compute_shadows([building], [], Point3D(0.0, 0.0, 0.0))
    >>> len(shadows)
    1
    """
    if reference_point is None:
        msg = "reference_point is required"
        raise ValueError(msg)
    if not isinstance(reference_point, Point3D):
        raise TypeError(f"Expected Point3D, got {type(reference_point).__name__}")
    if not reference_point.is_finite():
        msg = f"reference_point has non-finite coordinates: {reference_point}"
        raise ValueError(msg)

    config = config or DEFAULT_CONFIG
    buildings = list(buildings or [])
    overhangs = list(overhangs or [])

    if reference_refcat is None:
        excluded = {building.refcat for building in find_reference_buildings(buildings, reference_point)}
    else:
        excluded = {reference_refcat}

    building_walls = [
        wall for wall in buildings_to_walls(buildings, config)
        if wall.cadastral_number not in excluded
    ]
    shadows = project_walls(reference_point, building_walls, config)

    overhang_walls = overhangs_to_walls(overhangs, config)
    shadows.extend(project_walls(reference_point, overhang_walls, config))

    if config.excluded_sectors:
        shadows = remove_sector_shadows(
            shadows, config.excluded_sectors, tolerance=config.containment_tolerance
        )

    cleaned = clean_shadows(shadows, config)
    logging.debug(
        "Computed %d shadows from %d building walls and %d overhang walls",
        len(cleaned), len(building_walls), len(overhang_walls),
    )
    return cleaned
