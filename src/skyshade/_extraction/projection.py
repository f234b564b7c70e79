"""
Projection of 3D walls onto the observer's sky.

Each wall corner is turned into an (azimuth, elevation) pair seen from the
observer. Azimuth is ``atan2(dx, dy)``: 0 at North, 90 at East. Elevation is
the angle above the observer's horizontal plane, clamped to [0, 90], so
corners below the observer sit on the horizon instead of being discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np
import numpy.typing as npt

from skyshade._extraction.types import Point3D, Shadow, ShadowPoint, WallExternalBuilding
from skyshade._utils.geometry.angles import angular_span, normalize_azimuth
from skyshade.config import DEFAULT_CONFIG, ShadowConfig

ZENITH = 90.0
HORIZON = 0.0


def corner_angles(
    observer: Point3D,
    points: Sequence[Point3D],
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Raw angles from the observer to a set of points.

    Parameters
    ----------
    observer
        Observation point.
    points
        Target points.

    Returns
    -------
    azimuths
        Azimuths in [-180, 180).
    elevations
        Elevations clamped to [0, 90].
    horizontal_distances
        Horizontal distances in meters.
    """
    coords = np.array([[p.x, p.y, p.z] for p in points], dtype=float)
    deltas = coords - np.array([observer.x, observer.y, observer.z], dtype=float)
    dx, dy, dz = deltas[:, 0], deltas[:, 1], deltas[:, 2]

    azimuths = normalize_azimuth(np.degrees(np.arctan2(dx, dy)))
    horizontal = np.hypot(dx, dy)
    elevations = np.clip(np.degrees(np.arctan2(dz, horizontal)), HORIZON, ZENITH)
    return np.atleast_1d(azimuths), elevations, horizontal


def _fill_overhead_corners(
    points: Sequence[Point3D],
    azimuths: npt.NDArray[np.float64],
    elevations: npt.NDArray[np.float64],
    overhead: npt.NDArray[np.bool_],
) -> None:
    # Corners straight above/below the observer have no azimuth of their own;
    # take it from the closest corner that has one.
    coords = np.array([[p.x, p.y, p.z] for p in points], dtype=float)
    for i in np.flatnonzero(overhead):
        distances = np.linalg.norm(coords - coords[i], axis=1)
        distances[overhead] = np.inf
        nearest = int(np.argmin(distances))
        azimuths[i] = azimuths[nearest]
        elevations[i] = ZENITH


def project_wall(
    observer: Point3D,
    wall: WallExternalBuilding,
    config: ShadowConfig = DEFAULT_CONFIG,
) -> Shadow | None:
    """
    Compute the shadow a wall casts on the observer's sky.

    Parameters
    ----------
    observer
        Observation point.
    wall
        The wall to project.
    config
        Supplies the overhead tolerance and the maximum span.

    Returns
    -------
    shadow
        The angular quadrilateral of the wall, or None when the wall has no
        meaningful bounded image (every corner overhead, or an azimuth span
        wider than ``config.max_span`` once unwrapped).
    """
    corners = wall.corners()
    azimuths, elevations, horizontal = corner_angles(observer, corners)

    overhead = horizontal <= config.overhead_tolerance
    if overhead.all():
        logging.debug("Dropping wall %s: every corner is straight above or below the observer", wall.id)
        return None
    if overhead.any():
        _fill_overhead_corners(corners, azimuths, elevations, overhead)

    if not (np.isfinite(azimuths).all() and np.isfinite(elevations).all()):
        logging.debug("Dropping wall %s: non-finite angles", wall.id)
        return None

    span = angular_span(azimuths)
    if span > config.max_span:
        logging.debug("Dropping wall %s: azimuth span %.3f exceeds %.1f", wall.id, span, config.max_span)
        return None

    points = [ShadowPoint(azimuth=float(a), elevation=float(e)) for a, e in zip(azimuths, elevations)]
    return Shadow(
        id=wall.id,
        gid=wall.gid,
        cadastral_number=wall.cadastral_number,
        down_left=points[0],
        up_left=points[1],
        up_right=points[2],
        down_right=points[3],
    )


def project_walls(
    observer: Point3D,
    walls: Iterable[WallExternalBuilding],
    config: ShadowConfig = DEFAULT_CONFIG,
) -> list[Shadow]:
    """Project every wall, keeping only the ones that produce a shadow."""
    shadows = []
    for wall in walls:
        shadow = project_wall(observer, wall, config)
        if shadow is not None:
            shadows.append(shadow)
    return shadows
