"""
Removal of redundant shadows.

A shadow is redundant when every corner of it lies inside another shadow's
quadrilateral. This is a containment-only reduction: partially overlapping
shadows are all kept and never merged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np
import shapely
from shapely import Polygon

from skyshade._extraction.types import Shadow
from skyshade._utils.geometry.angles import interval_contains, normalize_azimuth, unwrap_near, unwrap_sequence
from skyshade.config import DEFAULT_CONFIG, ShadowConfig


def get_azimuth_interval(shadow: Shadow) -> tuple[float, float]:
    """
    Clockwise azimuth interval covered by a shadow.

    Returns
    -------
    start, end
        Normalized azimuths; ``start`` may be greater than ``end`` when the
        shadow straddles South.
    """
    unwrapped = unwrap_sequence(shadow.azimuths())
    return normalize_azimuth(float(unwrapped.min())), normalize_azimuth(float(unwrapped.max()))


def shadow_polygon(shadow: Shadow, reference: float | None = None) -> Polygon:
    """
    Quadrilateral of a shadow in (azimuth, elevation) space.

    Parameters
    ----------
    shadow
        The shadow.
    reference
        Azimuth the corners are unwrapped toward. Defaults to the first corner.

    Returns
    -------
    polygon
        A shapely Polygon whose x axis is the unwrapped azimuth and y axis the
        elevation.
    """
    azimuths = np.asarray(shadow.azimuths(), dtype=float)
    if reference is None:
        reference = float(azimuths[0])
    unwrapped = np.atleast_1d(unwrap_near(azimuths, reference))
    return Polygon(list(zip(unwrapped, shadow.elevations())))


class _ContainmentRegion:
    """Precomputed outer shape of one shadow for repeated containment tests."""

    def __init__(self, shadow: Shadow, tolerance: float) -> None:
        unwrapped = unwrap_sequence(shadow.azimuths())
        self.center = float((unwrapped.min() + unwrapped.max()) / 2.0)
        self.interval = get_azimuth_interval(shadow)
        self.tolerance = tolerance
        polygon = shadow_polygon(shadow, reference=float(unwrapped[0]))
        self.region = polygon.buffer(tolerance) if tolerance > 0 else polygon
        shapely.prepare(self.region)

    def covers(self, shadow: Shadow) -> bool:
        inner_interval = get_azimuth_interval(shadow)
        if not interval_contains(self.interval, inner_interval, tolerance=self.tolerance):
            return False
        azimuths = np.atleast_1d(unwrap_near(np.asarray(shadow.azimuths(), dtype=float), self.center))
        points = shapely.points(np.column_stack([azimuths, shadow.elevations()]))
        return bool(shapely.covers(self.region, points).all())


def is_shadow_contained(
    inner: Shadow,
    outer: Shadow,
    tolerance: float = DEFAULT_CONFIG.containment_tolerance,
) -> bool:
    """
    Check whether every corner of ``inner`` lies inside ``outer``.

    Parameters
    ----------
    inner
        The shadow that may be redundant.
    outer
        The shadow that may cover it.
    tolerance
        Slack in degrees around ``outer``.

    Returns
    -------
    contained
        True if all four corners of ``inner`` are inside the quadrilateral of
        ``outer``, comparing azimuths on the circle.
    """
    return _ContainmentRegion(outer, tolerance).covers(inner)


def clean_shadows(
    shadows: Sequence[Shadow],
    config: ShadowConfig = DEFAULT_CONFIG,
) -> list[Shadow]:
    """
    Drop shadows fully contained in another shadow.

    A shadow is dropped when another one contains it without being contained
    in it, or when both contain each other (identical within tolerance) and
    the other one comes first. Survivors keep their input order.

    Parameters
    ----------
    shadows
        Shadows in the order they were produced.
    config
        Supplies the containment tolerance.

    Returns
    -------
    cleaned
        The shadows that are not redundant.
    """
    shadows = list(shadows)
    if len(shadows) <= 1:
        return shadows

    regions = [_ContainmentRegion(shadow, config.containment_tolerance) for shadow in shadows]
    cache: dict[tuple[int, int], bool] = {}

    def contains(outer: int, inner: int) -> bool:
        key = (outer, inner)
        if key not in cache:
            cache[key] = regions[outer].covers(shadows[inner])
        return cache[key]

    cleaned = []
    for i, shadow in enumerate(shadows):
        redundant = any(
            j != i and contains(j, i) and (j < i or not contains(i, j))
            for j in range(len(shadows))
        )
        if not redundant:
            cleaned.append(shadow)

    logging.debug("Cleaning kept %d of %d shadows", len(cleaned), len(shadows))
    return cleaned


def remove_sector_shadows(
    shadows: Iterable[Shadow],
    sectors: Iterable[tuple[float, float]],
    tolerance: float = 0.0,
) -> list[Shadow]:
    """
    Drop shadows lying entirely inside any of the given azimuth sectors.

    Parameters
    ----------
    shadows
        Shadows to filter.
    sectors
        Clockwise ``(start, end)`` azimuth sectors, e.g. the part of the sky
        the sun never crosses at the site's latitude.
    tolerance
        Slack in degrees around each sector.

    Returns
    -------
    kept
        Shadows reaching outside every sector, in input order.
    """
    sectors = list(sectors)
    kept = []
    for shadow in shadows:
        interval = get_azimuth_interval(shadow)
        if any(interval_contains(sector, interval, tolerance=tolerance) for sector in sectors):
            continue
        kept.append(shadow)
    return kept
