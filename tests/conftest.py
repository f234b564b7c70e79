"""
Shared pytest fixtures for skyshade tests.

This module provides common fixtures used across multiple test files. All
coordinates are local UTM-like meters with the observer at the origin.
"""

import pytest
from shapely.geometry import Polygon

from skyshade._extraction.types import CatastroBuilding, Overhang, Point3D


@pytest.fixture
def observer():
    """Observer at ground level at the origin."""
    return Point3D(0.0, 0.0, 0.0)


@pytest.fixture
def north_square():
    """10 m x 10 m footprint centered 20 m north of the origin."""
    return Polygon([(-5.0, 15.0), (5.0, 15.0), (5.0, 25.0), (-5.0, 25.0)])


@pytest.fixture
def north_building(north_square):
    """Three-floor building on the north square."""
    return CatastroBuilding(
        gid="101",
        refcat="1111111AA1111A",
        constru="III",
        footprint=north_square,
    )


@pytest.fixture
def own_building():
    """Building containing the origin, the observer's own construction."""
    return CatastroBuilding(
        gid="100",
        refcat="0000000AA0000A",
        constru="V",
        footprint=Polygon([(-4.0, -4.0), (4.0, -4.0), (4.0, 4.0), (-4.0, 4.0)]),
    )


@pytest.fixture
def south_building():
    """Two-floor building straddling the south direction."""
    return CatastroBuilding(
        gid="102",
        refcat="2222222AA2222A",
        constru="II",
        footprint=Polygon([(-6.0, -30.0), (6.0, -30.0), (6.0, -20.0), (-6.0, -20.0)]),
    )


@pytest.fixture
def adjacent_overhang():
    """Obstacle footprint starting one meter east of the origin."""
    return Overhang(
        footprint=Polygon([(1.0, -2.0), (3.0, -2.0), (3.0, 2.0), (1.0, 2.0)]),
        id="tree-1",
    )


@pytest.fixture
def building_record():
    """Spatial-store row for the north building, geometry as a JSON string."""
    return {
        "data": {
            "gid": 101,
            "area": 100.0,
            "geom": (
                '{"type": "MultiPolygon", "coordinates": '
                "[[[[-5.0, 15.0], [5.0, 15.0], [5.0, 25.0], [-5.0, 25.0], [-5.0, 15.0]]]]}"
            ),
            "refcat": "1111111AA1111A",
            "constru": "III",
        },
        "json_geometria": None,
    }
