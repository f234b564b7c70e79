"""
skyshade: sky occlusion from neighbouring buildings.

Projects nearby building and obstacle footprints onto the sky seen from an
observation point, as quadrilaterals in (azimuth, elevation), and removes the
ones already covered by a larger shadow.

Quick Start
-----------
>>> import skyshade
>>> from shapely.geometry import Polygon
>>>
>>> building = skyshade.CatastroBuilding(
...     gid="1",
...     refcat="9872023VH5797S",
...     constru="III",
...     footprint=Polygon([(-5, 15), (5, 15), (5, 25), (-5, 25)]),
... )
>>> shadows = skyshade.compute_shadows([building], [], skyshade.Point3D(0, 0, 0))
>>> [round(a, 2) for a in shadows[0].azimuths()]
[-18.43, -18.43, 18.43, 18.43]

Conventions
-----------
World coordinates are UTM meters in one SRID. Azimuth is in [-180, 180),
0 at North and increasing clockwise. Elevation is in [0, 90], 0 at the horizon.

Modules
-------
core
    compute_shadows and the request/response service
config
    ShadowConfig and default constants
"""

from __future__ import annotations


# Version - import first as it has no dependencies
from skyshade._version import __version__

from skyshade._extraction.cleaning import clean_shadows
from skyshade._extraction.floors import get_floor_count
from skyshade._extraction.projection import project_wall
from skyshade._extraction.types import (
    CatastroBuilding,
    Overhang,
    Point3D,
    Shadow,
    ShadowPoint,
    WallExternalBuilding,
)
from skyshade._extraction.walls import building_to_walls, overhang_to_walls
from skyshade.config import DEFAULT_CONFIG, ShadowConfig
from skyshade.core.service import (
    GeoDataFrameStore,
    ShadowCalculationRequest,
    ShadowCalculationResponse,
    ShadowService,
)
from skyshade.core.shadows import compute_shadows
from skyshade.errors import InvalidFootprintError, ShadowCalculationError, SkyshadeError


__all__ = [
    # Meta
    "__version__",
    # Core API
    "compute_shadows",
    "ShadowService",
    "GeoDataFrameStore",
    "ShadowCalculationRequest",
    "ShadowCalculationResponse",
    # Pipeline steps
    "building_to_walls",
    "overhang_to_walls",
    "project_wall",
    "clean_shadows",
    "get_floor_count",
    # Types
    "CatastroBuilding",
    "Overhang",
    "Point3D",
    "Shadow",
    "ShadowPoint",
    "WallExternalBuilding",
    # Configuration
    "ShadowConfig",
    "DEFAULT_CONFIG",
    # Errors
    "SkyshadeError",
    "InvalidFootprintError",
    "ShadowCalculationError",
]

# Version tuple for programmatic access
__version_info__ = tuple(int(x) for x in __version__.split(".")[:3])
