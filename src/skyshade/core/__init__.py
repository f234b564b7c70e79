"""
High-level shadow API.

Provides:
    compute_shadows() - shadows for already-fetched buildings and overhangs
    ShadowService - request/response orchestration around a spatial store
"""

from skyshade.core.service import (
    GeoDataFrameStore,
    GeometryStore,
    ShadowCalculationRequest,
    ShadowCalculationResponse,
    ShadowService,
)
from skyshade.core.shadows import compute_shadows, find_reference_building, find_reference_buildings

__all__ = [
    "compute_shadows",
    "find_reference_building",
    "find_reference_buildings",
    "GeoDataFrameStore",
    "GeometryStore",
    "ShadowCalculationRequest",
    "ShadowCalculationResponse",
    "ShadowService",
]
