"""
Request/response orchestration around the shadow engine.

Provides:
    ShadowService.calculate_shadows(request)
    ShadowService.calculate_shadows_for_parcel(refcat)
    ShadowService.get_buildings_in_area(request)

The service computes the search box, asks a spatial store for the candidate
geometries, parses them and runs ``compute_shadows``. Any object implementing
``GeometryStore`` can back it; ``GeoDataFrameStore`` answers from in-memory
GeoDataFrames.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import geopandas as gpd
from shapely.geometry import box, mapping, shape

from skyshade._extraction.types import CatastroBuilding, Overhang, Point3D, Shadow
from skyshade._utils.geometry.point_geometry import lonlat_to_utm
from skyshade.config import DEFAULT_BUFFER_METERS, DEFAULT_CONFIG, ShadowConfig
from skyshade.core.shadows import compute_shadows
from skyshade.errors import ShadowCalculationError

NO_BUILDINGS_MESSAGE = "No buildings found in the specified area"
SUCCESS_MESSAGE = "Shadow calculation successful"


# =============================================================================
# Request / response
# =============================================================================

@dataclass
class ShadowCalculationRequest:
    """
    Parameters of a shadow calculation.

    Parameters
    ----------
    center_x
        Observer easting in UTM meters.
    center_y
        Observer northing in UTM meters.
    center_z
        Observer height in meters. Default is 0.
    buffer_meters
        Half side of the square searched for buildings. Default is 100.
    """

    center_x: float
    center_y: float
    center_z: float = 0.0
    buffer_meters: float = DEFAULT_BUFFER_METERS

    def __post_init__(self) -> None:
        """Validate parameter ranges after initialization."""
        if self.center_x is None or self.center_y is None:
            msg = "center_x and center_y are required"
            raise ValueError(msg)
        if self.center_z is None:
            self.center_z = 0.0
        if self.buffer_meters is None:
            self.buffer_meters = DEFAULT_BUFFER_METERS

        if not all(math.isfinite(v) for v in (self.center_x, self.center_y, self.center_z)):
            msg = "center coordinates must be finite"
            raise ValueError(msg)

        if not math.isfinite(self.buffer_meters) or self.buffer_meters <= 0:
            msg = "buffer_meters must be a positive number"
            raise ValueError(msg)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ShadowCalculationRequest:
        """Build from the wire format (``centerX``, ``centerY``, ``centerZ``, ``bufferMeters``)."""
        if "centerX" not in payload or "centerY" not in payload:
            msg = "centerX and centerY are required"
            raise ValueError(msg)
        return cls(
            center_x=float(payload["centerX"]),
            center_y=float(payload["centerY"]),
            center_z=_optional_float(payload.get("centerZ"), 0.0),
            buffer_meters=_optional_float(payload.get("bufferMeters"), DEFAULT_BUFFER_METERS),
        )

    @classmethod
    def from_lonlat(
        cls,
        longitude: float,
        latitude: float,
        center_z: float = 0.0,
        buffer_meters: float = DEFAULT_BUFFER_METERS,
        srid: int | None = None,
    ) -> ShadowCalculationRequest:
        """Build a request from a WGS84 position, projecting it to UTM."""
        x, y, _ = lonlat_to_utm(longitude, latitude, srid=srid)
        return cls(center_x=x, center_y=y, center_z=center_z, buffer_meters=buffer_meters)

    @property
    def center(self) -> Point3D:
        return Point3D(self.center_x, self.center_y, self.center_z)

    def bounds(self) -> dict[str, dict[str, float]]:
        """Search box around the center, in UTM meters."""
        return {
            "bottom_left": {"x": self.center_x - self.buffer_meters, "y": self.center_y - self.buffer_meters},
            "top_right": {"x": self.center_x + self.buffer_meters, "y": self.center_y + self.buffer_meters},
        }


@dataclass
class ShadowCalculationResponse:
    """Result of a shadow calculation with the query that produced it."""

    message: str
    data: list[Shadow] = field(default_factory=list)
    query: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "data": [shadow.to_dict() for shadow in self.data],
            "query": self.query,
        }


def _optional_float(value: Any, default: float) -> float:
    return default if value is None else float(value)


def _build_query(request: ShadowCalculationRequest) -> dict[str, Any]:
    return {
        "center": request.center.to_dict(),
        "buffer": request.buffer_meters,
        "bounds": request.bounds(),
    }


# =============================================================================
# Spatial store
# =============================================================================

class GeometryStore(Protocol):
    """Spatial store answering bounding box queries in one UTM SRID."""

    def get_intersecting_geometries(
        self,
        bottom_left_x: float,
        bottom_left_y: float,
        top_right_x: float,
        top_right_y: float,
    ) -> list[dict[str, Any]]:
        """Building rows ``{"data": {gid, area, geom, refcat, constru}}`` intersecting the box."""
        ...

    def get_intersecting_overhangs(
        self,
        bottom_left_x: float,
        bottom_left_y: float,
        top_right_x: float,
        top_right_y: float,
    ) -> list[dict[str, Any]]:
        """Overhang rows ``{"data": {id, geom}}`` intersecting the box."""
        ...

    def get_parcel(self, refcat: str) -> dict[str, Any] | None:
        """Parcel centroid ``{"refcat", "x", "y"}`` or None when unknown."""
        ...


class GeoDataFrameStore:
    """
    ``GeometryStore`` backed by GeoDataFrames.

    Parameters
    ----------
    buildings
        Building footprints with ``gid``, ``refcat`` and ``constru`` columns.
    overhangs
        Optional obstacle footprints.
    parcels
        Optional parcel polygons with a ``refcat`` column; centroids are used
        as observation points.
    """

    def __init__(
        self,
        buildings: gpd.GeoDataFrame,
        overhangs: gpd.GeoDataFrame | None = None,
        parcels: gpd.GeoDataFrame | None = None,
        *,
        gid_column: str = "gid",
        refcat_column: str = "refcat",
        constru_column: str = "constru",
    ) -> None:
        if not isinstance(buildings, gpd.GeoDataFrame):
            raise TypeError(f"Expected GeoDataFrame, got {type(buildings).__name__}")
        self.buildings = buildings
        self.overhangs = overhangs
        self.parcels = parcels
        self.gid_column = gid_column
        self.refcat_column = refcat_column
        self.constru_column = constru_column

    @classmethod
    def from_geojson(
        cls,
        buildings: str | Path | dict[str, Any],
        overhangs: str | Path | dict[str, Any] | None = None,
        parcels: str | Path | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> GeoDataFrameStore:
        """Load the layers from GeoJSON files or FeatureCollection dicts."""
        return cls(
            _load_geojson_to_gdf(buildings),
            _load_geojson_to_gdf(overhangs) if overhangs is not None else None,
            _load_geojson_to_gdf(parcels) if parcels is not None else None,
            **kwargs,
        )

    def get_intersecting_geometries(
        self,
        bottom_left_x: float,
        bottom_left_y: float,
        top_right_x: float,
        top_right_y: float,
    ) -> list[dict[str, Any]]:
        rows = []
        for index, row in _query_box(self.buildings, bottom_left_x, bottom_left_y, top_right_x, top_right_y):
            geometry = row.geometry
            rows.append({
                "data": {
                    "gid": row.get(self.gid_column, index),
                    "area": float(geometry.area),
                    "geom": mapping(geometry),
                    "refcat": row.get(self.refcat_column),
                    "constru": row.get(self.constru_column),
                }
            })
        return rows

    def get_intersecting_overhangs(
        self,
        bottom_left_x: float,
        bottom_left_y: float,
        top_right_x: float,
        top_right_y: float,
    ) -> list[dict[str, Any]]:
        if self.overhangs is None:
            return []
        return [
            {"data": {"id": row.get("id", index), "geom": mapping(row.geometry)}}
            for index, row in _query_box(self.overhangs, bottom_left_x, bottom_left_y, top_right_x, top_right_y)
        ]

    def get_parcel(self, refcat: str) -> dict[str, Any] | None:
        if self.parcels is None:
            return None
        matches = self.parcels[self.parcels[self.refcat_column] == refcat]
        if matches.empty:
            return None
        centroid = matches.geometry.iloc[0].centroid
        return {"refcat": refcat, "x": float(centroid.x), "y": float(centroid.y)}


def _query_box(
    gdf: gpd.GeoDataFrame,
    bottom_left_x: float,
    bottom_left_y: float,
    top_right_x: float,
    top_right_y: float,
):
    search_box = box(bottom_left_x, bottom_left_y, top_right_x, top_right_y)
    candidate_idxs = list(gdf.sindex.intersection(search_box.bounds))
    candidates = gdf.iloc[candidate_idxs]
    for index, row in candidates.iterrows():
        if row.geometry is None or row.geometry.is_empty:
            continue
        if row.geometry.intersects(search_box):
            yield index, row


def _load_geojson_to_gdf(source: str | Path | dict) -> gpd.GeoDataFrame:
    """Load GeoJSON from path or dict into GeoDataFrame."""
    if isinstance(source, dict):
        if source.get("type") == "FeatureCollection":
            return gpd.GeoDataFrame.from_features(source["features"])
        elif source.get("type") == "Feature":
            return gpd.GeoDataFrame.from_features([source])
        elif source.get("type") in ("Polygon", "MultiPolygon"):
            return gpd.GeoDataFrame(geometry=[shape(source)])
        else:
            raise ValueError(f"Unsupported GeoJSON type: {source.get('type')}")
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"GeoJSON file not found: {path}")
        return gpd.read_file(path)


# =============================================================================
# Service
# =============================================================================

class ShadowService:
    """
    Shadow calculation backed by a spatial store.

    Parameters
    ----------
    store
        Any ``GeometryStore`` implementation.
    config
        Engine configuration. Defaults to ``DEFAULT_CONFIG``.
    """

    def __init__(self, store: GeometryStore, config: ShadowConfig | None = None) -> None:
        self.store = store
        self.config = config or DEFAULT_CONFIG

    def calculate_shadows(
        self,
        request: ShadowCalculationRequest,
        *,
        reference_refcat: str | None = None,
    ) -> ShadowCalculationResponse:
        """
        Calculate the shadows seen from the request's center.

        Parameters
        ----------
        request
            Observer position and search radius.
        reference_refcat
            Cadastral reference of the observer's building, excluded from the
            occluders. Looked up from the footprints when not given.

        Returns
        -------
        ShadowCalculationResponse
            Shadows plus the query that produced them.

        Raises
        ------
        ShadowCalculationError
            If the spatial store fails.
        """
        query = _build_query(request)
        buildings = self.get_buildings_in_area(request)
        overhangs = self._get_overhangs_in_area(request)

        if not buildings and not overhangs:
            return ShadowCalculationResponse(message=NO_BUILDINGS_MESSAGE, data=[], query=query)

        shadows = compute_shadows(
            buildings,
            overhangs,
            request.center,
            reference_refcat=reference_refcat,
            config=self.config,
        )
        return ShadowCalculationResponse(message=SUCCESS_MESSAGE, data=shadows, query=query)

    def calculate_shadows_for_parcel(
        self,
        refcat: str,
        buffer_meters: float | None = None,
    ) -> ShadowCalculationResponse:
        """
        Calculate the shadows seen from a parcel's centroid at ground level.

        The parcel's own constructions are excluded from the occluders.

        Raises
        ------
        ShadowCalculationError
            If the parcel is unknown or the store fails.
        """
        try:
            parcel = self.store.get_parcel(refcat)
        except Exception as error:
            logging.exception("Error fetching parcel %s", refcat)
            raise ShadowCalculationError(f"Failed to fetch parcel {refcat}: {error}") from error

        if not parcel or parcel.get("x") is None or parcel.get("y") is None:
            msg = f"Parcel {refcat} not found or missing geometry"
            raise ShadowCalculationError(msg)

        request = ShadowCalculationRequest(
            center_x=float(parcel["x"]),
            center_y=float(parcel["y"]),
            center_z=0.0,
            buffer_meters=buffer_meters or self.config.default_buffer,
        )
        return self.calculate_shadows(request, reference_refcat=refcat)

    def get_buildings_in_area(self, request: ShadowCalculationRequest) -> list[CatastroBuilding]:
        """
        Fetch and parse the buildings inside the request's search box.

        Rows that cannot be parsed are logged and skipped.
        """
        rows = self._fetch(self.store.get_intersecting_geometries, request, "buildings")
        buildings = []
        for row in rows:
            try:
                buildings.append(CatastroBuilding.from_record(row))
            except (ValueError, TypeError, KeyError, AttributeError) as error:
                logging.warning("Skipping unparsable building record: %s", error)
        return buildings

    def _get_overhangs_in_area(self, request: ShadowCalculationRequest) -> list[Overhang]:
        rows = self._fetch(self.store.get_intersecting_overhangs, request, "overhangs")
        overhangs = []
        for row in rows:
            try:
                overhangs.append(Overhang.from_record(row))
            except (ValueError, TypeError, KeyError, AttributeError) as error:
                logging.warning("Skipping unparsable overhang record: %s", error)
        return overhangs

    def _fetch(self, query, request: ShadowCalculationRequest, layer: str) -> list[dict[str, Any]]:
        bounds = request.bounds()
        try:
            rows = query(
                bounds["bottom_left"]["x"],
                bounds["bottom_left"]["y"],
                bounds["top_right"]["x"],
                bounds["top_right"]["y"],
            )
        except Exception as error:
            logging.exception("Error fetching %s", layer)
            raise ShadowCalculationError(f"Failed to fetch {layer}: {error}") from error
        return list(rows or [])
