"""
Value types passed between the extruder, the projector and the cleaner.

Python attributes are snake_case; ``to_dict`` emits the wire field names
(``cadastralNumber``, ``downLeft``...) expected by API consumers.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from typing import Any

from shapely.geometry import MultiPolygon, Polygon, shape

CORNER_KEYS = ("downLeft", "upLeft", "upRight", "downRight")


@dataclass(frozen=True)
class Point3D:
    """
    World position.

    Parameters
    ----------
    x
        UTM easting in meters.
    y
        UTM northing in meters.
    z
        Height in meters above the common datum.
    """

    x: float
    y: float
    z: float = 0.0

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ShadowPoint:
    """Direction seen from the observer, in degrees."""

    azimuth: float
    elevation: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class WallExternalBuilding:
    """
    One vertical face of a building or overhang.

    ``down_left``/``up_left`` stand on the first vertex of the footprint edge
    and ``up_right``/``down_right`` on the second, so the footprint winding is
    carried through to the projected shadow.
    """

    id: str
    gid: str
    cadastral_number: str
    down_left: Point3D
    up_left: Point3D
    up_right: Point3D
    down_right: Point3D

    def corners(self) -> tuple[Point3D, Point3D, Point3D, Point3D]:
        return (self.down_left, self.up_left, self.up_right, self.down_right)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "gid": self.gid,
            "cadastralNumber": self.cadastral_number,
            "points": {key: corner.to_dict() for key, corner in zip(CORNER_KEYS, self.corners())},
        }


@dataclass(frozen=True)
class Shadow:
    """Angular image of one wall: a quadrilateral in (azimuth, elevation)."""

    id: str
    gid: str
    cadastral_number: str
    down_left: ShadowPoint
    up_left: ShadowPoint
    up_right: ShadowPoint
    down_right: ShadowPoint

    def corners(self) -> tuple[ShadowPoint, ShadowPoint, ShadowPoint, ShadowPoint]:
        return (self.down_left, self.up_left, self.up_right, self.down_right)

    def azimuths(self) -> list[float]:
        return [corner.azimuth for corner in self.corners()]

    def elevations(self) -> list[float]:
        return [corner.elevation for corner in self.corners()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "gid": self.gid,
            "cadastralNumber": self.cadastral_number,
            "points": {key: corner.to_dict() for key, corner in zip(CORNER_KEYS, self.corners())},
        }


@dataclass
class CatastroBuilding:
    """
    Building footprint as returned by the cadastral spatial store.

    Parameters
    ----------
    gid
        Store identifier of the construction.
    refcat
        Cadastral reference of the parcel the construction belongs to.
    constru
        Construction-type string encoding the floor count in Roman numerals
        (e.g. ``"III"``, ``"-I+IV"``).
    footprint
        Footprint polygon(s) in UTM meters.
    area
        Footprint area reported by the store, if any.
    """

    gid: str
    refcat: str
    constru: str | None
    footprint: Polygon | MultiPolygon
    area: float | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> CatastroBuilding:
        """
        Build from a spatial-store row.

        Accepts either ``{"data": {...}}`` rows or the inner ``data`` dict.
        ``geom`` may be a GeoJSON dict or a JSON string of one.

        Raises
        ------
        ValueError
            If the row has no usable geometry or cadastral reference.
        """
        data = record.get("data", record)
        geom = data.get("geom")
        if isinstance(geom, str):
            geom = json.loads(geom)
        if not geom:
            msg = f"record {data.get('gid')!r} has no geometry"
            raise ValueError(msg)

        footprint = shape(geom)
        if not isinstance(footprint, (Polygon, MultiPolygon)):
            msg = f"record {data.get('gid')!r} has a {footprint.geom_type} geometry"
            raise ValueError(msg)

        refcat = data.get("refcat")
        if not refcat:
            msg = f"record {data.get('gid')!r} has no cadastral reference"
            raise ValueError(msg)

        area = data.get("area")
        return cls(
            gid=str(data.get("gid", "")),
            refcat=str(refcat),
            constru=data.get("constru"),
            footprint=footprint,
            area=float(area) if area is not None else None,
        )


@dataclass
class Overhang:
    """
    Non-building obstacle (tree, canopy...) modelled as walls of unbounded height.

    When the footprint carries z values they are used as the base of each
    wall; otherwise ``base_height`` is.
    """

    footprint: Polygon | MultiPolygon
    id: str | None = None
    base_height: float = 0.0

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Overhang:
        """Build from a spatial-store row, same layout as buildings."""
        data = record.get("data", record)
        geom = data.get("geom")
        if isinstance(geom, str):
            geom = json.loads(geom)
        if not geom:
            msg = "overhang record has no geometry"
            raise ValueError(msg)

        footprint = shape(geom)
        if not isinstance(footprint, (Polygon, MultiPolygon)):
            msg = f"overhang has a {footprint.geom_type} geometry"
            raise ValueError(msg)

        overhang_id = data.get("id", data.get("gid"))
        return cls(
            footprint=footprint,
            id=str(overhang_id) if overhang_id is not None else None,
            base_height=float(data.get("base_height", 0.0)),
        )
