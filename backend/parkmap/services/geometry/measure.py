# backend/parkmap/services/geometry/measure.py
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from pyproj import Geod
from shapely.errors import ShapelyError
from shapely.geometry import Point, shape

# 面積は WGS84 楕円体上の測地線面積（m²）
GEOD = Geod(ellps="WGS84")


class GeometryError(ValueError):
    pass


def _polygon(geometry: dict):
    if not isinstance(geometry, dict) or geometry.get("type") not in ("Polygon", "MultiPolygon"):
        raise GeometryError("geometry must be a GeoJSON Polygon")
    try:
        geom = shape(geometry)  # [lng, lat] 順
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError) as e:
        raise GeometryError(f"unparsable polygon: {e}") from e
    if geom.is_empty:
        raise GeometryError("empty polygon")
    if not geom.is_valid:
        raise GeometryError("self-intersecting polygon")
    return geom


def polygon_area_m2(geometry: dict) -> float:
    geom = _polygon(geometry)
    if geom.geom_type == "MultiPolygon":
        return float(sum(abs(GEOD.geometry_area_perimeter(p)[0]) for p in geom.geoms))
    area, _ = GEOD.geometry_area_perimeter(geom)
    return float(abs(area))


def try_polygon_area_m2(geometry: Optional[dict]) -> Optional[float]:
    # 不正な形状は「不明」として None
    if geometry is None:
        return None
    try:
        return polygon_area_m2(geometry)
    except GeometryError:
        return None


def contains_point(geometry: dict, lat: float, lng: float) -> bool:
    # 境界上の点も内側とみなす
    return _polygon(geometry).covers(Point(lng, lat))


def containing_ids(items: Iterable[Tuple[int, Optional[dict]]], lat: float, lng: float) -> list[int]:
    """IDs of the polygons containing the point; malformed polygons are skipped."""
    hits = []
    for item_id, geometry in items:
        if geometry is None:
            continue
        try:
            if contains_point(geometry, lat, lng):
                hits.append(item_id)
        except GeometryError:
            continue
    return hits


def representative_point(geometry: dict) -> Tuple[float, float]:
    """A (lat, lng) point guaranteed to lie inside the polygon."""
    pt = _polygon(geometry).representative_point()
    return pt.y, pt.x
