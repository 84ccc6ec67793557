# marketplace/geometry.py
"""Polygon helpers for the map ("nazotte") search.

The exact containment test runs inside the store. On PostgreSQL it uses the
native geometric types; on SQLite the `polygon_contains` function is
registered per connection (see `db.py`) and evaluated with Shapely.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import Point, Polygon
from sqlalchemy import Boolean
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement

from .schemas import Coordinate

_POINT_RE = re.compile(r"\(\s*([-+0-9.eE]+)\s*,\s*([-+0-9.eE]+)\s*\)")


@dataclass(frozen=True)
class BoundingBox:
    min_latitude: float
    min_longitude: float
    max_latitude: float
    max_longitude: float


def bounding_box(coordinates: Sequence[Coordinate]) -> BoundingBox:
    if not coordinates:
        raise ValueError("bounding box of an empty polygon")
    lats = [c.latitude for c in coordinates]
    lons = [c.longitude for c in coordinates]
    return BoundingBox(min(lats), min(lons), max(lats), max(lons))


def polygon_text(coordinates: Sequence[Coordinate]) -> str:
    """Render vertices in PostgreSQL polygon literal form: ((lat,lon),...)."""
    points = ",".join("(%r,%r)" % (float(c.latitude), float(c.longitude)) for c in coordinates)
    return "(%s)" % points


def parse_polygon_text(text: str) -> List[Tuple[float, float]]:
    return [(float(a), float(b)) for a, b in _POINT_RE.findall(text or "")]


def contains_point(text: str, latitude: float, longitude: float) -> bool:
    vertices = parse_polygon_text(text)
    # Fewer than three vertices enclose no area.
    if len(vertices) < 3:
        return False
    return Polygon(vertices).contains(Point(latitude, longitude))


def sqlite_polygon_contains(text: Optional[str], latitude: Optional[float], longitude: Optional[float]) -> Optional[int]:
    if text is None or latitude is None or longitude is None:
        return None
    return 1 if contains_point(text, float(latitude), float(longitude)) else 0


class polygon_contains(FunctionElement):
    """polygon_contains(polygon_text, latitude, longitude) -> boolean"""

    name = "polygon_contains"
    type = Boolean()
    inherit_cache = True


@compiles(polygon_contains)
def _compile_polygon_contains(element, compiler, **kw):
    return "polygon_contains(%s)" % compiler.process(element.clauses, **kw)


@compiles(polygon_contains, "postgresql")
def _compile_polygon_contains_pg(element, compiler, **kw):
    polygon, latitude, longitude = list(element.clauses)
    return "CAST(%s AS polygon) @> point(%s, %s)" % (
        compiler.process(polygon, **kw),
        compiler.process(latitude, **kw),
        compiler.process(longitude, **kw),
    )
