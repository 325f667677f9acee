# Copyright 2025 DeepMind Technologies Limited.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Well-Known Text (WKT) geometries.

Six 2D geometry types are supported: POINT, LINESTRING, POLYGON, MULTIPOINT,
MULTILINESTRING and MULTIPOLYGON, with `lon lat` ordinates. Each type is a
frozen dataclass that knows its keyword, how to write its body and how to
walk its coordinates, so no code branches on type-name strings.

Written WKT has no optional whitespace and uses the shortest positional
number that reads back to the same float, so `to_wkt(parse_wkt(s))` is stable
and `parse_wkt(to_wkt(g)) == g`.
"""

from collections.abc import Callable, Iterator, Sequence
import dataclasses
import re
from typing import ClassVar

from geoconv import coords
from geoconv import errors
from geoconv import utils
import numpy as np
import shapely.geometry

Coordinate = coords.Coordinate
Ring = tuple[Coordinate, ...]


def _coordinate_text(c: Coordinate) -> str:
  return f"{utils.format_number(c.lon)} {utils.format_number(c.lat)}"


def _sequence_text(cs: Sequence[Coordinate]) -> str:
  return "(" + ",".join(_coordinate_text(c) for c in cs) + ")"


def _line(points: Sequence[Coordinate]) -> Ring:
  points = tuple(points)
  if len(points) < 2:
    raise errors.MalformedWKT(
        f"A line needs at least 2 points, got {len(points)}.")
  return points


def _ring(points: Sequence[Coordinate]) -> Ring:
  points = tuple(points)
  if len(points) < 4:
    raise errors.MalformedWKT(
        f"A polygon ring needs at least 4 points, got {len(points)}.")
  if points[0] != points[-1]:
    raise errors.MalformedWKT(
        f"Polygon ring is not closed: {points[0]} != {points[-1]}.")
  return points


def _non_empty(name: str, items: Sequence[object]) -> tuple[object, ...]:
  items = tuple(items)
  if not items:
    raise errors.MalformedWKT(f"{name} needs at least one member.")
  return items


@dataclasses.dataclass(frozen=True)
class Point:
  coordinate: Coordinate
  wkt_type: ClassVar[str] = "POINT"

  def iter_coordinates(self) -> Iterator[Coordinate]:
    yield self.coordinate

  def body(self) -> str:
    return "(" + _coordinate_text(self.coordinate) + ")"

  def to_shapely(self) -> shapely.geometry.Point:
    return shapely.geometry.Point(self.coordinate.as_tuple())


@dataclasses.dataclass(frozen=True)
class LineString:
  points: tuple[Coordinate, ...]
  wkt_type: ClassVar[str] = "LINESTRING"

  def __post_init__(self):
    object.__setattr__(self, "points", _line(self.points))

  def iter_coordinates(self) -> Iterator[Coordinate]:
    yield from self.points

  def body(self) -> str:
    return _sequence_text(self.points)

  def to_shapely(self) -> shapely.geometry.LineString:
    return shapely.geometry.LineString([c.as_tuple() for c in self.points])


@dataclasses.dataclass(frozen=True)
class Polygon:
  """A polygon: the exterior ring first, then any holes."""
  rings: tuple[Ring, ...]
  wkt_type: ClassVar[str] = "POLYGON"

  def __post_init__(self):
    rings = _non_empty("POLYGON", self.rings)
    object.__setattr__(self, "rings", tuple(_ring(r) for r in rings))

  def iter_coordinates(self) -> Iterator[Coordinate]:
    for ring in self.rings:
      yield from ring

  def body(self) -> str:
    return "(" + ",".join(_sequence_text(r) for r in self.rings) + ")"

  def to_shapely(self) -> shapely.geometry.Polygon:
    shell, *holes = [[c.as_tuple() for c in r] for r in self.rings]
    return shapely.geometry.Polygon(shell, holes)


@dataclasses.dataclass(frozen=True)
class MultiPoint:
  points: tuple[Coordinate, ...]
  wkt_type: ClassVar[str] = "MULTIPOINT"

  def __post_init__(self):
    object.__setattr__(self, "points", _non_empty("MULTIPOINT", self.points))

  def iter_coordinates(self) -> Iterator[Coordinate]:
    yield from self.points

  def body(self) -> str:
    return "(" + ",".join(
        "(" + _coordinate_text(c) + ")" for c in self.points) + ")"

  def to_shapely(self) -> shapely.geometry.MultiPoint:
    return shapely.geometry.MultiPoint([c.as_tuple() for c in self.points])


@dataclasses.dataclass(frozen=True)
class MultiLineString:
  lines: tuple[tuple[Coordinate, ...], ...]
  wkt_type: ClassVar[str] = "MULTILINESTRING"

  def __post_init__(self):
    lines = _non_empty("MULTILINESTRING", self.lines)
    object.__setattr__(self, "lines", tuple(_line(l) for l in lines))

  def iter_coordinates(self) -> Iterator[Coordinate]:
    for line in self.lines:
      yield from line

  def body(self) -> str:
    return "(" + ",".join(_sequence_text(l) for l in self.lines) + ")"

  def to_shapely(self) -> shapely.geometry.MultiLineString:
    return shapely.geometry.MultiLineString(
        [[c.as_tuple() for c in l] for l in self.lines])


@dataclasses.dataclass(frozen=True)
class MultiPolygon:
  polygons: tuple[Polygon, ...]
  wkt_type: ClassVar[str] = "MULTIPOLYGON"

  def __post_init__(self):
    polygons = _non_empty("MULTIPOLYGON", self.polygons)
    object.__setattr__(self, "polygons", tuple(
        p if isinstance(p, Polygon) else Polygon(p) for p in polygons))

  def iter_coordinates(self) -> Iterator[Coordinate]:
    for polygon in self.polygons:
      yield from polygon.iter_coordinates()

  def body(self) -> str:
    return "(" + ",".join(p.body() for p in self.polygons) + ")"

  def to_shapely(self) -> shapely.geometry.MultiPolygon:
    return shapely.geometry.MultiPolygon(
        [p.to_shapely() for p in self.polygons])


Geometry = (Point | LineString | Polygon | MultiPoint | MultiLineString |
            MultiPolygon)

_TOKEN_RE = re.compile(r"""
    (?P<word>[A-Za-z]+)
  | (?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<open>\()
  | (?P<close>\))
  | (?P<comma>,)
  | (?P<space>\s+)
""", re.VERBOSE)


class _Parser:
  """Recursive-descent parser over WKT tokens."""

  def __init__(self, text: str):
    self.tokens = []
    pos = 0
    while pos < len(text):
      m = _TOKEN_RE.match(text, pos)
      if not m:
        raise errors.MalformedWKT(
            f"Unexpected character {text[pos]!r} at position {pos}.")
      if m.lastgroup != "space":
        self.tokens.append((m.lastgroup, m.group(), pos))
      pos = m.end()
    self.i = 0

  def _peek(self) -> str | None:
    return self.tokens[self.i][0] if self.i < len(self.tokens) else None

  def _take(self, kind: str) -> str:
    if self.i >= len(self.tokens):
      raise errors.MalformedWKT(f"Expected {kind}, got end of text.")
    tok_kind, value, pos = self.tokens[self.i]
    if tok_kind != kind:
      raise errors.MalformedWKT(
          f"Expected {kind}, got {value!r} at position {pos}.")
    self.i += 1
    return value

  def sequence(self, item: Callable[[], object]) -> list[object]:
    """`( item, item, ... )`."""
    self._take("open")
    items = [item()]
    while self._peek() == "comma":
      self._take("comma")
      items.append(item())
    self._take("close")
    return items

  def coordinate(self) -> Coordinate:
    lon = float(self._take("number"))
    lat = float(self._take("number"))
    if self._peek() == "number":
      raise errors.MalformedWKT("Only 2D `lon lat` coordinates are supported.")
    return Coordinate(lon, lat)

  def coordinates(self) -> list[Coordinate]:
    return self.sequence(self.coordinate)

  def point(self) -> Point:
    self._take("open")
    c = self.coordinate()
    self._take("close")
    return Point(c)

  def multipoint_member(self) -> Coordinate:
    # Members may be written `(x y)` or bare `x y`.
    if self._peek() == "open":
      return self.point().coordinate
    return self.coordinate()

  def geometry(self) -> Geometry:
    keyword = self._take("word").upper()
    for suffix in ("ZM", "Z", "M"):
      base = keyword.removesuffix(suffix)
      if base != keyword and base in _PARSERS:
        raise errors.MalformedWKT(
            f"Only 2D geometries are supported, got {keyword}.")
    if keyword not in _PARSERS:
      raise errors.UnsupportedGeometryType(
          f"Unsupported geometry type {keyword!r}; expected one of "
          f"{', '.join(_PARSERS)}.")
    if self._peek() == "word":
      modifier = self._take("word").upper()
      if modifier == "EMPTY":
        raise errors.MalformedWKT(f"Empty {keyword} is not supported.")
      raise errors.MalformedWKT(
          f"Only 2D geometries are supported, got {keyword} {modifier}.")
    geometry = _PARSERS[keyword](self)
    if self.i != len(self.tokens):
      _, value, pos = self.tokens[self.i]
      raise errors.MalformedWKT(
          f"Unexpected {value!r} at position {pos} after the geometry.")
    return geometry


_PARSERS: dict[str, Callable[[_Parser], Geometry]] = {
    Point.wkt_type: lambda p: p.point(),
    LineString.wkt_type: lambda p: LineString(p.coordinates()),
    Polygon.wkt_type: lambda p: Polygon(p.sequence(p.coordinates)),
    MultiPoint.wkt_type: lambda p: MultiPoint(
        p.sequence(p.multipoint_member)),
    MultiLineString.wkt_type: lambda p: MultiLineString(
        p.sequence(p.coordinates)),
    MultiPolygon.wkt_type: lambda p: MultiPolygon(
        p.sequence(lambda: Polygon(p.sequence(p.coordinates)))),
}


def parse_wkt(text: str) -> Geometry:
  """Parses WKT text into a geometry.

  Args:
    text: WKT of one of the six supported types, e.g. `POINT(-0.1278 51.5077)`.
      Keywords are case-insensitive and whitespace is free.

  Returns:
    The parsed geometry.

  Raises:
    UnsupportedGeometryType: for any other geometry keyword.
    MalformedWKT: for syntax errors, EMPTY, 3D/measured geometries, short
      lines and rings that are not closed.
    OutOfRangeError: for ordinates outside the lon/lat ranges.
  """
  return _Parser(text).geometry()


def to_wkt(geometry: Geometry | Coordinate) -> str:
  """Writes a geometry (a bare coordinate is written as a POINT)."""
  if isinstance(geometry, Coordinate):
    geometry = Point(geometry)
  return geometry.wkt_type + geometry.body()


def first_coordinate(geometry: Geometry) -> Coordinate:
  """First coordinate in traversal order (e.g. first vertex of first ring)."""
  return next(geometry.iter_coordinates())


def extent(geometry: Geometry) -> coords.BoundingBox | None:
  """Component-wise min/max of all coordinates, None for a Point."""
  if isinstance(geometry, Point):
    return None
  xy = np.array([c.as_tuple() for c in geometry.iter_coordinates()])
  (x0, y0), (x1, y1) = xy.min(axis=0), xy.max(axis=0)
  return coords.BoundingBox(float(x0), float(y0), float(x1), float(y1))


def bbox_polygon(bbox: coords.BoundingBox) -> Polygon:
  """The closed rectangle of a bounding box: SW, SE, NE, NW, SW."""
  sw = Coordinate(bbox.min_lon, bbox.min_lat)
  se = Coordinate(bbox.max_lon, bbox.min_lat)
  ne = Coordinate(bbox.max_lon, bbox.max_lat)
  nw = Coordinate(bbox.min_lon, bbox.max_lat)
  return Polygon(((sw, se, ne, nw, sw),))
