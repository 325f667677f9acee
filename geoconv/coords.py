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

"""Working with coordinates."""

from collections.abc import Iterable
import dataclasses
import math

from geoconv import errors

MIN_LON, MAX_LON = -180.0, 180.0
MIN_LAT, MAX_LAT = -90.0, 90.0


def _check_range(name: str, value: float, lo: float, hi: float) -> float:
  if isinstance(value, bool) or not isinstance(value, (int, float)):
    raise errors.OutOfRangeError(f"{name} must be a number, got {value!r}.")
  value = float(value)
  if not math.isfinite(value) or not lo <= value <= hi:
    raise errors.OutOfRangeError(
        f"{name} {value!r} is outside of [{lo:g}, {hi:g}].")
  return value


@dataclasses.dataclass(frozen=True)
class Coordinate:
  """A WGS84 position in degrees.

  Attributes:
    lon: Longitude, in [-180, 180].
    lat: Latitude, in [-90, 90].
  """
  lon: float
  lat: float

  def __post_init__(self):
    # Stores the validated floats on the frozen instance.
    object.__setattr__(self, "lon", _check_range("Longitude", self.lon,
                                                 MIN_LON, MAX_LON))
    object.__setattr__(self, "lat", _check_range("Latitude", self.lat,
                                                 MIN_LAT, MAX_LAT))

  def near(self, other: "Coordinate", eps: float = 1e-9) -> bool:
    """Whether both components are within `eps` degrees of `other`."""
    return (abs(self.lon - other.lon) <= eps and
            abs(self.lat - other.lat) <= eps)

  def as_tuple(self) -> tuple[float, float]:
    return (self.lon, self.lat)  # (x, y)

  def __iter__(self):
    return iter(self.as_tuple())


@dataclasses.dataclass(frozen=True)
class BoundingBox:
  """An axis-aligned lon/lat box.

  Attributes:
    min_lon: Western edge.
    min_lat: Southern edge.
    max_lon: Eastern edge.
    max_lat: Northern edge.
  """
  min_lon: float
  min_lat: float
  max_lon: float
  max_lat: float

  def __post_init__(self):
    for name, lo, hi in (("min_lon", MIN_LON, MAX_LON),
                         ("max_lon", MIN_LON, MAX_LON),
                         ("min_lat", MIN_LAT, MAX_LAT),
                         ("max_lat", MIN_LAT, MAX_LAT)):
      object.__setattr__(self, name,
                         _check_range(name, getattr(self, name), lo, hi))
    if self.min_lon > self.max_lon or self.min_lat > self.max_lat:
      raise errors.OutOfRangeError(f"Inverted bounding box: {self.as_tuple()}.")

  @classmethod
  def from_coordinates(cls, coordinates: Iterable[Coordinate]) -> "BoundingBox":
    lons, lats = zip(*(c.as_tuple() for c in coordinates))
    return cls(min(lons), min(lats), max(lons), max(lats))

  @property
  def center(self) -> Coordinate:
    return Coordinate((self.min_lon + self.max_lon) / 2.0,
                      (self.min_lat + self.max_lat) / 2.0)

  def contains(self, coordinate: Coordinate) -> bool:
    return (self.min_lon <= coordinate.lon <= self.max_lon and
            self.min_lat <= coordinate.lat <= self.max_lat)

  def as_tuple(self) -> tuple[float, float, float, float]:
    return (self.min_lon, self.min_lat,
            self.max_lon, self.max_lat)  # (x0, y0, x1, y1)
