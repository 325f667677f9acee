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

"""Converts one input (DMS, lon/lat, MGRS or WKT) into all representations.

Every entry point returns a new `ConversionResult` and keeps no state between
calls:

  result = convert.convert("31UDQ4826010878")
  result.lon_lat  # Center of the MGRS cell.
  result.bbox     # The MGRS cell.
  result.wkt, result.dms, result.dms_without_space, result.mgrs
"""

from collections.abc import Callable
import dataclasses
import enum
import re
from typing import Any

from geoconv import coords
from geoconv import dms
from geoconv import errors
from geoconv import mgrs
from geoconv import wkt

DEFAULT_MGRS_PRECISION = mgrs.MAX_PRECISION
DEFAULT_DMS_FRACTION_DIGITS = 6


class InputFormat(enum.Enum):
  DMS = "dms"  # Free-form DMS or decimal degrees, see `dms.parse_freeform`.
  LONLAT = "lonlat"  # Two decimal numbers, longitude first.
  MGRS = "mgrs"
  WKT = "wkt"


@dataclasses.dataclass(frozen=True)
class ConversionResult:
  """All representations of one converted input.

  Attributes:
    lon_lat: Representative coordinate (the point itself, the MGRS cell
      center, or the first coordinate of a WKT shape).
    bbox: Extent of an MGRS cell or a non-point WKT geometry, else None.
    wkt: `lon_lat` as a WKT POINT.
    dms: `lon_lat` as `D° MM′ SS″ H D° MM′ SS″ H`, latitude first.
    dms_without_space: `dms` without marks and spaces.
    mgrs: `lon_lat` as an MGRS reference.
  """
  lon_lat: coords.Coordinate
  bbox: coords.BoundingBox | None
  wkt: str
  dms: str
  dms_without_space: str
  mgrs: str

  def __post_init__(self):
    if self.bbox is not None and not self.bbox.contains(self.lon_lat):
      raise ValueError(f"{self.lon_lat} is outside of {self.bbox}.")

  def as_dict(self) -> dict[str, Any]:
    """JSON-friendly dict with `lonLat`/`bbox` as lists."""
    return {
        "lonLat": list(self.lon_lat.as_tuple()),
        "bbox": list(self.bbox.as_tuple()) if self.bbox else None,
        "wkt": self.wkt,
        "dms": self.dms,
        "dmsWithoutSpace": self.dms_without_space,
        "mgrs": self.mgrs,
    }


def _result(lon_lat: coords.Coordinate, bbox: coords.BoundingBox | None,
            mgrs_precision: int, dms_fraction_digits: int) -> ConversionResult:
  dms_text = dms.to_dms(lon_lat, dms_fraction_digits)
  return ConversionResult(
      lon_lat=lon_lat,
      bbox=bbox,
      wkt=wkt.to_wkt(lon_lat),
      dms=dms_text.with_space,
      dms_without_space=dms_text.without_space,
      mgrs=mgrs.to_mgrs(lon_lat, mgrs_precision),
  )


def from_lonlat(
    lon: float, lat: float, *,
    mgrs_precision: int = DEFAULT_MGRS_PRECISION,
    dms_fraction_digits: int = DEFAULT_DMS_FRACTION_DIGITS,
) -> ConversionResult:
  return _result(coords.Coordinate(lon, lat), None,
                 mgrs_precision, dms_fraction_digits)


def from_freeform(
    text: str, *,
    mgrs_precision: int = DEFAULT_MGRS_PRECISION,
    dms_fraction_digits: int = DEFAULT_DMS_FRACTION_DIGITS,
) -> ConversionResult:
  return _result(dms.parse_freeform(text), None,
                 mgrs_precision, dms_fraction_digits)


def from_mgrs(
    text: str, *,
    mgrs_precision: int = DEFAULT_MGRS_PRECISION,
    dms_fraction_digits: int = DEFAULT_DMS_FRACTION_DIGITS,
) -> ConversionResult:
  cell = mgrs.parse_mgrs(text)
  return _result(cell.lon_lat, cell.bbox, mgrs_precision, dms_fraction_digits)


def from_wkt(
    text: str, *,
    mgrs_precision: int = DEFAULT_MGRS_PRECISION,
    dms_fraction_digits: int = DEFAULT_DMS_FRACTION_DIGITS,
) -> ConversionResult:
  """Points are taken as is, other shapes by first coordinate and extent."""
  geometry = wkt.parse_wkt(text)
  return _result(wkt.first_coordinate(geometry), wkt.extent(geometry),
                 mgrs_precision, dms_fraction_digits)


def parse_lonlat(text: str) -> coords.Coordinate:
  """Parses `lon lat` or `lon,lat` decimal degrees."""
  parts = [p for p in re.split(r"[\s,;]+", text.strip()) if p]
  if len(parts) != 2:
    raise errors.MalformedCoordinateString(
        f"Expected `lon lat`, got {text!r}.")
  try:
    lon, lat = (float(p) for p in parts)
  except ValueError as e:
    raise errors.MalformedCoordinateString(
        f"Expected two decimal numbers, got {text!r}.") from e
  return coords.Coordinate(lon, lat)


def _from_lonlat_text(text: str, **kwargs) -> ConversionResult:
  lon, lat = parse_lonlat(text)
  return from_lonlat(lon, lat, **kwargs)


_WKT_PREFIX_RE = re.compile(r"\s*[A-Za-z]+\s*(?:\(|EMPTY\b)", re.IGNORECASE)
_MGRS_SHAPE_RE = re.compile(r"\d{0,2}[A-Z]{3}\d*")

_CONVERTERS: dict[InputFormat, Callable[..., ConversionResult]] = {
    InputFormat.DMS: from_freeform,
    InputFormat.LONLAT: _from_lonlat_text,
    InputFormat.MGRS: from_mgrs,
    InputFormat.WKT: from_wkt,
}


def infer_format(text: str) -> InputFormat:
  """Guesses the format of a raw input string.

  A keyword followed by `(` or `EMPTY` is WKT, zone/band/square letters and
  digits are MGRS, everything else is treated as free-form DMS.

  Args:
    text: Raw input.

  Returns:
    The inferred format.
  """
  if _WKT_PREFIX_RE.match(text):
    return InputFormat.WKT
  if _MGRS_SHAPE_RE.fullmatch(re.sub(r"\s+", "", text).upper()):
    return InputFormat.MGRS
  return InputFormat.DMS


def convert(
    text: str,
    input_format: InputFormat | str | None = None, *,
    mgrs_precision: int = DEFAULT_MGRS_PRECISION,
    dms_fraction_digits: int = DEFAULT_DMS_FRACTION_DIGITS,
) -> ConversionResult:
  """Converts a raw input string into all representations.

  Args:
    text: The raw input.
    input_format: Format of `text` (an `InputFormat` or its value), inferred
      with `infer_format` when empty.
    mgrs_precision: Digits per axis of the MGRS output.
    dms_fraction_digits: Decimals kept for the seconds of the DMS output.

  Returns:
    A new ConversionResult.

  Raises:
    ConversionError: a subclass naming what is wrong with the input.
  """
  input_format = InputFormat(input_format or infer_format(text))
  return _CONVERTERS[input_format](
      text, mgrs_precision=mgrs_precision,
      dms_fraction_digits=dms_fraction_digits)
