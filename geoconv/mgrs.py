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

"""Military Grid Reference System (MGRS) references.

A reference is a grid zone designator, a 100 km square identifier and an
even number of digits, e.g. `31UDQ4826010878`:

  31U    UTM zone 31, latitude band U (no zone number in the polar UPS areas,
         where the band is A/B in the south and Y/Z in the north).
  DQ     Column and row letter of the 100 km square.
  48260  Easting within the square (here 1 m precision).
  10878  Northing within the square.

UTM is used between 80S and 84N (both exclusive), UPS at and beyond them.
"""

import dataclasses
import re

from geoconv import coords
from geoconv import errors
from geoconv import utm_lib

SQUARE_SIZE = 100_000  # Meters.
MAX_PRECISION = 5  # Digits per axis, 1 m.

# UTM column letters repeat every 3 zones, indexed by zone % 3.
UTM_COLUMN_LETTERS = ("STUVWXYZ", "ABCDEFGH", "JKLMNPQR")
UTM_ROW_LETTERS = "ABCDEFGHJKLMNPQRSTUV"
UTM_ROW_CYCLE = len(UTM_ROW_LETTERS) * SQUARE_SIZE  # 2000 km.
EVEN_ZONE_ROW_OFFSET = 5

# Lowest northing of each UTM latitude band, rounded down to 100 km. Southern
# values include the 10,000 km false northing.
BAND_MIN_NORTHING = {
    "C": 1_100_000, "D": 2_000_000, "E": 2_800_000, "F": 3_700_000,
    "G": 4_600_000, "H": 5_500_000, "J": 6_400_000, "K": 7_300_000,
    "L": 8_200_000, "M": 9_100_000, "N": 0, "P": 800_000,
    "Q": 1_700_000, "R": 2_600_000, "S": 3_500_000, "T": 4_400_000,
    "U": 5_300_000, "V": 6_200_000, "W": 7_000_000, "X": 7_900_000,
}

UPS_BANDS = "ABYZ"
# Per band: column letters and the easting of the first column, in 100 km.
UPS_COLUMNS = {
    "A": ("JKLPQRSTUXYZ", 8),
    "B": ("ABCFGHJKLPQR", 20),
    "Y": ("RSTUXYZ", 13),
    "Z": ("ABCFGHJ", 20),
}
# Per hemisphere (northern?): row letters and the northing of the first row.
UPS_ROWS = {
    False: ("ABCDEFGHJKLMNPQRSTUVWXYZ", 8),
    True: ("ABCDEFGHJKLMNP", 13),
}

_REFERENCE_RE = re.compile(r"(\d+)?([A-Z])([A-Z]{2})(\d*)")


@dataclasses.dataclass(frozen=True)
class GridReference:
  """A decoded MGRS reference.

  Attributes:
    zone: UTM zone number, None for UPS.
    band: Latitude band letter (C..X for UTM, A/B/Y/Z for UPS).
    easting: Easting of the cell's south-west corner, in meters.
    northing: Northing of the cell's south-west corner, in meters.
    precision: Digits per axis, 0 (100 km) to 5 (1 m).
  """
  zone: int | None
  band: str
  easting: float
  northing: float
  precision: int

  @property
  def is_ups(self) -> bool:
    return self.zone is None

  @property
  def northern(self) -> bool:
    if self.is_ups:
      return self.band in "YZ"
    return utm_lib.is_northern(self.band)

  @property
  def cell_size(self) -> int:
    """Side of the referenced cell, in meters."""
    return 10 ** (MAX_PRECISION - self.precision)

  def to_latlon(self, easting: float, northing: float,
                wrap: bool = True) -> tuple[float, float]:
    if self.is_ups:
      return utm_lib.to_latlon_ups(easting, northing, self.northern)
    return utm_lib.to_latlon(easting, northing, self.zone,
                             northern=self.northern, wrap=wrap)


@dataclasses.dataclass(frozen=True)
class MgrsCell:
  """Inverse of a reference: the cell center and the cell's lon/lat extent."""
  lon_lat: coords.Coordinate
  bbox: coords.BoundingBox
  precision: int


def _check_precision(precision: int) -> None:
  if not 0 <= precision <= MAX_PRECISION:
    raise ValueError(
        f"MGRS precision {precision} is outside of 0..{MAX_PRECISION}.")


def _digits(value: float, precision: int) -> str:
  """Truncates a coordinate within its 100 km square to `precision` digits."""
  return f"{int(value % SQUARE_SIZE):05d}"[:precision]


def _ups_square(easting: float, northing: float,
                northern: bool) -> tuple[str, str]:
  """Returns (band, square letters) of a UPS position."""
  if northern:
    band = "Y" if easting < utm_lib.UPS_FALSE_EASTING else "Z"
  else:
    band = "A" if easting < utm_lib.UPS_FALSE_EASTING else "B"
  columns, min_column = UPS_COLUMNS[band]
  rows, min_row = UPS_ROWS[northern]
  col = int(easting // SQUARE_SIZE) - min_column
  row = int(northing // SQUARE_SIZE) - min_row
  if not (0 <= col < len(columns) and 0 <= row < len(rows)):
    raise errors.OutOfProjectionDomain(
        f"UPS position ({easting}, {northing}) is outside of the MGRS polar "
        "grid.")
  return band, columns[col] + rows[row]


def _utm_square(easting: float, northing: float, zone: int) -> str:
  """Returns the 100 km square letters of a UTM position."""
  columns = UTM_COLUMN_LETTERS[zone % 3]
  col = int(easting // SQUARE_SIZE) - 1
  if not 0 <= col < len(columns):
    raise errors.OutOfProjectionDomain(
        f"Easting {easting} is outside of the MGRS columns of zone {zone}.")
  row = int(northing // SQUARE_SIZE)
  if zone % 2 == 0:
    row += EVEN_ZONE_ROW_OFFSET
  return columns[col] + UTM_ROW_LETTERS[row % len(UTM_ROW_LETTERS)]


def to_mgrs(coordinate: coords.Coordinate, precision: int = MAX_PRECISION
            ) -> str:
  """Formats a coordinate as an MGRS reference.

  Args:
    coordinate: Position to format.
    precision: Digits per axis, from 0 (100 km square only) to 5 (1 m).

  Returns:
    The reference without separators, e.g. `31UDQ4826010878`.
  """
  _check_precision(precision)
  lat, lon = coordinate.lat, coordinate.lon
  if lat >= utm_lib.MAX_LAT or lat <= utm_lib.MIN_LAT:
    northern = lat > 0
    easting, northing = utm_lib.from_latlon_ups(lat, lon, northern)
    designator, square = _ups_square(easting, northing, northern)
  else:
    easting, northing, zone, band = utm_lib.from_latlon(lat, lon)
    designator = f"{zone}{band}"
    square = _utm_square(easting, northing, zone)
  return (designator + square +
          _digits(easting, precision) + _digits(northing, precision))


def parse_reference(text: str) -> GridReference:
  """Decodes an MGRS reference (case and whitespace insensitive)."""
  ref = re.sub(r"\s+", "", text).upper()
  m = _REFERENCE_RE.fullmatch(ref)
  if not m:
    raise errors.MalformedGridReference(f"Not an MGRS reference: {text!r}.")
  zone_str, band, square, digits = m.groups()

  if len(digits) % 2 or len(digits) > 2 * MAX_PRECISION:
    raise errors.MalformedGridReference(
        f"Expected an even number of at most {2 * MAX_PRECISION} digits, got "
        f"{len(digits)} in {text!r}.")
  precision = len(digits) // 2
  scale = 10 ** (MAX_PRECISION - precision)
  easting = int(digits[:precision] or 0) * scale
  northing = int(digits[precision:] or 0) * scale

  if band in UPS_BANDS:
    if zone_str is not None:
      raise errors.InvalidZone(
          f"Polar band {band} takes no zone number, got {zone_str} in "
          f"{text!r}.")
    columns, min_column = UPS_COLUMNS[band]
    rows, min_row = UPS_ROWS[band in "YZ"]
    if square[0] not in columns or square[1] not in rows:
      raise errors.MalformedGridReference(
          f"Square {square} does not exist in polar band {band} in {text!r}.")
    easting += (min_column + columns.index(square[0])) * SQUARE_SIZE
    northing += (min_row + rows.index(square[1])) * SQUARE_SIZE
    return GridReference(None, band, easting, northing, precision)

  if band not in utm_lib.BAND_LETTERS:
    raise errors.InvalidBandLetter(
        f"`{band}` is not an MGRS latitude band in {text!r}.")
  if zone_str is None:
    raise errors.InvalidZone(f"Missing zone number for band {band} in "
                             f"{text!r}.")
  zone = int(zone_str)
  utm_lib.check_zone(zone)

  columns = UTM_COLUMN_LETTERS[zone % 3]
  if square[0] not in columns or square[1] not in UTM_ROW_LETTERS:
    raise errors.MalformedGridReference(
        f"Square {square} does not exist in zone {zone} in {text!r}.")
  easting += (columns.index(square[0]) + 1) * SQUARE_SIZE
  row = UTM_ROW_LETTERS.index(square[1])
  if zone % 2 == 0:
    row -= EVEN_ZONE_ROW_OFFSET
  northing += (row % len(UTM_ROW_LETTERS)) * SQUARE_SIZE
  # The row letters repeat every 2000 km: pick the cycle inside the band.
  while northing < BAND_MIN_NORTHING[band]:
    northing += UTM_ROW_CYCLE
  return GridReference(zone, band, easting, northing, precision)


def _clamp(value: float, lo: float, hi: float) -> float:
  return min(max(value, lo), hi)


def cell_of(ref: GridReference) -> MgrsCell:
  """Returns the center and the lon/lat bounding box of a reference's cell.

  The box is the min/max over the four cell corners and the center, so it
  always contains the center. UPS cells holding the pole extend to it and
  span all longitudes.

  Args:
    ref: A decoded reference.

  Returns:
    The cell.
  """
  size = ref.cell_size
  x0, y0 = ref.easting, ref.northing
  c_lat, c_lon = ref.to_latlon(x0 + size / 2, y0 + size / 2, wrap=False)
  corners = [ref.to_latlon(x, y, wrap=False)
             for x in (x0, x0 + size) for y in (y0, y0 + size)]

  # Cells past the antimeridian are moved to the side their center is on.
  shift = 0.0
  if c_lon > coords.MAX_LON:
    shift = -360.0
  elif c_lon < coords.MIN_LON:
    shift = 360.0
  lats = [c_lat] + [lat for lat, _ in corners]
  lons = [c_lon + shift] + [lon + shift for _, lon in corners]

  if ref.is_ups:
    # Corners on the 180 meridian belong to the cell's own hemisphere.
    seam = coords.MIN_LON if ref.band in "AY" else coords.MAX_LON
    lons = [seam if abs(v) == coords.MAX_LON else v for v in lons]
    pole = utm_lib.UPS_FALSE_EASTING
    if x0 <= pole <= x0 + size and y0 <= pole <= y0 + size:
      lats.append(90.0 if ref.northern else -90.0)
      lons.extend((coords.MIN_LON, coords.MAX_LON))

  lats = [_clamp(v, coords.MIN_LAT, coords.MAX_LAT) for v in lats]
  lons = [_clamp(v, coords.MIN_LON, coords.MAX_LON) for v in lons]
  bbox = coords.BoundingBox(min(lons), min(lats), max(lons), max(lats))
  return MgrsCell(coords.Coordinate(lons[0], lats[0]), bbox, ref.precision)


def parse_mgrs(text: str) -> MgrsCell:
  """Parses an MGRS reference into its cell center and bounding box.

  Args:
    text: A reference such as `31UDQ4826010878` or `31U DQ 48 10`.

  Returns:
    The referenced cell. `lon_lat` is the geodetic position of the cell's
    projected center, `bbox` covers the whole cell at the given precision.

  Raises:
    InvalidZone: zone outside 1..60, or zone number given for a polar band.
    InvalidBandLetter: unknown latitude band letter.
    MalformedGridReference: other syntax errors or unknown square letters.
  """
  return cell_of(parse_reference(text))

