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

"""Free-form degrees-minutes-seconds and decimal-degrees strings.

Parsing is split into a tokenizer and a reducer. The tokenizer turns the text
into numbers, hemisphere letters, unit marks and separators. The reducer walks
the tokens and assembles angle groups, each holding a sign or hemisphere and
up to three values (degrees, minutes, seconds). A group ends at a trailing
hemisphere letter, at a separator, when all three slots are used, or when the
next number cannot continue it (a signed number, a value after a fractional
one, or a unit mark that goes backwards).

Accepted examples:

  40°26'46"N 79°58'56"W
  N 40 26 46, W 79 58 56
  -79.9822, 40.4461  (no letters: the first value is the latitude)
  79.9822W 40.4461N
  402646N0795856W  (packed [D]DDMMSS, as written by `to_dms`)
"""

import dataclasses
import re

from geoconv import coords
from geoconv import errors

DEGREE_MARKS = "°º˚"
MINUTE_MARKS = "′'’"
SECOND_MARKS = "″\"”"

_TOKEN_RE = re.compile(rf"""
    (?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+))
  | (?P<hemisphere>[NSEWnsew])
  | (?P<second>''|′′|[{SECOND_MARKS}])
  | (?P<degree>[{DEGREE_MARKS}])
  | (?P<minute>[{MINUTE_MARKS}])
  | (?P<separator>[,;/])
  | (?P<space>[\s:]+)
""", re.VERBOSE)

_SLOTS = {"degree": 0, "minute": 1, "second": 2}
_AXIS = {"N": "lat", "S": "lat", "E": "lon", "W": "lon"}
_PACKED_MIN_DIGITS = 5


@dataclasses.dataclass(frozen=True)
class Token:
  kind: str
  text: str
  pos: int


def tokenize(text: str) -> list[Token]:
  """Splits a free-form coordinate string into tokens (spaces dropped)."""
  tokens, pos = [], 0
  while pos < len(text):
    m = _TOKEN_RE.match(text, pos)
    if not m:
      raise errors.MalformedCoordinateString(
          f"Unexpected character {text[pos]!r} at position {pos} in {text!r}.")
    if m.lastgroup != "space":
      tokens.append(Token(m.lastgroup, m.group(), pos))
    pos = m.end()
  return tokens


@dataclasses.dataclass
class _AngleGroup:
  """Angle under construction: [degrees, minutes, seconds] as number strings."""
  values: list[str | None] = dataclasses.field(
      default_factory=lambda: [None, None, None])
  hemisphere: str | None = None
  marked: bool = False  # Whether any unit mark was used.
  closed: bool = False
  next_slot: int = 0
  last_slot: int | None = None

  @property
  def has_values(self) -> bool:
    return self.last_slot is not None

  def accepts(self, number: str) -> bool:
    if self.closed or self.next_slot > 2:
      return False
    if self.has_values:
      if number[0] in "+-":
        return False
      if "." in self.values[self.last_slot]:
        return False
    return True

  def put(self, number: str, slot: int) -> None:
    self.values[slot] = number
    self.last_slot = slot
    self.next_slot = slot + 1


def _reduce_tokens(text: str, tokens: list[Token]) -> list[_AngleGroup]:
  """Assembles angle groups from tokens."""
  groups = [_AngleGroup()]
  prev = None
  for tok in tokens:
    group = groups[-1]
    if tok.kind == "number":
      if not group.accepts(tok.text):
        group.closed = True
        group = _AngleGroup()
        groups.append(group)
      group.put(tok.text, group.next_slot)
    elif tok.kind in _SLOTS:
      slot = _SLOTS[tok.kind]
      if prev is None or prev.kind != "number":
        raise errors.MalformedCoordinateString(
            f"Unit mark {tok.text!r} without a value at position {tok.pos} "
            f"in {text!r}.")
      number = group.values[group.last_slot]
      if slot < group.last_slot:
        # Going backwards (e.g. `40° 79°`): the number starts a new angle.
        group.values[group.last_slot] = None
        group.closed = True
        group = _AngleGroup()
        groups.append(group)
      elif slot > group.last_slot:
        group.values[group.last_slot] = None
      group.put(number, slot)
      group.marked = True
    elif tok.kind == "hemisphere":
      letter = tok.text.upper()
      if not group.has_values:
        if group.hemisphere is not None:
          raise errors.MalformedCoordinateString(
              f"Two hemisphere letters in a row at position {tok.pos} in "
              f"{text!r}.")
        group.hemisphere = letter
      elif group.hemisphere is None and not group.closed:
        group.hemisphere = letter
        group.closed = True
      else:
        group.closed = True
        groups.append(_AngleGroup(hemisphere=letter))
    elif tok.kind == "separator":
      if group.has_values:
        group.closed = True
    prev = tok
  for group in groups:
    if group.hemisphere is not None and not group.has_values:
      raise errors.MalformedCoordinateString(
          f"Hemisphere {group.hemisphere} without a value in {text!r}.")
  return [g for g in groups if g.has_values]


def _unpack(number: str) -> list[str]:
  """Splits a packed [D]DDMMSS[.s] number into degree/minute/second strings."""
  integer, dot, fraction = number.partition(".")
  return [integer[:-4], integer[-4:-2], integer[-2:] + dot + fraction]


def _to_degrees(text: str, group: _AngleGroup) -> tuple[float, str | None]:
  """Returns the signed angle of a group and its axis ("lat", "lon" or None)."""
  values = list(group.values)
  deg = values[0]
  if deg is None:
    raise errors.MalformedCoordinateString(
        f"Angle without degrees in {text!r}.")
  sign = -1 if deg.startswith("-") else 1
  deg = deg.lstrip("+-")
  if (not group.marked and values[1] is None and values[2] is None and
      len(deg.partition(".")[0]) >= _PACKED_MIN_DIGITS):
    values = _unpack(deg)
    deg = values[0]

  for i, finer in ((0, 1), (1, 2)):
    if values[i] is not None and "." in values[i] and values[finer] is not None:
      raise errors.MalformedCoordinateString(
          f"Fractional value {values[i]!r} followed by a finer unit in "
          f"{text!r}.")
  parts = [float(deg)]
  for name, v in (("Minutes", values[1]), ("Seconds", values[2])):
    if v is None:
      parts.append(0.0)
      continue
    if v[0] in "+-":
      raise errors.MalformedCoordinateString(
          f"{name} {v!r} must not be signed in {text!r}.")
    if not 0 <= float(v) < 60:
      raise errors.MalformedCoordinateString(
          f"{name} {v!r} must be within [0, 60) in {text!r}.")
    parts.append(float(v))
  magnitude = parts[0] + parts[1] / 60 + parts[2] / 3600

  if group.hemisphere in ("N", "E") and sign < 0:
    raise errors.MalformedCoordinateString(
        f"Negative value conflicts with hemisphere {group.hemisphere} in "
        f"{text!r}.")
  if group.hemisphere in ("S", "W"):
    sign = -1
  return sign * magnitude, _AXIS.get(group.hemisphere)


def parse_freeform(text: str) -> coords.Coordinate:
  """Parses a free-form DMS or decimal-degrees pair into a Coordinate.

  Args:
    text: Two angles with optional hemisphere letters, in either order.

  Returns:
    The parsed coordinate.

  Raises:
    MalformedCoordinateString: if the text does not hold exactly two valid
      angles, or their hemispheres/signs are inconsistent or out of range.
  """
  groups = _reduce_tokens(text, tokenize(text))
  if len(groups) != 2:
    raise errors.MalformedCoordinateString(
        f"Expected two angles, found {len(groups)} in {text!r}.")
  (first, first_axis), (second, second_axis) = (
      _to_degrees(text, g) for g in groups)

  if first_axis is None and second_axis is None:
    first_axis, second_axis = "lat", "lon"
  elif first_axis is None:
    first_axis = "lat" if second_axis == "lon" else "lon"
  elif second_axis is None:
    second_axis = "lat" if first_axis == "lon" else "lon"
  if first_axis == second_axis:
    raise errors.MalformedCoordinateString(
        f"Both angles are {'latitudes' if first_axis == 'lat' else 'longitudes'}"
        f" in {text!r}.")

  lat, lon = (first, second) if first_axis == "lat" else (second, first)
  if abs(lat) > coords.MAX_LAT or abs(lon) > coords.MAX_LON:
    raise errors.MalformedCoordinateString(
        f"Latitude {lat} or longitude {lon} is out of range in {text!r}.")
  return coords.Coordinate(lon=lon, lat=lat)


@dataclasses.dataclass(frozen=True)
class DmsText:
  """A coordinate written as DMS, e.g. `40° 26′ 46″ N 79° 58′ 56″ W`."""
  with_space: str
  without_space: str


def format_angle(value: float, hemispheres: str,
                 fraction_digits: int = 6) -> str:
  """Formats one angle as `D° MM′ SS.s″ H`.

  Rounding is done once on an integer count of 10**-fraction_digits seconds,
  so a value like 59.9999999″ carries into the minutes instead of printing 60.
  Trailing zeros of the seconds fraction are trimmed.

  Args:
    value: Signed angle in degrees.
    hemispheres: Positive and negative hemisphere letters, "NS" or "EW".
    fraction_digits: Decimals kept for the seconds.

  Returns:
    The formatted angle.
  """
  if not 0 <= fraction_digits <= 9:
    raise ValueError(f"fraction_digits {fraction_digits} not in [0, 9].")
  scale = 10 ** fraction_digits
  units = round(abs(value) * 3600 * scale)
  deg, rem = divmod(units, 3600 * scale)
  minutes, sec_units = divmod(rem, 60 * scale)
  sec_int, sec_frac = divmod(sec_units, scale)
  sec = f"{sec_int:02d}"
  if fraction_digits:
    frac = f"{sec_frac:0{fraction_digits}d}".rstrip("0")
    if frac:
      sec += "." + frac
  hemisphere = hemispheres[1] if value < 0 else hemispheres[0]
  return f"{deg}° {minutes:02d}′ {sec}″ {hemisphere}"


def strip_marks(dms: str) -> str:
  """Removes degree/minute/second marks and spaces (copy-paste friendly)."""
  return re.sub(r"[\s°′″]", "", dms)


def to_dms(coordinate: coords.Coordinate, fraction_digits: int = 6) -> DmsText:
  with_space = " ".join((
      format_angle(coordinate.lat, "NS", fraction_digits),
      format_angle(coordinate.lon, "EW", fraction_digits)))
  return DmsText(with_space=with_space, without_space=strip_marks(with_space))
