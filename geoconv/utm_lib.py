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

"""UTM and UPS projections on the WGS84 ellipsoid.

The call signatures follow the `utm` package (`from_latlon` returns
`(easting, northing, zone_number, zone_letter)`, `to_latlon` returns
`(lat, lon)`), but the math is implemented here so that results do not depend
on an external projection library:

  * UTM uses the transverse Mercator series from Snyder, "Map Projections: A
    Working Manual" (USGS PP 1395, 1987), eqs. 8-9 to 8-25.
  * UPS uses the ellipsoidal polar stereographic formulas from the same
    source, eqs. 21-33 to 21-40 and 7-9.
"""

import math

from geoconv import errors

# WGS84 ellipsoid.
SEMI_MAJOR_AXIS = 6_378_137.0  # a, in meters.
FLATTENING = 1 / 298.257223563  # f.
E2 = FLATTENING * (2 - FLATTENING)  # First eccentricity squared.
E = math.sqrt(E2)
E_P2 = E2 / (1 - E2)  # Second eccentricity squared.

# UTM.
K0 = 0.9996
FALSE_EASTING = 500_000.0
FALSE_NORTHING_SOUTH = 10_000_000.0
MIN_LAT, MAX_LAT = -80.0, 84.0
BAND_LETTERS = "CDEFGHJKLMNPQRSTUVWX"

# UPS.
UPS_K0 = 0.994
UPS_FALSE_EASTING = 2_000_000.0
UPS_FALSE_NORTHING = 2_000_000.0

# Meridian arc coefficients.
_E4 = E2 * E2
_E6 = _E4 * E2
_M1 = 1 - E2 / 4 - 3 * _E4 / 64 - 5 * _E6 / 256
_M2 = 3 * E2 / 8 + 3 * _E4 / 32 + 45 * _E6 / 1024
_M3 = 15 * _E4 / 256 + 45 * _E6 / 1024
_M4 = 35 * _E6 / 3072

# Footpoint latitude coefficients.
_E1 = (1 - math.sqrt(1 - E2)) / (1 + math.sqrt(1 - E2))
_P2 = 3 / 2 * _E1 - 27 / 32 * _E1**3 + 269 / 512 * _E1**5
_P4 = 21 / 16 * _E1**2 - 55 / 32 * _E1**4
_P6 = 151 / 96 * _E1**3 - 417 / 128 * _E1**5
_P8 = 1097 / 512 * _E1**4

_UPS_RHO_FACTOR = math.sqrt((1 + E)**(1 + E) * (1 - E)**(1 - E))


def _wrap_lon(lon: float) -> float:
  """Wraps a longitude in degrees into [-180, 180)."""
  return (lon + 180.0) % 360.0 - 180.0


def zone_number(lat: float, lon: float) -> int:
  """Returns the UTM zone number, including the Norway/Svalbard exceptions."""
  if 56 <= lat < 64 and 3 <= lon < 12:
    return 32
  if 72 <= lat <= 84 and lon >= 0:
    if lon < 9:
      return 31
    elif lon < 21:
      return 33
    elif lon < 33:
      return 35
    elif lon < 42:
      return 37
  return int(math.floor((lon + 180) / 6)) % 60 + 1


def latitude_band(lat: float) -> str:
  """Returns the MGRS latitude band letter (C..X) for a UTM latitude."""
  if not MIN_LAT <= lat <= MAX_LAT:
    raise errors.OutOfProjectionDomain(
        f"Latitude {lat} has no UTM latitude band.")
  # Band X is 12 degrees tall (72..84), all others 8.
  return BAND_LETTERS[min(int((lat - MIN_LAT) // 8), len(BAND_LETTERS) - 1)]


def central_longitude(zone: int) -> float:
  check_zone(zone)
  return (zone - 1) * 6 - 180 + 3


def check_zone(zone: int) -> None:
  if not 1 <= zone <= 60:
    raise errors.InvalidZone(f"UTM zone {zone} is outside of 1..60.")


def is_northern(zone_letter: str) -> bool:
  zone_letter = zone_letter.upper()
  if zone_letter not in BAND_LETTERS:
    raise errors.InvalidBandLetter(
        f"`{zone_letter}` is not a UTM latitude band letter.")
  return zone_letter >= "N"


def _meridian_arc(phi: float) -> float:
  return SEMI_MAJOR_AXIS * (_M1 * phi
                            - _M2 * math.sin(2 * phi)
                            + _M3 * math.sin(4 * phi)
                            - _M4 * math.sin(6 * phi))


def from_latlon(latitude: float, longitude: float,
                force_zone_number: int | None = None
                ) -> tuple[float, float, int, str]:
  """Projects a WGS84 position into UTM.

  Args:
    latitude: Latitude in degrees, within [-80, 84].
    longitude: Longitude in degrees.
    force_zone_number: Project into this zone instead of the natural one.

  Returns:
    (easting, northing, zone_number, zone_letter). Northing includes the
    10,000 km false northing in the southern hemisphere.
  """
  if not MIN_LAT <= latitude <= MAX_LAT:
    raise errors.OutOfProjectionDomain(
        f"Latitude {latitude} is outside of the UTM domain "
        f"[{MIN_LAT}, {MAX_LAT}].")
  zone = force_zone_number or zone_number(latitude, longitude)
  letter = latitude_band(latitude)

  phi = math.radians(latitude)
  dlam = math.radians(_wrap_lon(longitude - central_longitude(zone)))
  sin_phi, cos_phi = math.sin(phi), math.cos(phi)
  tan_phi = sin_phi / cos_phi
  t = tan_phi * tan_phi
  c = E_P2 * cos_phi * cos_phi
  n = SEMI_MAJOR_AXIS / math.sqrt(1 - E2 * sin_phi * sin_phi)
  a = dlam * cos_phi
  a2 = a * a

  easting = FALSE_EASTING + K0 * n * a * (
      1
      + a2 / 6 * (1 - t + c)
      + a2 * a2 / 120 * (5 - 18 * t + t * t + 72 * c - 58 * E_P2))
  northing = K0 * (_meridian_arc(phi) + n * tan_phi * a2 * (
      1 / 2
      + a2 / 24 * (5 - t + 9 * c + 4 * c * c)
      + a2 * a2 / 720 * (61 - 58 * t + t * t + 600 * c - 330 * E_P2)))
  if latitude < 0:
    northing += FALSE_NORTHING_SOUTH
  return easting, northing, zone, letter


def to_latlon(easting: float, northing: float, zone_number: int,  # pylint: disable=redefined-outer-name
              zone_letter: str | None = None, northern: bool | None = None,
              wrap: bool = True) -> tuple[float, float]:
  """Back-projects UTM easting/northing to (lat, lon) in degrees.

  Exactly one of `zone_letter` and `northern` selects the hemisphere. With
  `wrap=False` the longitude is left relative to the zone's central meridian
  and may fall outside [-180, 180) for positions past the antimeridian.
  """
  if (zone_letter is None) == (northern is None):
    raise ValueError("Set exactly one of `zone_letter` and `northern`.")
  if zone_letter is not None:
    northern = is_northern(zone_letter)
  lon0 = central_longitude(zone_number)

  x = easting - FALSE_EASTING
  y = northing if northern else northing - FALSE_NORTHING_SOUTH
  mu = y / K0 / (SEMI_MAJOR_AXIS * _M1)
  phi1 = (mu
          + _P2 * math.sin(2 * mu)
          + _P4 * math.sin(4 * mu)
          + _P6 * math.sin(6 * mu)
          + _P8 * math.sin(8 * mu))

  sin1, cos1 = math.sin(phi1), math.cos(phi1)
  tan1 = sin1 / cos1
  t1 = tan1 * tan1
  c1 = E_P2 * cos1 * cos1
  w = 1 - E2 * sin1 * sin1
  n1 = SEMI_MAJOR_AXIS / math.sqrt(w)
  r1 = SEMI_MAJOR_AXIS * (1 - E2) / (w * math.sqrt(w))
  d = x / (n1 * K0)
  d2 = d * d

  phi = phi1 - (n1 * tan1 / r1) * d2 * (
      1 / 2
      - d2 / 24 * (5 + 3 * t1 + 10 * c1 - 4 * c1 * c1 - 9 * E_P2)
      + d2 * d2 / 720 * (61 + 90 * t1 + 298 * c1 + 45 * t1 * t1
                         - 252 * E_P2 - 3 * c1 * c1))
  dlam = d * (
      1
      - d2 / 6 * (1 + 2 * t1 + c1)
      + d2 * d2 / 120 * (5 - 2 * c1 + 28 * t1 - 3 * c1 * c1 + 8 * E_P2
                         + 24 * t1 * t1)) / cos1

  lon = lon0 + math.degrees(dlam)
  if wrap:
    lon = _wrap_lon(lon)
  return math.degrees(phi), lon


def from_latlon_ups(latitude: float, longitude: float,
                    northern: bool | None = None) -> tuple[float, float]:
  """Projects a WGS84 position into UPS, returns (easting, northing)."""
  if northern is None:
    northern = latitude >= 0
  if (northern and latitude < 0) or (not northern and latitude > 0):
    raise errors.OutOfProjectionDomain(
        f"Latitude {latitude} is not in the "
        f"{'northern' if northern else 'southern'} UPS hemisphere.")
  sign = 1 if northern else -1
  phi = math.radians(sign * latitude)
  lam = math.radians(longitude)
  e_sin = E * math.sin(phi)
  t = (math.tan(math.pi / 4 - phi / 2)
       / ((1 - e_sin) / (1 + e_sin)) ** (E / 2))
  rho = 2 * SEMI_MAJOR_AXIS * UPS_K0 * t / _UPS_RHO_FACTOR
  easting = UPS_FALSE_EASTING + rho * math.sin(lam)
  northing = UPS_FALSE_NORTHING - sign * rho * math.cos(lam)
  return easting, northing


def to_latlon_ups(easting: float, northing: float,
                  northern: bool) -> tuple[float, float]:
  """Back-projects UPS easting/northing to (lat, lon) in degrees."""
  sign = 1 if northern else -1
  dx = easting - UPS_FALSE_EASTING
  dy = northing - UPS_FALSE_NORTHING
  rho = math.hypot(dx, dy)
  if rho == 0:
    return sign * 90.0, 0.0  # Longitude is undefined at the pole.
  t = rho * _UPS_RHO_FACTOR / (2 * SEMI_MAJOR_AXIS * UPS_K0)
  phi = math.pi / 2 - 2 * math.atan(t)
  for _ in range(20):
    e_sin = E * math.sin(phi)
    new_phi = math.pi / 2 - 2 * math.atan(
        t * ((1 - e_sin) / (1 + e_sin)) ** (E / 2))
    if abs(new_phi - phi) < 1e-13:
      phi = new_phi
      break
    phi = new_phi
  lon = math.degrees(math.atan2(dx, -sign * dy))
  return sign * math.degrees(phi), lon
