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

"""Tests for the UTM/UPS projections, checked against utm and pyproj."""

from absl.testing import absltest
from absl.testing import parameterized
from geoconv import errors
from geoconv import utm_lib
import numpy as np
import pyproj
import utm

_UTM_POINTS = (
    (40.446111, -79.982222),
    (48.8583, 2.2945),
    (51.5077, -0.1278),
    (-33.8688, 151.2093),
    (0.0, 0.0),
    (0.0, -179.99),
    (-79.9, 30.0),
    (83.9, -45.0),
    (60.0, 5.0),  # Norway.
    (78.0, 15.0),  # Svalbard.
    (-45.0, 177.5),
)


class ZoneTest(parameterized.TestCase):

  @parameterized.parameters(
      (0, -180, 1),
      (0, -174.0001, 1),
      (0, -174, 2),
      (0, 0, 31),
      (0, -0.0001, 30),
      (0, 179.999, 60),
      (0, 180, 1),  # 180 wraps to -180.
      (56, 3, 32),
      (63.999, 11.999, 32),
      (64, 3, 31),
      (55.999, 3, 31),
      (56, 2.999, 31),
      (72, 0, 31),
      (72, 8.999, 31),
      (72, 9, 33),
      (84, 20.999, 33),
      (80, 21, 35),
      (80, 32.999, 35),
      (80, 33, 37),
      (80, 41.999, 37),
      (80, 42, 38),
      (80, -1, 30),
  )
  def test_zone_number(self, lat, lon, expected):
    self.assertEqual(utm_lib.zone_number(lat, lon), expected)

  @parameterized.parameters(
      (-80, "C"), (-72.0001, "C"), (-72, "D"), (-0.0001, "M"), (0, "N"),
      (40.4, "T"), (71.999, "W"), (72, "X"), (84, "X"),
  )
  def test_latitude_band(self, lat, expected):
    self.assertEqual(utm_lib.latitude_band(lat), expected)

  @parameterized.parameters(-80.0001, 84.0001, 90, -90)
  def test_latitude_band_out_of_domain(self, lat):
    with self.assertRaises(errors.OutOfProjectionDomain):
      utm_lib.latitude_band(lat)

  @parameterized.parameters(0, 61, -1)
  def test_invalid_zone(self, zone):
    with self.assertRaises(errors.InvalidZone):
      utm_lib.central_longitude(zone)

  def test_central_longitude(self):
    self.assertEqual(utm_lib.central_longitude(1), -177)
    self.assertEqual(utm_lib.central_longitude(31), 3)
    self.assertEqual(utm_lib.central_longitude(60), 177)

  def test_is_northern(self):
    self.assertTrue(utm_lib.is_northern("N"))
    self.assertTrue(utm_lib.is_northern("x"))
    self.assertFalse(utm_lib.is_northern("M"))
    with self.assertRaises(errors.InvalidBandLetter):
      utm_lib.is_northern("I")


class UtmTest(parameterized.TestCase):

  @parameterized.parameters(*_UTM_POINTS)
  def test_from_latlon_matches_utm(self, lat, lon):
    e, n, zone, letter = utm_lib.from_latlon(lat, lon)
    expected = utm.from_latlon(lat, lon)
    np.testing.assert_allclose((e, n), expected[:2], atol=1e-3)
    self.assertEqual((zone, letter), tuple(expected[2:]))

  @parameterized.parameters(*_UTM_POINTS)
  def test_to_latlon_matches_utm(self, lat, lon):
    e, n, zone, letter = utm.from_latlon(lat, lon)
    np.testing.assert_allclose(
        utm_lib.to_latlon(e, n, zone, letter),
        utm.to_latlon(e, n, zone, letter), atol=1e-6)

  @parameterized.parameters(*_UTM_POINTS)
  def test_round_trip(self, lat, lon):
    e, n, zone, letter = utm_lib.from_latlon(lat, lon)
    np.testing.assert_allclose(
        utm_lib.to_latlon(e, n, zone, letter), (lat, lon), atol=1e-6)
    np.testing.assert_allclose(
        utm_lib.to_latlon(e, n, zone, northern=lat >= 0), (lat, lon),
        atol=1e-6)

  def test_force_zone_number(self):
    e, n, zone, letter = utm_lib.from_latlon(48.8583, 2.2945,
                                             force_zone_number=30)
    self.assertEqual((zone, letter), (30, "U"))
    self.assertGreater(e, 800_000)
    np.testing.assert_allclose(utm_lib.to_latlon(e, n, 30, "U"),
                               (48.8583, 2.2945), atol=1e-5)

  def test_unwrapped_longitude(self):
    # 900 km east of zone 60's central meridian is past the antimeridian.
    _, lon = utm_lib.to_latlon(900_000, 0, 60, northern=True, wrap=False)
    self.assertGreater(lon, 180)
    _, lon = utm_lib.to_latlon(900_000, 0, 60, northern=True)
    self.assertLess(lon, -179)

  @parameterized.parameters(84.0001, -80.0001, 90)
  def test_out_of_domain(self, lat):
    with self.assertRaises(errors.OutOfProjectionDomain):
      utm_lib.from_latlon(lat, 0)

  def test_hemisphere_arguments(self):
    with self.assertRaises(ValueError):
      utm_lib.to_latlon(500_000, 0, 31)
    with self.assertRaises(ValueError):
      utm_lib.to_latlon(500_000, 0, 31, "N", northern=True)


class UpsTest(parameterized.TestCase):

  @parameterized.parameters(
      (84.0, 0.0), (85.5, 45.0), (89.9, -135.0), (87.0, 179.0),
      (-80.0, 0.0), (-85.5, 45.0), (-89.9, -135.0), (-82.0, -90.0),
  )
  def test_matches_pyproj(self, lat, lon):
    epsg = 32661 if lat > 0 else 32761
    transformer = pyproj.Transformer.from_crs(
        "EPSG:4326", f"EPSG:{epsg}", always_xy=True)
    expected = transformer.transform(lon, lat)
    actual = utm_lib.from_latlon_ups(lat, lon)
    np.testing.assert_allclose(actual, expected, atol=1e-3)
    np.testing.assert_allclose(
        utm_lib.to_latlon_ups(*actual, northern=lat > 0), (lat, lon),
        atol=1e-9)

  @parameterized.parameters(True, False)
  def test_pole(self, northern):
    lat = 90.0 if northern else -90.0
    e, n = utm_lib.from_latlon_ups(lat, 0.0)
    np.testing.assert_allclose((e, n), (2_000_000, 2_000_000), atol=1e-6)
    self.assertEqual(utm_lib.to_latlon_ups(2_000_000, 2_000_000, northern),
                     (lat, 0.0))

  def test_hemisphere_mismatch(self):
    with self.assertRaises(errors.OutOfProjectionDomain):
      utm_lib.from_latlon_ups(-85, 0, northern=True)
    with self.assertRaises(errors.OutOfProjectionDomain):
      utm_lib.from_latlon_ups(85, 0, northern=False)


if __name__ == "__main__":
  absltest.main()
