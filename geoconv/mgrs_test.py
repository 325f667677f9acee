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

"""Tests for MGRS references."""

import math

from absl.testing import absltest
from absl.testing import parameterized
from geoconv import coords
from geoconv import errors
from geoconv import mgrs
import numpy as np
import utm


def _assert_within_meters(test, a, b, meters):
  """Approximate ground distance check on lat/lon degrees."""
  dlat = (a.lat - b.lat) * 111_000
  dlon = ((a.lon - b.lon + 180) % 360 - 180) * 111_000 * math.cos(
      math.radians((a.lat + b.lat) / 2))
  test.assertLess(math.hypot(dlat, dlon), meters, f"{a} vs. {b}")


class ToMgrsTest(parameterized.TestCase):

  @parameterized.parameters(
      (0.0, 0.0, 5, "31NAA6602100000"),
      (0.0, 0.00001, 5, "31NAA6602100001"),
      (0.0, 0.0, 0, "31NAA"),
      (-115.0820944, 36.2361322, 5, "11SPA7234911844"),
      (-32.66433, 83.62778, 3, "25XEN041865"),
      (2.2945, 48.8583, 2, "31UDQ4811"),
      (-0.1278, 51.5077, 0, "30UXC"),
  )
  def test_known_references(self, lon, lat, precision, expected):
    self.assertEqual(
        mgrs.to_mgrs(coords.Coordinate(lon, lat), precision), expected)

  @parameterized.parameters(
      (-79.982222, 40.446111),
      (151.2093, -33.8688),
      (10.0, 60.0),
      (15.0, 78.0),
      (-45.0, 83.9),
      (30.0, -79.9),
      (179.999, -45.0),
  )
  def test_utm_digits_match_utm_package(self, lon, lat):
    e, n, zone, letter = utm.from_latlon(lat, lon)
    ref = mgrs.to_mgrs(coords.Coordinate(lon, lat))
    self.assertTrue(ref.startswith(f"{zone}{letter}"), ref)
    self.assertEqual(ref[-10:-5], f"{int(e) % 100_000:05d}")
    self.assertEqual(ref[-5:], f"{int(n) % 100_000:05d}")

  @parameterized.parameters(
      (0.0, 90.0, "ZAH0000000000"),
      (0.0, -90.0, "BAN0000000000"),
  )
  def test_poles(self, lon, lat, expected):
    self.assertEqual(mgrs.to_mgrs(coords.Coordinate(lon, lat)), expected)

  @parameterized.parameters(
      (0.0, 84.0, "Z"),
      (-1.0, 84.0, "Y"),
      (90.0, 86.0, "Z"),
      (-90.0, 86.0, "Y"),
      (0.0, -80.0, "B"),
      (-1.0, -80.0, "A"),
      (120.0, -85.0, "B"),
  )
  def test_polar_bands(self, lon, lat, band):
    ref = mgrs.to_mgrs(coords.Coordinate(lon, lat))
    self.assertEqual(ref[0], band)
    self.assertLen(ref, 13)

  def test_utm_just_below_84(self):
    self.assertEqual(mgrs.to_mgrs(coords.Coordinate(0, 83.999), 0)[:3], "31X")

  def test_truncates(self):
    c = coords.Coordinate(-115.0820944, 36.2361322)
    self.assertEqual(mgrs.to_mgrs(c, 4), "11SPA72341184")
    self.assertEqual(mgrs.to_mgrs(c, 1), "11SPA71")

  @parameterized.parameters(-1, 6)
  def test_bad_precision(self, precision):
    with self.assertRaises(ValueError):
      mgrs.to_mgrs(coords.Coordinate(0, 0), precision)


class ParseMgrsTest(parameterized.TestCase):

  def test_paris(self):
    cell = mgrs.parse_mgrs("31UDQ4826010878")
    self.assertAlmostEqual(cell.lon_lat.lon, 2.29, delta=0.01)
    self.assertAlmostEqual(cell.lon_lat.lat, 48.85, delta=0.02)
    self.assertEqual(cell.precision, 5)
    self.assertTrue(cell.bbox.contains(cell.lon_lat))
    self.assertLess(cell.bbox.max_lat - cell.bbox.min_lat, 2e-5)
    self.assertEqual(mgrs.to_mgrs(cell.lon_lat), "31UDQ4826010878")

  def test_known_point(self):
    cell = mgrs.parse_mgrs("11SPA7234911844")
    np.testing.assert_allclose(cell.lon_lat.as_tuple(),
                               (-115.0820944, 36.2361322), atol=1e-5)

  def test_low_precision(self):
    cell = mgrs.parse_mgrs("33UXP04")
    np.testing.assert_allclose(cell.lon_lat.as_tuple(), (16.41450, 48.24949),
                               atol=1e-3)
    self.assertEqual(cell.precision, 1)
    self.assertEqual(mgrs.to_mgrs(cell.lon_lat, 1), "33UXP04")
    self.assertGreater(cell.bbox.max_lon - cell.bbox.min_lon, 0.1)

  @parameterized.parameters(
      "31UDQ4826010878",
      "31udq4826010878",
      "31U DQ 48260 10878",
      " 31UDQ 4826010878\t",
  )
  def test_case_and_whitespace(self, text):
    self.assertEqual(mgrs.parse_reference(text),
                     mgrs.parse_reference("31UDQ4826010878"))

  def test_parse_reference(self):
    ref = mgrs.parse_reference("31UDQ4826010878")
    self.assertEqual(ref.zone, 31)
    self.assertEqual(ref.band, "U")
    self.assertEqual(ref.easting, 448_260)
    self.assertEqual(ref.northing, 5_410_878)
    self.assertEqual(ref.cell_size, 1)
    self.assertFalse(ref.is_ups)
    self.assertTrue(ref.northern)

  def test_parse_reference_southern(self):
    e, n, _, _ = utm.from_latlon(-33.8688, 151.2093)
    ref = mgrs.parse_reference(
        mgrs.to_mgrs(coords.Coordinate(151.2093, -33.8688)))
    self.assertEqual(ref.easting, int(e))
    self.assertEqual(ref.northing, int(n))
    self.assertFalse(ref.northern)

  @parameterized.parameters(
      (0.0, 90.0, "ZAH"),
      (0.0, -90.0, "BAN"),
  )
  def test_pole_cells(self, lon, lat, text):
    cell = mgrs.parse_mgrs(text)
    self.assertEqual(cell.bbox.min_lon, -180)
    self.assertEqual(cell.bbox.max_lon, 180)
    if lat > 0:
      self.assertEqual(cell.bbox.max_lat, 90)
    else:
      self.assertEqual(cell.bbox.min_lat, -90)
    self.assertTrue(cell.bbox.contains(coords.Coordinate(lon, lat)))
    self.assertTrue(cell.bbox.contains(cell.lon_lat))
    self.assertTrue(mgrs.parse_reference(text).is_ups)

  def test_antimeridian_cell(self):
    # The 100 km square east of 180 in zone 60 at the equator.
    cell = mgrs.parse_mgrs("60NZF")
    self.assertLessEqual(cell.bbox.max_lon, 180)
    self.assertTrue(cell.bbox.contains(cell.lon_lat))

  @parameterized.parameters("YZP", "YZN", "AZG", "YZP9999950000")
  def test_polar_west_cell_on_seam(self, text):
    cell = mgrs.parse_mgrs(text)
    self.assertEqual(cell.bbox.min_lon, -180)
    self.assertLessEqual(cell.bbox.max_lon, 0)
    self.assertLess(cell.lon_lat.lon, 0)
    self.assertTrue(cell.bbox.contains(cell.lon_lat))

  @parameterized.parameters("ZAP", "BAG")
  def test_polar_east_cell_on_seam(self, text):
    cell = mgrs.parse_mgrs(text)
    self.assertEqual(cell.bbox.max_lon, 180)
    self.assertGreaterEqual(cell.bbox.min_lon, 0)
    self.assertTrue(cell.bbox.contains(cell.lon_lat))

  @parameterized.parameters(
      (2.2945, 48.8583),
      (-79.982222, 40.446111),
      (151.2093, -33.8688),
      (-0.0001, -0.0001),
      (179.9999, 0.5),
      (-179.9999, -0.5),
      (5.0, 60.0),
      (15.0, 78.0),
      (-45.0, 83.9999),
      (30.0, -79.9999),
      (45.0, 84.001),
      (-135.0, 88.0),
      (60.0, -80.001),
      (-10.0, -87.5),
  )
  def test_round_trip(self, lon, lat):
    c = coords.Coordinate(lon, lat)
    for precision in range(mgrs.MAX_PRECISION + 1):
      ref = mgrs.to_mgrs(c, precision)
      cell = mgrs.parse_mgrs(ref)
      self.assertTrue(cell.bbox.contains(cell.lon_lat), ref)
      size = 10 ** (mgrs.MAX_PRECISION - precision)
      _assert_within_meters(self, c, cell.lon_lat, size)
    # At 1 m the cell center is close enough to stay in the same zone.
    self.assertEqual(mgrs.to_mgrs(cell.lon_lat), ref)

  @parameterized.named_parameters(
      ("zone_too_big", "61UDQ", errors.InvalidZone),
      ("zone_zero", "0UDQ", errors.InvalidZone),
      ("zone_three_digits", "131UDQ", errors.InvalidZone),
      ("missing_zone", "UDQ1234", errors.InvalidZone),
      ("zone_with_polar_band", "31ZAH", errors.InvalidZone),
      ("band_i", "31IDQ", errors.InvalidBandLetter),
      ("band_o", "31ODQ", errors.InvalidBandLetter),
      ("band_y_with_zone", "31YRA", errors.InvalidZone),
      ("odd_digits", "31UDQ123", errors.MalformedGridReference),
      ("too_many_digits", "31UDQ123456789012", errors.MalformedGridReference),
      ("bad_column", "31USQ", errors.MalformedGridReference),
      ("bad_row", "31UDW", errors.MalformedGridReference),
      ("bad_ups_column", "YAA", errors.MalformedGridReference),
      ("bad_ups_row", "ZAQ", errors.MalformedGridReference),
      ("not_a_reference", "hello", errors.MalformedGridReference),
      ("empty", "", errors.MalformedGridReference),
      ("punctuation", "31U-DQ", errors.MalformedGridReference),
  )
  def test_errors(self, text, error):
    with self.assertRaises(error):
      mgrs.parse_mgrs(text)


if __name__ == "__main__":
  absltest.main()
