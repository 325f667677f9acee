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

"""Errors raised while parsing or formatting coordinates.

Every error is a `ValueError`, so callers that only care about "bad input"
can catch that, and callers that want to tell the user what went wrong can
catch the specific class.
"""


class ConversionError(ValueError):
  """Base class for all invalid-input errors."""


class OutOfRangeError(ConversionError):
  """Longitude/latitude outside [-180, 180] x [-90, 90]."""


class MalformedCoordinateString(ConversionError):
  """A free-form DMS/decimal string could not be reduced to two angles."""


class InvalidZone(ConversionError):
  """UTM zone number outside 1..60, or a zone given for a polar (UPS) band."""


class InvalidBandLetter(ConversionError):
  """Latitude band letter not part of the MGRS alphabet."""


class MalformedGridReference(ConversionError):
  """MGRS grid square letters or digits do not form a valid reference."""


class OutOfProjectionDomain(ConversionError):
  """Coordinate cannot be represented in the requested projection."""


class UnsupportedGeometryType(ConversionError):
  """WKT keyword other than the six supported geometry types."""


class MalformedWKT(ConversionError):
  """WKT text with mismatched parentheses or unexpected tokens."""
