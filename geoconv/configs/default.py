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

"""Default conversion config.

Example command:

  python -m geoconv.convert_main \
    --config=geoconv/configs/default.py:mgrs_precision=3 \
    --input="40°26'46\"N 79°58'56\"W"
"""

from geoconv import convert
from geoconv import utils
from ml_collections import config_dict as cd


def get_config(arg=None):
  arg = utils.parse_arg(
      arg,
      mgrs_precision=convert.DEFAULT_MGRS_PRECISION,
      dms_fraction_digits=convert.DEFAULT_DMS_FRACTION_DIGITS,
      input_format="",  # Empty: inferred per input.
  )
  config = cd.ConfigDict()
  config.mgrs_precision = arg.mgrs_precision
  config.dms_fraction_digits = arg.dms_fraction_digits
  config.input_format = arg.input_format
  return config
