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

r"""Converts coordinates given on the command line and prints them as JSON.

Example command line:
python -m geoconv.convert_main \
--input="40°26'46\"N 79°58'56\"W" \
--input=31UDQ4826010878 \
--input="POLYGON((0 0,1 0,1 1,0 1,0 0))" \
--config.mgrs_precision=3

Positional arguments are converted as well. One JSON document is printed per
successful input; failures are logged and make the exit status non-zero.
"""

from collections.abc import Sequence
import json
import os

from absl import app
from absl import flags
from absl import logging
from geoconv import convert
from geoconv import errors
import ml_collections
from ml_collections import config_flags

_DEFAULT_CONFIG = os.path.join(os.path.dirname(__file__), "configs",
                               "default.py")

flags.DEFINE_multi_string("input", [], "Raw input to convert (repeatable).")
flags.DEFINE_enum("format", None, [f.value for f in convert.InputFormat],
                  "Format of all inputs. Overrides `config.input_format`; "
                  "inferred per input when neither is set.")
config_flags.DEFINE_config_file("config", _DEFAULT_CONFIG,
                                "Conversion config.", lock_config=True)
FLAGS = flags.FLAGS


def convert_inputs(
    texts: Sequence[str],
    config: ml_collections.ConfigDict,
    input_format: str | None = None,
) -> tuple[list[convert.ConversionResult], list[tuple[str, Exception]]]:
  """Converts each input, returns the results and the failed inputs."""
  input_format = input_format or config.get("input_format") or None
  results, failures = [], []
  for text in texts:
    fmt = convert.InputFormat(input_format or convert.infer_format(text))
    logging.info("Converting %r as %s.", text, fmt.value)
    try:
      results.append(convert.convert(
          text, fmt,
          mgrs_precision=config.mgrs_precision,
          dms_fraction_digits=config.dms_fraction_digits))
    except errors.ConversionError as e:
      logging.error("Failed to convert %r: %s", text, e)
      failures.append((text, e))
  return results, failures


def main(argv):
  texts = list(FLAGS.input) + list(argv[1:])
  if not texts:
    raise app.UsageError("Nothing to convert, pass --input or arguments.")
  logging.info("Config: %s", FLAGS.config)
  results, failures = convert_inputs(texts, FLAGS.config, FLAGS.format)
  for result in results:
    print(json.dumps(result.as_dict(), ensure_ascii=False))
  if failures:
    logging.error("%d of %d inputs failed.", len(failures), len(texts))
    return 1
  return 0


def run():
  app.run(main)


if __name__ == "__main__":
  run()
