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

"""Utils."""

from collections.abc import Callable
from typing import Any

import ml_collections as mlc
import numpy as np


def format_number(x: float) -> str:
  """Shortest positional (no exponent) decimal that round-trips to `x`.

  >>> format_number(2.0), format_number(-0.1278), format_number(1e-7)
  ('2', '-0.1278', '0.0000001')
  """
  return np.format_float_positional(float(x), unique=True, trim="-")


def parse_arg(arg: str | None, **spec) -> mlc.ConfigDict:
  """Parses the single-string argument of a config's `get_config(arg)`.

  Example use in a config file:

    def get_config(arg=None):
      arg = utils.parse_arg(arg, mgrs_precision=5, input_format="")

  Accepted forms when launching:

    --config default.py:mgrs_precision=3,input_format=mgrs
    --config default.py:3  # The first spec entry may be passed unnamed alone.
    --config default.py:flag  # A boolean needs no value for "true".

  Args:
    arg: the string argument passed to get_config.
    **spec: names and default values of the expected options. A value may
      also be a (default, type_fn) tuple, otherwise the type is taken from the
      default value.

  Returns:
    ConfigDict with the type-converted values.
  """
  arg = arg or ""
  spec = {k: get_type_with_default(v) for k, v in spec.items()}

  if arg and "," not in arg and "=" not in arg:
    if arg in spec or not spec:
      arg = f"{arg}=True"
    else:
      arg = f"{next(iter(spec))}={arg}"

  raw_kv = {}
  for item in filter(None, arg.split(",")):
    key, _, value = item.partition("=")
    raw_kv[key] = value if "=" in item else "True"

  result = mlc.ConfigDict(type_safe=False)
  for name, (default, type_fn) in spec.items():
    value = raw_kv.pop(name, None)
    result[name] = type_fn(value) if value is not None else default
  if raw_kv:
    raise ValueError(f"Unhandled config args remain: {raw_kv}")
  return result


def get_type_with_default(v: Any) -> tuple[Any, Callable[[str], Any]]:
  """Returns (v, string_to_v_type) with strict bool parsing."""
  if isinstance(v, bool):
    def strict_bool(x):
      if x.lower() not in {"true", "false", ""}:
        raise ValueError(f"Not a boolean: {x!r}")
      return x.lower() == "true"
    return (v, strict_bool)
  if isinstance(v, (tuple, list)):
    return (v[0], v[1])
  return (v, type(v))
