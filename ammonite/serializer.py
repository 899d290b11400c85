"""A simple JSON serializer."""

import enum
import inspect
import math
import sys
from typing import Any, Dict, List, Union, cast

if sys.version_info >= (3, 10):
  from typing import TypeAlias
else:
  from typing_extensions import TypeAlias

JSON: TypeAlias = Union[Dict[str, "JSON"], List["JSON"], str, int, float, bool, None]


def get_ammonite_class_from_string(klass_type: str):
  import ammonite.protocol.standard as standard_module
  import ammonite.resources as resource_module

  for name, obj in inspect.getmembers(resource_module) + inspect.getmembers(standard_module):
    if inspect.isclass(obj) and name == klass_type:
      return obj
  raise ValueError(f"Could not find class {klass_type}")


def serialize(obj: Any) -> JSON:
  """Serialize an object."""

  if isinstance(obj, (int, float, str, bool, type(None))):
    # infinities and NaNs are not valid JSON, so we convert them to strings
    if isinstance(obj, float) and not math.isfinite(obj):
      return "nan" if math.isnan(obj) else ("Infinity" if obj > 0 else "-Infinity")
    return obj
  if isinstance(obj, (list, tuple, set)):
    return [serialize(item) for item in obj]
  if isinstance(obj, dict):
    return {k: serialize(v) for k, v in obj.items()}
  if isinstance(obj, enum.Enum):
    return obj.name
  if hasattr(obj, "serialize"):  # if the object has a custom serialize method
    return cast(JSON, obj.serialize())
  if hasattr(obj, "__dict__"):
    data: Dict[str, Any] = {}
    for key, value in vars(obj).items():
      if key.startswith("_"):
        continue
      data[key] = serialize(value)
    data["type"] = obj.__class__.__name__
    return data
  raise TypeError(f"Cannot serialize {obj} of type {type(obj)}")


def deserialize(data: JSON) -> Any:
  """Deserialize an object."""

  if isinstance(data, (int, float, str, bool, type(None))):
    return data
  if isinstance(data, list):
    return [deserialize(item) for item in data]
  if isinstance(data, dict):
    if "type" in data:  # deserialize a class
      klass = get_ammonite_class_from_string(cast(str, data["type"]))
      if hasattr(klass, "deserialize"):
        return klass.deserialize(data)
      params = {k: deserialize(v) for k, v in data.items() if k != "type"}
      return klass(**params)
    return {k: deserialize(v) for k, v in data.items()}
  raise TypeError(f"Cannot deserialize {data} of type {type(data)}")
