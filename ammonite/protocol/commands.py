"""Abstract commands submitted by clients, and their JSON form.

A protocol is a JSON list of objects, each tagged by a ``command`` field:

- ``{"command": "movexyz", "x": ..., "y": ..., "z": ..., "qw": ..., "qx": ..., "qy": ..., "qz": ...}``
  moves to an absolute pose in the arm base frame. The orientation is optional and defaults to the
  identity quaternion.
- ``{"command": "move", "deck": ..., "location": ..., "labware_name": ..., "address": ...,
  "depth_from_bottom": ...}`` moves into a well of labware mounted on a deck location.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, List, Union

from ammonite.protocol.errors import MalformedCommandError, UnknownCommandError
from ammonite.resources import Coordinate, Pose, Quaternion

MOVE_XYZ = "movexyz"
MOVE_TO_WELL = "move"

_ORIENTATION_KEYS = ("qw", "qx", "qy", "qz")


@dataclass(frozen=True)
class MoveXyz:
  x: float
  y: float
  z: float
  orientation: Quaternion = field(default_factory=Quaternion.identity)

  @property
  def pose(self) -> Pose:
    return Pose(location=Coordinate(self.x, self.y, self.z), rotation=self.orientation)

  def serialize(self) -> dict:
    return {
      "command": MOVE_XYZ,
      "x": self.x,
      "y": self.y,
      "z": self.z,
      "qw": self.orientation.w,
      "qx": self.orientation.x,
      "qy": self.orientation.y,
      "qz": self.orientation.z,
    }


@dataclass(frozen=True)
class MoveToWell:
  deck: str
  location: str
  labware: str
  address: str
  depth_from_bottom: float

  def serialize(self) -> dict:
    return {
      "command": MOVE_TO_WELL,
      "deck": self.deck,
      "location": self.location,
      "labware_name": self.labware,
      "address": self.address,
      "depth_from_bottom": self.depth_from_bottom,
    }


Command = Union[MoveXyz, MoveToWell]


def _number(data: dict, key: str) -> float:
  if key not in data:
    raise MalformedCommandError(f"missing key in json data: '{key}'")
  value = data[key]
  if isinstance(value, bool) or not isinstance(value, Real):
    raise MalformedCommandError(f"'{key}' must be a number, got {value!r}")
  if not math.isfinite(value):
    raise MalformedCommandError(f"'{key}' must be finite, got {value!r}")
  return float(value)


def _string(data: dict, key: str) -> str:
  if key not in data:
    raise MalformedCommandError(f"missing key in json data: '{key}'")
  value = data[key]
  if not isinstance(value, str):
    raise MalformedCommandError(f"'{key}' must be a string, got {value!r}")
  return value


def parse_command(data: Any) -> Command:
  """ Parse a single command from its JSON form.

  Raises:
    UnknownCommandError: if the ``command`` tag is not one of ``movexyz`` or ``move``.
    MalformedCommandError: if the data is not an object or a field is missing or of the wrong type.
  """

  if not isinstance(data, dict):
    raise MalformedCommandError(f"command must be an object, got {type(data).__name__}")
  if "command" not in data:
    raise MalformedCommandError("missing key in json data: 'command'")

  tag = data["command"]
  if tag == MOVE_XYZ:
    present = [k for k in _ORIENTATION_KEYS if k in data]
    if len(present) == 0:
      orientation = Quaternion.identity()
    elif len(present) == len(_ORIENTATION_KEYS):
      orientation = Quaternion(*(_number(data, k) for k in _ORIENTATION_KEYS))
    else:
      missing = [k for k in _ORIENTATION_KEYS if k not in data]
      raise MalformedCommandError(f"incomplete orientation, missing {missing}")
    return MoveXyz(
      x=_number(data, "x"),
      y=_number(data, "y"),
      z=_number(data, "z"),
      orientation=orientation,
    )
  if tag == MOVE_TO_WELL:
    return MoveToWell(
      deck=_string(data, "deck"),
      location=_string(data, "location"),
      labware=_string(data, "labware_name"),
      address=_string(data, "address"),
      depth_from_bottom=_number(data, "depth_from_bottom"),
    )
  raise UnknownCommandError(tag)


def parse_protocol(data: Any) -> List[Command]:
  """ Parse a protocol, a JSON list of commands. Parsing stops at the first bad command. """

  if not isinstance(data, list):
    raise MalformedCommandError("protocol must be a list of commands")
  commands: List[Command] = []
  for i, item in enumerate(data):
    try:
      commands.append(parse_command(item))
    except MalformedCommandError as e:
      raise MalformedCommandError(str(e), index=i) from e
  return commands
