from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ammonite.resources.coordinate import Coordinate
from ammonite.resources.quaternion import Quaternion


@dataclass(frozen=True)
class Location:
  """A named mounting slot on a deck.

  Args:
    name: Name of the slot, unique within its deck, like "1".
    offset: Offset of the slot relative to the deck origin.
    rotation: Orientation of the slot relative to the deck frame. Unset (all zero) means the slot
      has no orientation of its own and poses use the deck rotation.
  """

  name: str
  offset: Coordinate = field(default_factory=Coordinate.zero)
  rotation: Quaternion = field(default_factory=Quaternion.unset)

  def serialize(self) -> dict:
    return {
      "name": self.name,
      "x": self.offset.x,
      "y": self.offset.y,
      "z": self.offset.z,
      "qw": self.rotation.w,
      "qx": self.rotation.x,
      "qy": self.rotation.y,
      "qz": self.rotation.z,
    }

  @staticmethod
  def deserialize(data: dict) -> Location:
    return Location(
      name=data["name"],
      offset=Coordinate(x=data.get("x", 0), y=data.get("y", 0), z=data.get("z", 0)),
      rotation=Quaternion(
        w=data.get("qw", 0), x=data.get("qx", 0), y=data.get("qy", 0), z=data.get("qz", 0)),
    )


@dataclass(frozen=True)
class Deck:
  """A calibratable work surface with named locations.

  `translation` and `rotation` map deck-local coordinates into the arm base frame. They only mean
  something when `calibrated` is `True`; a fresh deck carries zeros.
  """

  name: str
  locations: Tuple[Location, ...] = ()
  calibrated: bool = False
  translation: Coordinate = field(default_factory=Coordinate.zero)
  rotation: Quaternion = field(default_factory=Quaternion.unset)

  def __post_init__(self):
    object.__setattr__(self, "locations", tuple(self.locations))
    names = [loc.name for loc in self.locations]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if len(duplicates) > 0:
      raise ValueError(f"Deck '{self.name}' has duplicate location names: {duplicates}")

  def get_location(self, name: str) -> Optional[Location]:
    """ Get a location by name, or `None` if this deck has no such location. """
    for location in self.locations:
      if location.name == name:
        return location
    return None

  def with_calibration(self, translation: Coordinate, rotation: Quaternion) -> Deck:
    """ Return a copy of this deck, calibrated with the given transform. """
    return dataclasses.replace(self, calibrated=True, translation=translation, rotation=rotation)

  def serialize(self) -> dict:
    return {
      "name": self.name,
      "calibrated": self.calibrated,
      "x": self.translation.x,
      "y": self.translation.y,
      "z": self.translation.z,
      "qw": self.rotation.w,
      "qx": self.rotation.x,
      "qy": self.rotation.y,
      "qz": self.rotation.z,
      "locations": [loc.serialize() for loc in self.locations],
    }

  @staticmethod
  def deserialize(data: dict) -> Deck:
    """ Deserialize a deck. Only `name` is required, so this also reads create-deck requests,
    which carry a name and locations but no calibration. """
    return Deck(
      name=data["name"],
      locations=tuple(Location.deserialize(loc) for loc in data.get("locations") or []),
      calibrated=bool(data.get("calibrated", False)),
      translation=Coordinate(x=data.get("x", 0), y=data.get("y", 0), z=data.get("z", 0)),
      rotation=Quaternion(
        w=data.get("qw", 0), x=data.get("qx", 0), y=data.get("qy", 0), z=data.get("qz", 0)),
    )
