from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ammonite.resources.coordinate import Coordinate


@dataclass(frozen=True)
class Well:
  """A single receptacle in a piece of labware.

  Args:
    address: The name of the well within its labware, like "A1".
    depth: Depth of the well in mm.
    diameter: Diameter of the well in mm.
    offset: Location of the well bottom relative to the labware's reference corner.
  """

  address: str
  depth: float
  diameter: float
  offset: Coordinate = field(default_factory=Coordinate.zero)

  def serialize(self) -> dict:
    return {
      "address": self.address,
      "depth": self.depth,
      "diameter": self.diameter,
      "x": self.offset.x,
      "y": self.offset.y,
      "z": self.offset.z,
    }

  @staticmethod
  def deserialize(data: dict) -> Well:
    return Well(
      address=data["address"],
      depth=data["depth"],
      diameter=data["diameter"],
      offset=Coordinate(x=data.get("x", 0), y=data.get("y", 0), z=data.get("z", 0)),
    )


@dataclass(frozen=True)
class Labware:
  """A plate, rack or reservoir type: a height and an ordered set of wells.

  Args:
    name: Unique name of the labware, like "nest_96_wellplate_100ul_pcr_full_skirt".
    z_dimension: Distance from the deck surface to the top of the labware in mm.
    wells: The wells, in order. Addresses must be unique.
  """

  name: str
  z_dimension: float
  wells: Tuple[Well, ...] = ()

  def __post_init__(self):
    object.__setattr__(self, "wells", tuple(self.wells))
    addresses = [w.address for w in self.wells]
    duplicates = sorted({a for a in addresses if addresses.count(a) > 1})
    if len(duplicates) > 0:
      raise ValueError(f"Labware '{self.name}' has duplicate well addresses: {duplicates}")

  def get_well(self, address: str) -> Optional[Well]:
    """ Get a well by address, or `None` if this labware has no such well. """
    for well in self.wells:
      if well.address == address:
        return well
    return None

  def serialize(self) -> dict:
    return {
      "name": self.name,
      "zDimension": self.z_dimension,
      "wells": [w.serialize() for w in self.wells],
    }

  @staticmethod
  def deserialize(data: dict) -> Labware:
    return Labware(
      name=data["name"],
      z_dimension=data["zDimension"],
      wells=tuple(Well.deserialize(w) for w in data.get("wells") or []),
    )
