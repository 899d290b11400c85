from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
  """Represents coordinates in millimeters. This is used for the translation of a deck, the offset
  of a location on a deck, the offset of a well within its labware and the position of a pose.
  """

  x: float = 0
  y: float = 0
  z: float = 0

  @staticmethod
  def zero() -> Coordinate:
    return Coordinate(0, 0, 0)

  def __add__(self, other) -> Coordinate:
    return Coordinate(
      x=(self.x or 0) + (other.x or 0),
      y=(self.y or 0) + (other.y or 0),
      z=(self.z or 0) + (other.z or 0),
    )

  def __sub__(self, other) -> Coordinate:
    return Coordinate(
      x=(self.x or 0) - (other.x or 0),
      y=(self.y or 0) - (other.y or 0),
      z=(self.z or 0) - (other.z or 0),
    )

  def __str__(self) -> str:
    return f"Coordinate({self.x:07.3f}, {self.y:07.3f}, {self.z:07.3f})"

  def __neg__(self) -> Coordinate:
    return Coordinate(-self.x, -self.y, -self.z)

  def vector(self) -> list[float]:
    return [self.x, self.y, self.z]

  def __iter__(self):
    return iter((self.x, self.y, self.z))

  def serialize(self) -> dict:
    return {"type": "Coordinate", "x": self.x, "y": self.y, "z": self.z}

  @staticmethod
  def deserialize(data: dict) -> Coordinate:
    return Coordinate(x=data["x"], y=data["y"], z=data["z"])
