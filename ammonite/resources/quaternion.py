from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Quaternion:
  """An orientation, stored as a quaternion (w, x, y, z).

  Quaternion math lives in the arm backends. Here a quaternion is only carried from a deck or a
  location into a pose, so this class is a plain value with a few helpers.

  The all-zero quaternion is not a rotation. It is what an orientation that was never set looks
  like in storage, see :meth:`is_unset`.
  """

  w: float = 1
  x: float = 0
  y: float = 0
  z: float = 0

  @staticmethod
  def identity() -> Quaternion:
    return Quaternion(1, 0, 0, 0)

  @staticmethod
  def unset() -> Quaternion:
    return Quaternion(0, 0, 0, 0)

  def is_unset(self) -> bool:
    return self.w == 0 and self.x == 0 and self.y == 0 and self.z == 0

  def __iter__(self):
    return iter((self.w, self.x, self.y, self.z))

  def __str__(self) -> str:
    return f"Quaternion(w={self.w}, x={self.x}, y={self.y}, z={self.z})"

  def serialize(self) -> dict:
    return {"type": "Quaternion", "w": self.w, "x": self.x, "y": self.y, "z": self.z}

  @staticmethod
  def deserialize(data: dict) -> Quaternion:
    return Quaternion(w=data["w"], x=data["x"], y=data["y"], z=data["z"])
