from __future__ import annotations

from dataclasses import dataclass

from ammonite.resources.coordinate import Coordinate
from ammonite.resources.quaternion import Quaternion


@dataclass(frozen=True)
class Pose:
  """An absolute pose of the arm's tool in the arm base frame."""

  location: Coordinate
  rotation: Quaternion

  def serialize(self) -> dict:
    return {
      "type": "Pose",
      "location": self.location.serialize(),
      "rotation": self.rotation.serialize(),
    }

  @staticmethod
  def deserialize(data: dict) -> Pose:
    return Pose(
      location=Coordinate.deserialize(data["location"]),
      rotation=Quaternion.deserialize(data["rotation"]),
    )
