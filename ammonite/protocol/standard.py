"""Data structures for the standard form of arm motion: the output of protocol compilation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from ammonite.resources.pose import Pose


@dataclass(frozen=True)
class SpeedProfile:
  """Speed and acceleration settings for a single move.

  Args:
    speed: Speed as a percentage of the arm's maximum speed.
    acceleration_duration: Percentage of the move spent accelerating.
    acceleration_speed: Acceleration as a percentage of the arm's maximum.
    deceleration_duration: Percentage of the move spent decelerating.
    deceleration_speed: Deceleration as a percentage of the arm's maximum.
  """

  speed: int = 25
  acceleration_duration: int = 10
  acceleration_speed: int = 10
  deceleration_duration: int = 10
  deceleration_speed: int = 10

  def serialize(self) -> dict:
    return {
      "type": "SpeedProfile",
      "speed": self.speed,
      "acceleration_duration": self.acceleration_duration,
      "acceleration_speed": self.acceleration_speed,
      "deceleration_duration": self.deceleration_duration,
      "deceleration_speed": self.deceleration_speed,
    }


DEFAULT_SPEED_PROFILE = SpeedProfile()


@dataclass(frozen=True)
class Move:
  pose: Pose
  speed_profile: SpeedProfile = field(default=DEFAULT_SPEED_PROFILE)

  def serialize(self) -> dict:
    return {
      "type": "Move",
      "pose": self.pose.serialize(),
      "speed_profile": self.speed_profile.serialize(),
    }

  @staticmethod
  def deserialize(data: dict) -> Move:
    speed_data = {k: v for k, v in data["speed_profile"].items() if k != "type"}
    return Move(pose=Pose.deserialize(data["pose"]), speed_profile=SpeedProfile(**speed_data))


@dataclass(frozen=True)
class Wait:
  duration_ms: int

  def serialize(self) -> dict:
    return {"type": "Wait", "duration_ms": self.duration_ms}


MotionInstruction = Union[Move, Wait]
MotionPlan = List[MotionInstruction]
