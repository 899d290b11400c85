from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Optional, Type

from ammonite.protocol.standard import SpeedProfile
from ammonite.resources import Pose


def _find_backend_class(name: str, cls: Type[ArmBackend]) -> Optional[Type[ArmBackend]]:
  """ Search `cls` and its subclasses, depth first, for a class called `name`. """
  if cls.__name__ == name:
    return cls
  for subclass in cls.__subclasses__():
    found = _find_backend_class(name, subclass)
    if found is not None:
      return found
  return None


class ArmBackend(ABC):
  """ Backend for a pipetting arm.

  A backend turns absolute poses in the arm base frame into motion. Inverse kinematics and joint
  space planning, if any, happen here. Every method blocks (awaits) until the motion is complete
  and raises if it fails.
  """

  @abstractmethod
  async def setup(self):
    """ Connect to the arm and prepare it for motion. """

  @abstractmethod
  async def stop(self):
    """ Disconnect from the arm. """

  @abstractmethod
  async def move(self, pose: Pose, speed_profile: SpeedProfile):
    """ Move the tool to `pose` using `speed_profile`. """

  @abstractmethod
  async def wait(self, duration_ms: int):
    """ Hold position for `duration_ms` milliseconds. """

  def serialize(self) -> dict:
    return {"type": self.__class__.__name__}

  @classmethod
  def deserialize(cls, data: dict) -> ArmBackend:
    data = data.copy()
    class_name = data.pop("type")
    subclass = _find_backend_class(class_name, cls)
    if subclass is None:
      raise ValueError(f'Could not find subclass with name "{class_name}"')
    if inspect.isabstract(subclass):
      raise ValueError(f'Subclass with name "{class_name}" is abstract')
    return subclass(**data)
