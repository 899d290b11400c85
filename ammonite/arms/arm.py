""" Defines Arm, the front end that executes motion plans. """

from __future__ import annotations

import functools
import logging
from typing import Sequence

from ammonite.arms.backend import ArmBackend
from ammonite.arms.errors import MotionError
from ammonite.protocol.standard import (
  DEFAULT_SPEED_PROFILE,
  Move,
  MotionInstruction,
  SpeedProfile,
  Wait,
)
from ammonite.resources import Pose

logger = logging.getLogger(__name__)


def need_setup_finished(func):
  """Decorator for methods that require the arm to be set up.

  Raises:
    RuntimeError: If the arm is not set up.
  """

  @functools.wraps(func)
  async def wrapper(self: Arm, *args, **kwargs):
    if not self.setup_finished:
      raise RuntimeError("The setup has not finished. See `setup`.")
    return await func(self, *args, **kwargs)

  return wrapper


class Arm:
  """ A pipetting arm.

  Motion plans come out of :func:`ammonite.protocol.compile_protocol` already resolved to absolute
  poses, so the arm only plays them back, in order, through its backend.
  """

  def __init__(self, backend: ArmBackend):
    self.backend = backend
    self._setup_finished = False

  @property
  def setup_finished(self) -> bool:
    return self._setup_finished

  def serialize(self) -> dict:
    return {"backend": self.backend.serialize()}

  @classmethod
  def deserialize(cls, data: dict) -> Arm:
    return cls(backend=ArmBackend.deserialize(data["backend"]))

  async def setup(self, **backend_kwargs):
    await self.backend.setup(**backend_kwargs)
    self._setup_finished = True

  @need_setup_finished
  async def stop(self):
    await self.backend.stop()
    self._setup_finished = False

  async def __aenter__(self):
    await self.setup()
    return self

  async def __aexit__(self, exc_type, exc_value, traceback):
    await self.stop()

  @need_setup_finished
  async def move_to(self, pose: Pose, speed_profile: SpeedProfile = DEFAULT_SPEED_PROFILE):
    """ Move the tool to an absolute pose in the arm base frame. """
    await self.backend.move(pose, speed_profile)

  @need_setup_finished
  async def wait(self, duration_ms: int):
    await self.backend.wait(duration_ms)

  @need_setup_finished
  async def execute(self, plan: Sequence[MotionInstruction]):
    """ Execute a motion plan, one instruction at a time, in order.

    Each instruction completes before the next one starts. Execution stops at the first failure;
    there is no retry and the remaining instructions are abandoned.

    Raises:
      MotionError: if the backend fails. `stage` is the index of the failing instruction.
    """

    logger.info("Executing motion plan of %d instructions.", len(plan))
    for stage, instruction in enumerate(plan):
      if not isinstance(instruction, (Move, Wait)):
        raise TypeError(f"Unknown motion instruction: {instruction!r}")
      logger.debug("Instruction %d: %s", stage, instruction)
      try:
        if isinstance(instruction, Move):
          await self.backend.move(instruction.pose, instruction.speed_profile)
        else:
          await self.backend.wait(instruction.duration_ms)
      except Exception as e:
        logger.error("Instruction %d (%s) failed: %s", stage, instruction, e)
        raise MotionError(stage=stage, cause=e, instruction=instruction) from e
    logger.info("Motion plan complete.")
