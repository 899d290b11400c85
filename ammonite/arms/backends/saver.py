from typing import List, Optional, Tuple, Union

from ammonite.arms.backend import ArmBackend
from ammonite.protocol.standard import SpeedProfile
from ammonite.resources import Pose

Call = Union[Tuple[str, Pose, SpeedProfile], Tuple[str, int]]


class SavingArmBackend(ArmBackend):
  """ An arm backend that records every call instead of moving.

  Args:
    fail_at: If set, the call with this index (counting moves and waits together, from 0) raises
      `RuntimeError` instead of being recorded. Used to exercise failure handling.
  """

  def __init__(self, fail_at: Optional[int] = None):
    self.fail_at = fail_at
    self.calls: List[Call] = []
    self._count = 0

  async def setup(self):
    pass

  async def stop(self):
    pass

  def _check_failure(self):
    index = self._count
    self._count += 1
    if self.fail_at is not None and index == self.fail_at:
      raise RuntimeError(f"simulated failure at call {index}")

  async def move(self, pose: Pose, speed_profile: SpeedProfile):
    self._check_failure()
    self.calls.append(("move", pose, speed_profile))

  async def wait(self, duration_ms: int):
    self._check_failure()
    self.calls.append(("wait", duration_ms))

  def serialize(self) -> dict:
    return {**super().serialize(), "fail_at": self.fail_at}
