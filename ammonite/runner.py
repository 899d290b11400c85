""" Compile, then execute. """

import logging
from typing import Sequence

from ammonite.arms import Arm
from ammonite.protocol import Command, MotionPlan, compile_protocol
from ammonite.repository import Repository

logger = logging.getLogger(__name__)


async def run_protocol(repository: Repository, arm: Arm, commands: Sequence[Command]) -> MotionPlan:
  """ Compile `commands` and execute the resulting plan on `arm`.

  The plan is compiled completely, and the repository snapshot released, before the arm moves. If
  compilation fails the arm does not move at all.

  This does not lock the device. Callers that may run protocols concurrently should hold a
  :class:`~ammonite.arms.DeviceLock` around this call.

  Raises:
    CompileError: if the protocol does not compile.
    MotionError: if execution fails.
  """

  plan = compile_protocol(repository, commands)
  await arm.execute(plan)
  return plan
