from typing import Optional

from ammonite.protocol.standard import MotionInstruction


class MotionError(Exception):
  """ Raised when executing a motion plan fails. The rest of the plan was not executed.

  Attributes:
    stage: Index of the failing instruction in the plan.
    cause: The exception raised by the backend.
    instruction: The failing instruction.
  """

  def __init__(self, stage: int, cause: BaseException,
               instruction: Optional[MotionInstruction] = None):
    super().__init__(f"instruction {stage} failed: {cause}")
    self.stage = stage
    self.cause = cause
    self.instruction = instruction
