from .commands import (
  Command,
  MoveToWell,
  MoveXyz,
  parse_command,
  parse_protocol,
)
from .compiler import compile_protocol
from .errors import (
  CompileError,
  DeckNotCalibratedError,
  EntityNotFoundError,
  LocationNotFoundError,
  MalformedCommandError,
  UnknownCommandError,
  WellNotFoundError,
)
from .frames import CLEARANCE, compose_well_pose, well_approach_moves
from .standard import (
  DEFAULT_SPEED_PROFILE,
  MotionInstruction,
  MotionPlan,
  Move,
  SpeedProfile,
  Wait,
)
