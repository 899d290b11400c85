""" Compile abstract commands into a motion plan.

Compilation only reads. It opens one snapshot of the repository, resolves every command against it,
and releases it before returning. Nothing is written and no arm is touched, so compiling is safe to
repeat and doubles as a dry run.
"""

import logging
from typing import List, Sequence

from ammonite.protocol.commands import Command, MoveToWell, MoveXyz
from ammonite.protocol.errors import (
  DeckNotCalibratedError,
  EntityNotFoundError,
  LocationNotFoundError,
  UnknownCommandError,
  WellNotFoundError,
)
from ammonite.protocol.frames import well_approach_moves
from ammonite.protocol.standard import DEFAULT_SPEED_PROFILE, Move, MotionPlan, SpeedProfile
from ammonite.repository import Repository, RepositoryView

logger = logging.getLogger(__name__)


def _compile_move_to_well(
  view: RepositoryView,
  command: MoveToWell,
  speed_profile: SpeedProfile,
) -> List[Move]:
  deck = view.get_deck(command.deck)
  if deck is None:
    raise EntityNotFoundError("deck", command.deck)
  if not deck.calibrated:
    raise DeckNotCalibratedError(deck.name)

  location = deck.get_location(command.location)
  if location is None:
    raise LocationNotFoundError(deck.name, command.location)

  labware = view.get_labware(command.labware)
  if labware is None:
    raise EntityNotFoundError("labware", command.labware)

  well = labware.get_well(command.address)
  if well is None:
    raise WellNotFoundError(labware.name, command.address)

  return well_approach_moves(
    deck=deck,
    location=location,
    well=well,
    labware=labware,
    depth_from_bottom=command.depth_from_bottom,
    speed_profile=speed_profile,
  )


def compile_protocol(
  repository: Repository,
  commands: Sequence[Command],
  speed_profile: SpeedProfile = DEFAULT_SPEED_PROFILE,
) -> MotionPlan:
  """ Compile commands into a motion plan.

  Args:
    repository: Where decks and labware are looked up.
    commands: The commands, in execution order.
    speed_profile: Speed profile for every move in the plan.

  Returns:
    The motion plan. `MoveXyz` becomes one move, `MoveToWell` becomes three (above the well, into
    the well, above the well).

  Raises:
    CompileError: for the first command that cannot be compiled. No partial plan is returned.
  """

  plan: MotionPlan = []
  with repository.read() as view:
    for command in commands:
      if isinstance(command, MoveXyz):
        plan.append(Move(pose=command.pose, speed_profile=speed_profile))
      elif isinstance(command, MoveToWell):
        plan.extend(_compile_move_to_well(view, command, speed_profile))
      else:
        raise UnknownCommandError(type(command).__name__)
  logger.debug("Compiled %d commands into %d instructions.", len(commands), len(plan))
  return plan
