"""Coordinate frame composition: deck calibration -> location on the deck -> well in the labware.

All functions here are pure. They do not look anything up and do not talk to an arm.
"""

from typing import List, Tuple

from ammonite.protocol.errors import DeckNotCalibratedError
from ammonite.protocol.standard import DEFAULT_SPEED_PROFILE, Move, SpeedProfile
from ammonite.resources import Coordinate, Deck, Labware, Location, Pose, Quaternion, Well

# Vertical clearance above the labware top before descending into a well, in mm.
CLEARANCE = 5


def location_rotation(deck: Deck, location: Location) -> Quaternion:
  """ The orientation of the tool above a location.

  A location that has its own orientation uses it. A location whose orientation was never set (the
  all-zero quaternion) uses the deck's calibrated rotation.
  """
  if not location.rotation.is_unset():
    return location.rotation
  return deck.rotation


def compose_well_pose(
  deck: Deck,
  location: Location,
  well: Well,
  labware: Labware,
  depth_from_bottom: float,
) -> Tuple[Pose, Pose]:
  """ Compute the absolute poses above and inside a well.

  Args:
    deck: The calibrated deck the labware is mounted on.
    location: The location on `deck` holding the labware.
    well: The target well of `labware`.
    labware: The labware holding `well`.
    depth_from_bottom: Height above the well bottom to descend to, in mm.

  Returns:
    `(top, bottom)`: `top` is `CLEARANCE` above the labware, directly over the well. `bottom` is
    `depth_from_bottom` above the well bottom. Both share x, y and orientation.

  Raises:
    DeckNotCalibratedError: if `deck` has no calibration.
  """

  if not deck.calibrated:
    raise DeckNotCalibratedError(deck.name)

  location_offset = deck.translation + location.offset
  well_offset = location_offset + well.offset
  rotation = location_rotation(deck, location)

  top = Pose(
    location=Coordinate(
      x=well_offset.x,
      y=well_offset.y,
      z=well_offset.z + labware.z_dimension + CLEARANCE,
    ),
    rotation=rotation,
  )
  bottom = Pose(
    location=Coordinate(
      x=well_offset.x,
      y=well_offset.y,
      z=well_offset.z + depth_from_bottom,
    ),
    rotation=rotation,
  )
  return top, bottom


def well_approach_moves(
  deck: Deck,
  location: Location,
  well: Well,
  labware: Labware,
  depth_from_bottom: float,
  speed_profile: SpeedProfile = DEFAULT_SPEED_PROFILE,
) -> List[Move]:
  """ Approach a well from above, descend into it and retract: top, bottom, top. """

  top, bottom = compose_well_pose(
    deck=deck,
    location=location,
    well=well,
    labware=labware,
    depth_from_bottom=depth_from_bottom,
  )
  return [
    Move(pose=top, speed_profile=speed_profile),
    Move(pose=bottom, speed_profile=speed_profile),
    Move(pose=top, speed_profile=speed_profile),
  ]
