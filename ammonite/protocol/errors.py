from ammonite.resources import errors as resource_errors


class CompileError(Exception):
  """ Base class for everything that can make a protocol fail to compile. Compilation never writes,
  so a `CompileError` leaves no state behind: fix the input and compile again. """


class EntityNotFoundError(CompileError, resource_errors.EntityNotFoundError):
  """ Raised when a command names a deck or labware that does not exist. """


class DeckNotCalibratedError(CompileError):
  """ Raised when a command moves relative to a deck that has not been calibrated. Without a
  calibration the deck has no transform into the arm base frame. """

  def __init__(self, deck: str):
    super().__init__(f"deck '{deck}' is not calibrated. Please calibrate the deck")
    self.deck = deck


class LocationNotFoundError(CompileError):
  def __init__(self, deck: str, location: str):
    super().__init__(f"location '{location}' not in deck '{deck}'")
    self.deck = deck
    self.location = location


class WellNotFoundError(CompileError):
  def __init__(self, labware: str, address: str):
    super().__init__(f"well '{address}' not in labware '{labware}'")
    self.labware = labware
    self.address = address


class UnknownCommandError(CompileError):
  def __init__(self, tag):
    super().__init__(
      f"Command not found. Only valid commands are `move, movexyz`, got: {tag}")
    self.tag = tag


class MalformedCommandError(CompileError):
  """ Raised when a command has a known tag but missing or invalid fields. """

  def __init__(self, message: str, index: int = -1):
    super().__init__(message if index < 0 else f"command {index}: {message}")
    self.index = index
