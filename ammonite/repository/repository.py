""" The entity repository: where decks and labware live between requests. """

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager, List, Optional

from ammonite.resources import Coordinate, Deck, EntityNotFoundError, Labware, Quaternion


class RepositoryView(ABC):
  """ A consistent, read-only view of the repository. Every lookup made through one view sees the
  same state, even if a write commits in the meantime. """

  @abstractmethod
  def get_deck(self, name: str) -> Optional[Deck]:
    """ Get a deck with its locations, or `None` if there is no deck with this name. """

  @abstractmethod
  def get_labware(self, name: str) -> Optional[Labware]:
    """ Get a labware with its wells, or `None` if there is no labware with this name. """

  @abstractmethod
  def get_decks(self) -> List[Deck]:
    ...

  @abstractmethod
  def get_labwares(self) -> List[Labware]:
    ...


class UnitOfWork(RepositoryView):
  """ A set of writes that is committed together, or not at all. """

  @abstractmethod
  def create_labware(self, labware: Labware) -> None:
    """ Insert a labware together with its wells.

    Raises:
      EntityExistsError: if a labware with this name exists.
    """

  @abstractmethod
  def delete_labware(self, name: str) -> None:
    """ Delete a labware and its wells.

    Raises:
      EntityNotFoundError: if there is no labware with this name.
    """

  @abstractmethod
  def create_deck(self, deck: Deck) -> None:
    """ Insert a deck together with its locations. The deck is stored uncalibrated, whatever
    calibration `deck` carries; use :meth:`set_deck_calibration` to calibrate it.

    Raises:
      EntityExistsError: if a deck with this name exists.
    """

  @abstractmethod
  def delete_deck(self, name: str) -> None:
    """ Delete a deck and its locations.

    Raises:
      EntityNotFoundError: if there is no deck with this name.
    """

  @abstractmethod
  def set_deck_calibration(self, name: str, translation: Coordinate, rotation: Quaternion) -> None:
    """ Calibrate a deck, or overwrite an existing calibration.

    Raises:
      EntityNotFoundError: if there is no deck with this name.
    """


class Repository(ABC):
  """ Abstract class for entity repositories.

  Reads go through :meth:`read`, writes through :meth:`write`. The convenience methods below each
  open their own unit of work.
  """

  @abstractmethod
  def read(self) -> ContextManager[RepositoryView]:
    """ Open a read-only snapshot. It is released when the context exits. """

  @abstractmethod
  def write(self) -> ContextManager[UnitOfWork]:
    """ Open a unit of work. It is committed when the context exits normally and rolled back when
    it exits with an exception. """

  def close(self) -> None:
    """ Release any resources held by the repository. """

  def get_deck(self, name: str) -> Deck:
    with self.read() as view:
      deck = view.get_deck(name)
    if deck is None:
      raise EntityNotFoundError("deck", name)
    return deck

  def get_labware(self, name: str) -> Labware:
    with self.read() as view:
      labware = view.get_labware(name)
    if labware is None:
      raise EntityNotFoundError("labware", name)
    return labware

  def get_decks(self) -> List[Deck]:
    with self.read() as view:
      return view.get_decks()

  def get_labwares(self) -> List[Labware]:
    with self.read() as view:
      return view.get_labwares()

  def create_labware(self, labware: Labware) -> None:
    with self.write() as uow:
      uow.create_labware(labware)

  def create_labwares(self, labwares: List[Labware]) -> None:
    """ Create several labwares in one unit of work. """
    with self.write() as uow:
      for labware in labwares:
        uow.create_labware(labware)

  def delete_labware(self, name: str) -> None:
    with self.write() as uow:
      uow.delete_labware(name)

  def create_deck(self, deck: Deck) -> None:
    with self.write() as uow:
      uow.create_deck(deck)

  def delete_deck(self, name: str) -> None:
    with self.write() as uow:
      uow.delete_deck(name)

  def set_deck_calibration(self, name: str, translation: Coordinate, rotation: Quaternion) -> None:
    with self.write() as uow:
      uow.set_deck_calibration(name, translation=translation, rotation=rotation)
