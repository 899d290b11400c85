""" A repository that keeps everything in process memory. Useful for tests and dry runs. """

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Dict, Iterator, List, Optional

from ammonite.repository.repository import Repository, RepositoryView, UnitOfWork
from ammonite.resources import (
  Coordinate,
  Deck,
  EntityExistsError,
  EntityNotFoundError,
  Labware,
  Quaternion,
)

logger = logging.getLogger(__name__)


class _MemoryView(RepositoryView):
  def __init__(self, decks: Dict[str, Deck], labwares: Dict[str, Labware]):
    self._decks = decks
    self._labwares = labwares

  def get_deck(self, name: str) -> Optional[Deck]:
    return self._decks.get(name)

  def get_labware(self, name: str) -> Optional[Labware]:
    return self._labwares.get(name)

  def get_decks(self) -> List[Deck]:
    return list(self._decks.values())

  def get_labwares(self) -> List[Labware]:
    return list(self._labwares.values())


class _MemoryUnitOfWork(_MemoryView, UnitOfWork):
  def create_labware(self, labware: Labware) -> None:
    if labware.name in self._labwares:
      raise EntityExistsError("labware", labware.name)
    self._labwares[labware.name] = labware

  def delete_labware(self, name: str) -> None:
    if name not in self._labwares:
      raise EntityNotFoundError("labware", name)
    del self._labwares[name]

  def create_deck(self, deck: Deck) -> None:
    if deck.name in self._decks:
      raise EntityExistsError("deck", deck.name)
    self._decks[deck.name] = Deck(name=deck.name, locations=deck.locations)

  def delete_deck(self, name: str) -> None:
    if name not in self._decks:
      raise EntityNotFoundError("deck", name)
    del self._decks[name]

  def set_deck_calibration(self, name: str, translation: Coordinate, rotation: Quaternion) -> None:
    deck = self._decks.get(name)
    if deck is None:
      raise EntityNotFoundError("deck", name)
    self._decks[name] = deck.with_calibration(translation=translation, rotation=rotation)


class MemoryRepository(Repository):
  """ An in-memory repository.

  Entities are immutable, so a snapshot is a copy of the two name -> entity maps taken under a
  lock. A unit of work edits its own copy of the maps and swaps them in on commit. Writers are
  serialized.
  """

  def __init__(self):
    self._decks: Dict[str, Deck] = {}
    self._labwares: Dict[str, Labware] = {}
    self._lock = threading.Lock()
    self._write_lock = threading.Lock()
    self._revision = 0

  @property
  def revision(self) -> int:
    """ Number of committed units of work. """
    return self._revision

  @contextlib.contextmanager
  def read(self) -> Iterator[RepositoryView]:
    with self._lock:
      view = _MemoryView(decks=dict(self._decks), labwares=dict(self._labwares))
    yield view

  @contextlib.contextmanager
  def write(self) -> Iterator[UnitOfWork]:
    with self._write_lock:
      with self._lock:
        uow = _MemoryUnitOfWork(decks=dict(self._decks), labwares=dict(self._labwares))
      yield uow
      with self._lock:
        self._decks = uow._decks
        self._labwares = uow._labwares
        self._revision += 1
      logger.debug("committed revision %d", self._revision)
