""" A repository backed by a SQL database through SQLAlchemy Core. """

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Iterator, List, Optional

from sqlalchemy import (
  Boolean,
  Column,
  Float,
  ForeignKey,
  Integer,
  MetaData,
  String,
  Table,
  create_engine,
  delete,
  event,
  insert,
  select,
  update,
)
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.pool import StaticPool

from ammonite.repository.repository import Repository, RepositoryView, UnitOfWork
from ammonite.resources import (
  Coordinate,
  Deck,
  EntityExistsError,
  EntityNotFoundError,
  Labware,
  Location,
  Quaternion,
  Well,
)

logger = logging.getLogger(__name__)

metadata = MetaData()

labware_table = Table(
  "labware",
  metadata,
  Column("name", String, primary_key=True),
  Column("zdimension", Float, nullable=False),
)

well_table = Table(
  "well",
  metadata,
  Column("id", Integer, primary_key=True, autoincrement=True),
  Column("labware", String, ForeignKey("labware.name", ondelete="CASCADE"), nullable=False,
         index=True),
  Column("address", String, nullable=False),
  Column("depth", Float, nullable=False),
  Column("diameter", Float, nullable=False),
  Column("x", Float, nullable=False),
  Column("y", Float, nullable=False),
  Column("z", Float, nullable=False),
)

deck_table = Table(
  "deck",
  metadata,
  Column("name", String, primary_key=True),
  Column("calibrated", Boolean, nullable=False, default=False),
  Column("x", Float, nullable=False, default=0),
  Column("y", Float, nullable=False, default=0),
  Column("z", Float, nullable=False, default=0),
  Column("qw", Float, nullable=False, default=0),
  Column("qx", Float, nullable=False, default=0),
  Column("qy", Float, nullable=False, default=0),
  Column("qz", Float, nullable=False, default=0),
)

location_table = Table(
  "location",
  metadata,
  Column("id", Integer, primary_key=True, autoincrement=True),
  Column("deck", String, ForeignKey("deck.name", ondelete="CASCADE"), nullable=False, index=True),
  Column("name", String, nullable=False),
  Column("x", Float, nullable=False),
  Column("y", Float, nullable=False),
  Column("z", Float, nullable=False),
  Column("qw", Float, nullable=False),
  Column("qx", Float, nullable=False),
  Column("qy", Float, nullable=False),
  Column("qz", Float, nullable=False),
)


def _is_memory_url(url: str) -> bool:
  return url in ("sqlite://", "sqlite:///:memory:")


def make_engine(url: str) -> Engine:
  """ Create an engine for `url`.

  For SQLite, pysqlite's own transaction handling is switched off and `BEGIN` is emitted when
  SQLAlchemy starts a transaction, so that a read transaction holds one snapshot from its first
  statement to its end. Foreign keys are switched on for cascading deletes. An in-memory database
  lives on a single connection that every thread shares.
  """

  if _is_memory_url(url):
    engine = create_engine(url, poolclass=StaticPool, connect_args={"check_same_thread": False})
  elif make_url(url).get_backend_name() == "sqlite":
    engine = create_engine(url, connect_args={"check_same_thread": False})
  else:
    engine = create_engine(url)

  if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # pylint: disable=unused-argument
      dbapi_connection.isolation_level = None
      cursor = dbapi_connection.cursor()
      cursor.execute("PRAGMA foreign_keys = ON")
      if not _is_memory_url(url):
        cursor.execute("PRAGMA journal_mode = WAL")
      cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
      conn.exec_driver_sql("BEGIN")

  return engine


class _SQLView(RepositoryView):
  def __init__(self, conn: Connection):
    self._conn = conn

  def _wells(self, labware: str) -> List[Well]:
    rows = self._conn.execute(
      select(well_table).where(well_table.c.labware == labware).order_by(well_table.c.id))
    return [
      Well(address=r.address, depth=r.depth, diameter=r.diameter, offset=Coordinate(r.x, r.y, r.z))
      for r in rows
    ]

  def _locations(self, deck: str) -> List[Location]:
    rows = self._conn.execute(
      select(location_table).where(location_table.c.deck == deck).order_by(location_table.c.id))
    return [
      Location(
        name=r.name,
        offset=Coordinate(r.x, r.y, r.z),
        rotation=Quaternion(r.qw, r.qx, r.qy, r.qz),
      )
      for r in rows
    ]

  def _deck_from_row(self, r) -> Deck:
    return Deck(
      name=r.name,
      locations=tuple(self._locations(r.name)),
      calibrated=bool(r.calibrated),
      translation=Coordinate(r.x, r.y, r.z),
      rotation=Quaternion(r.qw, r.qx, r.qy, r.qz),
    )

  def get_deck(self, name: str) -> Optional[Deck]:
    row = self._conn.execute(select(deck_table).where(deck_table.c.name == name)).first()
    if row is None:
      return None
    return self._deck_from_row(row)

  def get_labware(self, name: str) -> Optional[Labware]:
    row = self._conn.execute(select(labware_table).where(labware_table.c.name == name)).first()
    if row is None:
      return None
    return Labware(name=row.name, z_dimension=row.zdimension, wells=tuple(self._wells(row.name)))

  def get_decks(self) -> List[Deck]:
    rows = self._conn.execute(select(deck_table).order_by(deck_table.c.name)).all()
    return [self._deck_from_row(r) for r in rows]

  def get_labwares(self) -> List[Labware]:
    rows = self._conn.execute(select(labware_table).order_by(labware_table.c.name)).all()
    return [
      Labware(name=r.name, z_dimension=r.zdimension, wells=tuple(self._wells(r.name)))
      for r in rows
    ]


class _SQLUnitOfWork(_SQLView, UnitOfWork):
  def _exists(self, table: Table, name: str) -> bool:
    return self._conn.execute(select(table.c.name).where(table.c.name == name)).first() is not None

  def create_labware(self, labware: Labware) -> None:
    if self._exists(labware_table, labware.name):
      raise EntityExistsError("labware", labware.name)
    self._conn.execute(insert(labware_table).values(name=labware.name,
                                                    zdimension=labware.z_dimension))
    if len(labware.wells) > 0:
      self._conn.execute(insert(well_table), [
        {
          "labware": labware.name,
          "address": w.address,
          "depth": w.depth,
          "diameter": w.diameter,
          "x": w.offset.x,
          "y": w.offset.y,
          "z": w.offset.z,
        }
        for w in labware.wells
      ])

  def delete_labware(self, name: str) -> None:
    result = self._conn.execute(delete(labware_table).where(labware_table.c.name == name))
    if result.rowcount == 0:
      raise EntityNotFoundError("labware", name)

  def create_deck(self, deck: Deck) -> None:
    if self._exists(deck_table, deck.name):
      raise EntityExistsError("deck", deck.name)
    self._conn.execute(insert(deck_table).values(name=deck.name))
    if len(deck.locations) > 0:
      self._conn.execute(insert(location_table), [
        {
          "deck": deck.name,
          "name": loc.name,
          "x": loc.offset.x,
          "y": loc.offset.y,
          "z": loc.offset.z,
          "qw": loc.rotation.w,
          "qx": loc.rotation.x,
          "qy": loc.rotation.y,
          "qz": loc.rotation.z,
        }
        for loc in deck.locations
      ])

  def delete_deck(self, name: str) -> None:
    result = self._conn.execute(delete(deck_table).where(deck_table.c.name == name))
    if result.rowcount == 0:
      raise EntityNotFoundError("deck", name)

  def set_deck_calibration(self, name: str, translation: Coordinate, rotation: Quaternion) -> None:
    result = self._conn.execute(
      update(deck_table)
      .where(deck_table.c.name == name)
      .values(
        calibrated=True,
        x=translation.x,
        y=translation.y,
        z=translation.z,
        qw=rotation.w,
        qx=rotation.x,
        qy=rotation.y,
        qz=rotation.z,
      )
    )
    if result.rowcount == 0:
      raise EntityNotFoundError("deck", name)


class SQLRepository(Repository):
  """ A repository stored in a SQL database. Tables are created if they do not exist.

  An in-memory database has one connection, so reads and writes on it take turns: a write waits
  for open reads to finish. A file database in WAL mode lets writes proceed while reads keep their
  snapshot.

  Args:
    url: SQLAlchemy database url, like "sqlite:///ammonite.db". Defaults to in-memory SQLite.
  """

  def __init__(self, url: str = "sqlite://"):
    self.url = url
    self.engine = make_engine(url)
    self._lock = threading.RLock() if _is_memory_url(url) else None
    metadata.create_all(self.engine)
    logger.info("Opened repository at %s", self.engine.url)

  def _exclusive(self):
    if self._lock is None:
      return contextlib.nullcontext()
    return self._lock

  @contextlib.contextmanager
  def read(self) -> Iterator[RepositoryView]:
    with self._exclusive(), self.engine.connect() as conn:
      trans = conn.begin()
      try:
        yield _SQLView(conn)
      finally:
        trans.rollback()

  @contextlib.contextmanager
  def write(self) -> Iterator[UnitOfWork]:
    with self._exclusive(), self.engine.begin() as conn:
      yield _SQLUnitOfWork(conn)

  def close(self) -> None:
    self.engine.dispose()
