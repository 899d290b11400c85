import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

LOG_FROM_STRING = {
  "DEBUG": logging.DEBUG,
  "INFO": logging.INFO,
  "WARNING": logging.WARNING,
  "ERROR": logging.ERROR,
  "CRITICAL": logging.CRITICAL,
}

LOG_TO_STRING = {v: k for k, v in LOG_FROM_STRING.items()}


def _optional_path(value) -> Optional[Path]:
  if value is None or value == "":
    return None
  return Path(value)


@dataclass
class Config:
  """The configuration object for ammonite."""

  @dataclass
  class Logging:
    """The logging configuration."""

    level: int = logging.INFO
    log_dir: Optional[Path] = None

  @dataclass
  class Database:
    """Where decks and labware are stored.

    `url` is any SQLAlchemy database url. The default is an in-memory SQLite database, which is
    lost when the process exits. `labware_dir` is an optional directory of Opentrons labware
    definitions that is loaded into an empty database on start-up.
    """

    url: str = "sqlite://"
    labware_dir: Optional[Path] = None

  @dataclass
  class Server:
    """The HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8080

  logging: Logging = field(default_factory=Logging)
  database: Database = field(default_factory=Database)
  server: Server = field(default_factory=Server)

  @classmethod
  def from_dict(cls, d: dict) -> "Config":
    logging_data = d.get("logging", {})
    database_data = d.get("database", {})
    server_data = d.get("server", {})
    return cls(
      logging=cls.Logging(
        level=LOG_FROM_STRING[logging_data.get("level", "INFO")],
        log_dir=_optional_path(logging_data.get("log_dir")),
      ),
      database=cls.Database(
        url=database_data.get("url", cls.Database.url),
        labware_dir=_optional_path(database_data.get("labware_dir")),
      ),
      server=cls.Server(
        host=server_data.get("host", cls.Server.host),
        port=int(server_data.get("port", cls.Server.port)),
      ),
    )

  @property
  def as_dict(self) -> dict:
    return {
      "logging": {
        "level": LOG_TO_STRING[self.logging.level],
        "log_dir": str(self.logging.log_dir) if self.logging.log_dir is not None else None,
      },
      "database": {
        "url": self.database.url,
        "labware_dir": str(self.database.labware_dir)
        if self.database.labware_dir is not None
        else None,
      },
      "server": {
        "host": self.server.host,
        "port": self.server.port,
      },
    }
