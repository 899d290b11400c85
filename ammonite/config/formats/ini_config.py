import configparser
from typing import IO

from ammonite.config.config import Config
from ammonite.config.formats import ConfigLoader


class IniLoader(ConfigLoader):
  """Loads an INI file with `[logging]`, `[database]` and `[server]` sections. Missing sections
  and keys keep their defaults."""

  extension = "ini"

  def load(self, r: IO) -> Config:
    config = configparser.ConfigParser()
    try:
      config.read_file(r)
    except configparser.Error as e:
      raise ValueError(str(e)) from e
    return Config.from_dict({section: dict(config[section]) for section in config.sections()})
