import json
from typing import IO

from ammonite.config.config import Config
from ammonite.config.formats import ConfigLoader


class JsonLoader(ConfigLoader):
  """ Loads a JSON object shaped like `Config.as_dict`. """

  extension = "json"

  def load(self, r: IO) -> Config:
    config_dict = json.loads(r.read())
    if not isinstance(config_dict, dict):
      raise ValueError("JSON config must be an object")
    return Config.from_dict(config_dict)
