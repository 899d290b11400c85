from pathlib import Path
from typing import Union

from ammonite.config.config import Config
from ammonite.config.io import ConfigReader


class FileReader(ConfigReader):
  def read(self, r: Union[str, Path]) -> Config:
    with open(r, "r", encoding="utf-8") as f:
      return self.format_loader.load(f)
