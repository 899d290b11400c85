from abc import ABC, abstractmethod

from ammonite.config.config import Config
from ammonite.config.formats import ConfigLoader


class ConfigReader(ABC):
  """ Reads a Config from a source: a file, or the body of an HTTP request. """

  def __init__(self, format_loader: ConfigLoader):
    self.format_loader = format_loader

  @abstractmethod
  def read(self, r) -> Config:
    """ Read from `r` and parse with `format_loader`. """
