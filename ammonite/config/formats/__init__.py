""" Config loaders parse a Config from an IO stream in one file format. """

from abc import ABC, abstractmethod
from typing import IO, List

from ammonite.config.config import Config


class ConfigLoader(ABC):
  """ConfigLoader is an abstract class for loading a Config object from a stream. """

  extension: str

  @abstractmethod
  def load(self, r: IO) -> Config:
    """ Load a Config object.

    Raises:
      ValueError: if the stream is not valid in this format.
    """


class MultiLoader(ConfigLoader):
  """A ConfigLoader for files of unknown format: the first of `loaders` that can parse wins."""

  def __init__(self, loaders: List[ConfigLoader]):
    self.loaders = loaders

  def load(self, r: IO) -> Config:
    errors = []
    for loader in self.loaders:
      r.seek(0)
      try:
        return loader.load(r)
      except (ValueError, KeyError) as e:
        errors.append(f"{loader.extension}: {e}")
    raise ValueError(f"No loader could load file ({'; '.join(errors)}).")
