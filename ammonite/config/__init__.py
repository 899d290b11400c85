"""Loading the ammonite configuration.

The configuration is read from an `ammonite.ini` or `ammonite.json` file in the working directory
or the closest parent directory that has one. Without a file, the defaults of `Config` apply.
Environment variables (`ENVIRONMENT_OVERRIDES`) take precedence over the file.
"""
import dataclasses
import os
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from ammonite.config.config import Config
from ammonite.config.formats import MultiLoader
from ammonite.config.formats.ini_config import IniLoader
from ammonite.config.formats.json_config import JsonLoader
from ammonite.config.io.file import FileReader

DEFAULT_LOADERS = [IniLoader(), JsonLoader()]

DEFAULT_CONFIG_READER = FileReader(
  format_loader=MultiLoader(DEFAULT_LOADERS),
)

# environment variable -> (config section, field, parser)
ENVIRONMENT_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], object]]] = {
  "DATABASE_URL": ("database", "url", str),
  "HOST": ("server", "host", str),
  "PORT": ("server", "port", int),
}


def get_file(base_name: str, _dir: Path) -> Optional[Path]:
  for ext in (rdr.extension for rdr in DEFAULT_LOADERS):
    cfg = _dir / f"{base_name}.{ext}"
    if cfg.exists():
      return cfg
  return None


def get_config_file(
  base_name: str,
  cur_dir: Optional[Union[str, Path]] = None
) -> Optional[Path]:
  """Get the path to the config file.

  Args:
    base_name: The base name of the config file.
    cur_dir: The directory to start searching in. Defaults to the working directory.

  Returns:
    The path to the config file, or `None` if no directory up to the root has one.
  """
  cdir = Path(cur_dir) if cur_dir is not None else Path.cwd()

  cfg = get_file(base_name, cdir)
  if cfg is not None:
    return cfg

  if cdir.parent == cdir:
    return None

  return get_config_file(base_name, cdir.parent)


def apply_environment(cfg: Config, environ: Optional[Mapping[str, str]] = None) -> Config:
  """Return a copy of `cfg` with the values set in `ENVIRONMENT_OVERRIDES` variables replaced.

  Raises:
    ValueError: if a variable cannot be parsed, like a `PORT` that is not a number.
  """

  environ = os.environ if environ is None else environ
  for variable, (section_name, field_name, parse) in ENVIRONMENT_OVERRIDES.items():
    if variable not in environ:
      continue
    try:
      value = parse(environ[variable])
    except ValueError as e:
      raise ValueError(f"invalid value for {variable}: {environ[variable]!r}") from e
    section = dataclasses.replace(getattr(cfg, section_name), **{field_name: value})
    cfg = dataclasses.replace(cfg, **{section_name: section})
  return cfg


def load_config(
  base_file_name: str,
  cur_dir: Optional[Union[str, Path]] = None,
  environ: Optional[Mapping[str, str]] = None,
) -> Config:
  """Load the Config from the closest config file, then apply environment overrides.

  Args:
    base_file_name: The base file name to look for, without extension.
    cur_dir: The directory to start searching in. Defaults to the working directory.
    environ: The environment. Defaults to `os.environ`.
  """
  config_path = get_config_file(base_file_name, cur_dir)
  cfg = Config() if config_path is None else DEFAULT_CONFIG_READER.read(config_path)
  return apply_environment(cfg, environ)
