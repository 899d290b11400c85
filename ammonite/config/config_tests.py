import io
import logging
from pathlib import Path
import tempfile
import unittest

from ammonite.config import apply_environment, get_config_file, load_config
from ammonite.config.config import Config
from ammonite.config.formats import MultiLoader
from ammonite.config.formats.ini_config import IniLoader
from ammonite.config.formats.json_config import JsonLoader
from ammonite.config.io.file import FileReader

INI_CONFIG = """\
[logging]
level = DEBUG
log_dir = /tmp/ammonite-logs

[database]
url = sqlite:///ammonite.db

[server]
host = 127.0.0.1
port = 5001
"""

JSON_CONFIG = """{
  "logging": {"level": "DEBUG", "log_dir": "/tmp/ammonite-logs"},
  "database": {"url": "sqlite:///ammonite.db"},
  "server": {"host": "127.0.0.1", "port": 5001}
}"""

EXPECTED = Config(
  logging=Config.Logging(level=logging.DEBUG, log_dir=Path("/tmp/ammonite-logs")),
  database=Config.Database(url="sqlite:///ammonite.db"),
  server=Config.Server(host="127.0.0.1", port=5001),
)


class ConfigTests(unittest.TestCase):
  """ Tests for ammonite.config """

  def test_file_reader(self):
    tmp_path = Path(tempfile.mkdtemp())
    cases = (
      (IniLoader(), "config.ini", INI_CONFIG),
      (JsonLoader(), "config.json", JSON_CONFIG),
    )
    for loader, file_name, content in cases:
      (tmp_path / file_name).write_text(content, encoding="utf-8")
      cfg = FileReader(format_loader=loader).read(tmp_path / file_name)
      self.assertEqual(cfg, EXPECTED)

  def test_as_dict_loads_back(self):
    cfg = JsonLoader().load(io.StringIO(JSON_CONFIG))
    self.assertEqual(Config.from_dict(cfg.as_dict), cfg)

  def test_from_dict_defaults(self):
    self.assertEqual(Config.from_dict({}), Config())

  def test_partial_ini(self):
    cfg = IniLoader().load(io.StringIO("[server]\nport = 9000\n"))
    self.assertEqual(cfg.server.port, 9000)
    self.assertEqual(cfg.database, Config.Database())

  def test_multi_loader_falls_through(self):
    loader = MultiLoader([IniLoader(), JsonLoader()])
    cfg = loader.load(io.StringIO('{"server": {"port": 9000}}'))
    self.assertEqual(cfg.server.port, 9000)

  def test_multi_loader_rejects_garbage(self):
    loader = MultiLoader([IniLoader(), JsonLoader()])
    with self.assertRaises(ValueError):
      loader.load(io.StringIO("not a config"))

  def test_get_config_file_searches_parents(self):
    root = Path(tempfile.mkdtemp())
    nested = root / "a" / "b"
    nested.mkdir(parents=True)
    (root / "ammonite_test.json").write_text("{}", encoding="utf-8")
    self.assertEqual(get_config_file("ammonite_test", cur_dir=nested), root / "ammonite_test.json")


class EnvironmentTests(unittest.TestCase):
  def test_overrides(self):
    cfg = apply_environment(Config(), {
      "DATABASE_URL": "sqlite:///other.db",
      "HOST": "localhost",
      "PORT": "9000",
      "UNRELATED": "x",
    })
    self.assertEqual(cfg.database.url, "sqlite:///other.db")
    self.assertEqual(cfg.server, Config.Server(host="localhost", port=9000))
    self.assertEqual(cfg.logging, Config.Logging())

  def test_no_overrides(self):
    self.assertEqual(apply_environment(EXPECTED, {}), EXPECTED)

  def test_bad_port(self):
    with self.assertRaises(ValueError) as ctx:
      apply_environment(Config(), {"PORT": "http"})
    self.assertIn("PORT", str(ctx.exception))

  def test_load_config_without_file(self):
    directory = Path(tempfile.mkdtemp())
    cfg = load_config("ammonite_missing_config", cur_dir=directory, environ={"PORT": "9000"})
    self.assertEqual(cfg, Config(server=Config.Server(port=9000)))

  def test_environment_wins_over_file(self):
    directory = Path(tempfile.mkdtemp())
    (directory / "ammonite_test.ini").write_text(INI_CONFIG, encoding="utf-8")
    cfg = load_config("ammonite_test", cur_dir=directory, environ={"HOST": "localhost"})
    self.assertEqual(cfg.server.host, "localhost")
    self.assertEqual(cfg.server.port, 5001)
    self.assertEqual(cfg.database.url, "sqlite:///ammonite.db")
