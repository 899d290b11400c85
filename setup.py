from setuptools import setup, find_packages

from ammonite.__version__ import __version__

with open("README.md", "r", encoding="utf-8") as f:
  long_description = f.read()


extras_server = [
  "flask[async]",
]

extras_dev = extras_server + [
  "pytest",
  "pytest-timeout",
  "pylint",
  "mypy",
]

extras_all = extras_dev

setup(
  name="ammonite",
  version=__version__,
  packages=find_packages(),
  description="Protocol compiler and server for pipetting arms",
  long_description=long_description,
  long_description_content_type="text/markdown",
  install_requires=["typing_extensions", "sqlalchemy"],
  package_data={
    "ammonite": ["version.txt"],
    "ammonite.resources.opentrons": ["definitions/*.json"],
  },
  extras_require={
    "server": extras_server,
    "dev": extras_dev,
    "all": extras_all,
  },
  entry_points={
    "console_scripts": [
      "ammonite-server=ammonite.server.server:main",
    ],
  }
)
