import json
import os
import urllib.request
from pathlib import Path
from typing import List, Union

from ammonite.resources.coordinate import Coordinate
from ammonite.resources.labware import Labware, Well


def _download_file(url: str, local_path: str) -> bytes:
  with urllib.request.urlopen(url) as response, open(local_path, "wb") as out_file:
    data = response.read()
    out_file.write(data)
    return data  # type: ignore


def _download_ot_labware_file(ot_name: str, force_download: bool) -> dict:
  """Download an Opentrons labware definition file from GitHub.

  Args:
    ot_name: The load name of the labware, like "corning_96_wellplate_360ul_flat".

  Returns:
    The labware definition as a dictionary.
  """
  url = f"https://raw.githubusercontent.com/Opentrons/opentrons/5b51a98ce736b2bb5aff780bf3fdf91941a038fa/shared-data/labware/definitions/2/{ot_name}/1.json"
  path = f"/tmp/{ot_name}.json"
  if force_download or not os.path.exists(path):
    data = _download_file(url=url, local_path=path)
  else:
    with open(path, "rb") as f:
      data = f.read()
  return json.loads(data)


def labware_from_ot_definition(data: dict) -> Labware:
  """Convert an Opentrons labware definition to a Labware.

  The labware is named after `parameters.loadName`. Wells follow the definition's column-wise
  `ordering` when present. Opentrons well coordinates are measured from the labware's front left
  bottom corner to the well bottom center, which is what Well offsets are.
  """

  wells_data = data["wells"]
  if "ordering" in data:
    addresses = [address for column in data["ordering"] for address in column]
  else:
    addresses = list(wells_data.keys())

  wells: List[Well] = []
  for address in addresses:
    well_data = wells_data[address]
    wells.append(Well(
      address=address,
      depth=well_data["depth"],
      # rectangular wells have no diameter; the smaller side is what fits a tip
      diameter=well_data.get("diameter", min(well_data.get("xDimension", 0),
                                             well_data.get("yDimension", 0))),
      offset=Coordinate(x=well_data["x"], y=well_data["y"], z=well_data["z"]),
    ))

  return Labware(
    name=data["parameters"]["loadName"],
    z_dimension=data["dimensions"]["zDimension"],
    wells=tuple(wells),
  )


def load_ot_labware(ot_name: str, force_download: bool = False) -> Labware:
  """Download an Opentrons labware definition and convert it to a Labware."""
  data = _download_ot_labware_file(ot_name=ot_name, force_download=force_download)
  return labware_from_ot_definition(data)


def load_ot_labware_file(path: Union[str, Path]) -> Labware:
  with open(path, "r", encoding="utf-8") as f:
    return labware_from_ot_definition(json.load(f))


def load_ot_labware_directory(directory: Union[str, Path]) -> List[Labware]:
  """Load every `*.json` Opentrons labware definition under `directory`, recursively, sorted by
  path."""
  return [load_ot_labware_file(p) for p in sorted(Path(directory).rglob("*.json"))]

# Definitions shipped with ammonite, loaded into a new database by the server.
DEFAULT_LABWARE_DIR = Path(__file__).parent / "definitions"


def load_default_labware() -> List[Labware]:
  return load_ot_labware_directory(DEFAULT_LABWARE_DIR)
