from .load import (
  DEFAULT_LABWARE_DIR,
  labware_from_ot_definition,
  load_default_labware,
  load_ot_labware,
  load_ot_labware_directory,
  load_ot_labware_file,
)
