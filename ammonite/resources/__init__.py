from .coordinate import Coordinate
from .deck import Deck, Location
from .errors import EntityExistsError, EntityNotFoundError
from .labware import Labware, Well
from .pose import Pose
from .quaternion import Quaternion
