class EntityNotFoundError(Exception):
  """ Raised when a deck or labware with the given name does not exist.

  Attributes:
    kind: "deck" or "labware".
    name: The name that was looked up.
  """

  def __init__(self, kind: str, name: str):
    super().__init__(f"{kind} '{name}' not found")
    self.kind = kind
    self.name = name


class EntityExistsError(Exception):
  """ Raised when creating a deck or labware with a name that is already taken. """

  def __init__(self, kind: str, name: str):
    super().__init__(f"{kind} '{name}' already exists")
    self.kind = kind
    self.name = name
