from .chatterbox import ArmChatterboxBackend
from .saver import SavingArmBackend
