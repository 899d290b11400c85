from .arm import Arm
from .backend import ArmBackend
from .backends import ArmChatterboxBackend, SavingArmBackend
from .device_lock import Activity, ActivityStatus, DeviceBusyError, DeviceLock
from .errors import MotionError
