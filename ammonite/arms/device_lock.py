""" A device-wide lock with an activity log.

Only one protocol may run on the arm at a time. The compiler and the arm know nothing about this:
whoever submits protocols (the HTTP server) holds the lock around compile + execute.
"""

from __future__ import annotations

import contextlib
import datetime
import enum
import logging
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)


class ActivityStatus(enum.Enum):
  RUNNING = "RUNNING"
  FAILED = "FAILED"
  COMPLETED = "COMPLETED"


@dataclass
class Activity:
  """ One entry of the activity log: a program that held the device. """

  id: int
  program: str
  start: datetime.datetime
  status: ActivityStatus = ActivityStatus.RUNNING
  end: Optional[datetime.datetime] = None
  status_message: Optional[str] = None

  def serialize(self) -> dict:
    return {
      "id": self.id,
      "program": self.program,
      "start": self.start.isoformat(),
      "end": self.end.isoformat() if self.end is not None else None,
      "status": self.status.value,
      "status_message": self.status_message,
    }


class DeviceBusyError(Exception):
  """ Raised when the device is locked by another program. """

  def __init__(self, locked_by: Optional[Activity]):
    program = locked_by.program if locked_by is not None else "unknown"
    super().__init__(f"device is busy running '{program}'")
    self.locked_by = locked_by


class DeviceLock:
  """ Serializes protocol runs on one device and records them. Acquisition never blocks. """

  def __init__(self):
    self._device = threading.Lock()
    self._state = threading.Lock()
    self._log: List[Activity] = []
    self._active: Optional[Activity] = None

  @property
  def locked(self) -> bool:
    return self._device.locked()

  @property
  def active(self) -> Optional[Activity]:
    with self._state:
      return self._active

  def activity_log(self) -> List[Activity]:
    with self._state:
      return list(self._log)

  @contextlib.contextmanager
  def acquire(self, program: str) -> Iterator[Activity]:
    """ Hold the device for the duration of the context.

    The activity is logged as RUNNING on entry, then COMPLETED, or FAILED with the exception
    message if the context raises.

    Raises:
      DeviceBusyError: if another program holds the device.
    """

    if not self._device.acquire(blocking=False):
      raise DeviceBusyError(self.active)

    with self._state:
      activity = Activity(id=len(self._log) + 1, program=program, start=datetime.datetime.now())
      self._log.append(activity)
      self._active = activity
    logger.info("Device locked by activity %d (%s).", activity.id, program)

    try:
      yield activity
    except Exception as e:
      activity.status = ActivityStatus.FAILED
      activity.status_message = str(e)
      raise
    else:
      activity.status = ActivityStatus.COMPLETED
    finally:
      activity.end = datetime.datetime.now()
      with self._state:
        self._active = None
      self._device.release()
      logger.info("Device released by activity %d: %s.", activity.id, activity.status.value)
