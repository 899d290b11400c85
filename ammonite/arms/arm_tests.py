import unittest
from unittest.mock import AsyncMock, MagicMock

from ammonite.protocol.standard import DEFAULT_SPEED_PROFILE, Move, SpeedProfile, Wait
from ammonite.resources import Coordinate, Pose, Quaternion

from .arm import Arm
from .backend import ArmBackend
from .backends import ArmChatterboxBackend, SavingArmBackend
from .errors import MotionError


def pose(x: float, y: float = 0, z: float = 0) -> Pose:
  return Pose(location=Coordinate(x, y, z), rotation=Quaternion.identity())


class TestArm(unittest.IsolatedAsyncioTestCase):
  async def asyncSetUp(self):
    self.mock_backend = MagicMock(spec=ArmBackend)
    for method_name in ["setup", "stop", "move", "wait"]:
      setattr(self.mock_backend, method_name, AsyncMock())
    self.arm = Arm(backend=self.mock_backend)
    await self.arm.setup()

  async def test_move_to(self):
    await self.arm.move_to(pose(1, 2, 3))
    self.mock_backend.move.assert_called_once_with(pose(1, 2, 3), DEFAULT_SPEED_PROFILE)

  async def test_wait(self):
    await self.arm.wait(250)
    self.mock_backend.wait.assert_called_once_with(250)

  async def test_stop(self):
    await self.arm.stop()
    self.mock_backend.stop.assert_called_once()
    self.assertFalse(self.arm.setup_finished)

  async def test_needs_setup(self):
    arm = Arm(backend=self.mock_backend)
    with self.assertRaises(RuntimeError):
      await arm.execute([Move(pose=pose(1))])
    self.mock_backend.move.assert_not_called()

  async def test_execute_rejects_unknown_instruction(self):
    with self.assertRaises(TypeError):
      await self.arm.execute(["move"])  # type: ignore[list-item]


class TestExecute(unittest.IsolatedAsyncioTestCase):
  async def asyncSetUp(self):
    self.backend = SavingArmBackend()
    self.arm = Arm(backend=self.backend)
    await self.arm.setup()

  async def test_executes_in_order(self):
    slow = SpeedProfile(speed=5)
    plan = [Move(pose=pose(1)), Wait(duration_ms=100), Move(pose=pose(2), speed_profile=slow)]
    await self.arm.execute(plan)
    self.assertEqual(self.backend.calls, [
      ("move", pose(1), DEFAULT_SPEED_PROFILE),
      ("wait", 100),
      ("move", pose(2), slow),
    ])

  async def test_stops_at_first_failure(self):
    self.backend.fail_at = 1
    plan = [Move(pose=pose(1)), Move(pose=pose(2)), Move(pose=pose(3))]
    with self.assertRaises(MotionError) as ctx:
      await self.arm.execute(plan)
    self.assertEqual(ctx.exception.stage, 1)
    self.assertEqual(ctx.exception.instruction, Move(pose=pose(2)))
    self.assertIsInstance(ctx.exception.cause, RuntimeError)
    self.assertEqual(self.backend.calls, [("move", pose(1), DEFAULT_SPEED_PROFILE)])

  async def test_empty_plan(self):
    await self.arm.execute([])
    self.assertEqual(self.backend.calls, [])


class TestChatterbox(unittest.IsolatedAsyncioTestCase):
  async def test_execute(self):
    async with Arm(backend=ArmChatterboxBackend()) as arm:
      await arm.execute([Move(pose=pose(1, 2, 3)), Wait(duration_ms=10)])


class TestSerialization(unittest.TestCase):
  def test_round_trip(self):
    arm = Arm(backend=SavingArmBackend(fail_at=3))
    data = arm.serialize()
    self.assertEqual(data, {"backend": {"type": "SavingArmBackend", "fail_at": 3}})
    arm2 = Arm.deserialize(data)
    self.assertIsInstance(arm2.backend, SavingArmBackend)
    self.assertEqual(arm2.backend.fail_at, 3)

  def test_unknown_backend(self):
    with self.assertRaises(ValueError):
      ArmBackend.deserialize({"type": "NoSuchBackend"})

  def test_abstract_backend(self):
    with self.assertRaises(ValueError):
      ArmBackend.deserialize({"type": "ArmBackend"})
