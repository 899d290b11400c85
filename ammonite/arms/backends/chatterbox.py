from ammonite.arms.backend import ArmBackend
from ammonite.protocol.standard import SpeedProfile
from ammonite.resources import Pose


class ArmChatterboxBackend(ArmBackend):
  """ Chatter box backend for device-free testing. Prints out all operations. """

  _location_length = 30
  _rotation_length = 34

  async def setup(self):
    print("Setting up the arm.")

  async def stop(self):
    print("Stopping the arm.")

  async def move(self, pose: Pose, speed_profile: SpeedProfile):
    r = pose.rotation
    rotation = f"q=({r.w}, {r.x}, {r.y}, {r.z})"
    print(
      "Moving to "
      f"{str(pose.location):<{ArmChatterboxBackend._location_length}} "
      f"{rotation:<{ArmChatterboxBackend._rotation_length}} "
      f"speed={speed_profile.speed}"
    )

  async def wait(self, duration_ms: int):
    print(f"Waiting {duration_ms} ms.")
