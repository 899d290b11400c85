import asyncio
import json
import os
import tempfile
import unittest

from ammonite.arms import Arm, DeviceLock, SavingArmBackend
from ammonite.arms.device_lock import ActivityStatus
from ammonite.repository import MemoryRepository
from ammonite.resources import Coordinate, Deck, Labware, Location, Quaternion, Well

from .server import create_app, seed_labware

CALIBRATE_URL = "/api/decks/calibrate/deck/132/158/121/0.806/-0.575/-0.135/0.029"

PLATE = {
  "name": "plate",
  "zDimension": 10,
  "wells": [{"address": "A1", "depth": 10.8, "diameter": 5.5, "x": 14.38, "y": 74.24, "z": 0.92}],
}

DECK = {"name": "deck", "locations": [{"name": "1", "x": 0, "y": 0, "z": 0}]}

MOVE_TO_A1 = {
  "command": "move",
  "deck": "deck",
  "location": "1",
  "labware_name": "plate",
  "address": "A1",
  "depth_from_bottom": 1,
}


class ServerTestBase(unittest.TestCase):
  def setUp(self):
    self.repository = MemoryRepository()
    self.backend = SavingArmBackend()
    self.arm = Arm(backend=self.backend)
    asyncio.run(self.arm.setup())
    self.device_lock = DeviceLock()
    self.app = create_app(repository=self.repository, arm=self.arm, device_lock=self.device_lock)
    self.client = self.app.test_client()

  def load_layout(self, calibrate: bool = True):
    self.assertEqual(self.client.post("/api/labwares", json=PLATE).status_code, 201)
    self.assertEqual(self.client.post("/api/decks", json=DECK).status_code, 201)
    if calibrate:
      self.assertEqual(self.client.post(CALIBRATE_URL).status_code, 200)


class GeneralTests(ServerTestBase):
  def test_ping(self):
    response = self.client.get("/api/ping")
    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json, {"message": "Online"})

  def test_unknown_route(self):
    response = self.client.get("/api/teapot")
    self.assertEqual(response.status_code, 404)
    self.assertIn("error", response.json)

  def test_config(self):
    response = self.client.post("/api/config", data=json.dumps({"logging": {"level": "DEBUG"}}))
    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json["logging"]["level"], "DEBUG")

  def test_bad_config(self):
    response = self.client.post("/api/config", data="[1, 2")
    self.assertEqual(response.status_code, 400)


class LabwareTests(ServerTestBase):
  def test_create_and_get(self):
    response = self.client.post("/api/labwares", json=PLATE)
    self.assertEqual(response.status_code, 201)
    response = self.client.get("/api/labwares/plate")
    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json["zDimension"], 10)
    self.assertEqual(response.json["wells"][0]["address"], "A1")
    self.assertEqual([lw["name"] for lw in self.client.get("/api/labwares").json], ["plate"])

  def test_create_twice(self):
    self.client.post("/api/labwares", json=PLATE)
    response = self.client.post("/api/labwares", json=PLATE)
    self.assertEqual(response.status_code, 409)
    self.assertEqual(response.json["type"], "EntityExistsError")

  def test_missing_key(self):
    response = self.client.post("/api/labwares", json={"zDimension": 10})
    self.assertEqual(response.status_code, 400)
    self.assertIn("name", response.json["error"])

  def test_not_json(self):
    response = self.client.post("/api/labwares", data="not json")
    self.assertEqual(response.status_code, 400)

  def test_not_a_dict(self):
    response = self.client.post("/api/labwares", json=[PLATE])
    self.assertEqual(response.status_code, 400)

  def test_delete(self):
    self.client.post("/api/labwares", json=PLATE)
    self.assertEqual(self.client.delete("/api/labwares/plate").status_code, 200)
    response = self.client.get("/api/labwares/plate")
    self.assertEqual(response.status_code, 404)
    self.assertEqual((response.json["kind"], response.json["name"]), ("labware", "plate"))
    self.assertEqual(self.client.delete("/api/labwares/plate").status_code, 404)


class DeckTests(ServerTestBase):
  def test_create(self):
    response = self.client.post("/api/decks", json=DECK)
    self.assertEqual(response.status_code, 201)
    self.assertFalse(response.json["calibrated"])
    self.assertEqual(response.json["locations"][0]["name"], "1")

  def test_calibrate(self):
    self.client.post("/api/decks", json=DECK)
    response = self.client.post(CALIBRATE_URL)
    self.assertEqual(response.status_code, 200)
    self.assertTrue(response.json["calibrated"])
    self.assertEqual((response.json["x"], response.json["qx"]), (132, -0.575))
    deck = self.repository.get_deck("deck")
    self.assertEqual(deck.translation, Coordinate(132, 158, 121))
    self.assertEqual(deck.rotation, Quaternion(0.806, -0.575, -0.135, 0.029))

  def test_calibrate_missing_deck(self):
    self.assertEqual(self.client.post(CALIBRATE_URL).status_code, 404)

  def test_calibrate_bad_values(self):
    self.client.post("/api/decks", json=DECK)
    response = self.client.post("/api/decks/calibrate/deck/a/158/121/0.806/-0.575/-0.135/0.029")
    self.assertEqual(response.status_code, 400)
    response = self.client.post("/api/decks/calibrate/deck/1/2/3/0/0/0/0")
    self.assertEqual(response.status_code, 400)
    for url in ("/api/decks/calibrate/deck/nan/0/0/1/0/0/0",
                "/api/decks/calibrate/deck/0/0/0/1/inf/0/0",
                "/api/decks/calibrate/deck/0/-Infinity/0/1/0/0/0"):
      response = self.client.post(url)
      self.assertEqual(response.status_code, 400)
      self.assertIn("finite", response.json["error"])
    self.assertFalse(self.repository.get_deck("deck").calibrated)

  def test_delete(self):
    self.client.post("/api/decks", json=DECK)
    self.assertEqual(self.client.delete("/api/decks/deck").status_code, 200)
    self.assertEqual(self.client.get("/api/decks").json, [])


class ProtocolTests(ServerTestBase):
  def test_compile(self):
    self.load_layout()
    response = self.client.post("/api/protocols/compile", json=[MOVE_TO_A1])
    self.assertEqual(response.status_code, 200)
    plan = response.json["plan"]
    self.assertEqual(len(plan), 3)
    self.assertAlmostEqual(plan[0]["pose"]["location"]["z"], 136.92)
    self.assertAlmostEqual(plan[1]["pose"]["location"]["z"], 122.92)
    self.assertEqual(self.backend.calls, [])

  def test_run(self):
    self.load_layout()
    protocol = [{"command": "movexyz", "x": 1, "y": 2, "z": 3}, MOVE_TO_A1]
    response = self.client.post("/api/protocols?name=test", json=protocol)
    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json["activity"]["program"], "test")
    self.assertEqual(response.json["activity"]["status"], "COMPLETED")
    self.assertEqual(len(self.backend.calls), 4)
    self.assertEqual(self.backend.calls[0][1].location, Coordinate(1, 2, 3))

    activity = self.client.get("/api/activity").json
    self.assertEqual([a["status"] for a in activity], ["COMPLETED"])

  def test_uncalibrated(self):
    self.load_layout(calibrate=False)
    response = self.client.post("/api/protocols", json=[MOVE_TO_A1])
    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json["type"], "DeckNotCalibratedError")
    self.assertEqual(response.json["deck"], "deck")
    self.assertEqual(self.backend.calls, [])
    self.assertEqual(self.device_lock.activity_log()[0].status, ActivityStatus.FAILED)

  def test_missing_labware(self):
    self.load_layout()
    response = self.client.post("/api/protocols/compile",
                                json=[dict(MOVE_TO_A1, labware_name="other")])
    self.assertEqual(response.status_code, 404)
    self.assertEqual((response.json["kind"], response.json["name"]), ("labware", "other"))

  def test_unknown_command(self):
    response = self.client.post("/api/protocols/compile", json=[{"command": "dance"}])
    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json["tag"], "dance")

  def test_malformed_command(self):
    response = self.client.post("/api/protocols/compile",
                                json=[{"command": "movexyz", "x": 1, "y": 2}])
    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json["type"], "MalformedCommandError")
    self.assertEqual(response.json["index"], 0)

  def test_motion_failure(self):
    self.load_layout()
    self.backend.fail_at = 1
    response = self.client.post("/api/protocols", json=[MOVE_TO_A1])
    self.assertEqual(response.status_code, 500)
    self.assertEqual(response.json["stage"], 1)
    self.assertEqual(response.json["instruction"]["type"], "Move")
    self.assertEqual(len(self.backend.calls), 1)

  def test_busy(self):
    self.load_layout()
    with self.device_lock.acquire("other"):
      response = self.client.post("/api/protocols", json=[MOVE_TO_A1])
    self.assertEqual(response.status_code, 409)
    self.assertEqual(response.json["locked_by"]["program"], "other")
    self.assertEqual(self.backend.calls, [])

  def test_arm_not_set_up(self):
    self.load_layout()
    asyncio.run(self.arm.stop())
    response = self.client.post("/api/protocols", json=[MOVE_TO_A1])
    self.assertEqual(response.status_code, 409)
    self.assertEqual(self.client.get("/api/arm/status").json["status"], "stopped")
    self.assertEqual(self.client.post("/api/arm/setup").status_code, 200)
    self.assertEqual(self.client.post("/api/protocols", json=[MOVE_TO_A1]).status_code, 200)


class SeedLabwareTests(unittest.TestCase):
  def test_seed(self):
    definition = {
      "parameters": {"loadName": "tiny_plate"},
      "dimensions": {"zDimension": 10},
      "ordering": [["A1"]],
      "wells": {"A1": {"shape": "circular", "depth": 10.8, "diameter": 5.5,
                       "x": 14.38, "y": 74.24, "z": 0.92}},
    }
    repository = MemoryRepository()
    with tempfile.TemporaryDirectory() as directory:
      with open(os.path.join(directory, "tiny_plate.json"), "w", encoding="utf-8") as f:
        json.dump(definition, f)
      self.assertEqual(seed_labware(repository, directory), 1)
      self.assertEqual(seed_labware(repository, directory), 0)
    self.assertEqual(repository.get_labware("tiny_plate").get_well("A1").depth, 10.8)

  def test_existing_labware_is_kept(self):
    repository = MemoryRepository()
    repository.create_labware(Labware(name="plate", z_dimension=1, wells=[
      Well(address="A1", depth=1, diameter=1)]))
    repository.create_deck(Deck(name="deck", locations=[Location(name="1")]))
    self.assertEqual(seed_labware(repository, "/nonexistent"), 0)
    self.assertEqual([lw.name for lw in repository.get_labwares()], ["plate"])

  def test_seed_default_labware(self):
    repository = MemoryRepository()
    self.assertEqual(seed_labware(repository), 3)
    plate = repository.get_labware("corning_96_wellplate_360ul_flat")
    self.assertEqual(plate.z_dimension, 14.22)
