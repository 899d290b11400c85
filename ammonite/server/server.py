""" HTTP API for decks, labware, and protocols. """
# mypy: disable-error-code = attr-defined

import asyncio
import logging
import math
from typing import Any, Optional

from flask import Blueprint, Flask, Request, current_app, jsonify, request
import werkzeug

from ammonite import CONFIG, Config, configure
from ammonite.arms import Arm, ArmChatterboxBackend, DeviceBusyError, DeviceLock, MotionError
from ammonite.config.formats.json_config import JsonLoader
from ammonite.config.io import ConfigReader
from ammonite.protocol import CompileError, compile_protocol, parse_protocol
from ammonite.protocol import errors as protocol_errors
from ammonite.repository import Repository, SQLRepository
from ammonite.resources import (
  Coordinate,
  Deck,
  EntityExistsError,
  EntityNotFoundError,
  Labware,
  Quaternion,
)
from ammonite.resources.opentrons import DEFAULT_LABWARE_DIR, load_ot_labware_directory
from ammonite.serializer import serialize

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

# attributes copied from an exception into its error response, when present
_ERROR_DETAILS = ("kind", "name", "deck", "location", "labware", "address", "tag", "index",
                  "stage")


class ErrorResponse(Exception):
  def __init__(self, data: dict, status_code: int):
    self.data = data
    self.status_code = status_code


def _error_body(e: Exception) -> dict:
  body = {"error": str(e), "type": e.__class__.__name__}
  for attr in _ERROR_DETAILS:
    if hasattr(e, attr):
      body[attr] = getattr(e, attr)
  return body


def _reject(e: Exception, status_code: int):
  logger.warning("Rejected %s %s with %d: %s", request.method, request.path, status_code, e)
  return jsonify(_error_body(e)), status_code


@api.errorhandler(ErrorResponse)
def handle_error_response(e: ErrorResponse):
  logger.warning("Rejected %s %s with %d: %s", request.method, request.path, e.status_code,
                 e.data.get("error"))
  return jsonify(e.data), e.status_code


@api.errorhandler(EntityNotFoundError)
@api.errorhandler(protocol_errors.EntityNotFoundError)
def handle_not_found(e: EntityNotFoundError):
  return _reject(e, 404)


@api.errorhandler(CompileError)
def handle_compile_error(e: CompileError):
  return _reject(e, 400)


@api.errorhandler(EntityExistsError)
def handle_exists(e: EntityExistsError):
  return _reject(e, 409)


@api.errorhandler(DeviceBusyError)
def handle_busy(e: DeviceBusyError):
  body = _error_body(e)
  if e.locked_by is not None:
    body["locked_by"] = e.locked_by.serialize()
  logger.warning("Rejected %s %s with 409: %s", request.method, request.path, e)
  return jsonify(body), 409


@api.errorhandler(MotionError)
def handle_motion_error(e: MotionError):
  logger.error("Protocol failed during execution: %s", e)
  body = _error_body(e)
  if e.instruction is not None:
    body["instruction"] = serialize(e.instruction)
  return jsonify(body), 500


def get_json_data() -> Any:
  """ The request body parsed as JSON, regardless of the content type. """

  data = request.get_json(force=True, silent=True)
  if data is None:
    raise ErrorResponse({"error": "request body must be json"}, 400)
  return data


def get_json_dict() -> dict:
  data = get_json_data()
  if not isinstance(data, dict):
    raise ErrorResponse({"error": "json data must be a dict"}, 400)
  return data


def get_repository() -> Repository:
  return current_app.repository


@api.route("/ping", methods=["GET"])
def ping():
  return jsonify({"message": "Online"})


@api.route("/labwares", methods=["GET"])
def get_labwares():
  return jsonify([lw.serialize() for lw in get_repository().get_labwares()])


@api.route("/labwares", methods=["POST"])
def create_labware():
  data = get_json_dict()
  try:
    labware = Labware.deserialize(data)
  except KeyError as e:
    raise ErrorResponse({"error": "missing key in json data: " + str(e)}, 400) from e
  except (TypeError, ValueError) as e:
    raise ErrorResponse({"error": str(e)}, 400) from e
  get_repository().create_labware(labware)
  return jsonify(labware.serialize()), 201


@api.route("/labwares/<name>", methods=["GET"])
def get_labware(name: str):
  return jsonify(get_repository().get_labware(name).serialize())


@api.route("/labwares/<name>", methods=["DELETE"])
def delete_labware(name: str):
  get_repository().delete_labware(name)
  return jsonify({"status": "ok"})


@api.route("/decks", methods=["GET"])
def get_decks():
  return jsonify([deck.serialize() for deck in get_repository().get_decks()])


@api.route("/decks", methods=["POST"])
def create_deck():
  data = get_json_dict()
  try:
    deck = Deck.deserialize(data)
  except KeyError as e:
    raise ErrorResponse({"error": "missing key in json data: " + str(e)}, 400) from e
  except (TypeError, ValueError) as e:
    raise ErrorResponse({"error": str(e)}, 400) from e
  repository = get_repository()
  repository.create_deck(deck)
  return jsonify(repository.get_deck(deck.name).serialize()), 201


@api.route("/decks/<name>", methods=["GET"])
def get_deck(name: str):
  return jsonify(get_repository().get_deck(name).serialize())


@api.route("/decks/<name>", methods=["DELETE"])
def delete_deck(name: str):
  get_repository().delete_deck(name)
  return jsonify({"status": "ok"})


@api.route("/decks/calibrate/<name>/<x>/<y>/<z>/<qw>/<qx>/<qy>/<qz>", methods=["POST"])
def calibrate_deck(name: str, x: str, y: str, z: str, qw: str, qx: str, qy: str, qz: str):
  try:
    translation = Coordinate(float(x), float(y), float(z))
    rotation = Quaternion(float(qw), float(qx), float(qy), float(qz))
  except ValueError as e:
    raise ErrorResponse({"error": "calibration values must be numbers"}, 400) from e
  if not all(math.isfinite(v) for v in (*translation, *rotation)):
    raise ErrorResponse({"error": "calibration values must be finite"}, 400)
  if rotation.is_unset():
    raise ErrorResponse({"error": "calibration rotation must not be all zero"}, 400)
  repository = get_repository()
  repository.set_deck_calibration(name, translation=translation, rotation=rotation)
  return jsonify(repository.get_deck(name).serialize())


@api.route("/protocols/compile", methods=["POST"])
def compile_only():
  commands = parse_protocol(get_json_data())
  plan = compile_protocol(get_repository(), commands)
  return jsonify({"plan": serialize(plan)})


@api.route("/protocols", methods=["POST"])
async def submit_protocol():
  commands = parse_protocol(get_json_data())
  program = request.args.get("name", "protocol")
  arm: Arm = current_app.arm
  if not arm.setup_finished:
    raise ErrorResponse({"error": "arm is not set up"}, 409)

  with current_app.device_lock.acquire(program) as activity:
    plan = compile_protocol(get_repository(), commands)
    await arm.execute(plan)
  return jsonify({"activity": activity.serialize(), "plan": serialize(plan)})


@api.route("/activity", methods=["GET"])
def get_activity():
  return jsonify([a.serialize() for a in current_app.device_lock.activity_log()])


@api.route("/arm/setup", methods=["POST"])
async def setup_arm():
  await current_app.arm.setup()
  return jsonify({"status": "running"})


@api.route("/arm/stop", methods=["POST"])
async def stop_arm():
  if current_app.device_lock.locked:
    raise DeviceBusyError(current_app.device_lock.active)
  if current_app.arm.setup_finished:
    await current_app.arm.stop()
  return jsonify({"status": "stopped"})


@api.route("/arm/status", methods=["GET"])
def get_arm_status():
  status = "running" if current_app.arm.setup_finished else "stopped"
  return jsonify({"status": status, "busy": current_app.device_lock.locked})


class HttpReader(ConfigReader):
  def read(self, r: Request) -> Config:
    return self.format_loader.load(r.stream)


CONFIG_READER = HttpReader(format_loader=JsonLoader())


@api.route("/config", methods=["POST"])
def config():
  try:
    cfg = CONFIG_READER.read(request)
  except (KeyError, ValueError) as e:
    raise ErrorResponse({"error": "invalid config: " + str(e)}, 400) from e
  configure(cfg)
  return jsonify(cfg.as_dict)


def create_app(repository: Repository, arm: Arm, device_lock: Optional[DeviceLock] = None):
  """ Create a Flask app serving `repository` and running protocols on `arm`. """
  app = Flask(__name__)
  app.repository = repository
  app.arm = arm
  app.device_lock = device_lock if device_lock is not None else DeviceLock()
  app.register_blueprint(api)

  @app.errorhandler(werkzeug.exceptions.NotFound)
  def handle_unknown_route(e):
    return jsonify({"error": e.description}), 404

  return app


def seed_labware(repository: Repository, labware_dir=None) -> int:
  """ Load Opentrons labware definitions into an empty repository.

  Args:
    repository: The repository to fill.
    labware_dir: A directory of definitions. Defaults to the definitions shipped with ammonite.

  Returns:
    The number of labware created. A repository that already holds labware is left alone.
  """

  if len(repository.get_labwares()) > 0:
    return 0
  if labware_dir is None:
    labware_dir = DEFAULT_LABWARE_DIR
  labwares = load_ot_labware_directory(labware_dir)
  repository.create_labwares(labwares)
  logger.info("Loaded %d labware definitions from %s", len(labwares), labware_dir)
  return len(labwares)


def main():
  cfg = CONFIG
  repository = SQLRepository(cfg.database.url)
  seed_labware(repository, cfg.database.labware_dir)

  arm = Arm(backend=ArmChatterboxBackend())
  asyncio.run(arm.setup())

  app = create_app(repository=repository, arm=arm)
  app.run(host=cfg.server.host, port=cfg.server.port)


if __name__ == "__main__":
  main()
