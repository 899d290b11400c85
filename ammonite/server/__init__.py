from .server import api, create_app, main
