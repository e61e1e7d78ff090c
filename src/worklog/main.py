from __future__ import annotations

import importlib

from dotenv import load_dotenv
from flask import Flask
from loguru import logger

from .core.logger import setup_logger
from .container import build_container
from .days.controller import register as register_days
from .settings import get_settings_module


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logger(level=getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(f"settings={settings_module} db={getattr(settings, 'DB_PATH', ':memory:')}")

    container = build_container(settings)
    app.extensions["worklog"] = container

    register_days(app, container)

    return app


if __name__ == "__main__":
    create_app().run()
