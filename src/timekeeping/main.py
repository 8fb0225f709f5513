from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .config import get_settings_module
from .container import Container, build_container

log = logging.getLogger(__name__)


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", "") or None)
    log.info(
        "settings=%s ledger=%s idle_timeout=%ss",
        settings_module,
        getattr(settings, "LEDGER_BACKEND", "memory"),
        getattr(settings, "IDLE_TIMEOUT_SEC", None),
    )

    container = container or build_container(settings)
    app.extensions["timekeeping"] = container

    register_attendance(app, container)

    return app


def run() -> None:
    create_app().run()
