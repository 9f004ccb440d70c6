from __future__ import annotations

import atexit
import importlib
from pathlib import Path

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .schedules.controller import register as register_schedules
from .tokens.controller import register as register_tokens

logger = structlog.get_logger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"), json_output=bool(getattr(settings, "LOG_JSON", False)))
    logger.info(
        "app_starting",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema_ready", tables=len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        public_base_url=getattr(settings, "PUBLIC_BASE_URL"),
        token_validity_minutes=int(getattr(settings, "TOKEN_VALIDITY_MINUTES", 15)),
        max_token_validity_minutes=int(getattr(settings, "TOKEN_MAX_VALIDITY_MINUTES", 720)),
        token_bytes=int(getattr(settings, "TOKEN_BYTES", 32)),
        token_sweep_seconds=float(getattr(settings, "TOKEN_SWEEP_SECONDS", 60)),
    )
    atexit.register(container.close)
    app.extensions["academic_records"] = container

    register_tokens(app, container)
    register_attendance(app, container)
    register_schedules(app, container)

    return app
