from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .qr.controller import register as register_qr
from .reconciliation.controller import register as register_reconciliation
from .students.controller import register as register_students

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            webhook_url=getattr(settings, "WEBHOOK_URL", ""),
            qr_ttl_seconds=int(getattr(settings, "QR_SESSION_TTL_SECONDS", 600)),
            sweep_interval_seconds=int(getattr(settings, "QR_SWEEP_INTERVAL_SECONDS", 60)),
        )

    if container.qr_sweeper is not None and not container.qr_sweeper.running:
        container.qr_sweeper.start()
        atexit.register(container.qr_sweeper.stop)

    app.extensions["school_attendance"] = container

    register_attendance(app, container)
    register_qr(app, container)
    register_reconciliation(app, container)
    register_students(app, container)

    return app
