from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .common.http import register_error_handlers
from .container import build_container
from .core.constants import (
    DEFAULT_AUDIT_RETENTION_DAYS,
    DEFAULT_GRACE_MINUTES,
    DEFAULT_MERGE_MAX_RETRIES,
    DEFAULT_NAME_MATCH_PRECEDENCE,
)
from .database.bootstrap import apply_schema, list_tables
from .ingestion.controller import register as register_ingestion
from .maintenance.commands import register as register_commands
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .verification.controller import register as register_verification

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = load_settings()

    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format=LOG_FORMAT)

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["DB_CONFIG"] = db_config
    app.config["SCHEMA_PATH"] = str(Path(__file__).resolve().parents[3] / "database" / "schema.sql")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=app.config["SCHEMA_PATH"])
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        audit_retention_days=int(getattr(settings, "AUDIT_RETENTION_DAYS", DEFAULT_AUDIT_RETENTION_DAYS)),
        default_grace_minutes=int(getattr(settings, "DEFAULT_GRACE_MINUTES", DEFAULT_GRACE_MINUTES)),
        name_match_precedence=getattr(settings, "NAME_MATCH_PRECEDENCE", DEFAULT_NAME_MATCH_PRECEDENCE),
        filter_scans_by_file_date=bool(getattr(settings, "FILTER_SCANS_BY_FILE_DATE", True)),
        merge_max_retries=int(getattr(settings, "MERGE_MAX_RETRIES", DEFAULT_MERGE_MAX_RETRIES)),
    )

    register_error_handlers(app)
    register_ingestion(app, container)
    register_verification(app, container)
    register_reports(app, container)
    register_schedules(app, container)
    register_commands(app, container)

    return app
