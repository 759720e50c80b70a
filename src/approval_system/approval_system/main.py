from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from .common.logging_config import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_container() -> Container:
    """Load settings, prepare the database if asked to and wire the services."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    store = getattr(settings, "STORE", "mysql")
    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s store=%s db=%s@%s:%s/%s",
        settings_module, store,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )

    if store == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    return build_container(
        db_config=db_config,
        user_service_url=getattr(settings, "USER_SERVICE_URL"),
        leave_service_url=getattr(settings, "LEAVE_SERVICE_URL"),
        remote_timeout=float(getattr(settings, "REMOTE_TIMEOUT_SECONDS")),
        leave_retry_attempts=int(getattr(settings, "LEAVE_RETRY_ATTEMPTS", 0)),
        store=store,
    )
