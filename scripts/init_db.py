from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.tuition_system.tuition_system.common.logging_setup import configure_logging
from src.tuition_system.tuition_system.database.bootstrap import apply_schema, list_tables

# Package modules are imported through the src. path and log under it.
PACKAGE_LOGGER = "src.tuition_system.tuition_system"

logger = logging.getLogger(f"{PACKAGE_LOGGER}.scripts.init_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), name=PACKAGE_LOGGER)
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
