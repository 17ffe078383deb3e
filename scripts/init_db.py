from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from tutortrack.config import get_settings_module
from tutortrack.container import build_container
from tutortrack.database.bootstrap import ensure_database_exists, list_tables


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG), student_name=getattr(settings, "STUDENT_NAME", None))
    config = container.conn.config

    ensure_database_exists(config)
    container.schema_initializer.initialize()

    tables = list_tables(container.conn)
    print(
        "OK: Applied schema.sql -> "
        f"{config.user}@{config.host}:{config.port}/{config.database} "
        f"(tables={len(tables)}, student_id={container.student_resolver.resolve()})"
    )


if __name__ == "__main__":
    main()
