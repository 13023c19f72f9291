from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from school_scheduling.database.bootstrap import apply_schema
from school_scheduling.database.connection import DBConfig, DatabaseConnection
from school_scheduling.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level="INFO", format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    count = apply_schema(DatabaseConnection.get_instance(config), schema_path=schema_path)
    print(f"OK: Applied schema.sql -> {config.user}@{config.host}:{config.port}/{config.database} (statements={count})")


if __name__ == "__main__":
    main()
