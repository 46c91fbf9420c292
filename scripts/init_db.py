from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.calendar.holidays import DEFAULT_FIXED_HOLIDAYS
from src.class_attendance.class_attendance.database.bootstrap import apply_schema, list_tables
from src.class_attendance.class_attendance.database.connection import DBConfig, DatabaseConnection
from src.class_attendance.class_attendance.database.mysql_base import db_cursor, fetchone


def seed_fixed_holidays(db_config: dict) -> int:
    """Fill fixed_holidays with the default table when it is empty."""
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn) as (_, cur):
        cur.execute("SELECT COUNT(*) AS n FROM fixed_holidays")
        if int((fetchone(cur) or {}).get("n") or 0) > 0:
            return 0
        cur.executemany(
            "INSERT INTO fixed_holidays (month, day, label) VALUES (%s, %s, %s)",
            [(h.month, h.day, h.label) for h in DEFAULT_FIXED_HOLIDAYS],
        )
    return len(DEFAULT_FIXED_HOLIDAYS)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    seeded = seed_fixed_holidays(db_config)
    print(
        "OK: schema applied to "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)}, holidays seeded={seeded})"
    )


if __name__ == "__main__":
    main()
