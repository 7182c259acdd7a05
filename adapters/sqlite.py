from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from adapters.base import SQLHomeStore
from schema.tables import DEFAULT_HOME_LIMIT, LOCATION_TABLE, QUOTA_TABLE, USER_ID_MAX_LENGTH
from utils.env_loader import get_setting, load_environments

DEFAULT_DB_PATH = "homes.db"


def sqlite_db_path(source_config: Optional[Dict[str, Any]] = None) -> str:
    load_environments()
    raw = get_setting(source_config, "db_path", "SQLITE_DB_PATH", DEFAULT_DB_PATH)
    if raw != ":memory:":
        Path(raw).parent.mkdir(parents=True, exist_ok=True)
    return str(raw)


def connect(source_config: Optional[Dict[str, Any]] = None) -> sqlite3.Connection:
    # Calls may arrive from a worker thread other than the one that connected.
    conn = sqlite3.connect(sqlite_db_path(source_config), check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


class SQLiteAdapter(SQLHomeStore):
    """Single-file engine. Collects name rows instead of using GROUP_CONCAT,
    whose ordering SQLite does not guarantee."""

    engine = "sqlite"
    label = "SQLite"

    setup_statements = ("PRAGMA foreign_keys = ON",)
    schema_statements = (
        f"""
        CREATE TABLE IF NOT EXISTS {QUOTA_TABLE} (
            home_id      INTEGER PRIMARY KEY AUTOINCREMENT,
            player_uuid  VARCHAR({USER_ID_MAX_LENGTH}) NOT NULL UNIQUE,
            home_limit   INTEGER NOT NULL DEFAULT {DEFAULT_HOME_LIMIT}
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {LOCATION_TABLE} (
            home_data_id   INTEGER PRIMARY KEY AUTOINCREMENT,
            home_data_name TEXT NOT NULL,
            loc_x          REAL NOT NULL,
            loc_y          REAL NOT NULL,
            loc_z          REAL NOT NULL,
            player_uuid    VARCHAR({USER_ID_MAX_LENGTH}) NOT NULL,
            UNIQUE (player_uuid, home_data_name),
            FOREIGN KEY (player_uuid) REFERENCES {QUOTA_TABLE}(player_uuid) ON DELETE CASCADE
        )
        """,
    )

    ensure_quota_sql = f"""
        INSERT INTO {QUOTA_TABLE} (player_uuid, home_limit)
        SELECT ?, ?
        WHERE NOT EXISTS (SELECT 1 FROM {QUOTA_TABLE} WHERE player_uuid = ?)
    """
    select_limit_sql = f"SELECT home_limit FROM {QUOTA_TABLE} WHERE player_uuid = ?"
    update_limit_sql = f"UPDATE {QUOTA_TABLE} SET home_limit = ? WHERE player_uuid = ?"
    count_sql = f"SELECT COUNT(1) FROM {LOCATION_TABLE} WHERE player_uuid = ?"
    exists_sql = f"SELECT 1 FROM {LOCATION_TABLE} WHERE player_uuid = ? AND home_data_name = ? LIMIT 1"
    insert_home_sql = f"""
        INSERT INTO {LOCATION_TABLE} (home_data_name, loc_x, loc_y, loc_z, player_uuid)
        VALUES (?, ?, ?, ?, ?)
    """
    select_home_sql = f"""
        SELECT loc_x, loc_y, loc_z
        FROM {LOCATION_TABLE}
        WHERE player_uuid = ? AND home_data_name = ?
    """
    delete_home_sql = f"DELETE FROM {LOCATION_TABLE} WHERE player_uuid = ? AND home_data_name = ?"
    delete_quota_sql = f"DELETE FROM {QUOTA_TABLE} WHERE player_uuid = ?"
    list_names_sql = f"""
        SELECT home_data_name
        FROM {LOCATION_TABLE}
        WHERE player_uuid = ?
        ORDER BY home_data_name COLLATE NOCASE ASC, home_data_name ASC
    """

    def _quota_params(self, user_id: str) -> Sequence[Any]:
        return (user_id, DEFAULT_HOME_LIMIT, user_id)

    def _fetch_names(self, cur: Any, user_id: str) -> List[str]:
        cur.execute(self.list_names_sql, (user_id,))
        return [row[0] for row in cur.fetchall()]
