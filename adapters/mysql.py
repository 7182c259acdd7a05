from __future__ import annotations

from typing import Any, Dict, List, Optional

from adapters.base import SQLHomeStore, unpack_names
from schema.tables import DEFAULT_HOME_LIMIT, LOCATION_TABLE, NAME_MAX_LENGTH, QUOTA_TABLE, USER_ID_MAX_LENGTH
from utils.env_loader import get_setting, load_environments, require_setting

# GROUP_CONCAT silently truncates at 1024 bytes by default.
GROUP_CONCAT_MAX_LEN = 1_000_000


def mysql_params(source_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    load_environments()
    return {
        "host": require_setting(source_config, "host", "DB_HOST"),
        "port": int(get_setting(source_config, "port", "DB_PORT", "3306")),
        "database": require_setting(source_config, "dbname", "DB_NAME"),
        "user": require_setting(source_config, "user", "DB_USER"),
        "password": require_setting(source_config, "password", "DB_PASSWORD"),
    }


def connect(source_config: Optional[Dict[str, Any]] = None):
    params = mysql_params(source_config)
    try:
        import mysql.connector  # type: ignore

        return mysql.connector.connect(**params)
    except ImportError:
        try:
            import pymysql  # type: ignore

            return pymysql.connect(
                host=params["host"],
                port=params["port"],
                user=params["user"],
                password=params["password"],
                database=params["database"],
            )
        except ImportError as exc:
            raise ImportError(
                "No MySQL driver found. Install one of: "
                "`python -m pip install mysql-connector-python` or `python -m pip install pymysql`."
            ) from exc


class MySQLAdapter(SQLHomeStore):
    """InnoDB tables. Home names use a binary collation so that uniqueness and
    lookups stay case-sensitive."""

    engine = "mysql"
    label = "MySQL"

    schema_statements = (
        f"""
        CREATE TABLE IF NOT EXISTS {QUOTA_TABLE} (
            home_id     BIGINT PRIMARY KEY AUTO_INCREMENT,
            player_uuid VARCHAR({USER_ID_MAX_LENGTH}) NOT NULL UNIQUE,
            home_limit  INT NOT NULL DEFAULT {DEFAULT_HOME_LIMIT}
        ) ENGINE=InnoDB
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {LOCATION_TABLE} (
            home_data_id   BIGINT PRIMARY KEY AUTO_INCREMENT,
            home_data_name VARCHAR({NAME_MAX_LENGTH}) CHARACTER SET utf8mb4 COLLATE utf8mb4_bin NOT NULL,
            loc_x          DOUBLE NOT NULL,
            loc_y          DOUBLE NOT NULL,
            loc_z          DOUBLE NOT NULL,
            player_uuid    VARCHAR({USER_ID_MAX_LENGTH}) NOT NULL,
            UNIQUE KEY uniq_player_name (player_uuid, home_data_name),
            CONSTRAINT fk_home_player FOREIGN KEY (player_uuid)
                REFERENCES {QUOTA_TABLE}(player_uuid) ON DELETE CASCADE
        ) ENGINE=InnoDB
        """,
    )

    ensure_quota_sql = f"INSERT IGNORE INTO {QUOTA_TABLE} (player_uuid, home_limit) VALUES (%s, %s)"
    select_limit_sql = f"SELECT home_limit FROM {QUOTA_TABLE} WHERE player_uuid = %s"
    update_limit_sql = f"UPDATE {QUOTA_TABLE} SET home_limit = %s WHERE player_uuid = %s"
    count_sql = f"SELECT COUNT(1) FROM {LOCATION_TABLE} WHERE player_uuid = %s"
    exists_sql = f"SELECT 1 FROM {LOCATION_TABLE} WHERE player_uuid = %s AND home_data_name = %s LIMIT 1"
    insert_home_sql = f"""
        INSERT INTO {LOCATION_TABLE} (home_data_name, loc_x, loc_y, loc_z, player_uuid)
        VALUES (%s, %s, %s, %s, %s)
    """
    select_home_sql = f"""
        SELECT loc_x, loc_y, loc_z
        FROM {LOCATION_TABLE}
        WHERE player_uuid = %s AND home_data_name = %s
    """
    delete_home_sql = f"DELETE FROM {LOCATION_TABLE} WHERE player_uuid = %s AND home_data_name = %s"
    delete_quota_sql = f"DELETE FROM {QUOTA_TABLE} WHERE player_uuid = %s"
    list_names_sql = f"""
        SELECT GROUP_CONCAT(home_data_name ORDER BY LOWER(home_data_name) ASC, home_data_name ASC SEPARATOR ',')
        FROM {LOCATION_TABLE}
        WHERE player_uuid = %s
    """

    def _fetch_names(self, cur: Any, user_id: str) -> List[str]:
        cur.execute(f"SET SESSION group_concat_max_len = {int(GROUP_CONCAT_MAX_LEN)}")
        cur.execute(self.list_names_sql, (user_id,))
        row = cur.fetchone()
        packed = row[0] if row else None
        if isinstance(packed, (bytes, bytearray)):
            packed = packed.decode("utf-8")
        return unpack_names(packed)
