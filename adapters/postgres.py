from __future__ import annotations

from typing import Any, Dict, List, Optional

from adapters.base import SQLHomeStore, unpack_names
from schema.tables import DEFAULT_HOME_LIMIT, LOCATION_TABLE, QUOTA_TABLE, USER_ID_MAX_LENGTH
from utils.env_loader import get_setting, load_environments, require_setting


def postgres_params(source_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    load_environments()
    return {
        "host": require_setting(source_config, "host", "DB_HOST"),
        "port": int(get_setting(source_config, "port", "DB_PORT", "5432")),
        "dbname": require_setting(source_config, "dbname", "DB_NAME"),
        "user": require_setting(source_config, "user", "DB_USER"),
        "password": require_setting(source_config, "password", "DB_PASSWORD"),
    }


def connect(source_config: Optional[Dict[str, Any]] = None):
    params = postgres_params(source_config)
    try:
        import psycopg  # type: ignore

        return psycopg.connect(**params)
    except ImportError:
        try:
            import psycopg2  # type: ignore

            return psycopg2.connect(**params)
        except ImportError as exc:
            raise ImportError(
                "No PostgreSQL driver found. Install one of: "
                '`python -m pip install "psycopg[binary]"` or `python -m pip install psycopg2-binary`.'
            ) from exc


class PostgresAdapter(SQLHomeStore):
    engine = "postgres"
    label = "PostgreSQL"

    schema_statements = (
        f"""
        CREATE TABLE IF NOT EXISTS {QUOTA_TABLE} (
            home_id      BIGSERIAL PRIMARY KEY,
            player_uuid  VARCHAR({USER_ID_MAX_LENGTH}) UNIQUE NOT NULL,
            home_limit   INTEGER NOT NULL DEFAULT {DEFAULT_HOME_LIMIT}
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS {LOCATION_TABLE} (
            home_data_id   BIGSERIAL PRIMARY KEY,
            home_data_name TEXT NOT NULL,
            loc_x          DOUBLE PRECISION NOT NULL,
            loc_y          DOUBLE PRECISION NOT NULL,
            loc_z          DOUBLE PRECISION NOT NULL,
            player_uuid    VARCHAR({USER_ID_MAX_LENGTH}) NOT NULL,
            CONSTRAINT uq_player_name UNIQUE (player_uuid, home_data_name),
            CONSTRAINT fk_home_player FOREIGN KEY (player_uuid)
                REFERENCES {QUOTA_TABLE}(player_uuid) ON DELETE CASCADE
        )
        """,
    )

    ensure_quota_sql = f"""
        INSERT INTO {QUOTA_TABLE} (player_uuid, home_limit)
        VALUES (%s, %s)
        ON CONFLICT (player_uuid) DO NOTHING
    """
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
        SELECT string_agg(home_data_name, ',' ORDER BY lower(home_data_name) COLLATE "C", home_data_name COLLATE "C")
        FROM {LOCATION_TABLE}
        WHERE player_uuid = %s
    """

    def _fetch_names(self, cur: Any, user_id: str) -> List[str]:
        cur.execute(self.list_names_sql, (user_id,))
        row = cur.fetchone()
        return unpack_names(row[0] if row else None)
