from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from adapters import mysql, postgres, sqlite
from adapters.base import HomeStore
from adapters.mysql import MySQLAdapter
from adapters.postgres import PostgresAdapter
from adapters.sqlite import SQLiteAdapter
from utils.env_loader import load_environments

logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "sqlite"


def resolve_engine(db_engine: Optional[str] = None) -> str:
    load_environments()
    engine = (db_engine or os.getenv("HOME_DB_ENGINE", DEFAULT_ENGINE) or DEFAULT_ENGINE).strip().lower()
    if engine in {"postgres", "postgresql"}:
        return "postgres"
    if engine in {"sqlite", "mysql"}:
        return engine
    logger.warning("Unknown db_engine='%s', defaulting to SQLite.", engine)
    return DEFAULT_ENGINE


def get_adapter(
    db_engine: Optional[str] = None,
    source_config: Optional[Dict[str, Any]] = None,
    connection: Any = None,
) -> HomeStore:
    """Build the store for ``db_engine`` around ``connection``.

    When no connection is given one is opened from ``source_config`` and the
    environment; the returned store owns it either way (see ``close``).
    """
    engine = resolve_engine(db_engine)
    if engine == "postgres":
        return PostgresAdapter(connection if connection is not None else postgres.connect(source_config))
    if engine == "mysql":
        return MySQLAdapter(connection if connection is not None else mysql.connect(source_config))
    return SQLiteAdapter(connection if connection is not None else sqlite.connect(source_config))
