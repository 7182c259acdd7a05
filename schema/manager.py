from __future__ import annotations

import argparse
import json
import logging
from typing import TYPE_CHECKING, List, Optional

from utils.env_loader import load_environments
from utils.logging_config import configure_logging

if TYPE_CHECKING:
    from adapters.base import SQLHomeStore

logger = logging.getLogger(__name__)


def provision(store: SQLHomeStore) -> bool:
    """Create the quota and location tables if they are missing.

    Safe to run on every startup. A failure is logged and reported as
    ``False``; the store stays usable and its calls fall back to defaults.
    """
    statements = list(store.setup_statements) + list(store.schema_statements)
    try:
        with store.cursor() as cur:
            for statement in statements:
                cur.execute(statement)
    except Exception as exc:
        logger.warning("Failed to create home tables (%s): %s", store.label, exc)
        return False
    logger.info("Home tables (%s) created or already exist.", store.label)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create the home tables for the configured database engine.")
    parser.add_argument(
        "--db-engine",
        default=None,
        help="sqlite, postgres or mysql. Defaults to HOME_DB_ENGINE, then sqlite.",
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite database file. Defaults to SQLITE_DB_PATH, then homes.db.",
    )
    args = parser.parse_args(argv)

    load_environments()
    configure_logging()

    from adapters.factory import get_adapter

    source_config = {"db_path": args.db_path} if args.db_path else None
    store = get_adapter(db_engine=args.db_engine, source_config=source_config)
    try:
        provisioned = bool(getattr(store, "provisioned", False))
        status = "ok" if provisioned else "failed"
        print(json.dumps({"status": status, "engine": store.engine}))
    finally:
        store.close()
    return 0 if provisioned else 1


if __name__ == "__main__":
    raise SystemExit(main())
