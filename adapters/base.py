from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from schema.manager import provision
from schema.tables import DEFAULT_HOME_LIMIT, is_unlimited, is_valid_name

logger = logging.getLogger(__name__)


class AdapterError(RuntimeError):
    pass


@dataclass(frozen=True)
class Coordinate:
    x: float
    y: float
    z: float


def unpack_names(packed: Optional[str]) -> List[str]:
    """Split an engine-side ``','``-joined aggregate; NULL means no rows."""
    if not packed:
        return []
    return [name for name in packed.split(",") if name]


class HomeStore(ABC):
    """Per-user home storage.

    Every implementation degrades instead of raising: failures are logged and
    reported as ``False``, ``0``, the default limit, ``[]`` or ``None``.
    """

    engine: str = "unknown"

    @abstractmethod
    def provision_schema(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def ensure_quota_row(self, user_id: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_limit(self, user_id: Any) -> int:
        raise NotImplementedError

    @abstractmethod
    def set_limit(self, user_id: Any, new_limit: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def count(self, user_id: Any) -> int:
        raise NotImplementedError

    @abstractmethod
    def exists(self, user_id: Any, name: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def create(self, user_id: Any, name: str, x: float, y: float, z: float) -> bool:
        raise NotImplementedError

    @abstractmethod
    def read(self, user_id: Any, name: str) -> Optional[Coordinate]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: Any, name: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_names(self, user_id: Any) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def delete_quota(self, user_id: Any) -> bool:
        raise NotImplementedError

    def can_create_more(self, user_id: Any) -> bool:
        home_limit = self.get_limit(user_id)
        if is_unlimited(home_limit):
            return True
        return self.count(user_id) < home_limit

    def close(self) -> None:
        return None


class SQLHomeStore(HomeStore):
    """DB-API implementation of :class:`HomeStore`.

    Subclasses own all SQL text. They supply the DDL and statement attributes
    below plus :meth:`_fetch_names`, which is where the dialects differ the
    most.
    """

    label: str = "SQL"
    setup_statements: Sequence[str] = ()
    schema_statements: Sequence[str] = ()

    ensure_quota_sql: str
    select_limit_sql: str
    update_limit_sql: str
    count_sql: str
    exists_sql: str
    insert_home_sql: str
    select_home_sql: str
    delete_home_sql: str
    delete_quota_sql: str

    def __init__(self, connection: Any, provision_on_init: bool = True):
        self.conn = connection
        self.provisioned = False
        # One transaction at a time on the shared connection.
        self._lock = threading.RLock()
        if provision_on_init:
            self.provision_schema()

    @contextmanager
    def cursor(self) -> Iterator[Any]:
        with self._lock:
            cur = self.conn.cursor()
            try:
                yield cur
                self.conn.commit()
            except Exception:
                self.conn.rollback()
                raise
            finally:
                cur.close()

    @abstractmethod
    def _fetch_names(self, cur: Any, user_id: str) -> List[str]:
        raise NotImplementedError

    def provision_schema(self) -> bool:
        self.provisioned = provision(self)
        return self.provisioned

    def ensure_quota_row(self, user_id: Any) -> None:
        try:
            with self.cursor() as cur:
                cur.execute(self.ensure_quota_sql, self._quota_params(str(user_id)))
        except Exception as exc:
            logger.warning("Failed to ensure quota row (%s) for %s: %s", self.label, user_id, exc)

    def _quota_params(self, user_id: str) -> Sequence[Any]:
        return (user_id, DEFAULT_HOME_LIMIT)

    def get_limit(self, user_id: Any) -> int:
        self.ensure_quota_row(user_id)
        try:
            with self.cursor() as cur:
                cur.execute(self.select_limit_sql, (str(user_id),))
                row = cur.fetchone()
        except Exception as exc:
            logger.warning("Failed to read home_limit (%s) for %s: %s", self.label, user_id, exc)
            return DEFAULT_HOME_LIMIT
        if row is None or row[0] is None:
            return DEFAULT_HOME_LIMIT
        return int(row[0])

    def set_limit(self, user_id: Any, new_limit: int) -> bool:
        self.ensure_quota_row(user_id)
        try:
            with self.cursor() as cur:
                cur.execute(self.update_limit_sql, (int(new_limit), str(user_id)))
        except Exception as exc:
            logger.warning("Failed to update home_limit (%s) for %s: %s", self.label, user_id, exc)
            return False
        return True

    def count(self, user_id: Any) -> int:
        try:
            with self.cursor() as cur:
                cur.execute(self.count_sql, (str(user_id),))
                row = cur.fetchone()
        except Exception as exc:
            logger.warning("Failed to count homes (%s) for %s: %s", self.label, user_id, exc)
            return 0
        return 0 if row is None or row[0] is None else int(row[0])

    def exists(self, user_id: Any, name: str) -> bool:
        try:
            with self.cursor() as cur:
                cur.execute(self.exists_sql, (str(user_id), name))
                row = cur.fetchone()
        except Exception as exc:
            logger.warning("Failed to check existing home (%s) '%s' for %s: %s", self.label, name, user_id, exc)
            return False
        return row is not None

    def create(self, user_id: Any, name: str, x: float, y: float, z: float) -> bool:
        if not is_valid_name(name):
            logger.warning("Refusing to insert home (%s) with invalid name %r for %s", self.label, name, user_id)
            return False
        self.ensure_quota_row(user_id)
        try:
            with self.cursor() as cur:
                cur.execute(self.insert_home_sql, (name, float(x), float(y), float(z), str(user_id)))
        except Exception as exc:
            logger.warning("Failed to insert home (%s) '%s' for %s: %s", self.label, name, user_id, exc)
            return False
        return True

    def read(self, user_id: Any, name: str) -> Optional[Coordinate]:
        try:
            with self.cursor() as cur:
                cur.execute(self.select_home_sql, (str(user_id), name))
                row = cur.fetchone()
        except Exception as exc:
            logger.warning("Failed to read home (%s) '%s' for %s: %s", self.label, name, user_id, exc)
            return None
        if row is None:
            return None
        return Coordinate(float(row[0]), float(row[1]), float(row[2]))

    def delete(self, user_id: Any, name: str) -> bool:
        try:
            with self.cursor() as cur:
                cur.execute(self.delete_home_sql, (str(user_id), name))
                removed = cur.rowcount
        except Exception as exc:
            logger.warning("Failed to delete home (%s) '%s' for %s: %s", self.label, name, user_id, exc)
            return False
        return removed is not None and removed > 0

    def list_names(self, user_id: Any) -> List[str]:
        try:
            with self.cursor() as cur:
                return self._fetch_names(cur, str(user_id))
        except Exception as exc:
            logger.warning("Failed to list homes (%s) for %s: %s", self.label, user_id, exc)
            return []

    def delete_quota(self, user_id: Any) -> bool:
        try:
            with self.cursor() as cur:
                cur.execute(self.delete_quota_sql, (str(user_id),))
                removed = cur.rowcount
        except Exception as exc:
            logger.warning("Failed to delete quota row (%s) for %s: %s", self.label, user_id, exc)
            return False
        return removed is not None and removed > 0

    def close(self) -> None:
        try:
            self.conn.close()
        except Exception as exc:
            logger.warning("Failed to close %s connection: %s", self.label, exc)


def ensure_home_store(store: Any) -> HomeStore:
    if not isinstance(store, HomeStore):
        raise AdapterError(f"Expected HomeStore, got: {type(store).__name__}")
    return store
