"""Home storage adapters for SQLite, PostgreSQL and MySQL."""

from adapters.base import Coordinate, HomeStore
from adapters.factory import get_adapter

__all__ = ["Coordinate", "HomeStore", "get_adapter"]
