from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence

from adapters.base import Coordinate, HomeStore, ensure_home_store
from schema.tables import is_unlimited, is_valid_name

logger = logging.getLogger(__name__)

PAGE_CAPACITY = 45
SUBCOMMANDS = ("set", "tp", "delete", "limit")
LIMIT_ACTIONS = ("add", "minus")
AMOUNT_SUGGESTIONS = ("1", "2", "3", "5", "10")


class SetHomeResult(str, Enum):
    CREATED = "created"
    INVALID_NAME = "invalid_name"
    NAME_IN_USE = "name_in_use"
    LIMIT_REACHED = "limit_reached"
    FAILED = "failed"


@dataclass(frozen=True)
class HomePage:
    names: List[str] = field(default_factory=list)
    page: int = 0
    page_count: int = 1
    total: int = 0


@dataclass(frozen=True)
class LimitChange:
    previous_limit: int
    home_limit: int
    home_count: int
    updated: bool

    @property
    def over_limit(self) -> bool:
        return not is_unlimited(self.home_limit) and self.home_count > self.home_limit


def _filter_prefix(candidates: Sequence[str], prefix: str) -> List[str]:
    lowered = prefix.lower()
    return [c for c in candidates if c.lower().startswith(lowered)]


class HomeService:
    """Command-level flows on top of a :class:`HomeStore`.

    The check-then-create sequence in :meth:`set_home` is not atomic. Two
    concurrent calls can both pass the checks; the storage unique constraint
    then rejects one of them and it reports ``FAILED``.
    """

    def __init__(self, store: HomeStore):
        self.store = ensure_home_store(store)

    def set_home(self, user_id: Any, name: str, x: float, y: float, z: float) -> SetHomeResult:
        if not is_valid_name(name):
            return SetHomeResult.INVALID_NAME
        if self.store.exists(user_id, name):
            return SetHomeResult.NAME_IN_USE
        if not self.store.can_create_more(user_id):
            return SetHomeResult.LIMIT_REACHED
        if not self.store.create(user_id, name, x, y, z):
            return SetHomeResult.FAILED
        logger.info("Home '%s' set for %s at (%.2f, %.2f, %.2f)", name, user_id, x, y, z)
        return SetHomeResult.CREATED

    def teleport_target(self, user_id: Any, name: str) -> Optional[Coordinate]:
        return self.store.read(user_id, name)

    def delete_home(self, user_id: Any, name: str) -> bool:
        return self.store.delete(user_id, name)

    def list_page(self, user_id: Any, page: int = 0) -> HomePage:
        names = self.store.list_names(user_id)
        total = len(names)
        page_count = max(1, math.ceil(total / PAGE_CAPACITY))
        current = max(0, min(page, page_count - 1))
        start = current * PAGE_CAPACITY
        return HomePage(
            names=names[start : start + PAGE_CAPACITY],
            page=current,
            page_count=page_count,
            total=total,
        )

    def adjust_limit(self, user_id: Any, action: str, amount: int) -> LimitChange:
        action = (action or "").strip().lower()
        if action not in LIMIT_ACTIONS:
            raise ValueError(f"Invalid action: {action}. Use add or minus.")
        if amount <= 0:
            raise ValueError("amount must be positive")

        current = self.store.get_limit(user_id)
        if is_unlimited(current):
            return LimitChange(current, current, self.store.count(user_id), updated=False)

        new_limit = current + amount if action == "add" else max(0, current - amount)
        updated = self.store.set_limit(user_id, new_limit)
        if not updated:
            return LimitChange(current, current, self.store.count(user_id), updated=False)
        logger.info("Home limit for %s changed %d -> %d", user_id, current, new_limit)
        return LimitChange(current, new_limit, self.store.count(user_id), updated=True)

    def complete(self, user_id: Optional[Any], args: Sequence[str]) -> List[str]:
        # Senders without an identity only get the static suggestions.
        names = self.store.list_names(user_id) if user_id is not None else []

        if len(args) == 1:
            return _filter_prefix(list(SUBCOMMANDS) + names, args[0])

        if len(args) == 2:
            sub = args[0].lower()
            if sub in {"tp", "delete"}:
                return _filter_prefix(names, args[1])
            if sub == "limit":
                return _filter_prefix(LIMIT_ACTIONS, args[1])

        if len(args) == 4 and args[0].lower() == "limit" and args[1].lower() in LIMIT_ACTIONS:
            return _filter_prefix(AMOUNT_SUGGESTIONS, args[3])

        return []
