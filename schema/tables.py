"""Logical layout shared by every dialect: table names, defaults and name rules."""

import re
from typing import Optional

QUOTA_TABLE = "home"
LOCATION_TABLE = "home_data"

DEFAULT_HOME_LIMIT = 3
UNLIMITED = -1

NAME_MAX_LENGTH = 32
USER_ID_MAX_LENGTH = 64

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,%d}$" % NAME_MAX_LENGTH)


def is_valid_name(name: Optional[str]) -> bool:
    return isinstance(name, str) and bool(_NAME_PATTERN.fullmatch(name))


def is_unlimited(home_limit: int) -> bool:
    return home_limit < 0
