"""Process-wide logging setup for the API app and the provisioning CLI.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed here, once, by whichever entry point starts first.
"""

import logging
import os
from typing import Optional

from utils.env_loader import load_environments

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s"

_HANDLER_NAME = "homestore-console"


def configure_logging(level: Optional[str] = None) -> None:
    load_environments()
    resolved = (level or os.getenv("HOME_LOG_LEVEL", "INFO")).strip().upper()

    root = logging.getLogger()
    if not any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        root.addHandler(handler)

    numeric_level = getattr(logging, resolved, None)
    root.setLevel(numeric_level if isinstance(numeric_level, int) else logging.INFO)
