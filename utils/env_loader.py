import os
from pathlib import Path
from typing import Any, Dict, Optional


def load_environments(env_path: Optional[str] = None) -> None:
    env_file = Path(env_path or os.getenv("HOME_ENV_FILE", ".env"))
    if not env_file.exists():
        return

    for raw_line in env_file.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key and key not in os.environ:
            os.environ[key] = value


def get_setting(
    source_config: Optional[Dict[str, Any]],
    key: str,
    env_name: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """Explicit ``source_config`` values win over the environment."""
    if source_config and source_config.get(key) not in (None, ""):
        return str(source_config[key])
    return os.getenv(env_name, default)


def require_setting(source_config: Optional[Dict[str, Any]], key: str, env_name: str) -> str:
    value = get_setting(source_config, key, env_name)
    if not value:
        raise ValueError(f"{env_name} is required")
    return value
