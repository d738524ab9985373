"""Runtime settings loaded from environment variables (+ optional .env).

Variables
---------
``RSM_BACKEND_URL``
    Root URL of the backend.
``RSM_LOG_DIR`` / ``RSM_LOG_LEVEL``
    Where and how verbosely the log file is written.
``RSM_HTTP_TIMEOUT``
    Seconds to wait for the backend; unset means no timeout.
``RSM_ENV_FILE``
    Explicit dotenv file to load instead of the default search.

The config file location (``RSM_CONFIG_PATH``) is resolved by
:func:`rsm.infra.config_store.default_config_path`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "RSM"
DEFAULT_BACKEND_URL = "http://localhost:10001"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def load_env_file() -> bool:
    """Load the dotenv file without overriding variables already set.

    Returns ``True`` when a file was found and loaded.
    """
    explicit = os.getenv(_k("ENV_FILE"))
    path = explicit if explicit else find_dotenv(usecwd=True)
    if not path:
        return False
    return load_dotenv(path, override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def _default_log_dir() -> Path:
    state = os.getenv("XDG_STATE_HOME")
    base = Path(state).expanduser() if state else Path.home() / ".local" / "state"
    return base / "rsm"


@dataclass(frozen=True, slots=True)
class Settings:
    backend_url: str
    log_dir: Path
    log_level: str
    http_timeout: float | None

    @staticmethod
    def from_env() -> "Settings":
        log_dir_raw = _env(_k("LOG_DIR"))
        return Settings(
            backend_url=_env(_k("BACKEND_URL"), DEFAULT_BACKEND_URL).rstrip("/"),
            log_dir=Path(log_dir_raw).expanduser() if log_dir_raw else _default_log_dir(),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            http_timeout=_env_float(_k("HTTP_TIMEOUT")),
        )
