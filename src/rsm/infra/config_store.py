"""Infrastructure: the JSON config file holding the credential state.

The file is a pretty-printed object::

    {
      "key": "...",
      "token": "...",
      "first_run": false
    }

Rules
-----
* One fixed, platform-appropriate location, resolved once per process.
* Every ``OSError`` / ``ValueError`` is mapped to a
  :class:`~rsm.exceptions.ConfigError` subclass.
* No locking: invocations are assumed not to overlap.
"""

from __future__ import annotations

import functools
import json
import logging
import os
import platform
from pathlib import Path

from rsm.core.models import Config
from rsm.exceptions import ConfigReadError, ConfigUpdateError, InvalidConfigError, NoAuthError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "rsm-conf.json"
APP_DIRNAME = "rsm"


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

def _config_base_dir() -> Path:
    """Return the per-user configuration directory for this platform."""
    if platform.system() == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"

    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg).expanduser()
    return Path.home() / ".config"


@functools.lru_cache(maxsize=None)
def default_config_path() -> Path:
    """Location of the config file.

    ``$RSM_CONFIG_PATH`` wins when set; otherwise
    ``<config dir>/rsm/rsm-conf.json``.  The result is cached for the
    lifetime of the process.
    """
    override = os.getenv("RSM_CONFIG_PATH")
    if override:
        return Path(override).expanduser().resolve()
    return _config_base_dir() / APP_DIRNAME / CONFIG_FILENAME


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ConfigStore:
    """Reads and writes :class:`~rsm.core.models.Config` at *path*."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path if path is not None else default_config_path()

    def load(self) -> Config:
        """Return the stored config, creating a fresh one when missing.

        A missing or empty file is (re)written as
        ``{"key": null, "token": null, "first_run": true}``.

        Raises
        ------
        InvalidConfigError
            If the file holds malformed JSON or an unexpected shape.
        ConfigReadError
            If the file cannot be read.
        ConfigUpdateError
            If the fresh file cannot be created.
        """
        if not self._has_content():
            logger.info("no config at %s, creating a fresh one", self.path)
            config = Config.fresh()
            self.save(config)
            return config

        return self._read()

    def save(self, config: Config) -> None:
        """Overwrite the file with *config*.

        Raises
        ------
        ConfigUpdateError
            If the file cannot be written.
        """
        text = json.dumps(config.to_dict(), indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.error("failed to update config %s: %s", self.path, exc)
            raise ConfigUpdateError(
                f"Failed to update the config file: {self.path}",
                hint="Check the permissions of the config directory.",
            ) from exc
        logger.debug("config written (first_run=%s)", config.first_run)

    def load_token(self) -> str:
        """Return the stored session token.

        Raises
        ------
        NoAuthError
            If the file is missing or empty, or holds no token.
        """
        token = self._read().token if self._has_content() else None
        if not token:
            raise NoAuthError(
                "You are not logged in.",
                hint="Run any rsm command to log in, or 'rsm new-key' if you lost your key.",
            )
        return token

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _has_content(self) -> bool:
        try:
            return self.path.stat().st_size > 0
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ConfigReadError(f"Failed to read the config file: {self.path}") from exc

    def _read(self) -> Config:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise InvalidConfigError(
                f"Config file not found: {self.path}",
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("failed to read config %s: %s", self.path, exc)
            raise ConfigReadError(f"Failed to read the config file: {self.path}") from exc

        try:
            return Config.from_dict(json.loads(text))
        except ValueError as exc:
            logger.error("invalid config %s: %s", self.path, exc)
            raise InvalidConfigError(
                f"Invalid config file: {self.path}",
                hint="Delete the file to start over; you will be asked to log in again.",
            ) from exc
