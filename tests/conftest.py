"""Shared pytest fixtures and configuration for the rsm test suite.

Guidelines
----------
* No network access in any test: HTTP goes through ``FakeTransport``.
* No terminal interaction: prompts go through ``ScriptedUI``.
* Config files live under ``tmp_path`` only.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from rsm.infra.config_store import ConfigStore, default_config_path
from rsm.settings import Settings

_ENV_VARS = (
    "RSM_BACKEND_URL",
    "RSM_CONFIG_PATH",
    "RSM_ENV_FILE",
    "RSM_HTTP_TIMEOUT",
    "RSM_LOG_DIR",
    "RSM_LOG_LEVEL",
    "XDG_CONFIG_HOME",
    "XDG_STATE_HOME",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    default_config_path.cache_clear()
    yield
    default_config_path.cache_clear()


@pytest.fixture()
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "cfg" / "rsm-conf.json")


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        backend_url="http://backend.test",
        log_dir=tmp_path / "logs",
        log_level="DEBUG",
        http_timeout=None,
    )
