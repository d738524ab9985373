"""Smoke tests for the package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
* ``--help``/``--version`` work without the optional UI packages.
"""

from __future__ import annotations

import sys

import pytest

from rsm import __version__
from rsm.cli import exit_codes
from rsm.cli.app import main
from rsm.cli.console import _load_rich_console_class
from rsm.cli.prompts import _import_questionary
from rsm.cli.render import _import_rich_table
from rsm.exceptions import (
    AuthError,
    ConfigError,
    ConfigReadError,
    ConfigUpdateError,
    EnvironmentError,
    FileResolutionError,
    FirstRunError,
    InvalidConfigError,
    InvalidServerResponseError,
    KeyUpdateError,
    LoginFailedError,
    NoAuthError,
    RsmError,
    ServerConnectionError,
    ServerError,
    ServerResponseParseError,
    TerminalIOError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigError,
            NoAuthError,
            ServerError,
            AuthError,
            FileResolutionError,
            TerminalIOError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(self, exc_class: type[RsmError]) -> None:
        assert issubclass(exc_class, RsmError)

    @pytest.mark.parametrize(
        ("exc_class", "parent"),
        [
            (InvalidConfigError, ConfigError),
            (ConfigReadError, ConfigError),
            (ConfigUpdateError, ConfigError),
            (ServerConnectionError, ServerError),
            (InvalidServerResponseError, ServerError),
            (ServerResponseParseError, ServerError),
            (LoginFailedError, AuthError),
            (KeyUpdateError, AuthError),
            (FirstRunError, AuthError),
        ],
    )
    def test_grouping(self, exc_class: type[RsmError], parent: type[RsmError]) -> None:
        assert issubclass(exc_class, parent)

    def test_hint_is_stored(self) -> None:
        err = RsmError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert RsmError("boom").hint is None

    def test_file_resolution_keeps_detail(self) -> None:
        err = FileResolutionError("line 9 is past the end of notes.txt")
        assert err.detail == "line 9 is past the end of notes.txt"
        assert str(err) == "Failed to resolve file input: line 9 is past the end of notes.txt"


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# Optional UI packages
# ---------------------------------------------------------------------------

def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.table", None)


def _hide_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "questionary", None)


class TestWithoutUIPackages:
    def test_help(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _hide_rich(monkeypatch)
        _hide_questionary(monkeypatch)
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_version(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _hide_rich(monkeypatch)
        _hide_questionary(monkeypatch)
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    def test_missing_rich_is_an_environment_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _hide_rich(monkeypatch)
        with pytest.raises(EnvironmentError):
            _load_rich_console_class()
        with pytest.raises(EnvironmentError):
            _import_rich_table()

    def test_missing_questionary_is_an_environment_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _hide_questionary(monkeypatch)
        with pytest.raises(EnvironmentError):
            _import_questionary()
