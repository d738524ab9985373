"""Tests for argument parsing, command routing and the error boundary (cli/app.py).

The backend is a ``FakeApi`` handed to :func:`main` through
``api_factory``; the config file is a real ``ConfigStore`` under
``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from rsm.cli import app as app_module
from rsm.cli import exit_codes
from rsm.cli.app import cli, main
from rsm.core.models import Config, TaskPayload
from rsm.exceptions import LoginFailedError, NoAuthError
from rsm.infra.config_store import ConfigStore
from rsm.settings import Settings

from .fakes import FakeApi, ScriptedUI, err, ok

AUTHENTICATED = Config(key="k", token="session=abc", first_run=False)


class Harness:
    """Runs :func:`main` against fakes and records which client was built."""

    def __init__(self, store: ConfigStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings
        self.api = FakeApi()
        self.ui = ScriptedUI()
        self.tokens: list[str | None] = []

    def factory(self, settings: Settings, store: ConfigStore | None) -> FakeApi:
        self.tokens.append(None if store is None else store.load_token())
        return self.api

    def run(self, *argv: str) -> int:
        return main(
            list(argv),
            ui=self.ui,
            store=self.store,
            settings=self.settings,
            api_factory=self.factory,
        )


@pytest.fixture()
def harness(store: ConfigStore, settings: Settings) -> Harness:
    store.save(AUTHENTICATED)
    return Harness(store, settings)


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class TestRouting:
    def test_no_args_prints_help(self, harness: Harness) -> None:
        assert harness.run() == exit_codes.SUCCESS
        assert harness.api.calls == []

    def test_version_flag(self, harness: Harness) -> None:
        with pytest.raises(SystemExit) as exc_info:
            harness.run("--version")
        assert exc_info.value.code == 0

    def test_list_tables(self, harness: Harness) -> None:
        assert harness.run("list") == exit_codes.SUCCESS
        assert harness.api.calls == [("list_tables", ())]

    def test_list_table_contents(self, harness: Harness) -> None:
        harness.run("list", "todo", "-g", "home", "-s", "due")
        assert harness.api.calls == [("list_tasks", ("todo", "home", "due"))]

    def test_create_with_due(self, harness: Harness) -> None:
        harness.run("create", "books", "-d")
        assert harness.api.calls == [("create_table", ("books", True))]

    def test_create_without_due(self, harness: Harness) -> None:
        harness.run("create", "books")
        assert harness.api.calls == [("create_table", ("books", False))]

    def test_drop(self, harness: Harness) -> None:
        harness.run("drop", "books")
        assert harness.api.calls == [("drop_table", ("books",))]

    def test_remove(self, harness: Harness) -> None:
        harness.run("remove", "todo", "buy milk")
        assert harness.api.calls == [("remove_task", ("todo", "buy milk"))]

    def test_clear(self, harness: Harness) -> None:
        harness.run("clear", "reminder")
        assert harness.api.calls == [("clear_table", ("reminder",))]

    def test_uses_stored_token(self, harness: Harness) -> None:
        harness.run("list")
        assert harness.tokens == ["session=abc"]


class TestAddAndUpdate:
    def test_add_inline(self, harness: Harness) -> None:
        harness.run("add", "todo", "-t", "buy milk", "-g", "home", "-d", "2030-01-02 08:30")
        assert harness.api.calls == [
            ("add_task", (TaskPayload("todo", "buy milk", due="2030-01-02T08:30:00", group="home"),)),
        ]

    def test_add_from_file_line(self, harness: Harness, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("first\nsecond\nthird\n")
        harness.run("add", "todo", "-f", str(notes), "-l", "2")
        (_, (task,)), = harness.api.calls
        assert task.description == "second"

    def test_add_from_file_range(self, harness: Harness, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("first\nsecond\nthird\n")
        harness.run("add", "todo", "-f", str(notes), "-r", "2..4")
        (_, (task,)), = harness.api.calls
        assert task.description == "second\nthird"

    def test_update(self, harness: Harness) -> None:
        harness.run("update", "todo", "buy milk", "-t", "buy oat milk")
        assert harness.api.calls == [
            ("update_task", ("buy milk", TaskPayload("todo", "buy oat milk"))),
        ]

    def test_bad_line_propagates(self, harness: Harness, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("only\n")
        from rsm.exceptions import FileResolutionError

        with pytest.raises(FileResolutionError):
            harness.run("add", "todo", "-f", str(notes), "-l", "5")
        assert harness.api.calls == []


class TestUsageErrors:
    @pytest.mark.parametrize(
        "argv",
        [
            ("add", "todo"),
            ("add", "todo", "-t", "x", "-f", "f.txt"),
            ("add", "todo", "-t", "x", "-l", "1"),
            ("add", "todo", "-f", "f.txt", "-l", "1", "-r", "1..2"),
            ("add", "todo", "-t", "x", "-d", "25:00"),
            ("add", "todo", "-f", "f.txt", "-r", "1-2"),
            ("update", "todo", "-t", "x"),
            ("list", "-g", "home"),
            ("list", "-s", "due"),
            ("frobnicate",),
        ],
    )
    def test_exits_with_usage_error(self, harness: Harness, argv: tuple[str, ...]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            harness.run(*argv)
        assert exc_info.value.code == 2
        assert harness.api.calls == []

    def test_due_error_message(self, harness: Harness, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            harness.run("add", "todo", "-t", "x", "-d", "2024-13-01 10:00")
        assert "Invalid date" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Server errors on regular commands
# ---------------------------------------------------------------------------

class TestServerErrors:
    def test_printed_but_success(self, harness: Harness, capsys: pytest.CaptureFixture[str]) -> None:
        harness.api.next_response = err("TableNotFound")
        assert harness.run("drop", "ghost") == exit_codes.SUCCESS
        assert "TableNotFound" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# First-run guard and auth commands
# ---------------------------------------------------------------------------

class TestFirstRunGuard:
    def test_fresh_install_enrolls_before_command(self, store: ConfigStore, settings: Settings) -> None:
        harness = Harness(store, settings)
        harness.api.login_responses.append((ok(), "session=new"))
        harness.ui.confirms = [True]
        harness.ui.secrets = ["my-key"]

        assert harness.run("list") == exit_codes.SUCCESS

        assert harness.api.names == ["login", "list_tables"]
        assert harness.tokens == [None, "session=new"]
        assert store.load() == Config(key="my-key", token="session=new", first_run=False)

    def test_failed_enrollment_stops_command(self, store: ConfigStore, settings: Settings) -> None:
        harness = Harness(store, settings)
        harness.api.login_responses.append((err("InvalidKey"), ""))
        harness.ui.confirms = [True]
        harness.ui.secrets = ["bad"]

        with pytest.raises(LoginFailedError):
            harness.run("list")
        assert harness.api.names == ["login"]
        assert store.load() == Config.fresh()

    def test_new_key_skips_guard(self, store: ConfigStore, settings: Settings) -> None:
        harness = Harness(store, settings)
        harness.api.login_responses.append((ok(), "session=rotated"))
        harness.ui.texts = ["alice"]
        harness.ui.secrets = ["pw", "new-key"]

        assert harness.run("new-key") == exit_codes.SUCCESS

        assert harness.api.names == ["lostkey", "login"]
        assert harness.tokens == [None]
        assert store.load() == Config(key="new-key", token="session=rotated", first_run=False)

    def test_logout(self, harness: Harness) -> None:
        harness.ui.confirms = [True]
        assert harness.run("logout") == exit_codes.SUCCESS
        assert harness.api.calls == [("logout", (True,))]
        assert harness.store.load() == Config.fresh()

    def test_logout_server_error(self, harness: Harness) -> None:
        harness.api.logout_response = err("InternalServerError")
        harness.ui.confirms = [True]
        harness.run("logout")
        assert harness.store.load() == AUTHENTICATED

    def test_missing_token_after_first_run(self, store: ConfigStore, settings: Settings) -> None:
        store.save(Config(key="k", token=None, first_run=False))
        harness = Harness(store, settings)
        with pytest.raises(NoAuthError):
            harness.run("list")


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def _run_cli(self, monkeypatch: pytest.MonkeyPatch, behaviour: Any) -> int:
        monkeypatch.setattr(app_module, "_bootstrap", lambda: None)
        monkeypatch.setattr(app_module, "main", behaviour)
        with pytest.raises(SystemExit) as exc_info:
            cli()
        return int(exc_info.value.code)

    def test_success(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run_cli(monkeypatch, lambda **_: exit_codes.SUCCESS) == exit_codes.SUCCESS

    def test_rsm_error(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        def boom(**_: Any) -> int:
            raise NoAuthError("You are not logged in.", hint="Log in [again].")

        assert self._run_cli(monkeypatch, boom) == exit_codes.GENERAL_ERROR
        stderr = capsys.readouterr().err
        assert "You are not logged in." in stderr
        assert "Log in [again]." in stderr

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def interrupt(**_: Any) -> int:
            raise KeyboardInterrupt

        assert self._run_cli(monkeypatch, interrupt) == exit_codes.KEYBOARD_INTERRUPT

    def test_unexpected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def crash(**_: Any) -> int:
            raise RuntimeError("bug")

        assert self._run_cli(monkeypatch, crash) == exit_codes.UNEXPECTED_ERROR
