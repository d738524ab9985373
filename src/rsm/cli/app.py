"""CLI application entry point and command routing for rsm.

This module is the **sole error boundary** for the entire application.
It catches :class:`~rsm.exceptions.RsmError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via
Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here: each subcommand maps to exactly one
  :class:`~rsm.core.auth_flow.AuthFlow` or
  :class:`~rsm.infra.api_client.ApiClient` call.
* Every subcommand except ``new-key`` runs the first-run prompt first
  when the stored config asks for it.
* A server-reported error on a regular command is printed and the
  command still exits with :data:`exit_codes.SUCCESS`; only the
  authentication flows turn server errors into failures.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rsm.cli import exit_codes
from rsm.cli.console import console, err_console
from rsm.cli.render import ResponseKind, render_response
from rsm.core.auth_flow import AuthFlow
from rsm.core.due_parser import parse_due
from rsm.core.models import Config, LineRange, Response, TaskPayload
from rsm.core.protocols import AuthUI
from rsm.exceptions import DueParseError, RsmError
from rsm.infra.api_client import ApiClient
from rsm.infra.config_store import ConfigStore
from rsm.infra.input_resolver import resolve_task_body
from rsm.settings import Settings, load_env_file
from rsm.version import __version__

logger = logging.getLogger(__name__)

ApiFactory = Callable[[Settings, ConfigStore | None], Any]
"""Builds the backend client: without a token when the store is ``None``."""


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------

def _due_type(value: str) -> str:
    try:
        return parse_due(value)
    except DueParseError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _line_type(value: str) -> int:
    if not value.strip().isdigit() or int(value) > 65535:
        raise argparse.ArgumentTypeError(f"invalid line number '{value}'")
    return int(value)


def _range_type(value: str) -> LineRange:
    try:
        return LineRange.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid range: {exc}") from exc


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_task_source(parser: argparse.ArgumentParser, verb: str) -> None:
    """Arguments shared by ``add`` and ``update``."""
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-t", "--task", help=f"The task text to {verb}.")
    source.add_argument(
        "-f",
        "--file",
        type=Path,
        help="File holding the task text.",
    )

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument(
        "-l",
        "--line",
        type=_line_type,
        help="Take the task from this line of --file (1-indexed).",
    )
    selection.add_argument(
        "-r",
        "--range",
        dest="line_range",
        metavar="START..END",
        type=_range_type,
        help="Take the task from lines START up to END (exclusive) of --file.",
    )

    parser.add_argument(
        "-d",
        "--due",
        type=_due_type,
        help="Due time, as 'hh:mm' or 'YYYY-MM-DD hh:mm'.",
    )
    parser.add_argument("-g", "--group", help="The group of the task.")


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="rsm",
        description="Manage your reminder and todo tables from the terminal.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print debug traces of what is being sent.",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    sub.add_parser("new-key", help="Reset the account key.")
    sub.add_parser("logout", help="Log out from the account.")

    p_list = sub.add_parser("list", help="List tables, or the contents of one table.")
    p_list.add_argument("tablename", nargs="?", help="Name of the table to show.")
    p_list.add_argument("-g", "--group", help="Only show this group (needs TABLENAME).")
    p_list.add_argument(
        "-s",
        "--sort-by",
        dest="sort_by",
        help="Key to sort the output by (needs TABLENAME).",
    )

    p_create = sub.add_parser("create", help="Create a new table.")
    p_create.add_argument("tablename", help="Name of the table to create.")
    p_create.add_argument(
        "-d",
        "--due",
        action="store_true",
        help="The table's items carry a due time.",
    )

    p_drop = sub.add_parser("drop", help="Delete a table.")
    p_drop.add_argument("tablename", help="Name of the table to delete.")

    p_add = sub.add_parser("add", help="Add a task to a table.")
    p_add.add_argument("tablename", help="Table to add the task to.")
    _add_task_source(p_add, "add")

    p_update = sub.add_parser("update", help="Update a task of a table.")
    p_update.add_argument("tablename", help="Table holding the task.")
    p_update.add_argument("desc", help="Current description of the task.")
    _add_task_source(p_update, "set as the new description")

    p_remove = sub.add_parser("remove", help="Remove a task from a table.")
    p_remove.add_argument("tablename", help="Table holding the task.")
    p_remove.add_argument("desc", help="Description of the task to remove.")

    p_clear = sub.add_parser("clear", help="Remove every task of a table.")
    p_clear.add_argument("tablename", help="Table to clear.")

    return parser


def _check_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Cross-argument rules argparse cannot express; exits with usage error."""
    if args.command == "list" and args.tablename is None:
        if args.group is not None or args.sort_by is not None:
            parser.error("list: --group and --sort-by require TABLENAME")

    if args.command in ("add", "update") and args.file is None:
        if args.line is not None or args.line_range is not None:
            parser.error(f"{args.command}: --line and --range require --file")


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _default_api_factory(settings: Settings, store: ConfigStore | None) -> ApiClient:
    if store is None:
        return ApiClient.without_token(settings)
    return ApiClient.from_store(store, settings)


def _trace(args: argparse.Namespace, message: str) -> None:
    logger.debug(message)
    if args.verbose:
        console.print(f"DEBUG: {message}", style="dim", markup=False)


def _task_payload(args: argparse.Namespace) -> TaskPayload:
    description = resolve_task_body(
        file=args.file,
        line=args.line,
        line_range=args.line_range,
        inline=args.task,
    )
    return TaskPayload(
        tablename=args.tablename,
        description=description,
        due=args.due,
        group=args.group,
    )


def _handle_list(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(
        args,
        f"'rsm list' was used, tablename is: {args.tablename!r}, "
        f"group is: {args.group!r}, sort key is: {args.sort_by!r}",
    )
    if args.tablename is None:
        return api.list_tables(), ResponseKind.TABLES
    response = api.list_tasks(args.tablename, group=args.group, sort_by=args.sort_by)
    return response, ResponseKind.TASKS


def _handle_create(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(args, f"'rsm create' was used, tablename is: {args.tablename!r}, due is {args.due!r}")
    return api.create_table(args.tablename, args.due), ResponseKind.GENERIC


def _handle_drop(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(args, f"'rsm drop' was used, tablename is: {args.tablename!r}")
    return api.drop_table(args.tablename), ResponseKind.GENERIC


def _handle_add(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(
        args,
        f"'rsm add' was used, tablename is: {args.tablename!r}, task is {args.task!r}, "
        f"file is {args.file!r}, line is {args.line!r}, range is {args.line_range!r}, "
        f"due is {args.due!r}, group is {args.group!r}",
    )
    return api.add_task(_task_payload(args)), ResponseKind.GENERIC


def _handle_update(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(
        args,
        f"'rsm update' was used, tablename is: {args.tablename!r}, old_desc is: {args.desc!r}, "
        f"task is {args.task!r}, file is {args.file!r}, line is {args.line!r}, "
        f"range is {args.line_range!r}, due is {args.due!r}, group is {args.group!r}",
    )
    return api.update_task(args.desc, _task_payload(args)), ResponseKind.GENERIC


def _handle_remove(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(args, f"'rsm remove' was used, tablename is: {args.tablename!r}, desc is {args.desc!r}")
    return api.remove_task(args.tablename, args.desc), ResponseKind.GENERIC


def _handle_clear(api: Any, args: argparse.Namespace) -> tuple[Response, ResponseKind]:
    _trace(args, f"'rsm clear' was used, tablename is: {args.tablename!r}")
    return api.clear_table(args.tablename), ResponseKind.GENERIC


_HANDLERS: dict[str, Callable[[Any, argparse.Namespace], tuple[Response, ResponseKind]]] = {
    "list": _handle_list,
    "create": _handle_create,
    "drop": _handle_drop,
    "add": _handle_add,
    "update": _handle_update,
    "remove": _handle_remove,
    "clear": _handle_clear,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    ui: AuthUI | None = None,
    store: ConfigStore | None = None,
    settings: Settings | None = None,
    api_factory: ApiFactory | None = None,
) -> int:
    """Run the rsm CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.
    ui, store, settings, api_factory:
        Collaborators; the defaults talk to the real terminal, config
        file and backend.  Accepting them enables deterministic testing
        without monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _check_args(parser, args)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if ui is None:
        from rsm.cli.prompts import TerminalUI

        ui = TerminalUI()
    store = store if store is not None else ConfigStore()
    settings = settings if settings is not None else Settings.from_env()
    make_api = api_factory if api_factory is not None else _default_api_factory

    config: Config = store.load()

    if args.command == "new-key":
        _trace(args, "'rsm new-key' was used")
        AuthFlow(make_api(settings, None), store, ui).rotate_key(config)
        return exit_codes.SUCCESS

    if config.first_run:
        logger.info("first run detected, starting enrollment")
        config = AuthFlow(make_api(settings, None), store, ui).show_first_run_prompt(config)

    api = make_api(settings, store)

    if args.command == "logout":
        _trace(args, "'rsm logout' was used")
        AuthFlow(api, store, ui).logout(config)
        return exit_codes.SUCCESS

    response, kind = _HANDLERS[args.command](api, args)
    logger.info("'%s' answered with %s", args.command, type(response).__name__)
    render_response(response, kind)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def _bootstrap() -> Settings:
    """Load the dotenv file, settings and logging before anything else."""
    from rsm.logging_setup import setup_logging

    load_env_file()
    settings = Settings.from_env()
    setup_logging(log_dir=settings.log_dir, level=settings.log_level)
    return settings


def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        settings = _bootstrap()
        code = main(settings=settings)
        sys.exit(code)
    except RsmError as exc:
        from rich.markup import escape

        logger.error("%s: %s", type(exc).__name__, exc)
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        logger.warning("aborted by user")
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        logger.exception("unexpected error")
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
