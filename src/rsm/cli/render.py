"""Rendering of backend responses for the terminal.

All display-related logic lives here: no requests, no config access.
Listings become Rich tables; any other successful payload is printed
as indented JSON; server errors become a single red line.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from rsm.cli.console import console
from rsm.core.models import ErrorResponse, Response, TableInfo, TaskEntry
from rsm.core.responses import parse_tables, parse_tasks
from rsm.exceptions import EnvironmentError


class ResponseKind(Enum):
    """What the caller asked for, which decides how a success is shown."""

    GENERIC = "generic"
    TABLES = "tables"
    TASKS = "tasks"


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for listing rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms: no I/O themselves)
# ---------------------------------------------------------------------------

def _format_due(due: str | None) -> str:
    """Render ``2024-05-01T10:30:00`` as ``2024-05-01 10:30``, or ``—``."""
    if not due:
        return "—"
    day, _, at = due.partition("T")
    return f"{day} {at[:5]}".strip()


def _format_flag(value: bool) -> str:
    return "yes" if value else "no"


def format_error(response: ErrorResponse) -> str:
    """Single-line description of a server error."""
    return f"Server error: {response.error_type} (request {response.req_uuid})"


def format_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Rich tables
# ---------------------------------------------------------------------------

def _display_tables(tables: Sequence[TableInfo]) -> None:
    table_class = _import_rich_table()
    from rich.markup import escape

    table = table_class(
        title="Tables",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Name", justify="left", min_width=10)
    table.add_column("Has due", justify="center", min_width=7)
    for info in tables:
        table.add_row(escape(info.name), _format_flag(info.has_due))
    console.print(table)


def _display_tasks(tasks: Sequence[TaskEntry]) -> None:
    table_class = _import_rich_table()
    from rich.markup import escape

    table = table_class(
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Description", justify="left", min_width=20)
    table.add_column("Group", justify="left", min_width=8)
    table.add_column("Due", justify="left", min_width=16)
    for i, task in enumerate(tasks, start=1):
        table.add_row(str(i), escape(task.description), escape(task.group or "—"), _format_due(task.due))
    console.print(table)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def render_response(response: Response, kind: ResponseKind = ResponseKind.GENERIC) -> None:
    """Print *response* to stdout."""
    if isinstance(response, ErrorResponse):
        console.print(format_error(response), style="bold red", markup=False)
        return

    payload = response.payload
    if kind is ResponseKind.TABLES:
        tables = parse_tables(payload)
        if tables:
            _display_tables(tables)
            return
    elif kind is ResponseKind.TASKS:
        tasks = parse_tasks(payload)
        if tasks:
            _display_tasks(tasks)
            return
        if isinstance(payload.get("res"), list):
            console.print("[dim]No items.[/dim]")
            return

    console.print(format_payload(payload), markup=False)
