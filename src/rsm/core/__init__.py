"""Core / service layer: pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem, network or terminal I/O; those arrive through the
  protocols in :mod:`rsm.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from rsm.core.auth_flow import AuthFlow
from rsm.core.due_parser import parse_due
from rsm.core.models import (
    Config,
    ErrorResponse,
    LineRange,
    LineSelector,
    Response,
    SingleLine,
    SuccessfulResponse,
    TableInfo,
    TaskEntry,
    TaskPayload,
)
from rsm.core.protocols import AuthApi, AuthUI, ConfigRepository
from rsm.core.responses import decode_response, parse_tables, parse_tasks

__all__: list[str] = [
    "AuthApi",
    "AuthFlow",
    "AuthUI",
    "Config",
    "ConfigRepository",
    "ErrorResponse",
    "LineRange",
    "LineSelector",
    "Response",
    "SingleLine",
    "SuccessfulResponse",
    "TableInfo",
    "TaskEntry",
    "TaskPayload",
    "decode_response",
    "parse_due",
    "parse_tables",
    "parse_tasks",
]
