"""Decoding of backend response bodies into :data:`~rsm.core.models.Response`.

The backend's success and error shapes are disjoint: an error body is an
object with an ``error`` object inside it, everything else is a success.
The variant is chosen on the decoded JSON, so a successful payload that
merely mentions the word "error" is never misclassified.
"""

from __future__ import annotations

import json
from typing import Any

from rsm.core.models import ErrorResponse, Response, SuccessfulResponse, TableInfo, TaskEntry
from rsm.exceptions import ServerResponseParseError


def decode_response(body: str) -> Response:
    """Decode a raw response body.

    Raises
    ------
    ServerResponseParseError
        If *body* is not JSON, or carries a malformed ``error`` object.
    """
    try:
        data: Any = json.loads(body)
    except ValueError as exc:
        raise ServerResponseParseError(
            "The server sent a response that is not valid JSON.",
        ) from exc

    if isinstance(data, dict) and "error" in data:
        return _decode_error(data["error"])

    if not isinstance(data, dict):
        data = {"res": data}
    return SuccessfulResponse(payload=data)


def _decode_error(detail: Any) -> ErrorResponse:
    if not isinstance(detail, dict):
        raise ServerResponseParseError("The server sent a malformed error response.")
    req_uuid = detail.get("req_uuid")
    error_type = detail.get("type")
    if not isinstance(req_uuid, str) or not isinstance(error_type, str):
        raise ServerResponseParseError("The server sent a malformed error response.")
    return ErrorResponse(req_uuid=req_uuid, error_type=error_type)


# ---------------------------------------------------------------------------
# Listing payloads
# ---------------------------------------------------------------------------

def _entries(payload: dict[str, Any]) -> list[dict[str, Any]]:
    raw: object = payload.get("res")
    if not isinstance(raw, list):
        return []
    return [entry for entry in raw if isinstance(entry, dict)]


def parse_tables(payload: dict[str, Any]) -> list[TableInfo]:
    """Read the table characteristics of a ``/list`` response."""
    return [
        TableInfo(name=str(entry["name"]), has_due=bool(entry.get("has_due", False)))
        for entry in _entries(payload)
        if "name" in entry
    ]


def parse_tasks(payload: dict[str, Any]) -> list[TaskEntry]:
    """Read the items of a table listing."""
    tasks: list[TaskEntry] = []
    for entry in _entries(payload):
        if "description" not in entry:
            continue
        group = entry.get("group")
        due = entry.get("due")
        tasks.append(
            TaskEntry(
                description=str(entry["description"]),
                group=str(group) if group else None,
                due=str(due) if due else None,
            )
        )
    return tasks
