"""Domain models for rsm.

All models are **frozen** dataclasses: immutable value objects.  State
changes (for example on the local :class:`Config`) are expressed with
:func:`dataclasses.replace`, which keeps every transition explicit at
the call site.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

_U16_MAX = 65535


# ---------------------------------------------------------------------------
# Local client state
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Config:
    """Credential state persisted between invocations."""

    key: str | None
    """User-held key, only ever sent to ``/login``."""

    token: str | None
    """Session cookie replayed in the ``Cookie`` header."""

    first_run: bool
    """``True`` when the enrollment prompt must run before anything else."""

    @classmethod
    def fresh(cls) -> Config:
        """State of a fresh install (and of a logged-out user)."""
        return cls(key=None, token=None, first_run=True)

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "token": self.token, "first_run": self.first_run}

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a :class:`Config` from decoded JSON.

        Raises
        ------
        ValueError
            If *data* is not an object of the expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError("config must be a JSON object")

        first_run = data.get("first_run")
        if not isinstance(first_run, bool):
            raise ValueError("'first_run' must be a boolean")

        values: dict[str, str | None] = {}
        for field in ("key", "token"):
            value = data.get(field)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"'{field}' must be a string or null")
            values[field] = value

        return cls(key=values["key"], token=values["token"], first_run=first_run)


# ---------------------------------------------------------------------------
# File slice selectors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SingleLine:
    """Select one line of a file (1-indexed)."""

    number: int


@dataclass(frozen=True, slots=True)
class LineRange:
    """Select lines ``start`` up to, but not including, ``end`` (1-indexed)."""

    start: int
    end: int

    @classmethod
    def parse(cls, raw: str) -> LineRange:
        """Parse ``"START..END"``.

        Only the shape is checked here; ordering and bounds are checked
        against the actual file when the range is applied.

        Raises
        ------
        ValueError
            If *raw* is not two unsigned 16-bit integers around ``..``.
        """
        start_raw, sep, end_raw = raw.strip().partition("..")
        if not sep:
            raise ValueError(f"expected START..END, got '{raw}'")
        return cls(start=_parse_u16(start_raw), end=_parse_u16(end_raw))

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


LineSelector = Union[SingleLine, LineRange]


def _parse_u16(raw: str) -> int:
    text = raw.strip()
    if not text.isdigit():
        raise ValueError(f"'{raw}' is not a non-negative integer")
    value = int(text)
    if value > _U16_MAX:
        raise ValueError(f"{value} is larger than {_U16_MAX}")
    return value


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TaskPayload:
    """Everything needed to add or update one item in a table."""

    tablename: str
    description: str
    due: str | None = None
    group: str | None = None

    def to_body(self) -> dict[str, str]:
        """JSON body for the table endpoint; unset optionals are omitted."""
        body = {"description": self.description}
        if self.due is not None:
            body["due"] = self.due
        if self.group is not None:
            body["group"] = self.group
        return body


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SuccessfulResponse:
    """Any body the backend sends without an ``error`` object."""

    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """Server-reported failure."""

    req_uuid: str
    """Request identifier assigned by the backend, useful in bug reports."""

    error_type: str
    """Backend error kind (the ``type`` field on the wire)."""


Response = Union[SuccessfulResponse, ErrorResponse]


@dataclass(frozen=True, slots=True)
class TableInfo:
    """One entry of the ``list`` (tables) response."""

    name: str
    has_due: bool


@dataclass(frozen=True, slots=True)
class TaskEntry:
    """One item of a table listing."""

    description: str
    group: str | None
    due: str | None
