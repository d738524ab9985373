"""Parsing of user-supplied due times.

Accepted input::

    due  := time | date SP time
    time := HH ":" MM
    date := YYYY "-" MM "-" DD

The result is always a local timestamp ``YYYY-MM-DDTHH:MM:00``.  A bare
time that has already passed today is moved to tomorrow.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from rsm.exceptions import DueParseError

INVALID_FORMAT = "Invalid date and time format"
INVALID_TIME = "Invalid time"
INVALID_TIME_FORMAT = "Invalid time format"
INVALID_DATE = "Invalid date"


def parse_due(raw: str, *, now: datetime | None = None) -> str:
    """Normalise *raw* into ``YYYY-MM-DDTHH:MM:00``.

    Parameters
    ----------
    raw:
        ``"HH:MM"`` or ``"YYYY-MM-DD HH:MM"``.
    now:
        Current local time; defaults to :meth:`datetime.now`.  Only used
        when *raw* carries no date.

    Raises
    ------
    DueParseError
        With one of the module-level messages.
    """
    fields = raw.split()

    if len(fields) == 1:
        at = _parse_time(fields[0])
        current = now if now is not None else datetime.now()
        if at < current.time():
            day = current.date() + timedelta(days=1)
        else:
            day = current.date()
        return _format(day, at)

    if len(fields) == 2:
        day = _parse_date(fields[0])
        at = _parse_time(fields[1])
        return _format(day, at)

    raise DueParseError(INVALID_FORMAT)


def _split(raw: str, sep: str, count: int) -> list[str] | None:
    parts = [part.strip() for part in raw.split(sep)]
    if len(parts) != count or not all(parts):
        return None
    return parts


def _parse_time(raw: str) -> time:
    parts = _split(raw, ":", 2)
    if parts is None:
        raise DueParseError(INVALID_TIME_FORMAT)
    if not all(part.isdigit() for part in parts):
        raise DueParseError(INVALID_TIME)
    try:
        return time(int(parts[0]), int(parts[1]))
    except ValueError as exc:
        raise DueParseError(INVALID_TIME) from exc


def _parse_date(raw: str) -> date:
    parts = _split(raw, "-", 3)
    if parts is None or not all(part.isdigit() for part in parts):
        raise DueParseError(INVALID_DATE)
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except ValueError as exc:
        raise DueParseError(INVALID_DATE) from exc


def _format(day: date, at: time) -> str:
    return f"{day.isoformat()}T{at:%H:%M}:00"
