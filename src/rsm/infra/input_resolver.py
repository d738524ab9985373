"""Infrastructure: resolve the text of a task from the command line.

The text comes either inline (``-t TEXT``) or from a file
(``-f FILE``), optionally narrowed to one line (``-l N``) or a
half-open line range (``-r START..END``).  Line numbers are 1-indexed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rsm.core.models import LineRange, SingleLine
from rsm.exceptions import FileResolutionError

logger = logging.getLogger(__name__)


def resolve_task_body(
    file: Path | None = None,
    line: int | None = None,
    line_range: LineRange | None = None,
    inline: str | None = None,
) -> str:
    """Return the task text.

    Without *file*, *inline* is returned (or ``""``).  With *file*, the
    whole file or the selected slice is returned; trailing newlines of a
    whole file are kept as-is.

    Raises
    ------
    FileResolutionError
        If the file cannot be read or the selection does not fit it.
    """
    if file is None:
        return inline if inline is not None else ""

    if line is not None and line_range is not None:
        raise FileResolutionError("a single line and a line range cannot both be selected")

    try:
        with open(file, encoding="utf-8", newline="") as fh:
            text = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("failed to read task file %s: %s", file, exc)
        raise FileResolutionError(f"cannot read '{file}': {exc}") from exc

    if line is not None:
        return select_lines(text, SingleLine(line))
    if line_range is not None:
        return select_lines(text, line_range)
    return text


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only; one trailing ``\\r`` per line is dropped."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def select_lines(text: str, selector: SingleLine | LineRange) -> str:
    """Apply *selector* to *text*; selected lines are joined with ``\\n``.

    Raises
    ------
    FileResolutionError
        If the selection is empty, reversed, zero-based or past the end.
    """
    lines = _split_lines(text)

    if isinstance(selector, SingleLine):
        number = selector.number
        if number < 1 or number > len(lines):
            raise FileResolutionError(
                f"line {number} is out of range (the file has {len(lines)} lines)",
            )
        return lines[number - 1]

    start, end = selector.start, selector.end
    if start == 0:
        raise FileResolutionError("line numbers start at 1")
    if start >= end:
        raise FileResolutionError(f"invalid range {selector}: START must be lower than END")
    if end - 1 > len(lines):
        raise FileResolutionError(
            f"range {selector} is out of range (the file has {len(lines)} lines)",
        )
    return "\n".join(lines[start - 1:end - 1])
