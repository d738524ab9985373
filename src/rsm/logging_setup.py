"""Logging configuration for rsm.

Everything goes to one rotating file, ``<log dir>/rsm.log``.  The
terminal belongs to the CLI layer and never receives log records.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILENAME = "rsm.log"


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(*, log_dir: str | Path, level: str | int = logging.INFO) -> Path | None:
    """
    Configure logging with a single rotating file handler under *log_dir*.

    Terminal output belongs to the CLI layer, so nothing is attached to
    stderr.  When the directory cannot be created, records are dropped
    through a NullHandler and ``None`` is returned; otherwise the log
    file path is returned.

    Call this ONCE, very early (before first logger.info).
    """
    root = logging.getLogger()

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    log_path = Path(log_dir) / LOG_FILENAME
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=2, encoding="utf-8")
    except OSError:
        root.addHandler(logging.NullHandler())
        return None

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh.setFormatter(fmt)
    fh.setLevel(_resolve_level(level))
    root.setLevel(_resolve_level(level))
    root.addHandler(fh)

    # Keep urllib3 connection chatter out unless it is a real problem.
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return log_path
