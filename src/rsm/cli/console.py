"""CLI console helpers built on Rich.

Rich is imported lazily so bootstrap paths (``--help``, ``--version``)
never pay for it.  Regular output goes to stdout; the error boundary
writes to stderr.
"""

from __future__ import annotations

from typing import Any

from rsm.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


class _ConsoleProxy:
    """Lazily created Rich console bound to stdout or stderr."""

    def __init__(self, *, stderr: bool) -> None:
        self._stderr = stderr
        self._console: Any = None

    def get(self) -> Any:
        """Return the underlying ``rich.console.Console``."""
        if self._console is None:
            console_class = _load_rich_console_class()
            self._console = console_class(stderr=self._stderr, highlight=False)
        return self._console

    def print(self, *objects: object, **kwargs: Any) -> None:
        self.get().print(*objects, **kwargs)

    def status(self, message: str) -> Any:
        """Spinner context manager (``Console.status``)."""
        return self.get().status(message, spinner="dots")


console = _ConsoleProxy(stderr=False)
err_console = _ConsoleProxy(stderr=True)
