"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and the CLI
must satisfy.  :class:`~rsm.core.auth_flow.AuthFlow` depends ONLY on
these protocols, never on ``requests``, the config file or the
terminal, so the whole authentication lifecycle can be exercised with
in-memory fakes.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from rsm.core.models import Config, Response


class AuthApi(Protocol):
    """The subset of the backend used by the authentication flow.

    Implementations return server-reported failures as
    :class:`~rsm.core.models.ErrorResponse` and raise
    :class:`~rsm.exceptions.ServerError` subclasses only for transport
    or decoding problems.
    """

    def signup(self, username: str, password: str) -> Response:
        ...  # pragma: no cover

    def login(self, key: str) -> tuple[Response, str]:
        """Log in with *key* and return the response plus the session token."""
        ...  # pragma: no cover

    def logout(self, confirm: bool) -> Response:
        ...  # pragma: no cover

    def lostkey(self, username: str, password: str) -> Response:
        ...  # pragma: no cover


class ConfigRepository(Protocol):
    """Durable storage for :class:`~rsm.core.models.Config`."""

    def load(self) -> Config:
        ...  # pragma: no cover

    def save(self, config: Config) -> None:
        ...  # pragma: no cover


class AuthUI(Protocol):
    """Interactive terminal operations needed during authentication.

    Every method raises :class:`~rsm.exceptions.TerminalIOError` when the
    prompt cannot be completed (closed stdin, cancelled prompt).
    """

    def confirm(self, message: str, *, default: bool) -> bool:
        """Ask a yes/no question; empty input selects *default*."""
        ...  # pragma: no cover

    def ask_text(self, message: str) -> str:
        """Read a visible line of input."""
        ...  # pragma: no cover

    def ask_secret(self, message: str) -> str:
        """Read input with echo disabled."""
        ...  # pragma: no cover

    def announce(self, message: str) -> None:
        """Show an informational line to the user."""
        ...  # pragma: no cover

    def show_response(self, response: Response) -> None:
        """Render a backend response."""
        ...  # pragma: no cover

    def busy(self, message: str) -> AbstractContextManager[object]:
        """Context manager displaying an activity indicator."""
        ...  # pragma: no cover
