"""Interactive prompts for the CLI layer.

:class:`TerminalUI` satisfies :class:`~rsm.core.protocols.AuthUI` with
questionary prompts and a Rich spinner, so the authentication flow can
talk to the user without knowing about the terminal.

A prompt that returns ``None`` (Ctrl+C / Esc inside questionary) or that
fails because stdin is closed raises
:class:`~rsm.exceptions.TerminalIOError`.
"""

from __future__ import annotations

from typing import Any

from rsm.cli.console import console
from rsm.cli.render import ResponseKind, render_response
from rsm.core.models import Response
from rsm.exceptions import EnvironmentError, TerminalIOError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _ask(question: Any) -> Any:
    """Run a questionary question and map cancellation to ``TerminalIOError``."""
    try:
        answer = question.ask()  # Returns None on Ctrl+C / Esc
    except (OSError, EOFError) as exc:
        raise TerminalIOError(
            "Could not read from the terminal.",
            hint="rsm needs an interactive terminal to log in.",
        ) from exc
    if answer is None:
        raise TerminalIOError("Prompt cancelled.")
    return answer


class TerminalUI:
    """Questionary + Rich implementation of the authentication UI."""

    def confirm(self, message: str, *, default: bool) -> bool:
        questionary = _import_questionary()
        return bool(_ask(questionary.confirm(message, default=default)))

    def ask_text(self, message: str) -> str:
        questionary = _import_questionary()
        return str(_ask(questionary.text(message)))

    def ask_secret(self, message: str) -> str:
        questionary = _import_questionary()
        return str(_ask(questionary.password(message)))

    def announce(self, message: str) -> None:
        console.print(message)

    def show_response(self, response: Response) -> None:
        render_response(response, ResponseKind.GENERIC)

    def busy(self, message: str) -> Any:
        return console.status(message)
