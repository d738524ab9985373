"""Custom exception hierarchy for rsm.

All exceptions that cross layer boundaries must inherit from
:class:`RsmError`.  Raw third-party exceptions (e.g. from requests or
questionary) must NEVER propagate beyond the layer that talks to the
library: they must be caught and re-raised as a typed subclass
defined here.

Hierarchy
---------
RsmError
├── ConfigError
│   ├── InvalidConfigError
│   ├── ConfigReadError
│   └── ConfigUpdateError
├── NoAuthError
├── ServerError
│   ├── ServerConnectionError
│   ├── InvalidServerResponseError
│   └── ServerResponseParseError
├── AuthError
│   ├── LoginFailedError
│   ├── KeyUpdateError
│   └── FirstRunError
├── FileResolutionError
├── TerminalIOError
└── EnvironmentError
"""

from __future__ import annotations


class RsmError(Exception):
    """Base exception for all rsm errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Local config file -----------------------------------------------------

class ConfigError(RsmError):
    """Base class for failures around the local config file."""


class InvalidConfigError(ConfigError):
    """Raised when the config file holds malformed JSON or a bad shape."""


class ConfigReadError(ConfigError):
    """Raised when the config file cannot be read."""


class ConfigUpdateError(ConfigError):
    """Raised when the config file cannot be written."""


class NoAuthError(RsmError):
    """Raised when a session token is required but none is stored."""


# --- Backend communication -------------------------------------------------

class ServerError(RsmError):
    """Base class for transport and decoding failures."""


class ServerConnectionError(ServerError):
    """Raised when the request cannot be delivered to the backend."""


class InvalidServerResponseError(ServerError):
    """Raised when the response body cannot be read to completion."""


class ServerResponseParseError(ServerError):
    """Raised when the response body is not the JSON we expect."""


# --- Authentication lifecycle ----------------------------------------------

class AuthError(RsmError):
    """Base class for terminal failures of the authentication flow."""


class LoginFailedError(AuthError):
    """Raised when the backend rejects a login attempt."""


class KeyUpdateError(AuthError):
    """Raised when the backend refuses to issue a new key."""


class FirstRunError(AuthError):
    """Raised when account creation fails during onboarding."""


# --- Local input / terminal ------------------------------------------------

class FileResolutionError(RsmError):
    """Raised when task text cannot be taken from the requested file slice."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        super().__init__(f"Failed to resolve file input: {detail}", hint=hint)
        self.detail: str = detail


class TerminalIOError(RsmError):
    """Raised when an interactive prompt cannot be completed."""


class EnvironmentError(RsmError):
    """Raised when a required runtime dependency is not available."""


# --- Argument parsing ------------------------------------------------------

class DueParseError(ValueError):
    """Raised by the due parser with a short user-facing message.

    Not an :class:`RsmError`: the CLI converts it into an argparse usage
    error so it is reported next to the offending option.
    """
