"""Client-side authentication lifecycle.

:class:`AuthFlow` is the only component that changes the stored
credentials on behalf of the user.  The states it moves between are
derived from the stored :class:`~rsm.core.models.Config`:

============== ========== ========= ================================
State          first_run  token     Entered by
============== ========== ========= ================================
UNENROLLED     true       null      fresh install
AUTHENTICATED  false      present   successful login
DEAUTHENTICATED true      null      confirmed logout
ROTATING       true       null      successful ``new-key`` request
============== ========== ========= ================================

Guarantees
----------
* Only ``/signup``, ``/login`` and ``/lostkey`` are called while the
  user is not enrolled.
* Local state changes only after the backend accepted the request.
* Key rotation is two-phase: the pending state is persisted before the
  forced re-login, so an interrupted rotation leaves a recoverable
  UNENROLLED config.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from rsm.core.models import Config, ErrorResponse
from rsm.core.protocols import AuthApi, AuthUI, ConfigRepository
from rsm.exceptions import FirstRunError, KeyUpdateError, LoginFailedError

logger = logging.getLogger(__name__)


def _strip_newlines(value: str) -> str:
    return value.replace("\r", "").replace("\n", "")


class AuthFlow:
    """Orchestrates enrollment, login, logout and key rotation.

    Parameters
    ----------
    api:
        Backend adapter satisfying :class:`AuthApi`.
    store:
        Config persistence satisfying :class:`ConfigRepository`.
    ui:
        Terminal adapter satisfying :class:`AuthUI`.
    """

    def __init__(self, api: AuthApi, store: ConfigRepository, ui: AuthUI) -> None:
        self._api: AuthApi = api
        self._store: ConfigRepository = store
        self._ui: AuthUI = ui

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    def show_first_run_prompt(self, config: Config) -> Config:
        """Enroll the user: log in with an existing key, or sign up first.

        Returns
        -------
        Config
            The persisted AUTHENTICATED config.

        Raises
        ------
        FirstRunError
            If account creation is rejected.
        LoginFailedError
            If the login is rejected.
        """
        self._ui.announce("[blue]Welcome to RsMember![/blue]")

        has_key = self._ui.confirm("Do you already have a key?", default=True)
        if not has_key:
            self.signup()
            self._ui.announce("Log in:")

        key, token = self.login()
        enrolled = replace(config, key=key, token=token, first_run=False)
        self._store.save(enrolled)
        logger.info("first run completed (%s)", "login" if has_key else "signup and login")
        return enrolled

    def signup(self) -> None:
        """Create an account from interactively entered credentials.

        Raises
        ------
        FirstRunError
            If the backend reports an error.
        """
        self._ui.announce("Create Account:")
        username, password = self._ask_credentials()

        with self._ui.busy("Signing up..."):
            response = self._api.signup(username, password)

        self._ui.show_response(response)
        if isinstance(response, ErrorResponse):
            logger.error("signup rejected: %s (%s)", response.error_type, response.req_uuid)
            raise FirstRunError(
                "Account creation failed.",
                hint="Pick another username or try again later.",
            )
        self._ui.announce("Account creation successful, you can now log in!")
        logger.info("account created")

    def login(self) -> tuple[str, str]:
        """Exchange an interactively entered key for a session token.

        Returns
        -------
        tuple[str, str]
            The key and the session token, both without newlines.

        Raises
        ------
        LoginFailedError
            If the backend rejects the key or issues no session cookie.
        """
        key = self._ui.ask_secret("Please input your key:")

        with self._ui.busy("Logging in..."):
            response, token = self._api.login(key)

        self._ui.show_response(response)
        if isinstance(response, ErrorResponse):
            logger.error("login rejected: %s (%s)", response.error_type, response.req_uuid)
            raise LoginFailedError(
                "Login failed.",
                hint="Check your key, or run 'rsm new-key' if you lost it.",
            )

        token = _strip_newlines(token)
        if not token:
            logger.error("login succeeded but no session cookie was set")
            raise LoginFailedError("Login failed: the server did not issue a session.")

        self._ui.announce("[blue]Welcome to this machine![/blue]")
        logger.info("login succeeded")
        return _strip_newlines(key.strip()), token

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------

    def logout(self, config: Config) -> Config:
        """Ask for confirmation and log out.

        The stored credentials are wiped only when the user confirmed and
        the backend accepted the request; otherwise *config* is returned
        unchanged.
        """
        confirmed = self._ui.confirm("Do you really want to log out?", default=False)

        response = self._api.logout(confirmed)
        self._ui.show_response(response)

        if isinstance(response, ErrorResponse):
            logger.error("logout rejected: %s (%s)", response.error_type, response.req_uuid)
            return config
        if not confirmed:
            logger.info("logout cancelled by user")
            return config

        logged_out = Config.fresh()
        self._store.save(logged_out)
        logger.info("logged out, local credentials cleared")
        return logged_out

    # ------------------------------------------------------------------
    # Key rotation
    # ------------------------------------------------------------------

    def rotate_key(self, config: Config) -> Config:
        """Request a new key and immediately log in with it.

        Raises
        ------
        KeyUpdateError
            If the backend refuses to issue a new key.
        LoginFailedError
            If the forced re-login fails; the config then stays in the
            pending (first run) state.
        """
        self._ui.announce("Please input your credentials:")
        username, password = self._ask_credentials()

        with self._ui.busy("Making a new key..."):
            response = self._api.lostkey(username, password)

        self._ui.show_response(response)
        if isinstance(response, ErrorResponse):
            logger.error("key rotation rejected: %s (%s)", response.error_type, response.req_uuid)
            raise KeyUpdateError("Failed to update the key.")

        pending = replace(config, token=None, first_run=True)
        self._store.save(pending)
        logger.info("new key issued, re-login required")

        self._ui.announce("[blue]Now login again[/blue]")
        key, token = self.login()

        rotated = replace(pending, key=key, token=token, first_run=False)
        self._store.save(rotated)
        logger.info("key rotation completed")
        return rotated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ask_credentials(self) -> tuple[str, str]:
        username = self._ui.ask_text("username:")
        password = self._ui.ask_secret("password:")
        return username, password
