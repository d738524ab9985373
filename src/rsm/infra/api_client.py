"""``requests`` backed client for the rsm backend.

This module is the **only** place in the codebase that imports
``requests``.  Every ``requests`` exception is caught here and re-raised
as a typed :class:`~rsm.exceptions.ServerError` subclass: nothing raw
escapes the infrastructure boundary.

Each call opens its own :class:`requests.Session`, so nothing but the
token held by the client is shared between requests.  Server-reported
failures are *returned* as :class:`~rsm.core.models.ErrorResponse`;
deciding whether they are fatal is up to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any
from urllib.parse import quote, urlencode

import requests

from rsm.core.models import Response, TaskPayload
from rsm.core.responses import decode_response
from rsm.exceptions import InvalidServerResponseError, ServerConnectionError
from rsm.infra.config_store import ConfigStore
from rsm.settings import Settings

logger = logging.getLogger(__name__)

BUILTIN_TABLES: tuple[str, ...] = ("reminder", "todo")
"""Tables that live at the top level; all others sit under ``user/``."""


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def table_path(tablename: str) -> str:
    """Backend path of a table: built-ins as-is, others under ``user/``."""
    if tablename in BUILTIN_TABLES:
        return quote(tablename, safe="")
    return f"user/{quote(tablename, safe='')}"


def encode_query(params: dict[str, str | None]) -> str:
    """Percent-encode keys and values (``%20`` for spaces), joined with ``&``.

    Parameters whose value is ``None`` or empty are left out.
    """
    present = [(k, v) for k, v in params.items() if v]
    return urlencode(present, quote_via=quote, safe="")


def cookie_header_from(cookies: Iterable[Any]) -> str:
    """Turn the cookies set by the server into a ``Cookie`` header value."""
    return "; ".join(f"{cookie.name}={cookie.value}" for cookie in cookies)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class ApiClient:
    """Typed operations over the backend's HTTP API.

    Usage::

        client = ApiClient.from_store(ConfigStore(), settings)
        response = client.list_tables()

    Parameters
    ----------
    base_url:
        Backend root, e.g. ``http://localhost:10001``.
    token:
        Session cookie sent in the ``Cookie`` header, or ``None`` for
        the unauthenticated endpoints.
    timeout:
        Seconds to wait for the backend; ``None`` waits forever.
    session_factory:
        Callable returning a fresh :class:`requests.Session`.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._base_url: str = base_url.rstrip("/")
        self._token: str | None = token
        self._timeout: float | None = timeout
        self._session_factory = session_factory

    @classmethod
    def from_store(cls, store: ConfigStore, settings: Settings, **kwargs: Any) -> ApiClient:
        """Build a client holding the stored token.

        Raises
        ------
        NoAuthError
            If no token is stored.
        """
        return cls(
            settings.backend_url,
            store.load_token(),
            timeout=settings.http_timeout,
            **kwargs,
        )

    @classmethod
    def without_token(cls, settings: Settings, **kwargs: Any) -> ApiClient:
        """Build a client for ``/signup``, ``/login`` and ``/lostkey``."""
        return cls(settings.backend_url, None, timeout=settings.http_timeout, **kwargs)

    @property
    def token(self) -> str | None:
        return self._token

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def list_tables(self) -> Response:
        return self._call("GET", "list")

    def list_tasks(
        self,
        tablename: str,
        *,
        group: str | None = None,
        sort_by: str | None = None,
    ) -> Response:
        return self._call(
            "GET",
            quote(tablename, safe=""),
            query={"group": group, "sort_by": sort_by},
        )

    def create_table(self, tablename: str, has_due: bool) -> Response:
        return self._call("POST", "create", payload={"tablename": tablename, "has_due": has_due})

    def drop_table(self, tablename: str) -> Response:
        return self._call("DELETE", table_path(tablename))

    def clear_table(self, tablename: str) -> Response:
        return self._call("DELETE", f"{table_path(tablename)}/clear")

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_task(self, task: TaskPayload) -> Response:
        return self._call("POST", table_path(task.tablename), payload=task.to_body())

    def update_task(self, old_desc: str, task: TaskPayload) -> Response:
        body: dict[str, Any] = {"old_desc": old_desc}
        body.update(task.to_body())
        return self._call("PUT", table_path(task.tablename), payload=body)

    def remove_task(self, tablename: str, desc: str) -> Response:
        return self._call("DELETE", table_path(tablename), payload={"desc": desc})

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def signup(self, username: str, password: str) -> Response:
        return self._call(
            "POST",
            "signup",
            payload={"username": username.strip(), "password": password.strip()},
        )

    def login(self, key: str) -> tuple[Response, str]:
        """POST ``/login`` and capture the session cookie as a token."""
        response, cookies = self._exchange("POST", "login", payload={"key": key.strip()})
        return response, cookie_header_from(cookies)

    def logout(self, confirm: bool) -> Response:
        return self._call("POST", "logout", payload={"logout": confirm})

    def lostkey(self, username: str, password: str) -> Response:
        return self._call(
            "POST",
            "lostkey",
            payload={"username": username.strip(), "password": password.strip()},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _url(self, path: str, query: dict[str, str | None] | None) -> str:
        url = f"{self._base_url}/{path}"
        encoded = encode_query(query) if query else ""
        if encoded:
            url = f"{url}?{encoded}"
        return url

    def _call(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        query: dict[str, str | None] | None = None,
    ) -> Response:
        response, _ = self._exchange(method, path, payload=payload, query=query)
        return response

    def _exchange(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        query: dict[str, str | None] | None = None,
    ) -> tuple[Response, list[Any]]:
        """Send one request and return the decoded body plus received cookies.

        Raises
        ------
        ServerConnectionError
            When the request cannot be sent.
        InvalidServerResponseError
            When the body cannot be read to completion.
        ServerResponseParseError
            When the body is not a valid response document.
        """
        url = self._url(path, query)
        headers: dict[str, str] = {}
        if self._token:
            headers["Cookie"] = self._token

        logger.info("%s %s", method, url)
        with self._session_factory() as session:
            try:
                raw = session.request(
                    method,
                    url,
                    headers=headers,
                    json=payload,
                    timeout=self._timeout,
                    stream=True,
                )
            except requests.RequestException as exc:
                logger.error("%s %s failed: %s", method, url, exc)
                raise ServerConnectionError(
                    f"Failed to connect to the server at {self._base_url}.",
                    hint="Check RSM_BACKEND_URL and your network connection.",
                ) from exc

            try:
                body = raw.text
            except requests.RequestException as exc:
                logger.error("%s %s: failed to read body: %s", method, url, exc)
                raise InvalidServerResponseError(
                    "The server response could not be read.",
                ) from exc
            finally:
                raw.close()

            cookies = list(raw.cookies)

        logger.info("%s %s -> %s", method, url, raw.status_code)
        logger.debug("response body: %s", body)
        return decode_response(body), cookies
