"""
The authenticated session with an SMM server.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Mapping, Any, Callable, BinaryIO, Union

import requests

from smm_asset.errors import NetworkException
from smm_asset.models import ConnectionState, FetchResult, LoginOutcome
from smm_asset.requester import Requester
from smm_asset.session import login as login_procedure
from smm_asset.session import redirects
from smm_asset.utils import join_url, is_login_target


RequestData = Union[Mapping[str, Any], str, bytes]


class SMMSession:
    """
    One authenticated relationship with a host.

    All access is serialised by a single re-entrant lock. The lock is held for
    the whole of a fetch - including any login and retry it triggers - so no
    other thread ever sees a half swapped host or token.
    """

    _host: str
    username: str

    _state: ConnectionState
    _csrf_token: Optional[str]
    _http: Optional[requests.Session]

    _logger: logging.Logger

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        logger: Optional[logging.Logger] = None,
        requester: Optional[Requester] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
    ) -> None:
        """
        Startup a session object.

        Does not talk to the server - see `login` or `smm_asset.connect` for that.

        :param host: Base url of the server - e.g. https://smm.example.com
        :param username:
        :param password: Deliberately not exposed after this point
        :param logger: Where to send tracing. Defaults to a per-session logger.
        :param requester: Transport to use. Defaults to a fresh Requester.
        :param session_factory: Makes the underlying requests.Session on first use.
        """
        self._host = host
        self.username = username
        self._password = password

        self._state = ConnectionState.UNKNOWN
        self._csrf_token = None
        self._has_logged_in = False
        self._logging_in = False
        self._closed = False

        self._requester = requester if requester is not None else Requester()
        self._session_factory = session_factory
        self._http = None

        self._lock = threading.RLock()
        self._logger = logger if logger is not None else logging.getLogger(f"SMMSession-{username}-{id(self)}")

    def __enter__(self) -> "SMMSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SMMSession {self.username}@{self.host} {self.state.value}>"

    @property
    def host(self) -> str:
        with self._lock:
            return self._host

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    def get_state(self) -> ConnectionState:
        """
        Current state of the session. Has no side effects.

        :return:
        """
        return self.state

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def fetch(
        self,
        path: str,
        data: Optional[RequestData] = None,
        sink: Optional[BinaryIO] = None,
    ) -> FetchResult:
        """
        Request a page from the server - logging in again if need be.

        A POST is made if data is given, a GET otherwise. Redirects to https and
        to the login page are dealt with here. Any other redirect comes back to
        the caller unfollowed.

        :param path: Server path, e.g. "/assets/mine/json/"
        :param data: POST body
        :param sink: If given, the body of the final response is written to it
        :return: The result of the last attempt made
        """
        with self._lock:
            if self._closed:
                self._logger.warning(f"fetch on a closed session - {path = }")
                return FetchResult(succeeded=False, status_code=0, url=path, error="session closed")
            if self._state is ConnectionState.HOST_INVALID:
                self._logger.warning(f"fetch on a session with an invalid host - {path = }")
                return FetchResult(succeeded=False, status_code=0, url=path, error="host invalid")

            result = redirects.fetch_with_retry(self, path, data=data, sink=sink)
            self._track_request(result)
            return result

    def login(self) -> bool:
        """
        Run the login procedure now.

        :return: True if the server accepted the credentials
        """
        with self._lock:
            if self._closed or self._state is ConnectionState.HOST_INVALID:
                return False
            return self._login().success

    def close(self) -> None:
        """
        Release the connection and forget the token. The session can't be used again.

        :return:
        """
        with self._lock:
            if self._http is not None:
                self._http.close()
                self._http = None
            self._csrf_token = None
            self._closed = True

    # ---- used by the login procedure and the redirect controller -----------
    # All of these expect the lock to already be held.

    def _connection(self) -> requests.Session:
        """
        The owned connection handle - created on first use.

        :return:
        """
        if self._http is None:
            self._logger.debug("creating connection handle")
            if self._session_factory is None:
                self._http = self._requester.new_session()
            else:
                self._http = self._session_factory()
                self._requester.configure_session(self._http)
        return self._http

    def _attempt(
        self,
        path: str,
        data: Optional[RequestData] = None,
        want_body: bool = False,
    ) -> FetchResult:
        """
        Make exactly one request against the current host.

        :param path:
        :param data:
        :param want_body:
        :return:
        """
        url = join_url(self._host, path)
        method = "POST" if data is not None else "GET"
        # Django checks the referer of a form post over https
        headers = {"Referer": url} if data is not None else None

        self._logger.debug(f"fetching {method} {url}")
        try:
            result = self._requester.execute(
                self._connection(), method, url, data=data, headers=headers, want_body=want_body
            )
        except NetworkException as e:
            self._logger.debug(f"transport failure - {url = } - {e}")
            return FetchResult(succeeded=False, status_code=0, url=url, error=str(e))

        self._logger.debug(f"{url} -> {result.status_code = } {result.succeeded = }")
        return result

    def _swap_host(self, new_host: str) -> None:
        self._logger.debug(f"host {self._host} -> {new_host}")
        self._host = new_host

    def _set_token(self, token: Optional[str]) -> None:
        self._csrf_token = token

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            self._logger.debug(f"state {self._state.value} -> {state.value}")
        if state is ConnectionState.CONNECTED:
            self._has_logged_in = True
        self._state = state

    def _login(self) -> LoginOutcome:
        """
        Run the login procedure, guarding against being re-entered from inside itself.

        :return:
        """
        self._logging_in = True
        try:
            outcome = login_procedure.perform_login(self)
        finally:
            self._logging_in = False

        if not outcome.success:
            # Only a fresh login can bring the session back to CONNECTED now
            self._has_logged_in = False
        return outcome

    def _track_request(self, result: FetchResult) -> None:
        """
        Keep the state honest after a request on a live session.

        :param result:
        :return:
        """
        if not result.succeeded and self._state is ConnectionState.CONNECTED:
            self._set_state(ConnectionState.GENERAL_FAILURE)
        elif (
            result.succeeded
            and self._state is ConnectionState.GENERAL_FAILURE
            and self._has_logged_in
            and not (result.is_redirect and is_login_target(result.redirect_target))
        ):
            self._set_state(ConnectionState.CONNECTED)
