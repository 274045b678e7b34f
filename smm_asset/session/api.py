"""
Function style access to sessions.

    session = connect("https://smm.example.com", "asset-1", "secret")
    if get_state(session) is ConnectionState.CONNECTED:
        result = fetch(session, "/assets/mine/json/", sink=buffer)
    close(session)
"""

from __future__ import annotations

import logging
from typing import Optional, Callable, BinaryIO

import requests

from smm_asset.models import ConnectionState, FetchResult
from smm_asset.requester import Requester
from smm_asset.session.smmsession import SMMSession, RequestData
from smm_asset.utils import validate_host


def connect(
    host: str,
    username: str,
    password: str,
    *,
    logger: Optional[logging.Logger] = None,
    requester: Optional[Requester] = None,
    session_factory: Optional[Callable[[], requests.Session]] = None,
) -> SMMSession:
    """
    Create a session and make the first login attempt.

    Always returns a session - check how it went with get_state. A host which is
    not a valid http(s) url leaves the session HOST_INVALID with no request made.

    :param host: e.g. https://smm.example.com
    :param username:
    :param password:
    :param logger: Replaces the per session default logger
    :param requester: Transport to use
    :param session_factory: Makes the underlying requests.Session
    :return:
    """
    session = SMMSession(
        host.rstrip("/") if host else host,
        username,
        password,
        logger=logger,
        requester=requester,
        session_factory=session_factory,
    )

    if not validate_host(host):
        session.logger.warning(f"Not a usable host - {host!r}")
        with session._lock:
            session._set_state(ConnectionState.HOST_INVALID)
        return session

    session.login()
    return session


def fetch(
    session: SMMSession,
    path: str,
    data: Optional[RequestData] = None,
    sink: Optional[BinaryIO] = None,
) -> FetchResult:
    """
    See SMMSession.fetch.

    :param session:
    :param path:
    :param data:
    :param sink:
    :return:
    """
    return session.fetch(path, data=data, sink=sink)


def get_state(session: Optional[SMMSession]) -> ConnectionState:
    """
    State of a session. UNKNOWN if there is no session.

    :param session:
    :return:
    """
    if session is None:
        return ConnectionState.UNKNOWN
    return session.get_state()


def close(session: Optional[SMMSession]) -> None:
    if session is not None:
        session.close()
