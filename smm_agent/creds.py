"""
Works out which server to talk to, and as who.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from smm_asset import connect, SMMSession, Requester, ConnectionState, LoginException

from smm_agent import config


class CredentialRecord:
    def __init__(self, host: str, username: str, password: str):
        self.host = host
        self.username = username
        self.password = password

    def __repr__(self) -> str:
        # Never show the password
        return f"<CredentialRecord {self.username}@{self.host}>"


def load_credentials(
    path: Optional[Path] = None,
    host: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> CredentialRecord:
    """
    Combine explicit values, the environment and the credentials file - in that order.

    The file holds {"host": ..., "username": ..., "password": ...} and is only
    read for whatever is still missing.

    :param path: Defaults to config.CREDENTIALS_FILE
    :param host:
    :param username:
    :param password:
    :raises LoginException: The file can't be read, or something is still missing at the end
    :return:
    """
    host = host or config.HOST
    username = username or config.USERNAME
    password = password or config.PASSWORD

    path = Path(path) if path is not None else config.CREDENTIALS_FILE
    if not (host and username and password) and path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise LoginException(f"Could not read credentials from {path} - {e}", errors=[e]) from e
        if not isinstance(data, dict):
            raise LoginException(f"Credentials file {path} should hold a json object")
        host = host or data.get("host", "")
        username = username or data.get("username", "")
        password = password or data.get("password", "")

    missing = [name for name, value in (("host", host), ("username", username), ("password", password)) if not value]
    if missing:
        raise LoginException(f"No {', '.join(missing)} given - set SMM_* or write {path}")

    return CredentialRecord(host, username, password)


def build_requester() -> Requester:
    return Requester(
        requests_per_window=config.REQUESTS_PER_MINUTE,
        window_seconds=60.0,
        default_timeout=(config.CONNECT_TIMEOUT_S, config.READ_TIMEOUT_S),
        user_agent=config.USER_AGENT,
        verify=config.VERIFY_TLS,
    )


def start_session(record: CredentialRecord, requester: Optional[Requester] = None) -> SMMSession:
    """
    Connect - whatever the outcome of the login.

    :param record:
    :param requester:
    :return:
    """
    return connect(
        record.host,
        record.username,
        record.password,
        requester=requester if requester is not None else build_requester(),
    )


def open_session(record: CredentialRecord, requester: Optional[Requester] = None) -> SMMSession:
    """
    Connect and insist on being logged in.

    :param record:
    :param requester:
    :raises LoginException: The session did not end up CONNECTED
    :return:
    """
    session = start_session(record, requester=requester)
    state = session.get_state()
    if state is not ConnectionState.CONNECTED:
        session.close()
        raise LoginException(f"Could not log in to {record.host} as {record.username} - {state.value}")
    return session
