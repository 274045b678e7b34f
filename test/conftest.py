import pytest

from smm_asset.requester import Requester
from smm_asset.session.smmsession import SMMSession

from test import HOST, ScriptedHTTP, login_ok


@pytest.fixture()
def requester() -> Requester:
    # Big bucket - tests should never be throttled
    return Requester(requests_per_window=10000, window_seconds=1.0)


@pytest.fixture()
def make_session(requester):
    """
    Build a session wired to a ScriptedHTTP.

    :param requester:
    :return: factory(script, host=HOST) -> (session, http)
    """
    created = []

    def _make(script, host: str = HOST, username: str = "asset", password: str = "pw", **kwargs):
        http = ScriptedHTTP(script)
        session = SMMSession(host, username, password, requester=requester, session_factory=lambda: http, **kwargs)
        created.append(session)
        return session, http

    yield _make

    for session in created:
        session.close()


@pytest.fixture()
def connected_session(make_session):
    """
    A session that has logged in - with the rest of the script to follow.

    :param make_session:
    :return: factory(script) -> (session, http)
    """

    def _make(script, **kwargs):
        session, http = make_session(login_ok() + list(script), **kwargs)
        assert session.login() is True
        return session, http

    return _make
