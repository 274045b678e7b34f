"""
Tests the login procedure against a scripted server.
"""

from urllib.parse import parse_qsl

import requests

from smm_asset.models import ConnectionState
from smm_asset.session.login import perform_login, build_login_form, LOGIN_PATH

from test import HOST, LOGIN_PAGE, make_response, login_ok


class TestLoginProcedure:
    """
    GET the form, find the token, POST the credentials.
    """

    def test_login_success(self, make_session) -> None:
        """
        A 302 from the POST means we're in.

        :return:
        """
        session, http = make_session(login_ok(), username="heli-1", password="hunter2")

        assert session.login() is True
        assert session.state is ConnectionState.CONNECTED
        assert session._csrf_token == "TOKEN123"

        get_call, post_call = http.calls
        assert get_call.method == "GET"
        assert get_call.url == f"{HOST}{LOGIN_PATH}"
        assert post_call.method == "POST"
        assert post_call.url == f"{HOST}{LOGIN_PATH}"
        assert post_call.headers["Referer"] == f"{HOST}{LOGIN_PATH}"
        assert post_call.headers["Content-Type"] == "application/x-www-form-urlencoded"

        assert parse_qsl(post_call.body) == [
            ("csrfmiddlewaretoken", "TOKEN123"),
            ("username", "heli-1"),
            ("password", "hunter2"),
        ]

    def test_login_outcome(self, make_session) -> None:
        session, http = make_session(login_ok())

        with session._lock:
            outcome = perform_login(session)

        assert outcome.success is True
        assert outcome.state is ConnectionState.CONNECTED

    def test_credentials_rejected(self, make_session) -> None:
        """
        A 200 from the POST is the login page again - bad credentials.

        :return:
        """
        session, http = make_session(
            [
                make_response(200, LOGIN_PAGE, {"Content-Type": "text/html"}),
                make_response(200, LOGIN_PAGE, {"Content-Type": "text/html"}),
            ]
        )

        assert session.login() is False
        assert session.state is ConnectionState.AUTHENTICATION_FAILURE

    def test_post_server_error_is_auth_failure(self, make_session) -> None:
        session, http = make_session(
            [
                make_response(200, LOGIN_PAGE, {"Content-Type": "text/html"}),
                make_response(500),
            ]
        )

        assert session.login() is False
        assert session.state is ConnectionState.AUTHENTICATION_FAILURE

    def test_post_transport_failure_is_auth_failure(self, make_session) -> None:
        session, http = make_session(
            [
                make_response(200, LOGIN_PAGE, {"Content-Type": "text/html"}),
                requests.ConnectionError("reset"),
            ]
        )

        assert session.login() is False
        assert session.state is ConnectionState.AUTHENTICATION_FAILURE

    def test_no_host_connection(self, make_session) -> None:
        """
        Nothing at all back from the login page.

        :return:
        """
        session, http = make_session([requests.ConnectionError("no route to host")])

        assert session.login() is False
        assert session.state is ConnectionState.NO_HOST_CONNECTION
        assert len(http.calls) == 1

    def test_login_page_error_leaves_state(self, make_session) -> None:
        """
        The login page answered, but not with a 200 - state is left for the caller.

        :return:
        """
        session, http = make_session([make_response(503)])

        assert session.login() is False
        assert session.state is ConnectionState.UNKNOWN
        assert len(http.calls) == 1

    def test_missing_token_leaves_state(self, make_session) -> None:
        """
        No token on the page - fail without touching the state or posting anything.

        :return:
        """
        session, http = make_session(
            [make_response(200, b"<html><body><p>maintenance</p></body></html>", {"Content-Type": "text/html"})]
        )

        assert session.login() is False
        assert session.state is ConnectionState.UNKNOWN
        assert [c.method for c in http.calls] == ["GET"]

    def test_missing_token_keeps_connected(self, connected_session) -> None:
        session, http = connected_session(
            [make_response(200, b"<html><body></body></html>", {"Content-Type": "text/html"})]
        )

        assert session.login() is False
        assert session.state is ConnectionState.CONNECTED

    def test_recover_from_auth_failure(self, make_session) -> None:
        """
        AUTHENTICATION_FAILURE -> CONNECTED on a later good login.

        :return:
        """
        session, http = make_session(
            [
                make_response(200, LOGIN_PAGE, {"Content-Type": "text/html"}),
                make_response(200, LOGIN_PAGE, {"Content-Type": "text/html"}),
            ]
            + login_ok()
        )

        assert session.login() is False
        assert session.state is ConnectionState.AUTHENTICATION_FAILURE

        assert session.login() is True
        assert session.state is ConnectionState.CONNECTED

    def test_token_replaced_on_each_login(self, make_session) -> None:
        second_page = LOGIN_PAGE.replace(b"TOKEN123", b"TOKEN456")
        session, http = make_session(login_ok() + login_ok(second_page))

        assert session.login() is True
        assert session._csrf_token == "TOKEN123"
        assert session.login() is True
        assert session._csrf_token == "TOKEN456"

    def test_credentials_with_form_characters(self, make_session) -> None:
        """
        "&" and "=" in a password must not split the form body.

        :return:
        """
        session, http = make_session(login_ok(), password="a&b=c d")

        assert session.login() is True

        post_call = http.calls[1]
        assert dict(parse_qsl(post_call.body))["password"] == "a&b=c d"
        assert "a&b=c" not in post_call.body

    def test_login_page_upgraded_to_https(self, make_session) -> None:
        """
        The login page itself may bounce us to https first.

        :return:
        """
        session, http = make_session(
            [make_response(301, headers={"Location": "https://smm.example.com/accounts/login/"})] + login_ok(),
            host="http://smm.example.com",
        )

        assert session.login() is True
        assert session.host == "https://smm.example.com"
        assert http.urls() == [
            "http://smm.example.com/accounts/login/",
            "https://smm.example.com/accounts/login/",
            "https://smm.example.com/accounts/login/",
        ]

    def test_login_redirected_to_login_does_not_recurse(self, make_session) -> None:
        """
        A login page which sends us to the login page can't start another login.

        :return:
        """
        session, http = make_session([make_response(302, headers={"Location": "/accounts/login/?next=/accounts/login/"})])

        assert session.login() is False
        assert session.state is ConnectionState.UNKNOWN
        assert len(http.calls) == 1


def test_build_login_form_order() -> None:
    form = build_login_form("T", "u", "p")
    assert list(form.items()) == [("csrfmiddlewaretoken", "T"), ("username", "u"), ("password", "p")]
