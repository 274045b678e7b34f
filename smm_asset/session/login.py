"""
The login procedure - fetch the form, scrape the token, post the credentials.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup

from smm_asset.models import ConnectionState, LoginOutcome
from smm_asset.session import redirects
from smm_asset.tokens import extract_token, HTML_PARSER, CSRF_FIELD

if TYPE_CHECKING:
    from smm_asset.session.smmsession import SMMSession


LOGIN_PATH = "/accounts/login/"

# A good login sends the browser away from the login page
LOGIN_SUCCESS_CODE = 302


def build_login_form(token: str, username: str, password: str) -> dict[str, str]:
    """
    Fields of the login form - in the order the server's form has them.

    requests form-encodes these, so "&" and "=" in a password are safe.

    :param token:
    :param username:
    :param password:
    :return:
    """
    return {
        CSRF_FIELD: token,
        "username": username,
        "password": password,
    }


def perform_login(session: "SMMSession") -> LoginOutcome:
    """
    Log the session in. Must be called with the session's lock held.

    Updates the session's state and token as it goes:
     - no response at all to the GET -> NO_HOST_CONNECTION
     - anything but a 200 for the GET -> state untouched
     - no token on the page -> state untouched
     - POST answered with a 302 -> CONNECTED
     - anything else from the POST -> AUTHENTICATION_FAILURE

    :param session:
    :return:
    """
    logger = session.logger

    # Get the login page, so we can get the csrf cookie + token
    page = io.BytesIO()
    res_get = redirects.fetch_with_retry(session, LOGIN_PATH, sink=page)

    if not res_get.succeeded and res_get.status_code == 0:
        logger.debug(f"No response from the login page - {res_get.error}")
        session._set_state(ConnectionState.NO_HOST_CONNECTION)
        return LoginOutcome(success=False, state=session._state)

    if not res_get.ok:
        logger.debug(f"login page - {res_get.succeeded = } {res_get.status_code = }")
        return LoginOutcome(success=False, state=session._state)

    soup = BeautifulSoup(page.getvalue(), HTML_PARSER)
    token = extract_token(soup)
    if token is None:
        # Nothing to post - the state is left as it was
        logger.warning(f"No {CSRF_FIELD} found on the login page at {session._host}")
        return LoginOutcome(success=False, state=session._state)

    session._set_token(token)

    res_post = redirects.fetch_with_retry(
        session, LOGIN_PATH, data=build_login_form(token, session.username, session._password)
    )

    if res_post.succeeded and res_post.status_code == LOGIN_SUCCESS_CODE:
        session._set_state(ConnectionState.CONNECTED)
        logger.info(f"Logged in as {session.username} on {session._host}")
        return LoginOutcome(success=True, state=session._state)

    logger.warning(
        f"Login refused for {session.username} - {res_post.succeeded = } {res_post.status_code = }"
    )
    session._set_state(ConnectionState.AUTHENTICATION_FAILURE)
    return LoginOutcome(success=False, state=session._state)
