"""
Bounded redirect / retry handling around a single logical fetch.

Only two kinds of redirect are understood:
 - the server wants us on https -> switch the host over and go again
 - the server wants us to log in -> do so and go again
Everything else is handed back to the caller as it came.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, BinaryIO

from smm_asset.models import FetchResult, REDIRECT_CODES
from smm_asset.utils import is_secure, upgrade_to_https, is_login_target

if TYPE_CHECKING:
    from smm_asset.session.smmsession import SMMSession, RequestData


# Total attempts - not retries on top of the first one
MAX_ATTEMPTS = 3


def _should_retry(session: "SMMSession", path: str, result: FetchResult) -> bool:
    """
    Work out if a result is a redirect we can act on - and act on it.

    Side effects are limited to the session's host, state and token.

    :param session:
    :param path: Only used for logging
    :param result:
    :return: True if the request should be made again
    """
    if not (result.succeeded and result.status_code in REDIRECT_CODES and result.redirect_target):
        return False

    target = result.redirect_target
    session.logger.debug(f"Got redirected to ({target}) accessing {path}")

    if not is_secure(session._host) and is_secure(target):
        new_host = upgrade_to_https(session._host)
        session.logger.debug(f"Upgrading to https - {new_host}")
        session._swap_host(new_host)
        return True

    if is_login_target(target):
        if session._logging_in:
            # Sent back to the login page while logging in - nothing more to be done
            session.logger.debug(f"Redirected to login during login - {target}")
            return False

        session.logger.debug("Login required")
        return session._login().success

    session.logger.debug(f"Redirected to {target} - not following")
    return False


def fetch_with_retry(
    session: "SMMSession",
    path: str,
    data: Optional["RequestData"] = None,
    sink: Optional[BinaryIO] = None,
) -> FetchResult:
    """
    Issue one logical fetch as up to MAX_ATTEMPTS physical ones.

    Expects the session's lock to be held. The path and data are sent unchanged
    on every attempt - only the host may differ.

    :param session:
    :param path:
    :param data: If not None, a POST is made
    :param sink: Receives the body of the final result only
    :return: The most recent result
    """
    attempts = 0
    while True:
        result = session._attempt(path, data=data, want_body=sink is not None)
        attempts += 1

        retry = _should_retry(session, path, result)
        if not retry or attempts >= MAX_ATTEMPTS:
            break

    if attempts >= MAX_ATTEMPTS and retry:
        session.logger.debug(f"Giving up on {path} after {attempts} attempts")

    if sink is not None and result.body is not None:
        sink.write(result.body)

    return result
