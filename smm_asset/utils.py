"""
Small helpers for handling the host and path strings the session works with.
"""

import re

from typing import Optional

from urllib.parse import urlparse


SECURE_PREFIX = "https://"
INSECURE_PREFIX = "http://"

# Letters, digits and hyphens - labels separated by dots. Also accepts IPv4.
_HOSTNAME_RE = re.compile(r"^(?=.{1,253}$)[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$")


def is_secure(url: str) -> bool:
    """
    Is this url using the secure scheme?

    :param url:
    :return:
    """
    return url.startswith(SECURE_PREFIX)


def upgrade_to_https(host: str) -> str:
    """
    Compute the secure form of a host.

    Any insecure scheme prefix is stripped before the secure one is prepended.
    Everything after the scheme is preserved.

    :param host: e.g. "http://smm.example.com" or "smm.example.com"
    :return: e.g. "https://smm.example.com"
    """
    if host.startswith(INSECURE_PREFIX):
        host = host[len(INSECURE_PREFIX):]
    return f"{SECURE_PREFIX}{host}"


def validate_host(host: Optional[str]) -> bool:
    """
    Check a host is something we could plausibly talk to.

    It has to be an http(s) url with a valid domain (or ip) and optional port.
    Paths other than "/" are rejected - they would be prefixed to every request.

    :param host:
    :return:
    """
    if not host:
        return False

    try:
        parsed = urlparse(host)
        port = parsed.port
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https"):
        return False
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        return False
    if port is not None and not 0 < port < 65536:
        return False

    hostname = parsed.hostname
    if not hostname:
        return False
    return _HOSTNAME_RE.match(hostname) is not None


def join_url(host: str, path: str) -> str:
    """
    Join a host and a server path - exactly as given.

    No normalisation happens here. A host ending in "/" will give "//".

    :param host:
    :param path:
    :return:
    """
    return f"{host}{path}"


def is_login_target(redirect_target: str, login_segment: str = "accounts/login") -> bool:
    """
    Does this redirect send us back to the login page?

    :param redirect_target:
    :param login_segment:
    :return:
    """
    return login_segment in urlparse(redirect_target).path
