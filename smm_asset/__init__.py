"""

Programmatic tools to act as an asset on a Search Management Map (SMM) server.

Public API for the smm_asset package.

Typical usage:

    import smm_asset

    session = smm_asset.connect("https://smm.example.com", "user", "password")
    if session.state is smm_asset.ConnectionState.CONNECTED:
        for asset in smm_asset.get_assets(session):
            command = asset.report_position(-43.5, 172.6, altitude=300)

    session.close()

Only the names exported here are considered stable.
Everything else should be treated as internal and may change without notice.
"""

from __future__ import annotations


# Version
from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("smm-asset")
except PackageNotFoundError:
    # When running from a source checkout (editable install not yet built)
    __version__ = "0.0.0.dev0"

# Sessions - auth, redirects, re-login
from smm_asset.session import SMMSession, connect, fetch, get_state, close
from smm_asset.requester import Requester

# Domain objects
from smm_asset.assets import Asset, get_assets
from smm_asset.searches import Search
from smm_asset.models import ConnectionState, AssetCommand, FetchResult, Waypoint

from smm_asset.tokens import extract_token

# Typed, user-facing exceptions
from smm_asset.errors import (
    SMMException,
    LoginException,
    NetworkException,
    HTTPException,
    UnexpectedResponseException,
)

__all__ = [
    # Version
    "__version__",
    # Sessions
    "SMMSession",
    "connect",
    "fetch",
    "get_state",
    "close",
    "Requester",
    # Domain
    "Asset",
    "get_assets",
    "Search",
    "ConnectionState",
    "AssetCommand",
    "FetchResult",
    "Waypoint",
    "extract_token",
    # Exceptions
    "SMMException",
    "LoginException",
    "NetworkException",
    "HTTPException",
    "UnexpectedResponseException",
]
