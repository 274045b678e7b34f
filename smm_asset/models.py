"""
Contains dataclasses and enums to better represent the objects passed around.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ConnectionState(Enum):
    """
    Possible states for a session.
    """
    UNKNOWN = "unknown"                              # No login attempted yet (or no session at all)
    CONNECTED = "connected"
    HOST_INVALID = "host_invalid"                    # Not http(s):// or not a usable host
    NO_HOST_CONNECTION = "no_host_connection"
    AUTHENTICATION_FAILURE = "authentication_failure"
    GENERAL_FAILURE = "general_failure"


class AssetCommand(Enum):
    """
    The instruction the server last gave an asset.
    """
    NONE = "none"
    CONTINUE = "continue"
    GOTO = "goto"
    RTL = "rtl"
    CIRCLE = "circle"
    ABANDON_SEARCH = "abandon_search"
    MISSION_COMPLETE = "mission_complete"
    UNKNOWN = "unknown"


# Wire codes for the "action" field of a position report response
ACTION_CODES: dict[str, AssetCommand] = {
    "GOTO": AssetCommand.GOTO,
    "RON": AssetCommand.CONTINUE,
    "RTL": AssetCommand.RTL,
    "CIR": AssetCommand.CIRCLE,
    "AS": AssetCommand.ABANDON_SEARCH,
    "MC": AssetCommand.MISSION_COMPLETE,
}


REDIRECT_CODES = frozenset({301, 302, 303})


@dataclass(frozen=True)
class FetchResult:
    """
    The outcome of one physical HTTP attempt.
    """
    succeeded: bool                         # The I/O completed without a transport error
    status_code: int                        # 0 if no response was received at all
    url: str = ""
    content_type: Optional[str] = None      # Only on 200
    redirect_target: Optional[str] = None   # Only on 301/302/303 - absolute url
    body: Optional[bytes] = None            # Only if a sink was supplied
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """
        Did we get a clean 200?

        :return:
        """
        return self.succeeded and self.status_code == 200

    @property
    def is_redirect(self) -> bool:
        return self.status_code in REDIRECT_CODES and self.redirect_target is not None

    @property
    def is_json(self) -> bool:
        """
        Does the content type declare json - ignoring any parameters?

        :return:
        """
        if self.content_type is None:
            return False
        return self.content_type.split(";")[0].strip().lower() == "application/json"


@dataclass(frozen=True)
class LoginOutcome:
    """
    Result of one run of the login procedure.
    """
    success: bool
    state: ConnectionState


@dataclass(frozen=True)
class Waypoint:
    """
    One point on the route of a search.
    """
    latitude: float
    longitude: float
