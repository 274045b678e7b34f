"""
Assets - the aircraft, vehicles and teams that report in and take on searches.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from urllib.parse import quote

from smm_asset import threadable
from smm_asset.errors import UnexpectedResponseException
from smm_asset.models import AssetCommand, ACTION_CODES
from smm_asset.pages import fetch_ok, load_json, int_field
from smm_asset.searches import Search
from smm_asset.session.smmsession import SMMSession


ASSETS_PATH = "/assets/mine/json/"
POSITION_PATH = "/data/assets/{name}/position/add/?lat={lat:f}&lon={lon:f}&alt={alt:d}&bearing={bearing:d}&fix={fix:d}"
CLOSEST_SEARCH_PATH = "/search/find/closest/?asset_id={asset_id:d}&latitude={lat:f}&longitude={lon:f}"


class Asset:
    """
    Represents one asset the logged in user is allowed to act as.
    """

    session: SMMSession

    name: Optional[str]
    type_name: Optional[str]
    asset_id: int
    asset_type_id: int

    _last_command: AssetCommand
    _last_goto: Optional[tuple[float, float]]

    def __init__(
        self,
        session: SMMSession,
        name: Optional[str],
        type_name: Optional[str],
        asset_id: int,
        asset_type_id: int,
    ) -> None:
        self.session = session
        self.name = name
        self.type_name = type_name
        self.asset_id = asset_id
        self.asset_type_id = asset_type_id

        self._last_command = AssetCommand.NONE
        self._last_goto = None

        self._logger = logging.getLogger(f"Asset-{name}-{id(self)}")

    def __repr__(self) -> str:
        return f"<Asset [{self.asset_id}] {self.name} ({self.type_name})>"

    @property
    def last_command(self) -> AssetCommand:
        """
        The last instruction the server gave in answer to a position report.

        :return:
        """
        return self._last_command

    @property
    def last_goto_position(self) -> Optional[tuple[float, float]]:
        """
        Where we were last told to go - only while the last command is GOTO.

        :return: (latitude, longitude)
        """
        if self._last_command is not AssetCommand.GOTO:
            return None
        return self._last_goto

    @threadable.threadable
    def report_position(
        self,
        latitude: float,
        longitude: float,
        altitude: int = 0,
        bearing: int = 0,
        fix: int = 0,
    ) -> AssetCommand:
        """Tell the server where this asset is - and find out what it wants done.

        This function is threadable.

        Args:
            latitude (float): Decimal degrees
            longitude (float): Decimal degrees
            altitude (int): Metres
            bearing (int): Degrees, 0-359
            fix (int): GPS fix type (0 none, 2 2d, 3 3d)

        Raises:
            HTTPException: The report was not accepted

        Returns:
            AssetCommand: The command the server answered with
        """
        path = POSITION_PATH.format(
            name=quote(self.name or "", safe=""),
            lat=latitude,
            lon=longitude,
            alt=int(altitude),
            bearing=int(bearing),
            fix=int(fix),
        )
        res, body = fetch_ok(self.session, path)

        if res.is_json:
            self._update_command(body)
        elif body.startswith(b"Continue"):
            self._last_command = AssetCommand.CONTINUE
        else:
            self._last_command = AssetCommand.NONE

        self._logger.debug(f"position reported - {self._last_command = }")
        return self._last_command

    def _update_command(self, body: bytes) -> None:
        """
        Read the command out of a position report response.

        :param body:
        :return:
        """
        try:
            data = json.loads(body)
        except ValueError as e:
            self._logger.error(f"Malformed command json - {e}")
            self._last_command = AssetCommand.UNKNOWN
            return

        if not isinstance(data, dict) or "action" not in data:
            # No action given - keep whatever we had
            return

        action = data["action"]
        command = ACTION_CODES.get(action, AssetCommand.UNKNOWN) if isinstance(action, str) else AssetCommand.UNKNOWN
        if command is AssetCommand.GOTO:
            lat, lon = self._last_goto if self._last_goto is not None else (0.0, 0.0)
            try:
                lat = float(data.get("latitude", lat))
                lon = float(data.get("longitude", lon))
            except (TypeError, ValueError) as e:
                self._logger.error(f"Malformed GOTO position - {e}")
                command = AssetCommand.UNKNOWN
            else:
                self._last_goto = (lat, lon)
        self._last_command = command

    def find_search(self, latitude: float, longitude: float) -> Optional[Search]:
        """
        Ask for the closest search this asset could do from where it is.

        :param latitude:
        :param longitude:
        :raises HTTPException:
        :return: None if the server has nothing to offer
        """
        path = CLOSEST_SEARCH_PATH.format(asset_id=self.asset_id, lat=latitude, lon=longitude)
        res, body = fetch_ok(self.session, path)

        if not res.is_json:
            self._logger.info(f"No search offered - {res.content_type = }")
            return None

        data = load_json(body, res.url)
        if not isinstance(data, dict):
            raise UnexpectedResponseException(f"Expected an object describing a search - got {data!r}", url=res.url)

        url = data.get("object_url")
        if url is not None and not isinstance(url, str):
            raise UnexpectedResponseException(f"Bad object_url {url!r} from {res.url}", url=res.url)

        return Search(
            asset=self,
            url=url,
            distance=int_field(data, "distance", res.url),
            length=int_field(data, "length", res.url),
            sweep_width=int_field(data, "sweep_width", res.url),
        )


_ASSET_KEYS = {"id", "type_id", "name", "type_name"}


def get_assets(session: SMMSession) -> list[Asset]:
    """
    All the assets the logged in user may act as.

    :param session:
    :raises HTTPException: The list could not be fetched
    :raises UnexpectedResponseException: The list could not be read
    :return:
    """
    res, body = fetch_ok(session, ASSETS_PATH)
    data = load_json(body, res.url)

    if not isinstance(data, dict) or "assets" not in data:
        session.logger.warning("Didn't find assets")
        return []

    if not isinstance(data["assets"], list):
        raise UnexpectedResponseException(f"Expected a list of assets - got {data['assets']!r}", url=res.url)

    assets = []
    for entry in data["assets"]:
        if not isinstance(entry, dict):
            raise UnexpectedResponseException(f"Expected an object describing an asset - got {entry!r}", url=res.url)

        for key, value in entry.items():
            if key not in _ASSET_KEYS:
                session.logger.debug(f"asset field {key} = {value}")

        for key in ("name", "type_name"):
            if entry.get(key) is not None and not isinstance(entry[key], str):
                raise UnexpectedResponseException(f"Bad {key} {entry[key]!r} from {res.url}", url=res.url)

        assets.append(
            Asset(
                session,
                name=entry.get("name"),
                type_name=entry.get("type_name"),
                asset_id=int_field(entry, "id", res.url, default=-1),
                asset_type_id=int_field(entry, "type_id", res.url, default=-1),
            )
        )
    return assets
