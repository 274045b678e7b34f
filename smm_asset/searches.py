"""
Searches - a route over the ground (or sea) an asset has been asked to cover.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from smm_asset import threadable
from smm_asset.errors import UnexpectedResponseException
from smm_asset.models import Waypoint
from smm_asset.pages import fetch_ok, load_json

if TYPE_CHECKING:
    from smm_asset.assets import Asset


class Search:
    """
    A search on offer to (or taken on by) an asset.
    """

    asset: "Asset"
    url: Optional[str]
    distance: int
    length: int
    sweep_width: int

    def __init__(
        self,
        asset: "Asset",
        url: Optional[str],
        distance: int = 0,
        length: int = 0,
        sweep_width: int = 0,
    ) -> None:
        """
        Startup the search.

        :param asset: Who the search is for
        :param url: Server path of the search json, e.g. /search/12/json/
        :param distance: How far the asset is from the start - metres
        :param length: Length of the route - metres
        :param sweep_width: Metres
        """
        self.asset = asset
        self.url = url
        self.distance = distance
        self.length = length
        self.sweep_width = sweep_width

        self._logger = logging.getLogger(f"Search-{url}-{id(self)}")

    def __repr__(self) -> str:
        return f"<Search {self.url} distance={self.distance} length={self.length}>"

    def get_waypoints(self) -> list[Waypoint]:
        """
        Fetch the route of the search.

        The server sends GeoJSON with a single feature. Coordinates are [lon, lat].

        :raises HTTPException:
        :raises UnexpectedResponseException:
        :return: Empty if the response didn't hold exactly one feature
        """
        if not self.url:
            raise UnexpectedResponseException("Search has no url to fetch waypoints from")

        res, body = fetch_ok(self.asset.session, self.url)
        data = load_json(body, res.url)

        features = data.get("features") if isinstance(data, dict) else None
        if features is None:
            self._logger.warning("Didn't find waypoints")
            return []
        if not isinstance(features, list):
            raise UnexpectedResponseException(f"Expected a list of features - got {features!r}", url=res.url)
        if len(features) != 1:
            self._logger.warning(f"Expected one feature - got {len(features)}")
            return []

        try:
            coords = features[0]["geometry"]["coordinates"]
            return [Waypoint(latitude=float(point[1]), longitude=float(point[0])) for point in coords]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UnexpectedResponseException(f"Malformed waypoints from {res.url} - {e}", errors=[e], url=res.url) from e

    def _action_path(self, action: str) -> str:
        """
        Actions live next to the json - /search/12/json/ -> /search/12/<action>/

        :param action:
        :return:
        """
        if not self.url or "/json/" not in self.url:
            raise UnexpectedResponseException(f"Can't work out where to {action} search {self.url!r}")
        base = self.url[: self.url.index("/json/")]
        return f"{base}/{action}/?asset_id={self.asset.asset_id:d}"

    @threadable.threadable
    def accept(self) -> None:
        """Tell the server this asset is starting the search.

        This function is threadable.

        Raises:
            HTTPException: The server didn't accept it
            UnexpectedResponseException: The search url isn't one we understand
        """
        fetch_ok(self.asset.session, self._action_path("begin"))

    @threadable.threadable
    def complete(self) -> None:
        """Tell the server this asset has finished the search.

        This function is threadable.

        Raises:
            HTTPException: The server didn't accept it
            UnexpectedResponseException: The search url isn't one we understand
        """
        fetch_ok(self.asset.session, self._action_path("finished"))
