"""
Helpers for the domain objects - fetch a page that has to work, read json off it.
"""

import io
import json
from typing import Any

from smm_asset.errors import HTTPException, UnexpectedResponseException
from smm_asset.models import FetchResult
from smm_asset.session.smmsession import SMMSession


def fetch_ok(session: SMMSession, path: str) -> tuple[FetchResult, bytes]:
    """
    Fetch a page - which has to come back as a 200.

    :param session:
    :param path:
    :raises HTTPException: Anything other than a clean 200
    :return: The result and the body
    """
    buf = io.BytesIO()
    res = session.fetch(path, sink=buf)
    if not res.ok:
        raise HTTPException(
            f"Fetching {path} failed - {res.succeeded = } {res.status_code = } {res.error = }",
            url=res.url,
            status_code=res.status_code,
        )
    return res, buf.getvalue()


def load_json(body: bytes, url: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as e:
        raise UnexpectedResponseException(f"Malformed json from {url} - {e}", errors=[e], url=url) from e


def int_field(data: dict, key: str, url: str, default: int = 0) -> int:
    """
    Read an integer out of a json object.

    :param data:
    :param key:
    :param url: For the error message
    :param default: Used when the key is missing
    :raises UnexpectedResponseException: The value isn't a number
    :return:
    """
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise UnexpectedResponseException(f"Bad {key} {value!r} from {url}", errors=[e], url=url) from e
