"""
Need a module structure to get useful test fixtures.

Nothing here touches the network - ScriptedHTTP stands in for the server.
"""

import threading
from typing import Callable, Optional, Union

import requests
from requests.structures import CaseInsensitiveDict


HOST = "https://smm.example.com"

LOGIN_PAGE = b"""
<html><body>
<form method="post" action="/accounts/login/">
  <input type="hidden" name="csrfmiddlewaretoken" value="TOKEN123">
  <input type="text" name="username">
  <input type="password" name="password">
</form>
</body></html>
"""


def make_response(
    status_code: int,
    body: bytes = b"",
    headers: Optional[dict[str, str]] = None,
) -> requests.Response:
    """
    A response which has already been read - no socket behind it.

    :param status_code:
    :param body:
    :param headers:
    :return:
    """
    resp = requests.Response()
    resp.status_code = status_code
    resp.headers = CaseInsensitiveDict(headers or {})
    resp._content = body
    resp._content_consumed = True
    return resp


def json_response(body: bytes) -> requests.Response:
    return make_response(200, body, {"Content-Type": "application/json"})


def login_ok(token_page: bytes = LOGIN_PAGE) -> list[requests.Response]:
    """
    Responses for a login which works.

    :param token_page:
    :return:
    """
    return [
        make_response(200, token_page, {"Content-Type": "text/html; charset=utf-8"}),
        make_response(302, headers={"Location": "/"}),
    ]


def to_login(next_path: str = "/") -> requests.Response:
    """
    What the server sends when the session has expired.

    :param next_path:
    :return:
    """
    return make_response(302, headers={"Location": f"/accounts/login/?next={next_path}"})


class ScriptedHTTP(requests.Session):
    """
    Session which answers from a script instead of the network.

    Every call is prepared (so bodies are really encoded) and recorded.
    A script entry that is an exception gets raised instead of returned.
    """

    def __init__(self, script: Union[list, Callable[[str, str], requests.Response]]):
        super().__init__()
        self.script = script if callable(script) else list(script)
        self.calls: list[requests.PreparedRequest] = []
        self.call_kwargs: list[dict] = []
        self.closed = False

        # Concurrency tracking
        self._count_lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def request(self, method, url, **kwargs):
        """
        Record the call, and answer it from the script.

        :param method:
        :param url:
        :param kwargs:
        :return:
        """
        prepared = self.prepare_request(
            requests.Request(method, url, data=kwargs.get("data"), headers=kwargs.get("headers"))
        )
        with self._count_lock:
            self.calls.append(prepared)
            self.call_kwargs.append(kwargs)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if callable(self.script):
                item = self.script(method, url)
            else:
                assert self.script, f"Unexpected request {method} {url}"
                item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        finally:
            with self._count_lock:
                self.active -= 1

    def close(self):
        self.closed = True
        super().close()

    def urls(self) -> list[str]:
        return [p.url for p in self.calls]
