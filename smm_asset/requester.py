# smm_asset/requester.py
from __future__ import annotations

import io
import logging
import threading
import time
from typing import Optional, Mapping, Any
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from smm_asset.errors import NetworkException
from smm_asset.models import FetchResult, REDIRECT_CODES


_logger = logging.getLogger(__name__)


class Requester:
    """
    Executes exactly one HTTP request on a session it is handed.

    Redirects are never followed - the caller decides what they mean.
    Adds throttling, typed exceptions, and lazily mounts HTTPAdapter+Retry
    onto whichever session is used for a call.
    """

    def __init__(
        self,
        requests_per_window: int = 120,
        window_seconds: float = 60.0,
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        pool_connections: int = 1,
        pool_maxsize: int = 1,
        default_timeout: tuple[float, float] | float = (5.0, 30.0),
        user_agent: str = "smm-asset (+https://github.com/canterbury-air-patrol)",
        verify: bool = False,
        chunk_size: int = 8192,
    ):
        # throttle state
        self._capacity = max(1, int(requests_per_window))
        self._window = float(window_seconds)
        self._tokens = self._capacity
        self._last = time.monotonic()
        self._throttle_lock = threading.Lock()

        # Only retry failed connects. A request that reached the server is never
        # repeated here - status and redirect handling belongs to the session.
        self._retry = Retry(
            total=max_retries,
            connect=max_retries,
            read=0,
            status=0,
            redirect=0,
            backoff_factor=backoff_factor,
            raise_on_status=False,
            raise_on_redirect=False,
        )
        self._pool_connections = pool_connections
        self._pool_maxsize = pool_maxsize

        # defaults
        self._default_timeout = default_timeout
        self._default_headers: dict[str, str] = {
            "User-Agent": user_agent,
            "Accept": "*/*",
        }
        self._verify = verify
        self._chunk_size = chunk_size

    @property
    def verify(self) -> bool:
        return self._verify

    def configure_session(self, session: requests.Session) -> None:
        """Explicitly mount adapters and headers once on a session."""
        self._ensure_adapters(session)
        self._ensure_default_headers(session)
        session.verify = self._verify

    def new_session(self) -> requests.Session:
        """
        Create a fresh, configured connection handle.

        :return:
        """
        session = requests.Session()
        self.configure_session(session)
        return session

    def execute(
        self,
        http: requests.Session,
        method: str,
        url: str,
        data: Optional[Mapping[str, Any] | str | bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        want_body: bool = False,
        timeout: Optional[tuple[float, float] | float] = None,
    ) -> FetchResult:
        """
        Perform one request and describe what happened.

        :param http: The session (connection handle) to use
        :param method: "GET" or "POST"
        :param url: Full url to request
        :param data: Body for a POST
        :param headers: Merged over the default headers
        :param want_body: If True, the streamed body is kept on the result
        :param timeout: Overrides the default timeout
        :raises NetworkException: No response could be obtained at all
        :return:
        """
        self._throttle()

        self.configure_session(http)

        merged_headers = dict(self._default_headers)
        if headers:
            merged_headers.update(headers)

        try:
            resp = http.request(
                method=method,
                url=url,
                data=data,
                headers=merged_headers,
                allow_redirects=False,
                stream=True,
                verify=self._verify,
                timeout=self._default_timeout if timeout is None else timeout,
            )
        except requests.RequestException as e:
            raise NetworkException(str(e), errors=[e], url=url, method=method) from e

        status_code = resp.status_code

        content_type = None
        redirect_target = None
        if status_code == 200:
            content_type = resp.headers.get("Content-Type")
        elif status_code in REDIRECT_CODES:
            location = resp.headers.get("Location")
            if location:
                redirect_target = urljoin(url, location)

        buffer = io.BytesIO() if want_body else None
        try:
            # Drain the body even if no one wants it, so the connection can be reused
            for chunk in resp.iter_content(chunk_size=self._chunk_size):
                if buffer is not None and chunk:
                    buffer.write(chunk)
        except requests.RequestException as e:
            _logger.debug(f"Reading body failed - {url = } - {e}")
            return FetchResult(
                succeeded=False,
                status_code=status_code,
                url=url,
                content_type=content_type,
                redirect_target=redirect_target,
                body=buffer.getvalue() if buffer is not None else None,
                error=str(e),
            )
        finally:
            resp.close()

        return FetchResult(
            succeeded=True,
            status_code=status_code,
            url=url,
            content_type=content_type,
            redirect_target=redirect_target,
            body=buffer.getvalue() if buffer is not None else None,
        )

    # ---- internals ----
    def _throttle(self) -> None:
        """
        Take a token from the bucket - waiting for one if it is empty.

        One Requester may be shared by several sessions, so the bucket is locked.
        Waiters queue on the lock.

        :return:
        """
        with self._throttle_lock:
            now = time.monotonic()
            elapsed = now - self._last
            self._last = now

            self._tokens = min(self._capacity, self._tokens + elapsed * (self._capacity / self._window))
            if self._tokens < 1:
                sleep_for = (1 - self._tokens) * (self._window / self._capacity)
                time.sleep(sleep_for)
                self._tokens = 0
                self._last = time.monotonic()
            self._tokens = max(0, self._tokens - 1)

    def _ensure_adapters(self, session: requests.Session) -> None:
        """
        Ensure our custom adapter is mounted onto the session.

        :param session:
        :return:
        """
        if getattr(session, "_smm_adapters_installed", False):
            return
        adapter = HTTPAdapter(
            max_retries=self._retry,
            pool_connections=self._pool_connections,
            pool_maxsize=self._pool_maxsize,
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        setattr(session, "_smm_adapters_installed", True)

    def _ensure_default_headers(self, session: requests.Session) -> None:
        if getattr(session, "_smm_headers_installed", False):
            return
        for k, v in self._default_headers.items():
            session.headers.setdefault(k, v)
        setattr(session, "_smm_headers_installed", True)


__all__ = ["Requester"]
