"""
Central location for errors the library might throw.

Nothing here is raised across the session boundary - the session encodes
protocol problems in its state and in the returned FetchResult. These are for
the transport, which the session wraps, and for the domain layer built on top.
"""

from typing import Optional


class SMMException(Exception):
    """
    Base class for all exceptions this API can throw.
    """

    def __init__(self, message: str, errors: Optional[list[Exception]] = None) -> None:
        """
        Startup the exception.

        :param message:
        :param errors:
        """
        super().__init__(message)
        self.errors = errors if errors is not None else []


class LoginException(SMMException):
    """
    Attempting to login to the server has failed.
    """

    def __init__(self, message: str, errors: Optional[list[Exception]] = None) -> None:
        """
        Startup the exception.

        :param message:
        :param errors:
        """
        super().__init__(message=message, errors=errors)


class NetworkException(SMMException):
    """
    Something seems to have gone wrong on a network level.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[list[Exception]] = None,
        url: Optional[str] = None,
        method: Optional[str] = None,
    ) -> None:
        """
        Startup the exception.

        :param message:
        :param errors:
        :param url: The url being requested when things went wrong
        :param method: The HTTP method in use
        """
        super().__init__(message=message, errors=errors)

        self.url = url
        self.method = method


class HTTPException(NetworkException):
    """
    The server answered - but not with what we asked for.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[list[Exception]] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        """
        Startup the exception.

        :param message:
        :param errors:
        :param url:
        :param status_code: 0 if no response was received at all
        """
        super().__init__(message=message, errors=errors, url=url)

        self.status_code = status_code


class UnexpectedResponseException(NetworkException):
    """
    There was a response we could not make sense of.
    """

    def __init__(self, message: str, errors: Optional[list[Exception]] = None, url: Optional[str] = None) -> None:
        """
        Startup the exception.

        :param message:
        :param errors:
        :param url:
        """
        super().__init__(message=message, errors=errors, url=url)
