# site_harvest/crawler/errors.py
"""
Fetch error taxonomy and the mapping from HTTP statuses / aiohttp exceptions
onto it.
"""
from __future__ import annotations

import asyncio
import errno
import socket
from enum import Enum
from typing import Optional

from aiohttp import ClientConnectorError, ClientError, ClientResponseError, InvalidURL


class FetchErrorKind(str, Enum):
    INVALID_URL = "InvalidURL"
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    RATE_LIMITED = "RateLimited"
    SERVER_ERROR = "ServerError"
    UNCLASSIFIED_HTTP = "UnclassifiedHTTP"
    HOST_UNREACHABLE = "HostUnreachable"
    TIMEOUT = "Timeout"
    CONNECTION_REFUSED = "ConnectionRefused"
    PARSE_FAILURE = "ParseFailure"


_MESSAGES = {
    FetchErrorKind.INVALID_URL: 'Invalid URL: "{url}" must use http or https.',
    FetchErrorKind.NOT_FOUND: 'Page not found ({status}): the URL "{url}" does not exist or has been moved.',
    FetchErrorKind.FORBIDDEN: 'Access forbidden ({status}): the website "{url}" is blocking our request.',
    FetchErrorKind.RATE_LIMITED: 'Rate limited ({status}): too many requests to "{url}". Try again later.',
    FetchErrorKind.SERVER_ERROR: 'Server error ({status}): the website "{url}" is experiencing issues.',
    FetchErrorKind.UNCLASSIFIED_HTTP: 'HTTP {status}: unable to access "{url}".',
    FetchErrorKind.HOST_UNREACHABLE: 'Website not found: unable to resolve "{url}". Check that the URL is correct.',
    FetchErrorKind.TIMEOUT: 'Request timeout: the website "{url}" took too long to respond.',
    FetchErrorKind.CONNECTION_REFUSED: 'Connection refused: unable to connect to "{url}". The website may be down.',
    FetchErrorKind.PARSE_FAILURE: 'Parse failure: the markup of "{url}" could not be parsed.',
}


class FetchError(Exception):
    """A single page could not be fetched or parsed."""

    def __init__(
        self,
        kind: FetchErrorKind,
        url: str,
        status: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.url = url
        self.status = status
        self.detail = detail
        message = _MESSAGES[kind].format(url=url, status=status if status is not None else "no status")
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    def __reduce__(self):
        return (type(self), (self.kind, self.url, self.status, self.detail))


class CrawlError(Exception):
    """The crawl session failed; raised only for root-page failures and session timeouts."""

    def __init__(self, kind: FetchErrorKind, url: str, message: str) -> None:
        self.kind = kind
        self.url = url
        super().__init__(message)

    @classmethod
    def from_fetch_error(cls, error: FetchError) -> CrawlError:
        crawl_error = cls(error.kind, error.url, str(error))
        crawl_error.__cause__ = error
        return crawl_error


def classify_status(status: int) -> FetchErrorKind:
    """Error kind of a non-success HTTP status."""
    if status == 404:
        return FetchErrorKind.NOT_FOUND
    if status == 403:
        return FetchErrorKind.FORBIDDEN
    if status == 429:
        return FetchErrorKind.RATE_LIMITED
    if 500 <= status < 600:
        return FetchErrorKind.SERVER_ERROR
    return FetchErrorKind.UNCLASSIFIED_HTTP


def classify_exception(exc: BaseException) -> FetchErrorKind:
    """Error kind of a network-level failure raised while talking to the origin."""
    if isinstance(exc, asyncio.TimeoutError):
        return FetchErrorKind.TIMEOUT
    if isinstance(exc, ClientConnectorError):
        os_error = getattr(exc, "os_error", None)
        if isinstance(os_error, socket.gaierror):
            return FetchErrorKind.HOST_UNREACHABLE
        if isinstance(os_error, ConnectionRefusedError) or getattr(os_error, "errno", None) == errno.ECONNREFUSED:
            return FetchErrorKind.CONNECTION_REFUSED
        if isinstance(os_error, TimeoutError):
            return FetchErrorKind.TIMEOUT
        return FetchErrorKind.HOST_UNREACHABLE
    if isinstance(exc, InvalidURL):
        return FetchErrorKind.INVALID_URL
    if isinstance(exc, ClientResponseError):
        return FetchErrorKind.UNCLASSIFIED_HTTP
    if isinstance(exc, ClientError):
        return FetchErrorKind.HOST_UNREACHABLE
    return FetchErrorKind.UNCLASSIFIED_HTTP
