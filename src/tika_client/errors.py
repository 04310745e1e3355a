from __future__ import annotations


class TikaError(Exception):
    """Base class for every error raised by tika_client."""


class TransportError(TikaError):
    """The request never produced an HTTP response.

    Raised for an invalid method token, a malformed URL, or a
    connection-level failure (DNS, refused connection, timeout).
    """


class StatusError(TikaError):
    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"{url} returned HTTP {status_code}")
        self.status_code = status_code
        self.url = url


class DecodeError(TikaError):
    """The server answered, but the body does not have the expected shape."""


class ServerError(TikaError):
    """A local tika-server process could not be started or downloaded."""
