from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest

from tika_client import CallResult, Client


@dataclass
class Request:
    method: str
    url: str
    body: object
    headers: dict[str, str]


@dataclass
class FakeTransport:
    """Answers every request with the same status and body."""

    status_code: int = 200
    body: bytes = b""
    requests: list[Request] = field(default_factory=list)

    def do(self, method, url, body, headers):
        if hasattr(body, "read"):
            body = body.read()
        self.requests.append(Request(method, url, body, dict(headers)))
        return CallResult(status_code=self.status_code, body=self.body)

    @property
    def last(self) -> Request:
        return self.requests[-1]


BASE_URL = "http://tika.test:9998"


@pytest.fixture
def make_client():
    def _make(body: str | bytes = b"", status_code: int = 200, **kwargs):
        if isinstance(body, str):
            body = body.encode("utf-8")
        transport = FakeTransport(status_code=status_code, body=body)
        return Client(transport, BASE_URL, **kwargs), transport

    return _make


@pytest.fixture
def error_client():
    """Client whose server always answers 500."""
    return Client(FakeTransport(status_code=500, body=b"boom"), BASE_URL)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    # setup_logging() (called by the CLI) detaches the package logger from root.
    yield
    pkg_logger = logging.getLogger("tika_client")
    for handler in pkg_logger.handlers[:]:
        pkg_logger.removeHandler(handler)
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True
