from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

import requests

from .client import Client
from .http_client import RequestsTransport

DEFAULT_URL = "http://localhost:9998"
DEFAULT_TIMEOUT_S = 60.0


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_URL
    timeout_s: float | None = DEFAULT_TIMEOUT_S
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Read ``TIKA_URL`` and ``TIKA_TIMEOUT``.

        ``TIKA_TIMEOUT=0`` disables the transport timeout.
        """

        environ = os.environ if environ is None else environ
        base_url = _env(environ, "TIKA_URL") or DEFAULT_URL

        timeout_s: float | None = DEFAULT_TIMEOUT_S
        raw_timeout = _env(environ, "TIKA_TIMEOUT")
        if raw_timeout is not None:
            try:
                timeout_s = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"TIKA_TIMEOUT must be a number of seconds; got {raw_timeout!r}"
                ) from None
            if timeout_s < 0:
                raise ValueError("TIKA_TIMEOUT must not be negative")
            if timeout_s == 0:
                timeout_s = None

        return cls(base_url=base_url, timeout_s=timeout_s)


def build_client(
    config: ClientConfig, session: requests.Session | None = None
) -> Client:
    transport = RequestsTransport(session, timeout_s=config.timeout_s)
    return Client(transport, config.base_url, headers=config.headers)
