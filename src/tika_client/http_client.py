from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import BinaryIO, Protocol, Union

import requests
from requests import exceptions as req_exc

from .errors import TransportError

# Upload body accepted by document operations.
Document = Union[bytes, BinaryIO, None]


@dataclass(frozen=True)
class CallResult:
    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


class Transport(Protocol):
    def do(
        self,
        method: str,
        url: str,
        body: Document,
        headers: dict[str, str],
    ) -> CallResult: ...


class RequestsTransport:
    """Transport backed by ``requests``.

    An injected session is used for every request, so callers decide on
    adapters, proxies and pooling; sharing it between threads is then up to
    them. Without one, each calling thread gets its own ``requests.Session``
    since ``requests`` does not promise that a session is thread-safe.
    A single attempt is made per request.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout_s: float | None = 60,
    ) -> None:
        self._shared = session
        self._timeout_s = timeout_s
        self._local = threading.local()
        self._owned: list[requests.Session] = []
        self._lock = threading.Lock()

    def _session(self) -> requests.Session:
        if self._shared is not None:
            return self._shared
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._lock:
                self._owned.append(session)
        return session

    def do(
        self,
        method: str,
        url: str,
        body: Document,
        headers: dict[str, str],
    ) -> CallResult:
        try:
            resp = self._session().request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=self._timeout_s,
            )
        except req_exc.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        return CallResult(
            status_code=int(resp.status_code),
            body=resp.content,
        )

    def close(self) -> None:
        if self._shared is not None:
            self._shared.close()
            return
        with self._lock:
            owned, self._owned = self._owned, []
        for session in owned:
            session.close()
