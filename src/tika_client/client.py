from __future__ import annotations

import logging
from typing import Mapping

from . import decode
from .errors import StatusError
from .http_client import Document, RequestsTransport, Transport
from .models import RMETA_CONTENT_TYPES, Detector, MimeType, Parser, Translator
from .urls import join_url, path_segment, validate_method

logger = logging.getLogger(__name__)

ACCEPT_JSON = {"Accept": "application/json"}
ACCEPT_TEXT = {"Accept": "text/plain"}


def _text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


class Client:
    """Client for an Apache Tika server.

    Every operation performs exactly one HTTP request through ``call`` and
    then decodes the body. Failures raise a :class:`~tika_client.errors.TikaError`
    subclass: ``TransportError`` when no response was obtained,
    ``StatusError`` for a non-2xx answer and ``DecodeError`` when the body does
    not have the documented shape.

    The client keeps no per-call state, so one instance can serve concurrent
    callers as long as its transport can. The default
    :class:`~tika_client.http_client.RequestsTransport` uses one
    ``requests.Session`` per thread.
    """

    def __init__(
        self,
        transport: Transport | None,
        base_url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._transport = transport if transport is not None else RequestsTransport()
        self._base_url = base_url
        self._headers = dict(headers or {})

    @property
    def base_url(self) -> str:
        return self._base_url

    def call(
        self,
        body: Document,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
    ) -> bytes:
        method = validate_method(method)
        url = join_url(self._base_url, path)

        merged = dict(self._headers)
        if headers:
            merged.update(headers)

        result = self._transport.do(method, url, body, merged)
        logger.debug(
            "%s %s -> %d (%d bytes)", method, url, result.status_code, len(result.body)
        )
        if not result.ok:
            raise StatusError(result.status_code, url)
        return result.body

    def _call_text(
        self,
        body: Document,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        return _text(self.call(body, method, path, headers))

    # Content

    def parse(
        self, doc: Document, *, headers: Mapping[str, str] | None = None
    ) -> str:
        """Extract the document text.

        Pass ``headers={"Accept": "text/html"}`` to get XHTML instead of
        plain text, or any per-request ``X-Tika-*`` configuration header.
        """

        merged = dict(ACCEPT_TEXT)
        if headers:
            merged.update(headers)
        return self._call_text(doc, "PUT", "/tika", merged)

    def parse_recursive(self, doc: Document) -> list[str]:
        """Text of the document and of every embedded document, in order."""
        body = self.call(doc, "PUT", "/rmeta/text", ACCEPT_JSON)
        return decode.parse_recursive(body)

    # Metadata

    def meta(self, doc: Document) -> str:
        return self._call_text(doc, "PUT", "/meta")

    def meta_field(self, doc: Document, field: str) -> str:
        return self._call_text(
            doc, "PUT", f"/meta/{path_segment(field)}", ACCEPT_TEXT
        )

    def meta_recursive(
        self, doc: Document, content_type: str = "text"
    ) -> list[dict[str, list[str]]]:
        """Metadata of the document and every embedded document.

        ``content_type`` selects how ``X-TIKA:content`` is rendered: one of
        ``text``, ``html``, ``xml`` or ``ignore``.
        """

        if content_type not in RMETA_CONTENT_TYPES:
            raise ValueError(
                f"content_type must be one of {', '.join(RMETA_CONTENT_TYPES)}; "
                f"got {content_type!r}"
            )
        body = self.call(doc, "PUT", f"/rmeta/{content_type}", ACCEPT_JSON)
        return decode.meta_recursive(body)

    # Detection and language

    def detect(self, doc: Document) -> str:
        return self._call_text(doc, "PUT", "/detect/stream")

    def language(self, doc: Document) -> str:
        return self._call_text(doc, "PUT", "/language/stream")

    def language_string(self, text: str) -> str:
        return self._call_text(
            text.encode("utf-8"),
            "PUT",
            "/language/string",
            {"Content-Type": "text/plain; charset=utf-8"},
        )

    def translate(
        self,
        doc: Document,
        translator: Translator | str,
        src: str,
        dst: str,
    ) -> str:
        name = translator.value if isinstance(translator, Translator) else translator
        path = "/translate/all/{}/{}/{}".format(
            path_segment(name), path_segment(src), path_segment(dst)
        )
        return self._call_text(doc, "PUT", path)

    # Server capabilities

    def parsers(self) -> Parser:
        body = self.call(None, "GET", "/parsers/details", ACCEPT_JSON)
        return decode.decode_parser(body)

    def detectors(self) -> Detector:
        body = self.call(None, "GET", "/detectors", ACCEPT_JSON)
        return decode.decode_detector(body)

    def mime_types(self) -> dict[str, MimeType]:
        body = self.call(None, "GET", "/mime-types", ACCEPT_JSON)
        return decode.decode_mime_types(body)

    def version(self) -> str:
        return self._call_text(None, "GET", "/version")
