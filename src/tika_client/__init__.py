"""Client for the Apache Tika server REST API.

``Client`` issues one request per operation through an injectable
``Transport`` and decodes the answer into plain Python values and the
dataclasses in ``tika_client.models``.
"""

from __future__ import annotations

from .client import Client
from .config import ClientConfig, build_client
from .errors import DecodeError, ServerError, StatusError, TikaError, TransportError
from .http_client import CallResult, RequestsTransport, Transport
from .models import XTIKA_CONTENT, Detector, MimeType, Parser, Translator

__all__ = [
    "__version__",
    "CallResult",
    "Client",
    "ClientConfig",
    "DecodeError",
    "Detector",
    "MimeType",
    "Parser",
    "RequestsTransport",
    "ServerError",
    "StatusError",
    "TikaError",
    "Transport",
    "TransportError",
    "Translator",
    "XTIKA_CONTENT",
    "build_client",
]

__version__ = "0.1.0"
