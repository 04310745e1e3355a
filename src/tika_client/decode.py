"""Decoders for the JSON bodies returned by the Tika server.

Every decoder takes the raw response body and either returns a fully
populated result or raises :class:`DecodeError`. Nothing partial is ever
returned.

The server is loose about types: a metadata field holding one value comes
back as a bare string, the same field holding several values as an array of
strings. The decoders normalize that here so callers always see
``list[str]``.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from .errors import DecodeError
from .models import XTIKA_CONTENT, Detector, MimeType, Parser


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def load_json(body: bytes) -> Any:
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"response is not valid UTF-8: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"response is not valid JSON: {e}") from e
    except RecursionError as e:
        raise DecodeError("response JSON is nested too deeply") from e


def _expect_array_of_objects(doc: Any) -> list[dict[str, Any]]:
    if not isinstance(doc, list):
        raise DecodeError(f"$: expected array, got {_kind(doc)}")
    for i, item in enumerate(doc):
        if not isinstance(item, dict):
            raise DecodeError(f"$[{i}]: expected object, got {_kind(item)}")
    return doc


def _string_list(value: Any, where: str) -> list[str]:
    if not isinstance(value, list):
        raise DecodeError(f"{where}: expected array, got {_kind(value)}")
    out: list[str] = []
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise DecodeError(f"{where}[{i}]: expected string, got {_kind(item)}")
        out.append(item)
    return out


def parse_recursive(body: bytes) -> list[str]:
    """Collect ``X-TIKA:content`` from each unit of a recursive response.

    Units without the key contribute nothing.
    """

    units = _expect_array_of_objects(load_json(body))
    contents: list[str] = []
    for i, unit in enumerate(units):
        if XTIKA_CONTENT not in unit:
            continue
        value = unit[XTIKA_CONTENT]
        if not isinstance(value, str):
            raise DecodeError(
                f"$[{i}].{XTIKA_CONTENT}: expected string, got {_kind(value)}"
            )
        contents.append(value)
    return contents


def meta_recursive(body: bytes) -> list[dict[str, list[str]]]:
    """Normalize a recursive metadata response to ``list[dict[str, list[str]]]``.

    A string value becomes a one-element list, an array must hold strings
    only. Any other value type fails the whole decode.
    """

    units = _expect_array_of_objects(load_json(body))
    records: list[dict[str, list[str]]] = []
    for i, unit in enumerate(units):
        record: dict[str, list[str]] = {}
        for key, value in unit.items():
            where = f"$[{i}].{key}"
            if isinstance(value, str):
                record[key] = [value]
            elif isinstance(value, list):
                record[key] = _string_list(value, where)
            else:
                raise DecodeError(
                    f"{where}: expected string or array of strings, "
                    f"got {_kind(value)}"
                )
        records.append(record)
    return records


# Optional field readers. A missing key or JSON null yields the default.


def _opt_str(obj: dict[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{where}.{key}: expected string, got {_kind(value)}")
    return value


def _opt_bool(obj: dict[str, Any], key: str, where: str) -> bool:
    value = obj.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"{where}.{key}: expected boolean, got {_kind(value)}")
    return value


def _opt_str_list(obj: dict[str, Any], key: str, where: str) -> list[str]:
    value = obj.get(key)
    if value is None:
        return []
    return _string_list(value, f"{where}.{key}")


FieldReader = Callable[[dict[str, Any], str, str], Any]

# (json key, dataclass attribute, reader) for fields beyond name/composite/children.
_PARSER_FIELDS: tuple[tuple[str, str, FieldReader], ...] = (
    ("decorated", "decorated", _opt_bool),
    ("supportedTypes", "supported_types", _opt_str_list),
)
_DETECTOR_FIELDS: tuple[tuple[str, str, FieldReader], ...] = ()


def _decode_node(
    obj: Any,
    where: str,
    build: Callable[..., Any],
    extra_fields: tuple[tuple[str, str, FieldReader], ...],
) -> Any:
    if not isinstance(obj, dict):
        raise DecodeError(f"{where}: expected object, got {_kind(obj)}")

    kwargs: dict[str, Any] = {
        "name": _opt_str(obj, "name", where),
        "composite": _opt_bool(obj, "composite", where),
    }
    for json_key, attr, reader in extra_fields:
        kwargs[attr] = reader(obj, json_key, where)

    raw_children = obj.get("children")
    children: list[Any] = []
    if raw_children is not None:
        if not isinstance(raw_children, list):
            raise DecodeError(
                f"{where}.children: expected array, got {_kind(raw_children)}"
            )
        for i, child in enumerate(raw_children):
            children.append(
                _decode_node(child, f"{where}.children[{i}]", build, extra_fields)
            )
    kwargs["children"] = children
    return build(**kwargs)


def _decode_tree(
    body: bytes,
    build: Callable[..., Any],
    extra_fields: tuple[tuple[str, str, FieldReader], ...],
) -> Any:
    doc = load_json(body)
    try:
        return _decode_node(doc, "$", build, extra_fields)
    except RecursionError as e:
        raise DecodeError("tree is nested too deeply") from e


def decode_parser(body: bytes) -> Parser:
    return _decode_tree(body, Parser, _PARSER_FIELDS)


def decode_detector(body: bytes) -> Detector:
    return _decode_tree(body, Detector, _DETECTOR_FIELDS)


def decode_mime_types(body: bytes) -> dict[str, MimeType]:
    """Decode the ``/mime-types`` registry.

    The top level has to be an object even though an array would be valid
    JSON; ``{}`` is a valid, empty registry.
    """

    doc = load_json(body)
    if not isinstance(doc, dict):
        raise DecodeError(f"$: expected object, got {_kind(doc)}")

    registry: dict[str, MimeType] = {}
    for name, entry in doc.items():
        where = f"$.{name}"
        if not isinstance(entry, dict):
            raise DecodeError(f"{where}: expected object, got {_kind(entry)}")
        registry[name] = MimeType(
            super_type=_opt_str(entry, "supertype", where),
            alias=_opt_str_list(entry, "alias", where),
        )
    return registry
