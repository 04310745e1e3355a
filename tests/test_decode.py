from __future__ import annotations

import pytest

from tika_client.decode import (
    decode_detector,
    decode_mime_types,
    decode_parser,
    meta_recursive,
    parse_recursive,
)
from tika_client.errors import DecodeError
from tika_client.models import Detector, MimeType, Parser


@pytest.mark.parametrize(
    ("body", "want"),
    [
        (b'[{"X-TIKA:content":"test 1"}]', ["test 1"]),
        (
            b'[{"X-TIKA:content":"test 1"},{"X-TIKA:content":"test 2"}]',
            ["test 1", "test 2"],
        ),
        (b'[{"other_key":"other_value"},{"X-TIKA:content":"test"}]', ["test"]),
        (b'[{"k":["a", 1]},{"X-TIKA:content":""}]', [""]),
        (b"[]", []),
    ],
)
def test_parse_recursive(body, want):
    assert parse_recursive(body) == want


@pytest.mark.parametrize(
    "body",
    [
        b"invalid",
        b"",
        b'{"X-TIKA:content":"x"}',
        b'["x"]',
        b'[{"X-TIKA:content":["a"]}]',
        b"\xff\xfe",
    ],
)
def test_parse_recursive_rejects(body):
    with pytest.raises(DecodeError):
        parse_recursive(body)


@pytest.mark.parametrize(
    ("body", "want"),
    [
        (b'[{"X-TIKA:content":"test 1"}]', [{"X-TIKA:content": ["test 1"]}]),
        (
            b'[{"X-TIKA:content":"test 1"},{"X-TIKA:content":"test 2"}]',
            [{"X-TIKA:content": ["test 1"]}, {"X-TIKA:content": ["test 2"]}],
        ),
        (
            b'[{"other_key":"other_value"},{"X-TIKA:content":"test"}]',
            [{"other_key": ["other_value"]}, {"X-TIKA:content": ["test"]}],
        ),
        (
            b'[{"other_key":["other_value", "other_value2"]}]',
            [{"other_key": ["other_value", "other_value2"]}],
        ),
        (b'[{"empty":[]}, {}]', [{"empty": []}, {}]),
        (b"[]", []),
    ],
)
def test_meta_recursive(body, want):
    assert meta_recursive(body) == want


def test_meta_recursive_mixed_record():
    body = (
        b'[{"Content-Type":"application/pdf",'
        b'"dc:creator":["Ann","Bob"],'
        b'"X-TIKA:content":"hello"}]'
    )
    assert meta_recursive(body) == [
        {
            "Content-Type": ["application/pdf"],
            "dc:creator": ["Ann", "Bob"],
            "X-TIKA:content": ["hello"],
        }
    ]


@pytest.mark.parametrize(
    "body",
    [
        b'[{"other_key":{"test": "fail"}}]',
        b'[{"other_key":["other_value", {"test": "fail"}]}]',
        b'[{"n":1}]',
        b'[{"b":true}]',
        b'[{"z":null}]',
        b'[{"ok":"x"},{"bad":["x", 2]}]',
        b'{"super-alias":{}',
        b"invalid",
        b'{"a":"b"}',
        b"[1]",
    ],
)
def test_meta_recursive_rejects(body):
    with pytest.raises(DecodeError):
        meta_recursive(body)


def test_meta_recursive_error_names_field():
    with pytest.raises(DecodeError, match=r"\$\[1\]\.bad\[1\]"):
        meta_recursive(b'[{"ok":"x"},{"bad":["x", 2]}]')


@pytest.mark.parametrize(
    ("body", "want"),
    [
        (b'{"name":"TestParser"}', Parser(name="TestParser")),
        (
            b"""{
                "name":"TestParser",
                "children":[
                    {"name":"TestSubParser1"},
                    {"name":"TestSubParser2"}
                ]
            }""",
            Parser(
                name="TestParser",
                children=[Parser(name="TestSubParser1"), Parser(name="TestSubParser2")],
            ),
        ),
        (
            b"""{
                "name":"TestParser",
                "supportedTypes":["test-type"],
                "children":[
                    {
                        "supportedTypes":["test-type-two"],
                        "name":"TestSubParser",
                        "decorated":true,
                        "composite":false
                    }
                ],
                "decorated":false,
                "composite":true}""",
            Parser(
                name="TestParser",
                composite=True,
                supported_types=["test-type"],
                children=[
                    Parser(
                        name="TestSubParser",
                        decorated=True,
                        supported_types=["test-type-two"],
                    )
                ],
            ),
        ),
        (b"{}", Parser()),
        (b'{"name":"P","unknown":{"x":1},"children":null}', Parser(name="P")),
    ],
)
def test_decode_parser(body, want):
    assert decode_parser(body) == want


def test_decode_parser_depth_and_defaults():
    got = decode_parser(
        b'{"name":"P","supportedTypes":["t"],'
        b'"children":[{"name":"C","decorated":true}]}'
    )
    assert got.composite is False
    assert got.decorated is False
    assert got.supported_types == ["t"]
    assert len(got.children) == 1

    child = got.children[0]
    assert child.name == "C"
    assert child.decorated is True
    assert child.supported_types == []
    assert child.children == []


def test_decode_parser_preserves_order_at_depth():
    got = decode_parser(
        b'{"name":"root","children":['
        b'{"name":"a","children":[{"name":"a1"},{"name":"a2"},{"name":"a3"}]},'
        b'{"name":"b"}]}'
    )
    assert [p.name for p in got.walk()] == ["root", "a", "a1", "a2", "a3", "b"]


@pytest.mark.parametrize(
    "body",
    [
        b"invalid",
        b"",
        b'["test"]',
        b'"name"',
        b'{"name":1}',
        b'{"composite":"true"}',
        b'{"decorated":1}',
        b'{"supportedTypes":"text/plain"}',
        b'{"supportedTypes":["a", 2]}',
        b'{"children":{}}',
        b'{"children":["x"]}',
        b'{"children":[{"children":[{"composite":"no"}]}]}',
    ],
)
def test_decode_parser_rejects(body):
    with pytest.raises(DecodeError):
        decode_parser(body)


def test_decode_parser_error_names_path():
    with pytest.raises(DecodeError, match=r"\$\.children\[0\]\.children\[0\]\.composite"):
        decode_parser(b'{"children":[{"children":[{"composite":"no"}]}]}')


def test_decode_parser_deep_nesting_is_decode_error():
    depth = 5000
    body = ('{"children":[' * depth + "{}" + "]}" * depth).encode()
    with pytest.raises(DecodeError):
        decode_parser(body)


@pytest.mark.parametrize(
    ("body", "want"),
    [
        (b'{"name":"TestDetector"}', Detector(name="TestDetector")),
        (
            b"""{
                "name":"TestDetector",
                "children":[
                    {"name":"TestSubDetector1"},
                    {"name":"TestSubDetector2"}
                ]
            }""",
            Detector(
                name="TestDetector",
                children=[
                    Detector(name="TestSubDetector1"),
                    Detector(name="TestSubDetector2"),
                ],
            ),
        ),
        (
            b"""{
                "name":"TestDetector",
                "children":[
                    {
                        "name":"TestSubDetector",
                        "composite":false
                    }
                ],
                "composite":true}""",
            Detector(
                name="TestDetector",
                composite=True,
                children=[Detector(name="TestSubDetector")],
            ),
        ),
        # Parser-only fields are not part of a detector.
        (
            b'{"name":"D","decorated":"ignored","supportedTypes":7}',
            Detector(name="D"),
        ),
    ],
)
def test_decode_detector(body, want):
    assert decode_detector(body) == want


def test_decode_detector_walk_order():
    got = decode_detector(
        b'{"name":"Default","composite":true,"children":['
        b'{"name":"Mime","composite":true,"children":[{"name":"Magic"}]},'
        b'{"name":"Zip"}]}'
    )
    assert [(d.name, d.composite) for d in got.walk()] == [
        ("Default", True),
        ("Mime", True),
        ("Magic", False),
        ("Zip", False),
    ]


@pytest.mark.parametrize("body", [b"", b'["test"]', b'{"composite":1}'])
def test_decode_detector_rejects(body):
    with pytest.raises(DecodeError):
        decode_detector(body)


@pytest.mark.parametrize(
    ("body", "want"),
    [
        (b'{"empty-mime":{}}', {"empty-mime": MimeType()}),
        (
            b'{"alias-mime":{"alias":["alias1", "alias2"]}}',
            {"alias-mime": MimeType(alias=["alias1", "alias2"])},
        ),
        (
            b'{"empty-mime":{},"super-mime":{"supertype":"super-mime"}}',
            {"empty-mime": MimeType(), "super-mime": MimeType(super_type="super-mime")},
        ),
        (
            b'{"super-alias":{"alias":["alias1", "alias2"], "supertype": "super-mime"}}',
            {
                "super-alias": MimeType(
                    alias=["alias1", "alias2"], super_type="super-mime"
                )
            },
        ),
        (b"{}", {}),
        (b'{"m":{"parser":"x.y.Z"}}', {"m": MimeType()}),
    ],
)
def test_decode_mime_types(body, want):
    assert decode_mime_types(body) == want


def test_decode_mime_types_alias_scenario():
    got = decode_mime_types(b'{"alias-mime":{"alias":["alias1","alias2"]}}')
    assert list(got) == ["alias-mime"]
    assert got["alias-mime"].alias == ["alias1", "alias2"]
    assert got["alias-mime"].super_type == ""


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b'["test"]',
        b'{"m":"text/plain"}',
        b'{"m":{"alias":"a"}}',
        b'{"m":{"alias":["a", null]}}',
        b'{"m":{"supertype":["a"]}}',
    ],
)
def test_decode_mime_types_rejects(body):
    with pytest.raises(DecodeError):
        decode_mime_types(body)
