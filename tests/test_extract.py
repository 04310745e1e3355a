from __future__ import annotations

import json

from tika_client import CallResult, Client
from tika_client.extract import extract_directory, iter_documents
from tika_client.manifest import ExtractionManifest

XHTML = (
    "<html><head><title>{title}</title></head>"
    "<body><p>{text}</p></body></html>"
)


class RoutingTransport:
    """Detects every file as text/plain and echoes its bytes back as XHTML."""

    def __init__(self, fail_on: bytes | None = None):
        self.fail_on = fail_on
        self.paths: list[str] = []

    def do(self, method, url, body, headers):
        data = body.read() if hasattr(body, "read") else body
        path = url.split("9998", 1)[1]
        self.paths.append(path)
        if self.fail_on is not None and data == self.fail_on:
            return CallResult(status_code=422, body=b"")
        if path == "/detect/stream":
            return CallResult(status_code=200, body=b"text/plain\n")
        if path == "/tika":
            assert headers["Accept"] == "text/html"
            text = data.decode("utf-8")
            html = XHTML.format(title=text.upper(), text=text)
            return CallResult(status_code=200, body=html.encode("utf-8"))
        return CallResult(status_code=404, body=b"")


def _client(transport) -> Client:
    return Client(transport, "http://tika.test:9998")


def test_iter_documents_skips_hidden_and_excluded(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / ".hidden").write_text("h")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_text("c")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_text("b")
    (tmp_path / "out").mkdir()
    (tmp_path / "out" / "old.md").write_text("o")

    got = iter_documents(tmp_path, exclude=tmp_path / "out")
    assert [p.relative_to(tmp_path).as_posix() for p in got] == ["a.txt", "sub/b.txt"]


def test_extract_directory(tmp_path):
    in_dir = tmp_path / "docs"
    (in_dir / "sub").mkdir(parents=True)
    (in_dir / "alpha.txt").write_bytes(b"alpha")
    (in_dir / "sub" / "beta gamma.txt").write_bytes(b"beta")
    out_dir = tmp_path / "out"

    summary = extract_directory(
        _client(RoutingTransport()), in_dir, out_dir, progress=False
    )

    assert summary["documents"] == 2
    assert summary["extracted"] == 2
    assert summary["failed"] == 0
    assert summary["service"] == "http://tika.test:9998"
    assert json.loads((out_dir / "manifest.json").read_text()) == summary

    events = ExtractionManifest(out_dir).events()
    assert [e["kind"] for e in events] == ["extracted", "extracted"]
    assert [e["source"] for e in events] == ["alpha.txt", "sub/beta gamma.txt"]
    assert events[0]["mime_type"] == "text/plain"
    assert events[0]["title"] == "ALPHA"

    page = out_dir / events[1]["paths"]["page_md"]
    assert page.name.startswith("beta-gamma--")
    text = page.read_text()
    assert text.startswith("Source: sub/beta gamma.txt\n\n")
    assert "beta" in text


def test_extract_directory_records_failures(tmp_path):
    in_dir = tmp_path / "docs"
    in_dir.mkdir()
    (in_dir / "good.txt").write_bytes(b"good")
    (in_dir / "bad.txt").write_bytes(b"bad")

    summary = extract_directory(
        _client(RoutingTransport(fail_on=b"bad")),
        in_dir,
        tmp_path / "out",
        progress=False,
    )

    assert summary["extracted"] == 1
    assert summary["failed"] == 1
    events = ExtractionManifest(tmp_path / "out").events()
    errors = [e for e in events if e["kind"] == "error"]
    assert len(errors) == 1
    assert errors[0]["source"] == "bad.txt"
    assert errors[0]["error_type"] == "StatusError"
    assert "422" in errors[0]["error"]


def test_manifest_events_empty_before_first_append(tmp_path):
    assert ExtractionManifest(tmp_path / "out").events() == []
