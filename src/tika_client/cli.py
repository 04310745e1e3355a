from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from .client import Client
from .config import ClientConfig, build_client
from .convert.html_to_md import html_to_markdown
from .errors import TikaError
from .extract import extract_directory
from .http_client import Transport
from .log import setup_logging
from .models import RMETA_CONTENT_TYPES, Translator
from .server import download_server


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _add_file_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", type=Path, help="Document to send to the server")


def _translator(value: str) -> str:
    # Accept enum member names (google, moses, ...) as well as class names.
    try:
        return Translator[value.upper()].value
    except KeyError:
        return value


def _build_parser(config: ClientConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tika-client")
    parser.add_argument(
        "--url",
        default=config.base_url,
        help="Tika server URL (env TIKA_URL, default %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.timeout_s,
        help="Request timeout in seconds (env TIKA_TIMEOUT)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("TIKA_LOG_LEVEL", "WARNING"),
        help="DEBUG, INFO, WARNING or ERROR (env TIKA_LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    parse_p = sub.add_parser("parse", help="Extract document text")
    _add_file_arg(parse_p)
    fmt = parse_p.add_mutually_exclusive_group()
    fmt.add_argument("--html", action="store_true", help="Print Tika XHTML")
    fmt.add_argument(
        "--markdown", action="store_true", help="Convert Tika XHTML to Markdown"
    )

    rparse_p = sub.add_parser(
        "parse-recursive",
        help="Text of the document and each embedded document (JSON list)",
    )
    _add_file_arg(rparse_p)

    meta_p = sub.add_parser("meta", help="Document metadata")
    _add_file_arg(meta_p)
    meta_p.add_argument("--field", default=None, help="Only this metadata field")
    meta_p.add_argument(
        "--recursive",
        action="store_true",
        help="Metadata of embedded documents too (JSON)",
    )
    meta_p.add_argument(
        "--content-type",
        choices=RMETA_CONTENT_TYPES,
        default="text",
        help="Rendering of X-TIKA:content with --recursive",
    )

    detect_p = sub.add_parser("detect", help="Detect the MIME type")
    _add_file_arg(detect_p)

    lang_p = sub.add_parser("language", help="Detect the document language")
    lang_p.add_argument("file", type=Path, nargs="?", default=None)
    lang_p.add_argument("--text", default=None, help="Classify this text instead")

    tr_p = sub.add_parser("translate", help="Translate a document")
    _add_file_arg(tr_p)
    tr_p.add_argument(
        "--translator",
        type=_translator,
        default=Translator.GOOGLE.value,
        help="Translator name (google, microsoft, ...) or class name",
    )
    tr_p.add_argument("--src", required=True, help="Source language code")
    tr_p.add_argument("--dst", required=True, help="Target language code")

    sub.add_parser("version", help="Server version")
    sub.add_parser("parsers", help="Parser tree (JSON)")
    sub.add_parser("detectors", help="Detector tree (JSON)")
    sub.add_parser("mime-types", help="MIME type registry (JSON)")

    extract_p = sub.add_parser(
        "extract",
        help="Convert every file under a directory to Markdown",
    )
    extract_p.add_argument("--in", dest="in_dir", type=Path, required=True)
    extract_p.add_argument("--out", dest="out_dir", type=Path, required=True)
    extract_p.add_argument("--pattern", default="*", help="Glob, default %(default)s")
    extract_p.add_argument("--no-progress", action="store_true")

    dl_p = sub.add_parser("download-server", help="Download a tika-server jar")
    dl_p.add_argument("--version", dest="server_version", required=True)
    dl_p.add_argument("--out", type=Path, required=True)
    dl_p.add_argument("--no-verify", action="store_true")
    dl_p.add_argument("--no-progress", action="store_true")

    return parser


def _run(args: argparse.Namespace, client: Client) -> int:
    if args.cmd == "parse":
        with args.file.open("rb") as fh:
            if args.html or args.markdown:
                xhtml = client.parse(fh, headers={"Accept": "text/html"})
            else:
                print(client.parse(fh), end="")
                return 0
        if args.markdown:
            print(html_to_markdown(xhtml, source=str(args.file)), end="")
        else:
            print(xhtml, end="")
        return 0

    if args.cmd == "parse-recursive":
        with args.file.open("rb") as fh:
            _print_json(client.parse_recursive(fh))
        return 0

    if args.cmd == "meta":
        with args.file.open("rb") as fh:
            if args.recursive:
                _print_json(client.meta_recursive(fh, args.content_type))
            elif args.field:
                print(client.meta_field(fh, args.field), end="")
            else:
                print(client.meta(fh), end="")
        return 0

    if args.cmd == "detect":
        with args.file.open("rb") as fh:
            print(client.detect(fh).strip())
        return 0

    if args.cmd == "language":
        if (args.text is None) == (args.file is None):
            raise ValueError("language needs exactly one of FILE or --text")
        if args.text is not None:
            print(client.language_string(args.text).strip())
        else:
            with args.file.open("rb") as fh:
                print(client.language(fh).strip())
        return 0

    if args.cmd == "translate":
        with args.file.open("rb") as fh:
            print(client.translate(fh, args.translator, args.src, args.dst), end="")
        return 0

    if args.cmd == "version":
        print(client.version().strip())
        return 0

    if args.cmd == "parsers":
        _print_json(asdict(client.parsers()))
        return 0

    if args.cmd == "detectors":
        _print_json(asdict(client.detectors()))
        return 0

    if args.cmd == "mime-types":
        _print_json({k: asdict(v) for k, v in client.mime_types().items()})
        return 0

    if args.cmd == "extract":
        summary = extract_directory(
            client,
            args.in_dir,
            args.out_dir,
            pattern=args.pattern,
            progress=not args.no_progress,
        )
        _print_json(summary)
        return 0 if summary["failed"] == 0 else 1

    if args.cmd == "download-server":
        path = download_server(
            args.server_version,
            args.out,
            verify=not args.no_verify,
            progress=not args.no_progress,
        )
        print(str(path))
        return 0

    raise AssertionError(f"unhandled command {args.cmd!r}")


def main(argv: list[str] | None = None, *, transport: Transport | None = None) -> int:
    try:
        config = ClientConfig.from_env()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    args = _build_parser(config).parse_args(argv)
    setup_logging(args.log_level)

    timeout_s = args.timeout if args.timeout else None
    config = ClientConfig(base_url=args.url, timeout_s=timeout_s)
    if transport is None:
        client = build_client(config)
    else:
        client = Client(transport, config.base_url, headers=config.headers)

    try:
        return _run(args, client)
    except (TikaError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
