from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from tqdm import tqdm

from .client import Client
from .convert.html_to_md import extract_title, html_to_markdown
from .errors import TikaError
from .manifest import ExtractionManifest, relpath_posix, utc_iso
from .urls import safe_filename_piece

logger = logging.getLogger(__name__)


def _page_key(rel_source: str) -> str:
    return hashlib.sha256(rel_source.encode("utf-8")).hexdigest()[:12]


def iter_documents(
    in_dir: Path, pattern: str = "*", *, exclude: Path | None = None
) -> list[Path]:
    """Files under ``in_dir`` matching ``pattern``, hidden paths excluded."""
    files: list[Path] = []
    for path in sorted(in_dir.rglob(pattern)):
        if not path.is_file():
            continue
        rel = path.relative_to(in_dir)
        if any(part.startswith(".") for part in rel.parts):
            continue
        if exclude is not None and exclude in path.parents:
            continue
        files.append(path)
    return files


def extract_document(client: Client, path: Path) -> tuple[str, str, str]:
    """Return ``(mime_type, title, xhtml)`` for one file."""
    with path.open("rb") as fh:
        mime_type = client.detect(fh).strip()
    with path.open("rb") as fh:
        xhtml = client.parse(fh, headers={"Accept": "text/html"})
    return mime_type, extract_title(xhtml), xhtml


def extract_directory(
    client: Client,
    in_dir: Path,
    out_dir: Path,
    *,
    pattern: str = "*",
    progress: bool = True,
) -> dict:
    in_dir = in_dir.resolve()
    out_dir = out_dir.resolve()
    if not in_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {in_dir}")

    pages_dir = out_dir / "pages"
    pages_dir.mkdir(parents=True, exist_ok=True)
    manifest = ExtractionManifest(out_dir)

    started_at = utc_iso()
    documents = iter_documents(in_dir, pattern, exclude=out_dir)
    extracted = 0
    failed = 0

    for path in tqdm(documents, desc="Tika extract", unit="doc", disable=not progress):
        rel_source = relpath_posix(path, in_dir)
        try:
            mime_type, title, xhtml = extract_document(client, path)
            md_text = html_to_markdown(xhtml, source=rel_source)

            page_name = f"{safe_filename_piece(path.stem)}--{_page_key(rel_source)}.md"
            page_path = pages_dir / page_name
            page_path.write_text(md_text, encoding="utf-8", newline="\n")
        except (TikaError, OSError) as e:
            logger.warning("extraction failed for %s: %s", rel_source, e)
            manifest.record_error(source=rel_source, error=e)
            failed += 1
            continue

        manifest.record_extracted(
            source=rel_source,
            page=relpath_posix(page_path, out_dir),
            mime_type=mime_type,
            title=title,
        )
        extracted += 1

    summary = {
        "started_at": started_at,
        "finished_at": utc_iso(),
        "service": client.base_url,
        "documents": len(documents),
        "extracted": extracted,
        "failed": failed,
        "paths": {
            "pages_dir": relpath_posix(pages_dir, out_dir),
            "manifest_jsonl": "manifest.jsonl",
        },
    }
    manifest.write_summary(summary)
    return summary
