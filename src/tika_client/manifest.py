from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any


def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def relpath_posix(path: Path, base_dir: Path) -> str:
    return path.relative_to(base_dir).as_posix()


@dataclass
class ExtractionManifest:
    """Append-only record of a batch extraction.

    ``manifest.jsonl`` gets one event per processed document;
    ``manifest.json`` holds the run summary.
    """

    out_dir: Path

    def __post_init__(self) -> None:
        self.jsonl_path = self.out_dir / "manifest.jsonl"
        self.json_path = self.out_dir / "manifest.json"

    def append(self, event: dict[str, Any]) -> None:
        event = dict(event)
        event.setdefault("at", utc_iso())
        self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
        with self.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")

    def record_extracted(
        self, *, source: str, page: str, mime_type: str, title: str
    ) -> None:
        self.append(
            {
                "kind": "extracted",
                "source": source,
                "mime_type": mime_type,
                "title": title,
                "paths": {"page_md": page},
            }
        )

    def record_error(self, *, source: str, error: Exception) -> None:
        self.append(
            {
                "kind": "error",
                "source": source,
                "error_type": type(error).__name__,
                "error": str(error),
            }
        )

    def events(self) -> list[dict[str, Any]]:
        if not self.jsonl_path.exists():
            return []
        out: list[dict[str, Any]] = []
        with self.jsonl_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    out.append(json.loads(line))
        return out

    def write_summary(self, summary: dict[str, Any]) -> None:
        self.json_path.write_text(
            json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8"
        )
