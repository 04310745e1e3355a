from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

# Key under which the recursive metadata endpoint reports extracted text.
XTIKA_CONTENT = "X-TIKA:content"

RMETA_CONTENT_TYPES = ("text", "html", "xml", "ignore")


class Translator(str, Enum):
    GOOGLE = "org.apache.tika.language.translate.GoogleTranslator"
    MICROSOFT = "org.apache.tika.language.translate.MicrosoftTranslator"
    LINGO24 = "org.apache.tika.language.translate.Lingo24Translator"
    MOSES = "org.apache.tika.language.translate.MosesTranslator"
    JOSHUA = "org.apache.tika.language.translate.JoshuaNetworkTranslator"
    YANDEX = "org.apache.tika.language.translate.YandexTranslator"


@dataclass(frozen=True)
class Parser:
    name: str = ""
    composite: bool = False
    decorated: bool = False
    supported_types: list[str] = field(default_factory=list)
    children: list[Parser] = field(default_factory=list)

    def walk(self) -> Iterator[Parser]:
        """Yield this parser and every descendant, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class Detector:
    name: str = ""
    composite: bool = False
    children: list[Detector] = field(default_factory=list)

    def walk(self) -> Iterator[Detector]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class MimeType:
    super_type: str = ""
    alias: list[str] = field(default_factory=list)
