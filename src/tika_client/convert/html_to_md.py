from __future__ import annotations

from bs4 import BeautifulSoup
from markdownify import markdownify as md


def _clean_soup_inplace(soup: BeautifulSoup) -> None:
    for tag_name in ["script", "style", "noscript"]:
        for t in soup.find_all(tag_name):
            t.decompose()


def _page_divs(body) -> list:
    # PDF (and some presentation) parsers wrap every page in <div class="page">.
    return [
        div
        for div in body.find_all("div")
        if "page" in (div.get("class") or [])
    ]


def extract_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(" ", strip=True)
    meta = soup.find("meta", attrs={"name": "dc:title"})
    if meta and str(meta.get("content") or "").strip():
        return str(meta.get("content")).strip()
    h1 = soup.find("h1")
    if h1 and h1.get_text(strip=True):
        return h1.get_text(" ", strip=True)
    return "Untitled"


def html_to_markdown(html: str, *, source: str) -> str:
    """Render Tika's XHTML output as Markdown.

    Pages are emitted as separate sections divided by a horizontal rule.
    """

    soup = BeautifulSoup(html, "html.parser")
    _clean_soup_inplace(soup)
    body = soup.body or soup

    pages = _page_divs(body)
    if pages:
        parts = [md(str(page), heading_style="ATX").strip() for page in pages]
        markdown = "\n\n---\n\n".join(p for p in parts if p)
    else:
        markdown = md(str(body), heading_style="ATX").strip()

    markdown = markdown + "\n"
    return f"Source: {source}\n\n" + markdown
