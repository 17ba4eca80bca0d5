"""HTML → PageRecord extractor.

No LLM calls. BeautifulSoup parsing of titles, headings, meta tags,
images, links, and keyword density.
"""

import re
from collections import Counter
from typing import Optional

from bs4 import BeautifulSoup

from seo_intel.models.crawl import Heading, ImageRef, KeywordDensity, PageRecord
from seo_intel.services.crawler.constants import (
    KEYWORD_MIN_COUNT,
    KEYWORD_MIN_WORD_LENGTH,
    MAX_KEYWORDS_PER_PAGE,
    MAX_PARAGRAPH_LENGTH,
    MAX_PARAGRAPHS_PER_PAGE,
    MIN_PARAGRAPH_LENGTH,
    RAW_TEXT_SAMPLE_LENGTH,
)
from seo_intel.services.crawler.url_utils import normalize_url, resolve_link, url_host

_HEADING_RE = re.compile(r"^h[1-6]$")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs={k: re.compile(f"^{v}$", re.I) for k, v in attrs.items()})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _clean_text(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def read_meta_robots(soup: BeautifulSoup) -> tuple[bool, bool]:
    """Return ``(noindex, nofollow)`` from robots / googlebot meta tags."""
    directives = " ".join(
        (tag.get("content") or "").lower()
        for tag in soup.find_all(
            "meta", attrs={"name": re.compile(r"^(robots|googlebot)$", re.I)}
        )
    )
    return "noindex" in directives, "nofollow" in directives


def extract_links(soup: BeautifulSoup, page_url: str) -> list[str]:
    """All resolvable http(s) links on the page, normalized, in order, unique."""
    seen: set[str] = set()
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        link = resolve_link(anchor.get("href"), page_url)
        if link and link not in seen:
            seen.add(link)
            links.append(link)
    return links


def extract_keyword_density(text: str) -> list[KeywordDensity]:
    """Top single-word keywords by density (words > 3 chars, seen >= 3 times)."""
    words = [
        w
        for w in _NON_WORD_RE.sub(" ", text.lower()).split()
        if len(w) >= KEYWORD_MIN_WORD_LENGTH
    ]
    total = len(words)
    if total == 0:
        return []

    counts = Counter(words)
    keywords = [
        KeywordDensity(keyword=word, count=count, density=count / total * 100)
        for word, count in counts.items()
        if count >= KEYWORD_MIN_COUNT
    ]
    keywords.sort(key=lambda kw: kw.density, reverse=True)
    return keywords[:MAX_KEYWORDS_PER_PAGE]


class PageSignalExtractor:
    """Turns raw HTML into a validated, immutable ``PageRecord``."""

    def extract(self, html: str, url: str) -> PageRecord:
        soup = parse_html(html)
        return self.extract_from_soup(soup, url)

    def extract_from_soup(self, soup: BeautifulSoup, url: str) -> PageRecord:
        page_url = normalize_url(url)

        title_tag = soup.find("title")
        title = _clean_text(title_tag.get_text()) if title_tag else ""

        meta_description = _meta_content(soup, name="description") or _meta_content(
            soup, property="og:description"
        )
        meta_robots = _meta_content(soup, name="robots")

        canonical_tag = soup.find("link", rel="canonical")
        canonical = canonical_tag.get("href") if canonical_tag else None
        has_structured_data = (
            soup.find("script", attrs={"type": "application/ld+json"}) is not None
        )

        headings = [
            Heading(level=int(tag.name[1]), text=text)
            for tag in soup.find_all(_HEADING_RE)
            if (text := _clean_text(tag.get_text()))
        ]

        images = [
            ImageRef(src=src, alt=img.get("alt"))
            for img in soup.find_all("img")
            if (src := img.get("src") or img.get("data-src"))
        ]

        paragraphs: list[str] = []
        for p in soup.find_all("p"):
            text = _clean_text(p.get_text())
            if len(text) > MIN_PARAGRAPH_LENGTH:
                paragraphs.append(text[:MAX_PARAGRAPH_LENGTH])
            if len(paragraphs) >= MAX_PARAGRAPHS_PER_PAGE:
                break

        host = url_host(page_url)
        internal_links = [
            link
            for link in extract_links(soup, page_url)
            if url_host(link) == host and link != page_url
        ]

        for tag in soup(["script", "style", "noscript", "template"]):
            tag.decompose()
        body = soup.body or soup
        body_text = _clean_text(body.get_text(" "))

        return PageRecord(
            url=page_url,
            title=title or None,
            meta_description=meta_description,
            headings=tuple(headings),
            images=tuple(images),
            paragraphs=tuple(paragraphs),
            word_count=len(body_text.split()),
            keyword_density=tuple(extract_keyword_density(body_text)),
            internal_links=tuple(internal_links),
            raw_text_sample=body_text[:RAW_TEXT_SAMPLE_LENGTH],
            meta_robots=meta_robots,
            canonical=canonical,
            has_structured_data=has_structured_data,
        )
