"""
Signal extractor: raw markup -> PageSignals.

Tags and attributes are read with BeautifulSoup's html.parser instead of
ad hoc patterns, so attribute order, quoting style and self-closing tags
do not matter. Extraction semantics:

- singular tags (<title>, description/keywords <meta>): first match wins
- repeated tags (<h1>-<h3>, <img>, <a href>): every occurrence, document order
- word count: every tag stripped from the *whole* document (title, script
  and style bodies included) then split on whitespace. This over-counts
  relative to visible text.

extract() is total: any markup, including "", yields a PageSignals.
"""

from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup  # type: ignore
from loguru import logger

from core.data_models import (
    ContentStats,
    HeadingMap,
    ImageStats,
    LinkStats,
    PageSignals,
    ResourceStats,
)
from utils.text_utils import count_words, strip_tags

STRUCTURED_DATA_MARKER = "application/ld+json"
OPEN_GRAPH_MARKER = "og:"
TWITTER_CARD_MARKER = "twitter:"


def _domain_of(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def _first_text(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find(name)
    if tag is None:
        return None
    text = tag.get_text()
    if not text:
        return None
    # a whitespace-only element is present, just blank
    return text.strip() or text


def _meta_content(soup: BeautifulSoup, meta_name: str) -> Optional[str]:
    """Content of the first <meta name=...> whose name matches case-insensitively."""
    for tag in soup.find_all("meta"):
        name = tag.get("name")
        if isinstance(name, str) and name.strip().lower() == meta_name:
            content = (tag.get("content") or "").strip()
            return content or None
    return None


def _split_keywords(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _headings(soup: BeautifulSoup, level: str) -> List[str]:
    return [h.get_text().strip() for h in soup.find_all(level)]


def _alt_rate(total: int, without_alt: int) -> int:
    if total == 0:
        return 0
    # round half up, not banker's rounding
    return int((total - without_alt) / total * 100 + 0.5)


def _image_stats(soup: BeautifulSoup) -> ImageStats:
    images = soup.find_all("img")
    without_alt = sum(1 for img in images if not img.get("alt"))
    return ImageStats(
        total=len(images),
        without_alt=without_alt,
        alt_optimization_rate=_alt_rate(len(images), without_alt),
    )


def classify_href(href: str, domain: str) -> Optional[str]:
    """
    "internal", "external" or None.

    The internal test runs first, so an absolute link back to the analyzed
    host is internal. Anything else (mailto:, tel:, #top, relative paths
    without a leading slash) is neither.
    """
    if href.startswith("/") or (domain and domain in href):
        return "internal"
    if href.startswith("http") and not (domain and domain in href):
        return "external"
    return None


def _link_stats(soup: BeautifulSoup, domain: str) -> LinkStats:
    internal = external = total = 0
    for anchor in soup.find_all("a"):
        href = anchor.get("href")
        if not isinstance(href, str) or not href:
            continue
        total += 1
        kind = classify_href(href, domain)
        if kind == "internal":
            internal += 1
        elif kind == "external":
            external += 1
    return LinkStats(internal=internal, external=external, total=total)


def _resource_stats(soup: BeautifulSoup) -> ResourceStats:
    scripts = sum(1 for tag in soup.find_all("script") if tag.has_attr("src"))
    stylesheets = 0
    for tag in soup.find_all("link"):
        rel = tag.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if any(value.lower() == "stylesheet" for value in rel):
            stylesheets += 1
    return ResourceStats(scripts=scripts, stylesheets=stylesheets)


def extract(markup: Optional[str], url: str) -> PageSignals:
    """Parse markup fetched from ``url`` into a PageSignals record."""
    html = markup or ""
    domain = _domain_of(url)
    soup = BeautifulSoup(html, "html.parser")

    signals = PageSignals(
        url=url,
        domain=domain,
        title=_first_text(soup, "title"),
        description=_meta_content(soup, "description"),
        keywords=_split_keywords(_meta_content(soup, "keywords")),
        headings=HeadingMap(
            h1=_headings(soup, "h1"),
            h2=_headings(soup, "h2"),
            h3=_headings(soup, "h3"),
        ),
        images=_image_stats(soup),
        links=_link_stats(soup, domain),
        content=ContentStats(
            word_count=count_words(strip_tags(html)),
            has_structured_data=STRUCTURED_DATA_MARKER in html,
            has_open_graph=OPEN_GRAPH_MARKER in html,
            has_twitter_card=TWITTER_CARD_MARKER in html,
        ),
        resources=_resource_stats(soup),
    )

    logger.debug(
        "signal_extractor: url={} title={!r} h1={} images={}/{} links={}",
        url,
        signals.title,
        len(signals.headings.h1),
        signals.images.without_alt,
        signals.images.total,
        signals.links.total,
    )
    return signals
