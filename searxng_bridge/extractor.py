"""Reduce a fetched HTML page to compact markdown.

The page is narrowed to its most likely content region before conversion so
that navigation and footers do not eat into the size budget.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import html2text
from bs4 import BeautifulSoup, Tag

MAX_CONTENT_CHARS = 15000
TRUNCATION_MARKER = "...\n\n(Content truncated because too long)"
EMPTY_PAGE_MESSAGE = "The page was loaded but no textual content could be extracted."


@dataclass(frozen=True)
class RegionRule:
    selector: str
    confident: bool = False


# Tried in order. A confident match ends the scan; otherwise the first match
# found is kept and later rules cannot replace it.
REGION_RULES = (
    RegionRule("article", confident=True),
    RegionRule("main", confident=True),
    RegionRule(".content"),
    RegionRule("#content"),
    RegionRule("body"),
)


def select_region(soup: BeautifulSoup) -> Tuple[Optional[Tag], Optional[str]]:
    """Return the chosen element and the selector that matched it."""
    chosen: Optional[Tag] = None
    matched_by: Optional[str] = None
    for rule in REGION_RULES:
        element = soup.select_one(rule.selector)
        if element is None:
            continue
        if chosen is None:
            chosen = element
            matched_by = rule.selector
        if rule.confident:
            break
    return chosen, matched_by


def html_to_markdown(html: str) -> str:
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ignore_images = False
    converter.ignore_links = False
    return converter.handle(html)


def truncate(text: str, max_chars: int = MAX_CONTENT_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def reduce_html(html: str, max_chars: int = MAX_CONTENT_CHARS) -> str:
    soup = BeautifulSoup(html, "html.parser")
    region, _ = select_region(soup)
    fragment = str(region) if region is not None else html
    cleaned = html_to_markdown(fragment).strip()
    if not cleaned:
        return EMPTY_PAGE_MESSAGE
    return truncate(cleaned, max_chars)
