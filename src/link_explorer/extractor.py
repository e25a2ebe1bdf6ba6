"""
Content extraction.
Finds the main content region of a page and pulls out its outbound links,
skipping navigation, table-of-contents, footer and similar noise.
"""

import copy
import logging
from typing import Dict, Iterable, List, Optional, Pattern, Union

import soupsieve
from bs4 import BeautifulSoup, Tag

from . import config
from .types import ExtractionResult, LinkRecord
from .utils import clean_link_text, get_domain, normalize_url, should_exclude_url

logger = logging.getLogger(__name__)


class ContentExtractor:
    def __init__(
        self,
        max_links: Optional[int] = None,
        content_selectors: Optional[Iterable[str]] = None,
        exclude_selectors: Optional[Iterable[str]] = None,
        exclude_patterns: Optional[Iterable[Union[str, Pattern]]] = None,
    ) -> None:
        self.max_links = max_links if max_links is not None else config.MAX_LINKS_PER_PAGE
        self.content_selectors = list(
            content_selectors if content_selectors is not None else config.MAIN_CONTENT_SELECTORS
        )
        self.exclude_selectors = list(
            exclude_selectors if exclude_selectors is not None else config.EXCLUDE_SELECTORS
        )
        self.exclude_patterns = list(
            exclude_patterns if exclude_patterns is not None else config.EXCLUDE_LINK_PATTERNS
        )

    def _parse_html(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    def find_main_content(self, soup: BeautifulSoup) -> Tag:
        """Return the first element matching the content selectors, else the body."""
        for selector in self.content_selectors:
            try:
                element = soup.select_one(selector)
            except soupsieve.SelectorSyntaxError as e:
                logger.warning(f"Skipping invalid content selector {selector!r}: {e}")
                continue
            if element is not None:
                logger.debug(f"Main content found with selector {selector!r}")
                return element

        return soup.body or soup

    def remove_excluded_elements(self, container: Tag) -> Tag:
        """Return a copy of ``container`` with every excluded region removed."""
        clone = copy.copy(container)

        for selector in self.exclude_selectors:
            try:
                elements = clone.select(selector)
            except soupsieve.SelectorSyntaxError as e:
                logger.warning(f"Skipping invalid exclude selector {selector!r}: {e}")
                continue
            for element in elements:
                element.decompose()

        return clone

    def extract(self, html: str, source_url: str) -> ExtractionResult:
        """Extract the ordered, deduplicated content links of a page."""
        soup = self._parse_html(html)
        content = self.remove_excluded_elements(self.find_main_content(soup))

        source_domain = get_domain(source_url)
        normalized_source = normalize_url(source_url) or source_url

        title = ""
        if soup.title:
            title = soup.title.get_text().strip()
        title = title or source_domain or source_url

        # Insertion order of the dict is first-seen order
        links: Dict[str, LinkRecord] = {}
        for anchor in content.find_all("a", href=True):
            href = anchor["href"].strip()
            if should_exclude_url(href, self.exclude_patterns):
                continue

            url = normalize_url(href, source_url)
            if not url or url == normalized_source or url in links:
                continue

            domain = get_domain(url)
            links[url] = {
                "url": url,
                "text": clean_link_text(anchor.get_text(), url),
                "is_external": domain != source_domain,
                "domain": domain,
            }

        total_found = len(links)
        kept: List[LinkRecord] = list(links.values())[: self.max_links]
        logger.debug(f"Extracted {len(kept)} of {total_found} links from {source_url}")

        return {
            "title": title,
            "url": source_url,
            "links": kept,
            "total_found": total_found,
            "was_truncated": total_found > self.max_links,
        }


def extract_links(html: str, source_url: str) -> ExtractionResult:
    """Extract links with the default configuration."""
    return ContentExtractor().extract(html, source_url)
