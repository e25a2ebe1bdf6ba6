"""
Proxy fetcher.
Fetches remote pages through an ordered chain of pass-through proxies,
falling back to the next proxy whenever one fails.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import certifi
import requests

from . import config
from .exceptions import AllProxiesExhaustedError, MalformedResponseError
from .types import FetchResult

logger = logging.getLogger(__name__)

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


class ProxyFetcher:
    def __init__(
        self,
        proxies: Optional[List[Dict]] = None,
        timeout: Optional[float] = None,
        min_html_length: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the fetcher with its proxy chain and HTTP session."""
        self.proxies = list(proxies if proxies is not None else config.CORS_PROXIES)
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.min_html_length = min_html_length if min_html_length is not None else config.MIN_HTML_LENGTH
        self.session = session or self._init_session()

    def _init_session(self) -> requests.Session:
        """Initialize and configure the HTTP session."""
        session = requests.Session()
        session.headers.update(config.HEADERS)
        return session

    def build_proxy_url(self, url: str, index: int) -> str:
        """Build the request URL for ``url`` routed through the proxy at ``index``."""
        proxy = self.proxies[index]
        target = quote(url, safe=_URI_COMPONENT_SAFE) if proxy.get("encode", True) else url
        return proxy["url"] + target

    def _fetch_via_proxy(self, url: str, index: int) -> str:
        """Fetch ``url`` through a single proxy and return the page HTML."""
        proxy_url = self.build_proxy_url(url, index)
        logger.debug(f"Attempting to fetch {url} via proxy {index}: {proxy_url}")

        response = self.session.get(
            proxy_url,
            timeout=self.timeout,
            headers={"Accept": config.HEADERS["Accept"]},
            verify=certifi.where(),
        )
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(f"HTTP {response.status_code}", response=response)

        html = response.text or ""
        if "<" not in html or len(html) < self.min_html_length:
            raise MalformedResponseError("Invalid HTML response")
        return html

    def fetch(self, url: str, start_index: int = 0) -> FetchResult:
        """Fetch ``url`` trying each proxy from ``start_index`` onwards, one attempt each.

        Returns the HTML together with the index of the proxy that served it, so the
        caller can start from that proxy next time.

        Raises:
            AllProxiesExhaustedError: If no remaining proxy produced an HTML page.
        """
        last_error: Optional[Exception] = None

        for index in range(max(start_index, 0), len(self.proxies)):
            try:
                html = self._fetch_via_proxy(url, index)
            except (requests.RequestException, MalformedResponseError) as e:
                logger.warning(f"Proxy {index} failed for {url}: {e}")
                last_error = e
                continue

            logger.info(f"Fetched {url} via proxy {index} ({len(html)} chars)")
            return {"html": html, "proxy_index": index, "proxy_url": self.proxies[index]["url"]}

        logger.error(f"All proxies failed for {url}")
        raise AllProxiesExhaustedError(url, last_error)
