"""Shared fakes for the test suite."""

import threading
from typing import Dict, Iterable, List, Optional

from link_explorer.exceptions import AllProxiesExhaustedError

PADDING = "<!-- " + "padding " * 20 + "-->"


def make_page(title: str, hrefs: Iterable[str], extra_body: str = "") -> str:
    """Build an HTML page whose main content holds one anchor per href."""
    anchors = "\n".join(f'<a href="{href}">Link {index}</a>' for index, href in enumerate(hrefs))
    return f"""<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body>
  {extra_body}
  <main>
    {anchors}
  </main>
  {PADDING}
</body>
</html>
"""


class FakeFetcher:
    """Stands in for ProxyFetcher, serving pages from a dict."""

    def __init__(self, pages: Dict[str, str], proxy_index: int = 0):
        self.pages = pages
        self.proxy_index = proxy_index
        self.calls: List[tuple] = []
        self.gates: Dict[str, threading.Event] = {}

    def block(self, url: str) -> threading.Event:
        """Make fetches of ``url`` wait until the returned event is set."""
        gate = threading.Event()
        self.gates[url] = gate
        return gate

    def fetch(self, url: str, start_index: int = 0) -> dict:
        self.calls.append((url, start_index))
        gate: Optional[threading.Event] = self.gates.get(url)
        if gate is not None:
            gate.wait(5)
        if url not in self.pages:
            raise AllProxiesExhaustedError(url, ConnectionError("unreachable"))
        return {"html": self.pages[url], "proxy_index": self.proxy_index, "proxy_url": "https://proxy.test/?url="}

    def fetched_urls(self) -> List[str]:
        return [url for url, _ in self.calls]
