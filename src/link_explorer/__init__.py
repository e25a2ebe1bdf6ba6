"""
Progressive web-page link explorer.
"""

from . import config
from . import utils
from .explorer import LinkExplorer, ExplorerEvent, SessionState
from .extractor import ContentExtractor, extract_links
from .fetcher import ProxyFetcher

__all__ = [
    "config",
    "utils",
    "LinkExplorer",
    "ExplorerEvent",
    "SessionState",
    "ContentExtractor",
    "extract_links",
    "ProxyFetcher",
]
