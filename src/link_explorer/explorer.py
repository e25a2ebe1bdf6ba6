"""
Session controller for progressive link exploration.
Starts an exploration from a seed URL and expands nodes on demand,
one fetch per node, notifying subscribers of every state change.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

from .exceptions import ExplorerError, InvalidUrlError
from .extractor import ContentExtractor
from .fetcher import ProxyFetcher
from .stats import compute_stats
from .tree import Node, TreeStore
from .types import ExtractionResult, Stats
from .utils import normalize_url

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ExplorerEvent(str, Enum):
    EXPLORING = "exploring"
    READY = "ready"
    ERROR = "error"
    NODE_LOADING = "node-loading"
    NODE_LOADED = "node-loaded"
    NODE_ERROR = "node-error"
    EXPANDED = "expanded"
    COLLAPSED = "collapsed"
    CLEARED = "cleared"


Listener = Callable[[ExplorerEvent, Dict[str, Any]], None]


@dataclass
class Session:
    """Everything that belongs to one exploration; replaced wholesale on reset."""

    generation: int = 0
    tree: TreeStore = field(default_factory=TreeStore)
    expanded: Set[int] = field(default_factory=set)
    discovered: Set[str] = field(default_factory=set)
    proxy_index: int = 0
    state: SessionState = SessionState.IDLE
    error: Optional[str] = None

    @property
    def root(self) -> Optional[Node]:
        return self.tree.root


class LinkExplorer:
    def __init__(
        self,
        fetcher: Optional[ProxyFetcher] = None,
        extractor: Optional[ContentExtractor] = None,
    ) -> None:
        """Initialize the explorer with an idle session."""
        self.fetcher = fetcher or ProxyFetcher()
        self.extractor = extractor or ContentExtractor()
        self.session = Session()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Listener:
        """Register ``listener(event, payload)`` for every state change."""
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: ExplorerEvent, **payload: Any) -> None:
        logger.debug(f"Event {event.value}: {payload}")
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                logger.exception(f"Listener failed while handling {event.value}")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def root(self) -> Optional[Node]:
        return self.session.root

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def last_error(self) -> Optional[str]:
        return self.session.error

    @property
    def expanded(self) -> FrozenSet[int]:
        return frozenset(self.session.expanded)

    def is_expanded(self, node_id: int) -> bool:
        return node_id in self.session.expanded

    def find_node(self, node_id: int) -> Optional[Node]:
        return self.session.tree.find_node(node_id)

    def stats(self) -> Stats:
        return compute_stats(self.session.root, self.session.expanded, self.session.discovered)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> Session:
        self.session = Session(generation=self.session.generation + 1)
        return self.session

    def _is_current(self, session: Session) -> bool:
        return session.generation == self.session.generation

    async def _fetch_links(self, session: Session, url: str) -> ExtractionResult:
        """Fetch ``url`` through the proxy chain and extract its links."""
        result = await asyncio.to_thread(self.fetcher.fetch, url, session.proxy_index)
        logger.debug(f"Fetched {url} through {result['proxy_url']}")
        if self._is_current(session):
            session.proxy_index = result["proxy_index"]
        return self.extractor.extract(result["html"], url)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def explore(self, raw_url: str) -> Optional[Node]:
        """Start a fresh exploration rooted at ``raw_url``.

        Returns the root node with its children already loaded, or None if the
        page could not be fetched (see ``last_error``) or a newer exploration
        superseded this one.

        Raises:
            InvalidUrlError: If ``raw_url`` is not an http(s) URL. The current
                session is left untouched.
        """
        url = normalize_url(raw_url)
        if not url:
            logger.error(f"Invalid URL format: {raw_url}")
            raise InvalidUrlError(raw_url)

        session = self._reset()
        session.state = SessionState.LOADING
        logger.info(f"🔍 Exploring {url}")
        self._emit(ExplorerEvent.EXPLORING, url=url)

        try:
            extraction = await self._fetch_links(session, url)
        except Exception as e:
            if not self._is_current(session):
                logger.info(f"Ignoring failure of superseded exploration of {url}")
                return None
            if not isinstance(e, ExplorerError):
                logger.exception(f"Unexpected error exploring {url}")
            else:
                logger.error(f"Exploration of {url} failed: {e}")
            session.state = SessionState.ERROR
            session.error = str(e) or "Failed to fetch the page"
            self._emit(ExplorerEvent.ERROR, url=url, error=session.error)
            return None

        if not self._is_current(session):
            logger.info(f"Discarding result of superseded exploration of {url}")
            return None

        root = session.tree.create_node(url, extraction["title"], is_root=True)
        session.tree.set_children(root, extraction)
        session.discovered.add(url)
        session.discovered.update(link["url"] for link in extraction["links"])
        session.expanded.add(root.id)
        session.state = SessionState.READY

        logger.info(f"✅ Found {len(root.children)} links on {url}")
        self._emit(ExplorerEvent.READY, root=root, stats=self.stats())
        return root

    async def toggle(self, node_id: int) -> Optional[Node]:
        """Collapse an expanded node, or expand it, loading its children on first use.

        Returns the toggled node, or None when the id is unknown or the session
        was cleared while the node was loading.
        """
        session = self.session
        node = session.tree.find_node(node_id)
        if node is None:
            logger.debug(f"Toggle ignored, no node with id {node_id}")
            return None

        if node_id in session.expanded:
            session.expanded.discard(node_id)
            self._emit(ExplorerEvent.COLLAPSED, node=node)
            return node

        session.expanded.add(node_id)
        if node.is_loaded or node.is_loading:
            self._emit(ExplorerEvent.EXPANDED, node=node)
            return node

        self._emit(ExplorerEvent.NODE_LOADING, node=node)
        await session.tree.load_children(node, functools.partial(self._fetch_links, session))

        if not self._is_current(session):
            logger.info(f"Discarding children of {node.url}, session was reset")
            return None

        if node.error:
            self._emit(ExplorerEvent.NODE_ERROR, node=node, error=node.error)
        else:
            session.discovered.update(child.url for child in node.children)
            self._emit(ExplorerEvent.NODE_LOADED, node=node, stats=self.stats())
        return node

    def collapse_all(self) -> None:
        """Collapse every node except the root."""
        root = self.session.root
        if root is None:
            return
        self.session.expanded = {root.id}
        self._emit(ExplorerEvent.COLLAPSED, node=root, all=True)

    def clear(self) -> None:
        """Discard the current tree and return to idle."""
        self._reset()
        logger.info("Exploration cleared")
        self._emit(ExplorerEvent.CLEARED)
