"""
Tree store.
Owns the explored node graph: node allocation, lazy child loading and lookup.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, List, Optional

from .exceptions import ExplorerError
from .types import ExtractionResult
from .utils import get_domain

logger = logging.getLogger(__name__)

LinkLoader = Callable[[str], Awaitable[ExtractionResult]]


@dataclass(eq=False)
class Node:
    """A page in the explored tree.

    ``children`` is None until a load has been attempted, then a list
    (empty when the page had no usable links or the load failed).
    """

    id: int
    url: str
    text: str
    is_external: bool = False
    is_root: bool = False
    domain: Optional[str] = None
    children: Optional[List["Node"]] = None
    is_loading: bool = False
    error: Optional[str] = None
    total_found: int = 0
    was_truncated: bool = False

    @property
    def is_loaded(self) -> bool:
        return self.children is not None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def can_expand(self) -> bool:
        # External pages are only offered for expansion once something is loaded
        return self.is_root or not self.is_external or self.is_loaded

    @property
    def hidden_count(self) -> int:
        """Links found on the page but dropped by the per-page cap."""
        return self.total_found - len(self.children or [])


class TreeStore:
    def __init__(self) -> None:
        self.root: Optional[Node] = None
        self._next_id = 0

    def create_node(self, url: str, text: str, is_external: bool = False, is_root: bool = False) -> Node:
        """Allocate a node with unloaded children and the next free id."""
        if is_root:
            if self.root is not None:
                raise ValueError("Tree already has a root node")
            is_external = False

        self._next_id += 1
        node = Node(
            id=self._next_id,
            url=url,
            text=text,
            is_external=is_external,
            is_root=is_root,
            domain=get_domain(url),
        )
        if is_root:
            self.root = node
        return node

    def set_children(self, node: Node, extraction: ExtractionResult) -> None:
        """Populate ``node`` with one child per extracted link, in extraction order."""
        node.children = [
            self.create_node(link["url"], link["text"], link["is_external"]) for link in extraction["links"]
        ]
        node.total_found = extraction["total_found"]
        node.was_truncated = extraction["was_truncated"]

    async def load_children(self, node: Node, load_links: LinkLoader) -> bool:
        """Fetch and attach the children of ``node`` unless already loading or loaded.

        Returns True if this call performed the load. Failures are recorded on
        the node and leave it loaded with no children.
        """
        if node.is_loading or node.children is not None:
            return False

        node.is_loading = True
        node.error = None
        try:
            extraction = await load_links(node.url)
            self.set_children(node, extraction)
            logger.info(f"Loaded {len(node.children)} children for node {node.id} ({node.url})")
        except ExplorerError as e:
            logger.error(f"Failed to load children for {node.url}: {e}")
            node.children = []
            node.error = str(e) or "Failed to load"
        except Exception as e:
            logger.exception(f"Unexpected error loading children for {node.url}")
            node.children = []
            node.error = str(e) or "Failed to load"
        finally:
            node.is_loading = False
        return True

    def find_node(self, node_id: int) -> Optional[Node]:
        """Depth-first search for a node by id."""

        def _search(node: Node) -> Optional[Node]:
            if node.id == node_id:
                return node
            for child in node.children or []:
                found = _search(child)
                if found is not None:
                    return found
            return None

        if self.root is None:
            return None
        return _search(self.root)

    def iter_nodes(self) -> Iterator[Node]:
        """Yield every node in pre-order."""
        return walk_subtree(self.root)


def walk_subtree(node: Optional[Node]) -> Iterator[Node]:
    """Yield ``node`` and its loaded descendants in pre-order."""
    stack = [node] if node is not None else []
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children or []))
