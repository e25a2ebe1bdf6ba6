from typing import Iterable, Optional, Set

from .tree import Node, walk_subtree
from .types import Stats


def count_total_nodes(node: Optional[Node]) -> int:
    """Count ``node`` and every loaded descendant."""
    return sum(1 for _ in walk_subtree(node))


def unique_domains(node: Optional[Node], domains: Optional[Set[str]] = None) -> Set[str]:
    """Collect the hostnames of ``node`` and its loaded descendants."""
    if domains is None:
        domains = set()
    domains.update(current.domain for current in walk_subtree(node) if current.domain)
    return domains


def compute_stats(root: Optional[Node], expanded: Iterable[int] = (), discovered: Iterable[str] = ()) -> Stats:
    """Snapshot the statistics shown alongside the tree."""
    return {
        "total_nodes": count_total_nodes(root),
        "expanded": len(set(expanded)),
        "unique_domains": len(unique_domains(root)),
        "discovered_urls": len(set(discovered)),
    }
