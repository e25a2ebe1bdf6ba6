"""Utilities for rendering the explored tree as text."""

from typing import AbstractSet, List, Optional

from .tree import Node
from .types import Stats
from .utils import truncate_url


def _toggle_marker(node: Node, expanded: AbstractSet[int]) -> str:
    if node.is_loading:
        return "…"
    if node.id in expanded:
        return "▾"
    if node.is_loaded and not node.has_children:
        return "·"
    return "▸"


def _label(node: Node, expanded: AbstractSet[int], show_urls: bool) -> str:
    parts = [f"{_toggle_marker(node, expanded)} [{node.id}] {node.text}"]
    if node.is_external:
        parts.append("↗ external")
    if node.was_truncated:
        parts.append(f"+{node.hidden_count} more")
    if node.error:
        parts.append(f"⚠ {node.error}")
    if show_urls:
        parts.append(f"<{truncate_url(node.url)}>")
    return "  ".join(parts)


def render_tree(root: Optional[Node], expanded: AbstractSet[int], show_urls: bool = True) -> str:
    """Render the tree as ASCII art, descending only into expanded nodes."""
    if root is None:
        return "(nothing explored yet)"

    lines: List[str] = [_label(root, expanded, show_urls)]

    def _visit(node: Node, prefix: str) -> None:
        if node.id not in expanded or not node.children:
            return
        for index, child in enumerate(node.children):
            is_last = index == len(node.children) - 1
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{_label(child, expanded, show_urls)}")
            _visit(child, prefix + ("    " if is_last else "│   "))

    _visit(root, "")
    return "\n".join(lines)


def format_stats(stats: Stats) -> str:
    return (
        f"Total links: {stats['total_nodes']} | Expanded: {stats['expanded']} | "
        f"Domains: {stats['unique_domains']}"
    )
