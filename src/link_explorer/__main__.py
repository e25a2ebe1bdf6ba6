"""
Entry point for the link explorer.
Run with: python -m link_explorer URL [--expand ID ...] [--json] [--pretty] [--verbose]
"""

import argparse
import asyncio
import json
import logging
import sys

from .exceptions import InvalidUrlError
from .explorer import LinkExplorer
from .rendering import format_stats, render_tree
from .types import NodeResponse

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Explore the link hierarchy of a web page, one level at a time")
    parser.add_argument("url", help="Page to start from (e.g. https://example.com/docs/)")
    parser.add_argument(
        "--expand",
        type=int,
        action="append",
        default=[],
        metavar="ID",
        help="Toggle the node with this id after exploring; repeat to go deeper",
    )
    parser.add_argument("--json", action="store_true", help="Print the tree as JSON instead of ASCII art")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--no-urls", action="store_true", help="Hide URLs in the ASCII tree")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    return parser.parse_args(argv)


async def run(args, explorer: LinkExplorer) -> int:
    """Explore ``args.url``, apply the requested toggles and print the result."""
    try:
        root = await explorer.explore(args.url)
    except InvalidUrlError as e:
        logger.error(str(e))
        return 2

    if root is None:
        logger.error(f"Failed to fetch the page: {explorer.last_error}")
        return 1

    for node_id in args.expand:
        node = await explorer.toggle(node_id)
        if node is None:
            logger.warning(f"No node with id {node_id}")
        elif node.error:
            logger.warning(f"Node {node_id} failed to load: {node.error}")

    if args.json:
        payload = {
            "root": NodeResponse.model_validate(explorer.root).model_dump(),
            "expanded": sorted(explorer.expanded),
            "stats": explorer.stats(),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2 if args.pretty else None))
    else:
        print(render_tree(explorer.root, explorer.expanded, show_urls=not args.no_urls))
        print()
        print(format_stats(explorer.stats()))
    return 0


def main(argv=None) -> int:
    """Main entry point for the explorer CLI."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        return asyncio.run(run(args, LinkExplorer()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
