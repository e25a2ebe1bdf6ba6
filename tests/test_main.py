import asyncio
import io
import json
import unittest
from contextlib import redirect_stdout
from link_explorer.__main__ import parse_arguments, run
from link_explorer.explorer import LinkExplorer

from helpers import FakeFetcher, make_page

SEED = "https://example.com/"


class TestCli(unittest.TestCase):
    def setUp(self):
        self.fetcher = FakeFetcher(
            {
                SEED: make_page("Home", ["/about", "https://other.com/"]),
                "https://example.com/about": make_page("About", ["/team"]),
            }
        )

    def run_cli(self, *argv):
        explorer = LinkExplorer(fetcher=self.fetcher)
        output = io.StringIO()
        with redirect_stdout(output):
            code = asyncio.run(run(parse_arguments(list(argv)), explorer))
        return code, output.getvalue()

    def test_parse_arguments(self):
        args = parse_arguments([SEED, "--expand", "2", "--expand", "5", "--json"])
        self.assertEqual(args.url, SEED)
        self.assertEqual(args.expand, [2, 5])
        self.assertTrue(args.json)
        self.assertFalse(args.no_urls)

    def test_prints_tree_and_stats(self):
        """Test the default ASCII output."""
        code, output = self.run_cli(SEED, "--no-urls")

        self.assertEqual(code, 0)
        lines = output.splitlines()
        self.assertEqual(lines[0], "▾ [1] Home")
        self.assertEqual(lines[1], "├── ▸ [2] Link 0")
        self.assertEqual(lines[2], "└── ▸ [3] Link 1  ↗ external")
        self.assertEqual(lines[-1], "Total links: 3 | Expanded: 1 | Domains: 2")

    def test_expand_loads_children(self):
        code, output = self.run_cli(SEED, "--expand", "2", "--no-urls")

        self.assertEqual(code, 0)
        self.assertIn("│   └── ▸ [4] Link 0", output)
        self.assertEqual(self.fetcher.fetched_urls(), [SEED, "https://example.com/about"])

    def test_unknown_expand_id_is_ignored(self):
        code, output = self.run_cli(SEED, "--expand", "42")
        self.assertEqual(code, 0)
        self.assertIn("[1] Home", output)

    def test_json_output(self):
        """Test --json emits the tree, expansion set and stats."""
        code, output = self.run_cli(SEED, "--json", "--pretty")

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["root"]["url"], SEED)
        self.assertEqual(len(payload["root"]["children"]), 2)
        self.assertEqual(payload["expanded"], [1])
        self.assertEqual(payload["stats"]["total_nodes"], 3)

    def test_invalid_url(self):
        code, output = self.run_cli("mailto:someone@example.com")
        self.assertEqual(code, 2)
        self.assertEqual(output, "")

    def test_fetch_failure(self):
        code, output = self.run_cli("https://unreachable.test/")
        self.assertEqual(code, 1)
        self.assertEqual(output, "")


if __name__ == "__main__":
    unittest.main()
