import unittest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from link_explorer.api import app, get_explorer
from link_explorer.explorer import LinkExplorer, SessionState
from link_explorer.tree import TreeStore

from helpers import FakeFetcher, make_page

SEED = "https://example.com/"


class TestApi(unittest.TestCase):
    def setUp(self):
        """Serve a fresh explorer backed by fake pages for each test."""
        self.fetcher = FakeFetcher(
            {
                SEED: make_page("Home", ["/about", "/blog", "https://other.com/"]),
                "https://example.com/about": make_page("About", ["/team"]),
            }
        )
        self.explorer = LinkExplorer(fetcher=self.fetcher)
        app.dependency_overrides[get_explorer] = lambda: self.explorer
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def explore(self):
        return self.client.post("/explore", json={"url": SEED})

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Link Explorer", response.json()["message"])

    def test_explore(self):
        """Test starting an exploration."""
        response = self.explore()

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["state"], "ready")
        self.assertEqual(body["expanded"], [1])
        self.assertEqual(body["root"]["text"], "Home")
        self.assertTrue(body["root"]["is_root"])
        self.assertEqual(
            [child["url"] for child in body["root"]["children"]],
            ["https://example.com/about", "https://example.com/blog", "https://other.com/"],
        )
        self.assertIsNone(body["root"]["children"][0]["children"])
        self.assertFalse(body["root"]["children"][2]["can_expand"])
        self.assertEqual(body["stats"]["total_nodes"], 4)

    def test_explore_invalid_url(self):
        response = self.client.post("/explore", json={"url": "not a url"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid URL", response.json()["detail"])

    def test_explore_fetch_failure(self):
        response = self.client.post("/explore", json={"url": "https://down.test/"})
        self.assertEqual(response.status_code, 502)
        self.assertIn("All proxies failed", response.json()["detail"])

        tree = self.client.get("/tree").json()
        self.assertEqual(tree["state"], "error")
        self.assertIsNone(tree["root"])

    def test_toggle_node(self):
        """Expanding a node loads its links."""
        self.explore()

        response = self.client.post("/nodes/2/toggle")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["expanded"], [1, 2])
        about = body["root"]["children"][0]
        self.assertEqual([child["url"] for child in about["children"]], ["https://example.com/team"])

        collapsed = self.client.post("/nodes/2/toggle").json()
        self.assertEqual(collapsed["expanded"], [1])
        self.assertEqual(len(collapsed["root"]["children"][0]["children"]), 1)

    def test_toggle_failing_node(self):
        self.explore()

        body = self.client.post("/nodes/3/toggle").json()

        blog = body["root"]["children"][1]
        self.assertEqual(blog["children"], [])
        self.assertIn("All proxies failed", blog["error"])

    def test_toggle_unknown_node(self):
        self.explore()
        response = self.client.post("/nodes/999/toggle")
        self.assertEqual(response.status_code, 404)

    def test_get_node(self):
        self.explore()

        response = self.client.get("/nodes/2")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["url"], "https://example.com/about")
        self.assertEqual(self.client.get("/nodes/42").status_code, 404)

    def test_collapse_and_clear(self):
        self.explore()
        self.client.post("/nodes/2/toggle")

        collapsed = self.client.post("/collapse").json()
        self.assertEqual(collapsed["expanded"], [1])

        cleared = self.client.delete("/session").json()
        self.assertEqual(cleared["state"], "idle")
        self.assertIsNone(cleared["root"])
        self.assertEqual(cleared["stats"]["total_nodes"], 0)

    def test_stats(self):
        self.explore()
        response = self.client.get("/stats")
        self.assertEqual(
            response.json(), {"total_nodes": 4, "expanded": 1, "unique_domains": 2, "discovered_urls": 4}
        )


class TestApiSupersededSession(unittest.TestCase):
    def setUp(self):
        """Serve a mocked explorer whose operations lose to a concurrent reset."""
        self.explorer = MagicMock(spec=LinkExplorer)
        self.explorer.state = SessionState.IDLE
        self.explorer.last_error = None
        app.dependency_overrides[get_explorer] = lambda: self.explorer
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_explore_superseded(self):
        self.explorer.explore = AsyncMock(return_value=None)

        response = self.client.post("/explore", json={"url": SEED})

        self.assertEqual(response.status_code, 409)
        self.assertIn("superseded", response.json()["detail"])
        self.explorer.explore.assert_awaited_once_with(SEED)

    def test_toggle_after_reset(self):
        """A toggle whose session was cleared mid-load reports a conflict."""
        self.explorer.find_node.return_value = TreeStore().create_node(SEED, "Home", is_root=True)
        self.explorer.toggle = AsyncMock(return_value=None)

        response = self.client.post("/nodes/1/toggle")

        self.assertEqual(response.status_code, 409)
        self.assertIn("reset", response.json()["detail"])
        self.explorer.toggle.assert_awaited_once_with(1)


if __name__ == "__main__":
    unittest.main()
