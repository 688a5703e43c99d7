"""Tests for tinydocs.content.navigation — the sitemap tree and nav overrides."""

from __future__ import annotations

import pytest

from tinydocs._errors import ConfigError
from tinydocs.content.navigation import NavEntry, build_sitemap, walk_nav


class TestBuildSitemap:
    """build_sitemap — trie of URL paths with index folding."""

    def test_example_site(self) -> None:
        root = build_sitemap(["", "guide", "guide/setup", "about"])
        assert root.path is None
        assert root.has_page
        assert [c.title for c in root.children] == ["about", "guide"]

        guide = root.children[1]
        assert guide.path == "guide"
        assert guide.has_page
        assert [c.path for c in guide.children] == ["guide/setup"]

    def test_directory_without_index(self) -> None:
        root = build_sitemap(["reference/api"])
        reference = root.children[0]
        assert reference.title == "reference"
        assert not reference.has_page
        assert reference.children[0].has_page

    def test_empty(self) -> None:
        root = build_sitemap([])
        assert root.path is None
        assert root.children == ()
        assert not root.has_page

    def test_order_independent(self) -> None:
        paths = ["b", "a/z", "a/y", "a", "c"]
        assert build_sitemap(paths) == build_sitemap(sorted(paths))

    def test_deep_tree_does_not_recurse(self) -> None:
        depth = 5_000
        deep = "/".join(f"d{i}" for i in range(depth))
        root = build_sitemap([deep])
        levels = list(root.walk())
        assert len(levels) == depth
        assert levels[-1][0] == depth - 1
        assert levels[-1][1].path == deep


class TestSitemapNode:
    """walk."""

    def test_walk_order_and_depth(self) -> None:
        root = build_sitemap(["", "guide", "guide/setup", "about"])
        assert [(d, n.path) for d, n in root.walk()] == [
            (0, "about"),
            (0, "guide"),
            (1, "guide/setup"),
        ]


class TestWalkNav:
    """walk_nav — flatten a configured nav override."""

    def test_flat(self) -> None:
        entries = list(walk_nav(["guide", {"Source": "https://example.com"}]))
        assert entries == [
            (0, NavEntry(title="guide", kind="page", target="guide")),
            (0, NavEntry(title="Source", kind="link", target="https://example.com")),
        ]

    def test_sections_nest_to_any_depth(self) -> None:
        nav = [{"A": [{"B": [{"C": ["a/b/c"]}]}, "a"]}]
        assert [(d, e.kind, e.title) for d, e in walk_nav(nav)] == [
            (0, "section", "A"),
            (1, "section", "B"),
            (2, "section", "C"),
            (3, "page", "a/b/c"),
            (1, "page", "a"),
        ]

    def test_mapping_order_kept(self) -> None:
        nav = [{"One": "https://one.example", "Two": ["two"]}]
        assert [e.title for _, e in walk_nav(nav)] == ["One", "Two", "two"]

    def test_bad_target(self) -> None:
        with pytest.raises(ConfigError, match="Guide"):
            list(walk_nav([{"Guide": 3}]))

    def test_bad_item(self) -> None:
        with pytest.raises(ConfigError):
            list(walk_nav([None]))
