"""Site navigation — derive a sitemap tree from document URL paths.

Every rendered page embeds the whole tree, so it is built once per build
after all URL paths are known and before any template is rendered.

The tree is built without recursion: paths are inserted into a trie with a
plain loop and the trie is frozen into ``SitemapNode`` objects with an
explicit post-order stack, so arbitrarily deep directory trees cannot
exhaust the interpreter stack.  A configured ``nav`` override is flattened
the same way by ``walk_nav``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from tinydocs._errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

type NavKind = Literal["page", "link", "section"]


@dataclass(frozen=True, slots=True)
class SitemapNode:
    """One entry of the navigation tree.

    Attributes:
        title: Last path segment (empty for the root).
        path: Site-relative URL path; ``None`` only for the synthetic root.
        children: Child nodes ordered by segment name.
        has_page: Whether a document renders at exactly this path.

    """

    title: str
    path: str | None
    children: tuple[SitemapNode, ...] = ()
    has_page: bool = False

    def walk(self) -> Iterator[tuple[int, SitemapNode]]:
        """Yield ``(depth, node)`` for every descendant in display order.

        The root itself is not yielded; its children have depth 0.
        """
        stack: list[tuple[int, SitemapNode]] = [(0, c) for c in reversed(self.children)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, c) for c in reversed(node.children))


class _TrieNode:
    __slots__ = ("children", "has_page")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        self.has_page = False


def build_sitemap(url_paths: Iterable[str]) -> SitemapNode:
    """Build the navigation tree for a set of document URL paths.

    An index page (``""`` or a directory path) folds into the node for its
    directory instead of appearing as a child of it.

    >>> root = build_sitemap(["", "guide", "guide/setup", "about"])
    >>> [c.title for c in root.children]
    ['about', 'guide']

    """
    trie = _TrieNode()
    for url_path in url_paths:
        node = trie
        for segment in (s for s in url_path.split("/") if s):
            node = node.children.setdefault(segment, _TrieNode())
        node.has_page = True

    # Post-order freeze: a frame is expanded once, then finished after its children.
    built: dict[int, SitemapNode] = {}
    stack: list[tuple[_TrieNode, str | None, bool]] = [(trie, None, False)]
    while stack:
        node, path, expanded = stack.pop()
        if not expanded:
            stack.append((node, path, True))
            for segment, child in node.children.items():
                child_path = segment if not path else f"{path}/{segment}"
                stack.append((child, child_path, False))
            continue

        children = tuple(
            built.pop(id(child))
            for _segment, child in sorted(node.children.items())
        )
        built[id(node)] = SitemapNode(
            title="" if path is None else path.rsplit("/", 1)[-1],
            path=path,
            children=children,
            has_page=node.has_page,
        )

    return built[id(trie)]


@dataclass(frozen=True, slots=True)
class NavEntry:
    """One line of a configured ``nav`` override.

    Attributes:
        title: Link text or section heading.
        kind: ``"page"`` (target is a URL path), ``"link"`` (target is an
            external URL) or ``"section"`` (no target).
        target: URL path or external URL; empty for sections.

    """

    title: str
    kind: NavKind
    target: str = ""


def walk_nav(items: Iterable[Any]) -> Iterator[tuple[int, NavEntry]]:
    """Yield ``(depth, entry)`` for a ``nav`` override in display order.

    Items are a URL path string, or a mapping whose values are an external
    URL or a list of nested items.  A section heading comes before its
    items, which sit one level deeper.  Sections nest to any depth.

    >>> [(d, e.title) for d, e in walk_nav(["guide", {"API": ["api", {"More": ["api/x"]}]}])]
    [(0, 'guide'), (0, 'API'), (1, 'api'), (1, 'More'), (2, 'api/x')]

    Raises:
        ConfigError: If an item is not a string or a mapping of that shape.

    """
    stack: list[tuple[int, Any]] = [(0, item) for item in reversed(list(items))]
    while stack:
        depth, item = stack.pop()
        if isinstance(item, NavEntry):
            yield depth, item
        elif isinstance(item, str):
            yield depth, NavEntry(title=item, kind="page", target=item)
        elif isinstance(item, dict):
            for label, target in reversed(list(item.items())):
                if isinstance(target, str):
                    stack.append((depth, NavEntry(title=str(label), kind="link", target=target)))
                elif isinstance(target, list):
                    stack.extend((depth + 1, child) for child in reversed(target))
                    stack.append((depth, NavEntry(title=str(label), kind="section")))
                else:
                    msg = f"nav entry {label!r} must map to a URL or a list, got {target!r}"
                    raise ConfigError(msg)
        else:
            msg = f"nav items must be a URL path or a mapping, got {item!r}"
            raise ConfigError(msg)
